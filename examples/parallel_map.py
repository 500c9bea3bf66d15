#!/usr/bin/env python3
# SPDX-License-Identifier: Apache-2.0
"""Worker pool example - every job runs in its own forked child.

fork_map blocks only its calling thread, so a thread pool gives N
children in flight at once.  Each result is paired with its own job.

Usage:
    python parallel_map.py [N_ITEMS]
"""

import os
import sys
from concurrent.futures import ThreadPoolExecutor

from forkmap import fork_map, ForkOptions, ForkMapError


def ugly_operation(item: int) -> tuple[int, int]:
    """Work we don't want polluting the parent's memory."""
    return item * 1234, os.getpid()


def main():
    n_items = int(sys.argv[1]) if len(sys.argv) > 1 else 8
    options = ForkOptions(max_payload=64 * 1024)

    def job(item: int):
        return fork_map(lambda: ugly_operation(item), options=options)

    with ThreadPoolExecutor(max_workers=4) as pool:
        futures = {item: pool.submit(job, item) for item in range(n_items)}

    for item, future in futures.items():
        try:
            value, pid = future.result()
        except ForkMapError as e:
            print(f"  item {item}: failed ({e})")
            continue
        print(f"  item {item}: {value} (child {pid})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
