#!/usr/bin/env python3
# SPDX-License-Identifier: Apache-2.0
"""Simple fork_map example - do something unpleasant in a child process.

Usage:
    python simple_fork.py
"""

import os
import sys

from forkmap import fork_map, forked, TaskError, ChildTerminatedError

_leaky_cache = []


@forked
def leaky_square(value: int) -> int:
    """Pretend to leak memory; the leak dies with the child."""
    _leaky_cache.append(bytearray(10 * 1024 * 1024))
    return value * value


def crashes() -> None:
    os.abort()


def fails() -> None:
    raise RuntimeError("task logic failed")


def main():
    print(f"Parent pid {os.getpid()}")

    print("\n--- Plain value ---")
    print(f"fork_map(lambda: 42 * 10) = {fork_map(lambda: 42 * 10)}")

    print("\n--- Decorated function ---")
    print(f"leaky_square(12) = {leaky_square(12)}")
    print(f"parent cache size after call: {len(_leaky_cache)}")

    print("\n--- Task raises ---")
    try:
        fork_map(fails)
    except TaskError as e:
        print(f"TaskError: {e.error!r}")

    print("\n--- Child crashes ---")
    try:
        fork_map(crashes)
    except ChildTerminatedError as e:
        print(f"ChildTerminatedError: child {e.status}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
