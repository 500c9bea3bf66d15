# SPDX-License-Identifier: Apache-2.0
"""
forkmap - run a callable in a forked child, get its result back.

The child is a copy-on-write duplicate of the caller created with fork().
Its return value, or the exception it raised, comes back through a pipe
as if it had been computed in-process.  Whatever the task leaks, corrupts
or crashes stays in the child.

Example:
    from forkmap import fork_map

    def do_with_fork(value: int) -> int:
        # Runs in a child; memory it leaks dies with the child.
        return fork_map(lambda: value * 10)

Composes with a thread pool, one child per job:

    from concurrent.futures import ThreadPoolExecutor

    with ThreadPoolExecutor() as pool:
        results = list(pool.map(lambda i: fork_map(lambda: i * 1234), items))

Only available where os.fork() exists.
"""

# Exceptions are lightweight and always available.
from .exceptions import (
    ForkMapError,
    IsolationError,
    ChannelCreationError,
    ForkError,
    ChildTerminatedError,
    PayloadTooLargeError,
    CorruptPayloadError,
    SerializationError,
    TaskFailure,
    TaskError,
    ChildPanicError,
)

__all__ = [
    # Process
    "fork_map",
    "forked",
    "ForkOptions",
    "parse_size",
    "TerminationStatus",
    # Exceptions
    "ForkMapError",
    "IsolationError",
    "ChannelCreationError",
    "ForkError",
    "ChildTerminatedError",
    "PayloadTooLargeError",
    "CorruptPayloadError",
    "SerializationError",
    "TaskFailure",
    "TaskError",
    "ChildPanicError",
]

__version__ = "0.1.0"

# Lazy imports - the process layer registers an at-fork hook on import.
_LAZY_IMPORTS = {
    "fork_map": ".process.runner",
    "forked": ".process.runner",
    "ForkOptions": ".process.options",
    "parse_size": ".process.options",
    "TerminationStatus": ".process.status",
}


def __getattr__(name: str):
    if name in _LAZY_IMPORTS:
        import importlib
        module = importlib.import_module(_LAZY_IMPORTS[name], __name__)
        value = getattr(module, name)
        # Cache on the module so __getattr__ isn't called again.
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
