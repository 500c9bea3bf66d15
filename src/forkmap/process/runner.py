# SPDX-License-Identifier: Apache-2.0
"""fork_map: run a callable in a forked child and return its result."""

from __future__ import annotations

import functools
import os
from typing import Any, Callable, Optional, TypeVar

from ..exceptions import ForkError
from .channel import Channel, fork_lock
from .child import flush_std_streams, run_child
from .options import ForkOptions
from .parent import collect

R = TypeVar("R")


def fork_map(fn: Callable[[], R], *, options: Optional[ForkOptions] = None) -> R:
    """Run *fn()* in a forked child process and return its result.

    The child gets a copy-on-write snapshot of the caller's memory; nothing
    it mutates is visible here afterwards.  The return value (or the
    exception *fn* raised) travels back through a pipe, serialized with
    ``options.serializer``.

    Blocks the calling thread only.  Safe to call from many threads at once;
    each call owns its pipe and its child.  There is no timeout.

    Anything process-wide that is held at fork time (locks owned by other
    threads, sockets, open files) is inherited as-is by the child; quiescing
    it beforehand is up to the caller.

    Args:
        fn: Zero-argument callable. Use ``functools.partial`` or
            :func:`forked` to bind arguments.
        options: Payload ceiling, serializer and fd handling.

    Returns:
        Whatever *fn* returned, deserialized.

    Raises:
        ChannelCreationError: pipe() failed.
        ForkError: fork() failed; no child was created.
        ChildTerminatedError: The child crashed, was signalled, exited
            non-zero, or exited without a result.
        PayloadTooLargeError: The result exceeded ``options.max_payload``.
        CorruptPayloadError: The result bytes could not be decoded.
        SerializationError: The child could not serialize the outcome.
        TaskError: *fn* raised; ``.error`` is the original exception.
        ChildPanicError: *fn* raised SystemExit, KeyboardInterrupt or
            another non-Exception BaseException.
    """
    if options is None:
        options = ForkOptions()

    flush_std_streams()

    with fork_lock():
        channel = Channel.create()
        try:
            pid = os.fork()
        except OSError as e:
            channel.close()
            raise ForkError(f"fork() failed: {e}") from e

        if pid == 0:
            # === Child process ===
            run_child(fn, channel, options)

        # === Parent process ===
        channel.close_write()
        channel.track_read()

    return collect(pid, channel, options)


def forked(fn: Optional[Callable[..., R]] = None, *, options: Optional[ForkOptions] = None):
    """Decorator: every call of the wrapped function runs via :func:`fork_map`.

    Usable bare (``@forked``) or with options
    (``@forked(options=ForkOptions(max_payload=1 << 20))``).
    """
    def decorate(func: Callable[..., R]) -> Callable[..., R]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> R:
            return fork_map(functools.partial(func, *args, **kwargs), options=options)
        return wrapper

    if fn is not None:
        return decorate(fn)
    return decorate

