# SPDX-License-Identifier: Apache-2.0
"""Child side of fork_map: run the task, report once, exit."""

from __future__ import annotations

import os
import sys
import struct
import traceback
from typing import Any, Callable, NoReturn

from .channel import Channel
from .envelope import Envelope
from .options import ForkOptions

EXIT_OK = 0
EXIT_WRITE_FAILED = 1


def run_child(fn: Callable[[], Any], channel: Channel, options: ForkOptions) -> NoReturn:
    """Execute *fn* in the forked child and terminate the process.

    Never returns: every path ends in ``os._exit`` so control can't leak
    back into the caller's stack frames in the child.
    """
    code = EXIT_WRITE_FAILED
    try:
        channel.close_read()
        if options.close_fds:
            _close_inherited_fds(keep=channel.write_fd)
        frame = _frame(_outcome(fn, options.serializer))
        try:
            channel.write_all(frame)
            code = EXIT_OK
        except OSError:
            pass  # parent stopped reading; the exit code reports it
        finally:
            channel.close_write()
    except BaseException:
        code = EXIT_WRITE_FAILED
    finally:
        flush_std_streams()
        os._exit(code)


def _outcome(fn: Callable[[], Any], serializer: Any) -> Envelope:
    """Run *fn* and turn whatever happens into an envelope."""
    try:
        value = fn()
    except Exception as exc:
        tb = traceback.format_exc()
        try:
            return _round_tripped(Envelope.err(exc, tb, serializer), serializer)
        except Exception as ser_exc:
            return Envelope.serialization_failed(
                f"task raised {type(exc).__name__}: {exc}; "
                f"error not serializable: {type(ser_exc).__name__}: {ser_exc}"
            )
    except BaseException as exc:
        return Envelope.panicked(f"{type(exc).__name__}: {exc}")

    try:
        return _round_tripped(Envelope.ok(value, serializer), serializer)
    except Exception as ser_exc:
        return Envelope.serialization_failed(
            f"{type(value).__name__} result: {type(ser_exc).__name__}: {ser_exc}"
        )


def _round_tripped(envelope: Envelope, serializer: Any) -> Envelope:
    """Return *envelope* once its payload is known to load back.

    Raises:
        CorruptPayloadError: If the serializer cannot load its own output.
    """
    envelope.value(serializer)
    return envelope


def _frame(envelope: Envelope) -> bytes:
    try:
        return envelope.encode()
    except (struct.error, OverflowError) as e:
        return Envelope.serialization_failed(
            f"{envelope.kind.name} envelope cannot be framed: {e}"
        ).encode()


def _close_inherited_fds(keep: int | None) -> None:
    max_fd = os.sysconf("SC_OPEN_MAX")
    if keep is None:
        os.closerange(3, max_fd)
        return
    os.closerange(3, keep)
    os.closerange(keep + 1, max_fd)


def flush_std_streams() -> None:
    """Flush stdio so buffered output is written exactly once across fork()."""
    for stream in (sys.stdout, sys.stderr):
        try:
            if stream is not None:
                stream.flush()
        except (AttributeError, ValueError, OSError):
            pass
