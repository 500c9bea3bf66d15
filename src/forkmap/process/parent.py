# SPDX-License-Identifier: Apache-2.0
"""Parent side of fork_map: drain the pipe, reap the child, reconcile."""

from __future__ import annotations

import os
from typing import Any

from ..exceptions import (
    ChildPanicError,
    ChildTerminatedError,
    PayloadTooLargeError,
    SerializationError,
    TaskError,
)
from .channel import Channel
from .envelope import HEADER, Envelope, Kind
from .options import ForkOptions
from .status import TerminationStatus


def collect(pid: int, channel: Channel, options: ForkOptions) -> Any:
    """Read the child's envelope, wait for it to exit, and return its value.

    The child is reaped and the read end closed on every path, including
    ``PayloadTooLargeError``.
    If the child was already reaped behind our back (SIGCHLD set to
    SIG_IGN), a read error is still raised, with the ``ChildProcessError``
    as its cause.

    Returns:
        Whatever the task returned.

    Raises:
        ChildTerminatedError: Non-zero exit, signal, or exit 0 with no data.
        PayloadTooLargeError: More than ``options.max_payload`` bytes sent.
        CorruptPayloadError: Data received but not a valid envelope.
        SerializationError: The child could not serialize its outcome.
        TaskError: The task raised; the original exception is attached.
        ChildPanicError: The task escaped via SystemExit/KeyboardInterrupt.
    """
    channel.close_write()

    limit = None
    if options.max_payload is not None:
        limit = HEADER.size + options.max_payload

    try:
        try:
            data = channel.read_all(limit)
        except PayloadTooLargeError as e:
            raise PayloadTooLargeError(
                options.max_payload, e.received - HEADER.size
            ) from None
        finally:
            channel.close_read()
    except BaseException as read_exc:
        try:
            wait_child(pid)
        except ChildProcessError as wait_exc:
            # SIGCHLD ignored: the kernel reaped the child already.
            raise read_exc from wait_exc
        raise

    status = wait_child(pid)

    return reconcile(data, status, options.serializer)


def wait_child(pid: int) -> TerminationStatus:
    """Block until *pid* exits and return how it ended."""
    _, raw = os.waitpid(pid, 0)
    return TerminationStatus.from_wait_status(raw)


def reconcile(data: bytes, status: TerminationStatus, serializer: Any) -> Any:
    """Map received bytes plus termination status onto a value or an error."""
    if not status.success:
        raise ChildTerminatedError(status)
    if not data:
        raise ChildTerminatedError(
            status, f"Child {status} without writing a result"
        )

    envelope = Envelope.decode(data)
    if envelope.kind is Kind.OK:
        return envelope.value(serializer)
    if envelope.kind is Kind.ERR:
        error = envelope.value(serializer)
        cause = error if isinstance(error, BaseException) else None
        raise TaskError(error, envelope.detail or None) from cause
    if envelope.kind is Kind.PANICKED:
        raise ChildPanicError(envelope.detail)
    raise SerializationError(envelope.detail)
