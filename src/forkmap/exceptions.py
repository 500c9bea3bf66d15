# SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for fork_map operations.

Two families are kept apart so callers can tell "the isolation mechanism
failed" (:class:`IsolationError`) from "my task failed"
(:class:`TaskFailure`).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .process.status import TerminationStatus


class ForkMapError(Exception):
    """Base exception for all fork_map errors."""

    pass


class IsolationError(ForkMapError):
    """The fork/pipe/serialization machinery failed."""

    pass


class ChannelCreationError(IsolationError):
    """The result pipe could not be created (e.g. out of descriptors)."""

    pass


class ForkError(IsolationError):
    """fork() failed. No child process exists."""

    pass


class ChildTerminatedError(IsolationError):
    """Child exited non-zero, was killed by a signal, or exited 0 without
    writing a result."""

    def __init__(self, status: TerminationStatus, message: str | None = None):
        self.status = status
        super().__init__(message or f"Child {status}")

    def __reduce__(self):
        return type(self), (self.status, self.args[0])


class PayloadTooLargeError(IsolationError):
    """Child sent more bytes than the configured ceiling allows."""

    def __init__(self, limit: int, received: int):
        self.limit = limit
        self.received = received
        super().__init__(
            f"Result payload exceeds {limit} bytes (received {received})"
        )

    def __reduce__(self):
        return type(self), (self.limit, self.received)


class CorruptPayloadError(IsolationError):
    """Bytes were received but do not decode as a result envelope."""

    pass


class SerializationError(IsolationError):
    """The child could not serialize the task's outcome."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Child could not serialize result: {reason}")

    def __reduce__(self):
        return type(self), (self.reason,)


class TaskFailure(ForkMapError):
    """The task itself failed inside the child."""

    pass


class TaskError(TaskFailure):
    """The task raised an exception. The original is in :attr:`error`."""

    def __init__(self, error: Any, child_traceback: Optional[str] = None):
        self.error = error
        self.child_traceback = child_traceback
        super().__init__(f"{type(error).__name__}: {error}")

    def __reduce__(self):
        return type(self), (self.error, self.child_traceback)


class ChildPanicError(TaskFailure):
    """The task aborted its own control flow (SystemExit, KeyboardInterrupt, ...)."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Child panicked: {message}")

    def __reduce__(self):
        return type(self), (self.message,)
