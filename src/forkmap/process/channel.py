# SPDX-License-Identifier: Apache-2.0
"""One-way result pipe between a forked child and its parent.

Both ends are inherited across fork(). Right after the split each side
must close the end it does not own, otherwise the parent never sees
end-of-stream while its own copy of the write end stays open.
"""

from __future__ import annotations

import os
import threading
from typing import Optional

from ..exceptions import ChannelCreationError, PayloadTooLargeError

READ_CHUNK = 65536

# Held from pipe() until the parent has closed its write end, so no other
# call's child inherits that write end and delays our EOF. Parent read ends
# still in flight are tracked here and closed in every new child, so a
# reader that gives up early still delivers EPIPE to its own child.
_fork_lock = threading.RLock()
_inflight_read_fds: set[int] = set()


def fork_lock():
    """The lock to hold around pipe creation, fork() and the parent's setup."""
    return _fork_lock


def _after_fork_in_child() -> None:
    global _fork_lock
    _fork_lock = threading.RLock()
    for fd in _inflight_read_fds:
        try:
            os.close(fd)
        except OSError:
            pass
    _inflight_read_fds.clear()


os.register_at_fork(after_in_child=_after_fork_in_child)


class Channel:
    """Anonymous pipe: the child writes, the parent reads."""

    def __init__(self, read_fd: int, write_fd: int):
        self._read_fd: Optional[int] = read_fd
        self._write_fd: Optional[int] = write_fd

    @classmethod
    def create(cls) -> "Channel":
        try:
            read_fd, write_fd = os.pipe()
        except OSError as e:
            raise ChannelCreationError(f"pipe() failed: {e}") from e
        return cls(read_fd, write_fd)

    @property
    def read_fd(self) -> Optional[int]:
        return self._read_fd

    @property
    def write_fd(self) -> Optional[int]:
        return self._write_fd

    def track_read(self) -> None:
        """Register the read end so children forked later close their copy."""
        with _fork_lock:
            if self._read_fd is not None:
                _inflight_read_fds.add(self._read_fd)

    def close_read(self) -> None:
        if self._read_fd is not None:
            fd, self._read_fd = self._read_fd, None
            with _fork_lock:
                _inflight_read_fds.discard(fd)
                os.close(fd)

    def close_write(self) -> None:
        if self._write_fd is not None:
            fd, self._write_fd = self._write_fd, None
            os.close(fd)

    def close(self) -> None:
        try:
            self.close_write()
        finally:
            self.close_read()

    def write_all(self, data: bytes) -> None:
        """Write *data* in full, looping over partial writes.

        Raises:
            OSError: On any write error (e.g. ``BrokenPipeError`` once the
                reader has gone away).
        """
        if self._write_fd is None:
            raise ValueError("write end is closed")
        view = memoryview(data)
        while view:
            written = os.write(self._write_fd, view)
            view = view[written:]

    def read_all(self, limit: int | None = None) -> bytes:
        """Read until end-of-stream and return everything received.

        Args:
            limit: Maximum number of bytes to accept (None = unbounded).

        Raises:
            PayloadTooLargeError: As soon as more than *limit* bytes have
                accumulated. Reading stops there.
        """
        if self._read_fd is None:
            raise ValueError("read end is closed")
        buf = bytearray()
        while True:
            chunk = os.read(self._read_fd, READ_CHUNK)
            if not chunk:
                break
            buf += chunk
            if limit is not None and len(buf) > limit:
                raise PayloadTooLargeError(limit, len(buf))
        return bytes(buf)

    def __enter__(self) -> "Channel":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def __repr__(self) -> str:
        return f"Channel(read_fd={self._read_fd}, write_fd={self._write_fd})"
