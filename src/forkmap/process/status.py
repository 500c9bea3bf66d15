# SPDX-License-Identifier: Apache-2.0
"""How a child process ended, decoded from a raw waitpid() status."""

from __future__ import annotations

import os
import signal as _signal
from dataclasses import dataclass


@dataclass(frozen=True)
class TerminationStatus:
    """Exit code or terminating signal of a reaped child.

    Exactly one of ``exit_code`` and ``signal`` is set.
    """

    exit_code: int | None = None
    signal: int | None = None

    @classmethod
    def from_wait_status(cls, status: int) -> "TerminationStatus":
        """Build from the second element returned by ``os.waitpid``."""
        if os.WIFSIGNALED(status):
            return cls(signal=os.WTERMSIG(status))
        return cls(exit_code=os.waitstatus_to_exitcode(status))

    @property
    def success(self) -> bool:
        return self.signal is None and self.exit_code == 0

    def __str__(self) -> str:
        if self.signal is not None:
            try:
                name = _signal.Signals(self.signal).name
            except ValueError:
                name = "unknown"
            return f"killed by signal {self.signal} ({name})"
        return f"exited with status {self.exit_code}"
