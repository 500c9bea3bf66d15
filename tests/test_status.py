# SPDX-License-Identifier: Apache-2.0
"""Tests for TerminationStatus decoding."""

import os
import signal

import pytest

from forkmap.process.status import TerminationStatus

needs_fork = pytest.mark.skipif(
    not hasattr(os, "fork"),
    reason="Platform has no fork()",
)


def _reap_child(exit_code=None, sig=None) -> TerminationStatus:
    pid = os.fork()
    if pid == 0:
        if sig is not None:
            os.kill(os.getpid(), sig)
        os._exit(exit_code or 0)
    _, raw = os.waitpid(pid, 0)
    return TerminationStatus.from_wait_status(raw)


@needs_fork
def test_clean_exit():
    status = _reap_child(exit_code=0)
    assert status == TerminationStatus(exit_code=0)
    assert status.success
    assert str(status) == "exited with status 0"


@needs_fork
def test_nonzero_exit():
    status = _reap_child(exit_code=7)
    assert status.exit_code == 7
    assert status.signal is None
    assert not status.success


@needs_fork
def test_killed_by_signal():
    status = _reap_child(sig=signal.SIGKILL)
    assert status.signal == signal.SIGKILL
    assert status.exit_code is None
    assert not status.success
    assert "SIGKILL" in str(status)


def test_unknown_signal_number_still_formats():
    assert "unknown" in str(TerminationStatus(signal=250))


def test_frozen():
    status = TerminationStatus(exit_code=0)
    with pytest.raises(AttributeError):
        status.exit_code = 1  # type: ignore[misc]
