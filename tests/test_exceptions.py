# SPDX-License-Identifier: Apache-2.0
"""Exceptions must survive pickling, e.g. when raised by a nested fork_map."""

import pickle

from forkmap.exceptions import (
    ChildPanicError,
    ChildTerminatedError,
    PayloadTooLargeError,
    SerializationError,
    TaskError,
)
from forkmap.process.status import TerminationStatus


def _round_trip(exc):
    return pickle.loads(pickle.dumps(exc))


def test_payload_too_large():
    exc = _round_trip(PayloadTooLargeError(10, 42))
    assert (exc.limit, exc.received) == (10, 42)
    assert str(exc) == str(PayloadTooLargeError(10, 42))


def test_child_terminated():
    exc = _round_trip(ChildTerminatedError(TerminationStatus(signal=9), "gone"))
    assert exc.status == TerminationStatus(signal=9)
    assert str(exc) == "gone"


def test_serialization_error():
    exc = _round_trip(SerializationError("cannot pickle"))
    assert exc.reason == "cannot pickle"
    assert str(exc) == "Child could not serialize result: cannot pickle"


def test_task_error():
    exc = _round_trip(TaskError(ValueError("boom"), "tb"))
    assert isinstance(exc.error, ValueError)
    assert exc.child_traceback == "tb"


def test_child_panic():
    exc = _round_trip(ChildPanicError("SystemExit: 1"))
    assert exc.message == "SystemExit: 1"
