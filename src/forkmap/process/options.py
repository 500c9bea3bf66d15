# SPDX-License-Identifier: Apache-2.0
"""Per-call configuration for fork_map."""

from __future__ import annotations

import pickle
import re
from dataclasses import dataclass
from typing import Any

_UNITS = {
    "K": 1024,
    "M": 1024 ** 2,
    "G": 1024 ** 3,
    "T": 1024 ** 4,
}

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMGT])?B?\s*$", re.IGNORECASE)


def parse_size(s: str) -> int:
    """Parse a human-friendly byte size string to bytes.

    Accepts plain integers (bytes) or suffixed values: ``'512K'``, ``'16M'``,
    ``'1G'``, optionally followed by ``B``.  The suffix is case-insensitive.

    Returns:
        Size in bytes (integer).

    Raises:
        ValueError: If the string cannot be parsed.
    """
    m = _SIZE_RE.match(s)
    if m is None:
        raise ValueError(f"invalid size: {s!r}")
    value = float(m.group(1))
    suffix = m.group(2)
    if suffix is not None:
        value *= _UNITS[suffix.upper()]
    return int(value)


@dataclass(frozen=True)
class ForkOptions:
    """Options for a single fork_map call.

    ``ForkOptions()`` means: no payload ceiling, pickle serialization,
    inherited descriptors left alone.
    """

    max_payload: int | None = None
    """Ceiling on result bytes received from the child, header excluded.

    Exceeding it raises ``PayloadTooLargeError`` (the child is still reaped).
    """

    serializer: Any = pickle
    """Object with ``dumps(obj) -> bytes`` and ``loads(bytes) -> obj``.

    The ``pickle`` module by default; ``cloudpickle`` or ``dill`` work as-is.
    """

    close_fds: bool = False
    """Close every inherited descriptor above 2 in the child, except the
    result pipe."""

    def __post_init__(self) -> None:
        if self.max_payload is not None and self.max_payload < 0:
            raise ValueError(f"max_payload must be >= 0, got {self.max_payload}")
        if not (hasattr(self.serializer, "dumps") and hasattr(self.serializer, "loads")):
            raise TypeError("serializer must provide dumps() and loads()")
