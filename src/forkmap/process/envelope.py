# SPDX-License-Identifier: Apache-2.0
"""Wire envelope carrying one task outcome from child to parent.

Frame layout (big-endian)::

    magic "FKMP" | version u8 | kind u8 | pad 2 | detail_len u32 | payload_len u64
    detail (UTF-8) | payload (serializer bytes)

The reader consumes the pipe to EOF, then checks the declared lengths
against what actually arrived, so a truncated frame is never mistaken for
a complete one.
"""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Any

from ..exceptions import CorruptPayloadError

MAGIC = b"FKMP"
VERSION = 1

HEADER = struct.Struct(">4sBBxxIQ")


class Kind(enum.IntEnum):
    OK = 1
    ERR = 2
    PANICKED = 3
    SERIALIZATION_FAILED = 4


@dataclass(frozen=True)
class Envelope:
    """Decoded frame. ``payload`` is still serialized; see :meth:`value`."""

    kind: Kind
    detail: str = ""
    payload: bytes = b""

    @classmethod
    def ok(cls, value: Any, serializer: Any) -> "Envelope":
        return cls(Kind.OK, payload=serializer.dumps(value))

    @classmethod
    def err(cls, error: BaseException, traceback_text: str, serializer: Any) -> "Envelope":
        return cls(Kind.ERR, detail=traceback_text, payload=serializer.dumps(error))

    @classmethod
    def panicked(cls, message: str) -> "Envelope":
        return cls(Kind.PANICKED, detail=message)

    @classmethod
    def serialization_failed(cls, reason: str) -> "Envelope":
        return cls(Kind.SERIALIZATION_FAILED, detail=reason)

    def encode(self) -> bytes:
        detail = self.detail.encode("utf-8", "backslashreplace")
        header = HEADER.pack(
            MAGIC, VERSION, int(self.kind), len(detail), len(self.payload)
        )
        return b"".join((header, detail, self.payload))

    @classmethod
    def decode(cls, data: bytes) -> "Envelope":
        """Parse a complete frame.

        Raises:
            CorruptPayloadError: Short, truncated, over-long or unknown frame.
        """
        if len(data) < HEADER.size:
            raise CorruptPayloadError(
                f"Envelope truncated: {len(data)} bytes, header needs {HEADER.size}"
            )
        magic, version, kind, detail_len, payload_len = HEADER.unpack_from(data)
        if magic != MAGIC:
            raise CorruptPayloadError(f"Bad envelope magic {magic!r}")
        if version != VERSION:
            raise CorruptPayloadError(f"Unsupported envelope version {version}")
        try:
            kind = Kind(kind)
        except ValueError:
            raise CorruptPayloadError(f"Unknown envelope kind {kind}") from None

        expected = HEADER.size + detail_len + payload_len
        if len(data) != expected:
            raise CorruptPayloadError(
                f"Envelope length mismatch: declared {expected}, got {len(data)}"
            )
        body = memoryview(data)[HEADER.size:]
        try:
            detail = bytes(body[:detail_len]).decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptPayloadError(f"Envelope detail is not UTF-8: {e}") from e
        return cls(kind, detail=detail, payload=bytes(body[detail_len:]))

    def value(self, serializer: Any) -> Any:
        """Deserialize the payload of an OK or ERR envelope.

        Raises:
            CorruptPayloadError: If the serializer rejects the bytes.
        """
        try:
            return serializer.loads(self.payload)
        except Exception as e:
            raise CorruptPayloadError(
                f"Cannot deserialize {self.kind.name} payload: {type(e).__name__}: {e}"
            ) from e
