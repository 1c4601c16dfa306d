"""L2CAP basic frames carrying ATT and SMP PDUs, and the packet errors."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional, Union

__all__ = [
    "ATT_CID",
    "SMP_CID",
    "PacketParseError",
    "InsufficientDataError",
    "TooMuchDataError",
    "InvalidHandleError",
    "PacketSerializeError",
    "DataTooLongError",
    "AttPdu",
    "SmpPdu",
    "L2capPacket",
]

ATT_CID = 0x0004
SMP_CID = 0x0006

_HEADER = struct.Struct("<HH")
_MAX_PAYLOAD = 0xFFFF


class PacketParseError(ValueError):
    """Raised when bytes do not form a valid packet."""


class InsufficientDataError(PacketParseError):
    """The input ends before the packet does."""


class TooMuchDataError(PacketParseError):
    """The input carries bytes beyond the end of the packet."""


class PacketSerializeError(ValueError):
    """Raised when a packet cannot be encoded."""


class DataTooLongError(PacketSerializeError):
    """The payload does not fit the length field."""


class InvalidHandleError(PacketParseError, PacketSerializeError):
    """An ACL connection handle or its flags are out of range."""

    def __init__(self, handle: int) -> None:
        super().__init__(f"invalid HCI ACL packet handle {handle:#06x}")
        self.handle = handle


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must fit in one byte: {value}")


@dataclass(frozen=True)
class AttPdu:
    """An Attribute Protocol PDU: opcode and parameters."""

    opcode: int
    data: bytes = b""

    def __post_init__(self) -> None:
        _check_byte("opcode", self.opcode)
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def from_bytes(cls, data: bytes) -> "AttPdu":
        """Decode an ATT PDU; at least the opcode must be present."""
        data = bytes(data)
        if not data:
            raise InsufficientDataError("ATT PDU needs an opcode")
        return cls(data[0], data[1:])

    def to_bytes(self) -> bytes:
        return bytes([self.opcode]) + self.data


@dataclass(frozen=True)
class SmpPdu:
    """A Security Manager Protocol PDU: code and parameters."""

    code: int
    data: bytes = b""

    def __post_init__(self) -> None:
        _check_byte("code", self.code)
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def from_bytes(cls, data: bytes) -> "SmpPdu":
        """Decode an SMP PDU; at least the code must be present."""
        data = bytes(data)
        if not data:
            raise InsufficientDataError("SMP PDU needs a code")
        return cls(data[0], data[1:])

    def to_bytes(self) -> bytes:
        return bytes([self.code]) + self.data


@dataclass(frozen=True)
class L2capPacket:
    """An L2CAP basic frame.

    ``payload`` is an :class:`AttPdu`, an :class:`SmpPdu`, or raw bytes for
    any other channel.  For raw bytes ``cid`` must be given; for ATT and SMP
    it is filled in from the payload type.
    """

    payload: Union[AttPdu, SmpPdu, bytes]
    cid: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.payload, AttPdu):
            known = ATT_CID
        elif isinstance(self.payload, SmpPdu):
            known = SMP_CID
        elif isinstance(self.payload, (bytes, bytearray)):
            if self.cid is None:
                raise ValueError("a raw L2CAP payload needs a channel id")
            if not 0 <= self.cid <= 0xFFFF:
                raise ValueError(f"channel id out of range: {self.cid}")
            object.__setattr__(self, "payload", bytes(self.payload))
            return
        else:
            raise TypeError(f"unsupported L2CAP payload: {self.payload!r}")
        if self.cid is None:
            object.__setattr__(self, "cid", known)
        elif self.cid != known:
            raise ValueError(
                f"channel id {self.cid:#06x} does not match payload channel {known:#06x}"
            )

    @classmethod
    def from_bytes(cls, data: bytes) -> "L2capPacket":
        """Decode a complete L2CAP frame (length, channel id, payload)."""
        data = bytes(data)
        if len(data) < _HEADER.size:
            raise InsufficientDataError("L2CAP header needs 4 bytes")
        length, cid = _HEADER.unpack_from(data)
        total = _HEADER.size + length
        if len(data) < total:
            raise InsufficientDataError(
                f"L2CAP frame needs {total} bytes, got {len(data)}"
            )
        if len(data) > total:
            raise TooMuchDataError(
                f"L2CAP frame is {total} bytes, got {len(data)}"
            )
        inner = data[_HEADER.size:]
        if cid == ATT_CID:
            return cls(AttPdu.from_bytes(inner))
        if cid == SMP_CID:
            return cls(SmpPdu.from_bytes(inner))
        return cls(inner, cid)

    def _payload_bytes(self) -> bytes:
        if isinstance(self.payload, (AttPdu, SmpPdu)):
            return self.payload.to_bytes()
        return self.payload

    def to_bytes(self) -> bytes:
        inner = self._payload_bytes()
        if len(inner) > _MAX_PAYLOAD:
            raise DataTooLongError(f"L2CAP payload too long: {len(inner)} bytes")
        return _HEADER.pack(len(inner), self.channel_id()) + inner

    def channel_id(self) -> int:
        """The channel id this frame travels on."""
        assert self.cid is not None
        return self.cid