"""HCI packets over the H4 transport: commands, events and ACL data.

``parse_packet`` takes a complete H4 frame, starting with the packet type
indicator.  The ``from_bytes`` methods of the individual packet classes
take the frame without that indicator.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from hidgatt.l2cap import (
    DataTooLongError,
    InsufficientDataError,
    InvalidHandleError,
    L2capPacket,
)

__all__ = [
    "PacketBoundaryFlag",
    "BroadcastFlag",
    "HciCommand",
    "HciEvent",
    "HciAclData",
    "UnknownPacket",
    "HciPacket",
    "parse_packet",
    "serialize_packet",
]

H4_COMMAND = 0x01
H4_ACL_DATA = 0x02
H4_EVENT = 0x04

_MAX_HANDLE = 0x0EFF
_MAX_PARAMS = 0xFF
_MAX_ACL_DATA = 0xFFFF

_COMMAND_HEADER = struct.Struct("<HB")
_ACL_HEADER = struct.Struct("<HH")


class PacketBoundaryFlag(IntEnum):
    FIRST_NON_FLUSHABLE = 0b00
    CONTINUATION = 0b01
    FIRST_FLUSHABLE = 0b10
    DEPRECATED = 0b11


class BroadcastFlag(IntEnum):
    POINT_TO_POINT = 0b00
    BD_EDR_BROADCAST = 0b01


def _check_range(name: str, value: int, maximum: int) -> None:
    if not 0 <= value <= maximum:
        raise ValueError(f"{name} out of range: {value}")


@dataclass(frozen=True)
class HciCommand:
    """An HCI command: opcode and parameters."""

    opcode: int
    data: bytes = b""

    def __post_init__(self) -> None:
        _check_range("opcode", self.opcode, 0xFFFF)
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def from_bytes(cls, data: bytes) -> "HciCommand":
        """Decode opcode, length and parameters; trailing bytes are ignored."""
        data = bytes(data)
        if len(data) < _COMMAND_HEADER.size:
            raise InsufficientDataError("HCI command header needs 3 bytes")
        opcode, length = _COMMAND_HEADER.unpack_from(data)
        end = _COMMAND_HEADER.size + length
        if len(data) < end:
            raise InsufficientDataError(
                f"HCI command needs {end} bytes, got {len(data)}"
            )
        return cls(opcode, data[_COMMAND_HEADER.size:end])

    def to_bytes(self) -> bytes:
        if len(self.data) > _MAX_PARAMS:
            raise DataTooLongError(f"command parameters too long: {len(self.data)}")
        return _COMMAND_HEADER.pack(self.opcode, len(self.data)) + self.data


@dataclass(frozen=True)
class HciEvent:
    """An HCI event: event code and parameters."""

    event_code: int
    data: bytes = b""

    def __post_init__(self) -> None:
        _check_range("event_code", self.event_code, 0xFF)
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def from_bytes(cls, data: bytes) -> "HciEvent":
        """Decode event code, length and parameters; trailing bytes are ignored."""
        data = bytes(data)
        if len(data) < 2:
            raise InsufficientDataError("HCI event header needs 2 bytes")
        event_code, length = data[0], data[1]
        end = 2 + length
        if len(data) < end:
            raise InsufficientDataError(f"HCI event needs {end} bytes, got {len(data)}")
        return cls(event_code, data[2:end])

    def to_bytes(self) -> bytes:
        if len(self.data) > _MAX_PARAMS:
            raise DataTooLongError(f"event parameters too long: {len(self.data)}")
        return bytes([self.event_code, len(self.data)]) + self.data


@dataclass(frozen=True)
class HciAclData:
    """An ACL data packet on one connection carrying an L2CAP frame."""

    handle: int
    data: L2capPacket
    pb: PacketBoundaryFlag = PacketBoundaryFlag.FIRST_NON_FLUSHABLE
    bc: BroadcastFlag = BroadcastFlag.POINT_TO_POINT

    @classmethod
    def from_bytes(cls, data: bytes) -> "HciAclData":
        """Decode handle, flags and the L2CAP frame after the 4-byte header.

        The header's length field is not consulted; the L2CAP frame must
        fill the rest of the input exactly.
        """
        data = bytes(data)
        if len(data) < _ACL_HEADER.size:
            raise InsufficientDataError("HCI ACL header needs 4 bytes")
        handle_and_flags, _length = _ACL_HEADER.unpack_from(data)
        handle = handle_and_flags & 0x0FFF
        if handle > _MAX_HANDLE:
            raise InvalidHandleError(handle_and_flags)
        pb = PacketBoundaryFlag((handle_and_flags >> 12) & 0b11)
        try:
            bc = BroadcastFlag((handle_and_flags >> 14) & 0b11)
        except ValueError:
            raise InvalidHandleError(handle_and_flags) from None
        packet = L2capPacket.from_bytes(data[_ACL_HEADER.size:])
        return cls(handle=handle, data=packet, pb=pb, bc=bc)

    def to_bytes(self) -> bytes:
        frame = self.data.to_bytes()
        if len(frame) > _MAX_ACL_DATA:
            raise DataTooLongError(f"ACL data too long: {len(frame)} bytes")
        if not 0 <= self.handle <= _MAX_HANDLE:
            raise InvalidHandleError(self.handle)
        handle_and_flags = (
            (self.handle & 0x0FFF)
            | (int(self.pb) << 12)
            | (int(self.bc) << 14)
        )
        return _ACL_HEADER.pack(handle_and_flags, len(frame)) + frame


@dataclass(frozen=True)
class UnknownPacket:
    """An H4 packet of a type this module does not decode."""

    packet_type: int
    data: bytes = b""

    def __post_init__(self) -> None:
        _check_range("packet_type", self.packet_type, 0xFF)
        object.__setattr__(self, "data", bytes(self.data))


HciPacket = Union[HciCommand, HciAclData, HciEvent, UnknownPacket]


def parse_packet(data: bytes) -> HciPacket:
    """Decode a complete H4 frame, starting at the packet type indicator."""
    data = bytes(data)
    if not data:
        raise InsufficientDataError("H4 frame needs a packet type")
    packet_type, payload = data[0], data[1:]
    if packet_type == H4_COMMAND:
        return HciCommand.from_bytes(payload)
    if packet_type == H4_ACL_DATA:
        return HciAclData.from_bytes(payload)
    if packet_type == H4_EVENT:
        return HciEvent.from_bytes(payload)
    return UnknownPacket(packet_type, payload)


def serialize_packet(packet: HciPacket) -> bytes:
    """Encode a packet as an H4 frame with its packet type indicator."""
    if isinstance(packet, HciCommand):
        return bytes([H4_COMMAND]) + packet.to_bytes()
    if isinstance(packet, HciAclData):
        return bytes([H4_ACL_DATA]) + packet.to_bytes()
    if isinstance(packet, HciEvent):
        return bytes([H4_EVENT]) + packet.to_bytes()
    if isinstance(packet, UnknownPacket):
        return bytes([packet.packet_type]) + packet.data
    raise TypeError(f"not an HCI packet: {packet!r}")