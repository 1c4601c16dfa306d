"""Typed HCI events: LE Connection Complete, Command Complete and Command Status.

Frames here start at the event code; the H4 packet type byte is not included.
A status of 0 means success.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Type, TypeVar, Union

__all__ = [
    "EventParseError",
    "EventSerializationError",
    "Role",
    "AddressType",
    "ClockAccuracy",
    "LeConnectionComplete",
    "CommandComplete",
    "CommandStatus",
    "HciEventMsg",
    "parse_event",
]

EVENT_CODE_LE_META = 0x3E
EVENT_CODE_COMMAND_COMPLETE = 0x0E
EVENT_CODE_COMMAND_STATUS = 0x0F

SUBEVENT_LE_CONNECTION_COMPLETE = 0x01

_LE_CONN_COMPLETE_PARAM_LEN = 19
_COMMAND_COMPLETE_MIN_PARAM_LEN = 3
_COMMAND_STATUS_PARAM_LEN = 4

_LE_CONN_COMPLETE = struct.Struct("<BBBBHBB6sHHHB")
_COMMAND_STATUS = struct.Struct("<BBBBH")


class EventParseError(ValueError):
    """Raised when bytes do not form a supported HCI event."""


class EventSerializationError(ValueError):
    """Raised when an event cannot be encoded."""


class Role(IntEnum):
    CENTRAL = 0x00
    PERIPHERAL = 0x01


class AddressType(IntEnum):
    PUBLIC = 0x00
    RANDOM = 0x01


class ClockAccuracy(IntEnum):
    PPM500 = 0x00
    PPM250 = 0x01
    PPM150 = 0x02
    PPM100 = 0x03
    PPM75 = 0x04
    PPM50 = 0x05
    PPM30 = 0x06
    PPM20 = 0x07


_E = TypeVar("_E", bound=IntEnum)


def _decode_enum(cls: Type[_E], field_name: str, value: int) -> _E:
    try:
        return cls(value)
    except ValueError:
        raise EventParseError(f"invalid value {value:#04x} for {field_name}") from None


@dataclass(frozen=True)
class LeConnectionComplete:
    """LE Meta event, LE Connection Complete subevent."""

    status: int
    connection_handle: int
    role: Role
    peer_address_type: AddressType
    peer_address: bytes
    connection_interval: int
    peripheral_latency: int
    supervision_timeout: int
    central_clock_accuracy: ClockAccuracy

    def to_bytes(self) -> bytes:
        if len(self.peer_address) != 6:
            raise EventSerializationError("peer address must be 6 bytes")
        try:
            return _LE_CONN_COMPLETE.pack(
                EVENT_CODE_LE_META,
                _LE_CONN_COMPLETE_PARAM_LEN,
                SUBEVENT_LE_CONNECTION_COMPLETE,
                self.status,
                self.connection_handle,
                int(self.role),
                int(self.peer_address_type),
                bytes(self.peer_address),
                self.connection_interval,
                self.peripheral_latency,
                self.supervision_timeout,
                int(self.central_clock_accuracy),
            )
        except struct.error as exc:
            raise EventSerializationError(str(exc)) from None


@dataclass(frozen=True)
class CommandComplete:
    """Command Complete event."""

    num_hci_command_packets: int
    command_opcode: int
    return_parameters: bytes = b""

    def to_bytes(self) -> bytes:
        param_len = 3 + len(self.return_parameters)
        if param_len > 0xFF:
            raise EventSerializationError(
                "CommandComplete return parameters too large for HCI length field"
            )
        try:
            header = struct.pack(
                "<BBBH",
                EVENT_CODE_COMMAND_COMPLETE,
                param_len,
                self.num_hci_command_packets,
                self.command_opcode,
            )
        except struct.error as exc:
            raise EventSerializationError(str(exc)) from None
        return header + bytes(self.return_parameters)


@dataclass(frozen=True)
class CommandStatus:
    """Command Status event."""

    status: int
    num_hci_command_packets: int
    command_opcode: int

    def to_bytes(self) -> bytes:
        try:
            return _COMMAND_STATUS.pack(
                EVENT_CODE_COMMAND_STATUS,
                _COMMAND_STATUS_PARAM_LEN,
                self.status,
                self.num_hci_command_packets,
                self.command_opcode,
            )
        except struct.error as exc:
            raise EventSerializationError(str(exc)) from None


HciEventMsg = Union[LeConnectionComplete, CommandComplete, CommandStatus]


def _parse_le_meta(data: bytes, param_len: int) -> LeConnectionComplete:
    if param_len < 1:
        raise EventParseError(f"invalid length: expected at least 1, got {param_len}")
    subevent = data[2]
    if subevent != SUBEVENT_LE_CONNECTION_COMPLETE:
        raise EventParseError(f"invalid LE subevent code {subevent:#04x}")
    if param_len != _LE_CONN_COMPLETE_PARAM_LEN:
        raise EventParseError(
            f"invalid length: expected {_LE_CONN_COMPLETE_PARAM_LEN}, got {param_len}"
        )
    (
        _code,
        _length,
        _subevent,
        status,
        handle,
        role,
        addr_type,
        address,
        interval,
        latency,
        timeout,
        accuracy,
    ) = _LE_CONN_COMPLETE.unpack_from(data)
    return LeConnectionComplete(
        status=status,
        connection_handle=handle,
        role=_decode_enum(Role, "Role", role),
        peer_address_type=_decode_enum(AddressType, "AddressType", addr_type),
        peer_address=address,
        connection_interval=interval,
        peripheral_latency=latency,
        supervision_timeout=timeout,
        central_clock_accuracy=_decode_enum(ClockAccuracy, "ClockAccuracy", accuracy),
    )


def parse_event(data: bytes) -> HciEventMsg:
    """Decode an HCI event starting at its event code."""
    data = bytes(data)
    if len(data) < 2:
        raise EventParseError(f"insufficient data: expected 2 bytes, got {len(data)}")
    event_code, param_len = data[0], data[1]
    total = 2 + param_len
    if len(data) < total:
        raise EventParseError(
            f"insufficient data: expected {total} bytes, got {len(data)}"
        )

    if event_code == EVENT_CODE_LE_META:
        return _parse_le_meta(data, param_len)

    if event_code == EVENT_CODE_COMMAND_COMPLETE:
        if param_len < _COMMAND_COMPLETE_MIN_PARAM_LEN:
            raise EventParseError(
                f"invalid length: expected at least {_COMMAND_COMPLETE_MIN_PARAM_LEN},"
                f" got {param_len}"
            )
        num_packets = data[2]
        (opcode,) = struct.unpack_from("<H", data, 3)
        return CommandComplete(num_packets, opcode, data[5:total])

    if event_code == EVENT_CODE_COMMAND_STATUS:
        if param_len != _COMMAND_STATUS_PARAM_LEN:
            raise EventParseError(
                f"invalid length: expected {_COMMAND_STATUS_PARAM_LEN}, got {param_len}"
            )
        _code, _length, status, num_packets, opcode = _COMMAND_STATUS.unpack_from(data)
        return CommandStatus(status, num_packets, opcode)

    raise EventParseError(f"invalid event code {event_code:#04x}")