"""GATT attribute model and a simple attribute database."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

__all__ = [
    "GattParseError",
    "Uuid",
    "Handle",
    "CharacteristicProperties",
    "Service",
    "Characteristic",
    "Descriptor",
    "Attribute",
    "AttributeDatabase",
]


class GattParseError(ValueError):
    """Raised when GATT data on the wire cannot be decoded."""


@dataclass(frozen=True)
class Uuid:
    """A 16-bit UUID (an int) or a 128-bit UUID (16 bytes)."""

    value: Union[int, bytes]

    def __post_init__(self) -> None:
        if isinstance(self.value, (bytes, bytearray)):
            if len(self.value) != 16:
                raise ValueError(
                    f"a 128-bit UUID must be 16 bytes, got {len(self.value)}"
                )
            object.__setattr__(self, "value", bytes(self.value))
        elif isinstance(self.value, int) and not isinstance(self.value, bool):
            if not 0 <= self.value <= 0xFFFF:
                raise ValueError(f"a 16-bit UUID must fit in 16 bits: {self.value:#x}")
        else:
            raise TypeError("UUID value must be an int or 16 bytes")


@dataclass(frozen=True, order=True)
class Handle:
    """An attribute handle."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFF:
            raise ValueError(f"handle out of range: {self.value}")


@dataclass
class CharacteristicProperties:
    """The characteristic properties bit field."""

    read: bool = False
    write: bool = False
    write_without_response: bool = False
    notify: bool = False
    indicate: bool = False
    broadcast: bool = False
    write_authenticated_signed: bool = False

    _BITS = (
        ("broadcast", 0x01),
        ("read", 0x02),
        ("write_without_response", 0x04),
        ("write", 0x08),
        ("notify", 0x10),
        ("indicate", 0x20),
        ("write_authenticated_signed", 0x40),
    )

    def to_bytes(self) -> bytes:
        """Encode the properties as a single byte."""
        byte = 0
        for name, mask in self._BITS:
            if getattr(self, name):
                byte |= mask
        return bytes([byte])

    @classmethod
    def from_bytes(cls, data: bytes) -> "CharacteristicProperties":
        """Decode the properties from exactly one byte."""
        data = bytes(data)
        if len(data) != 1:
            raise GattParseError(
                f"characteristic properties must be 1 byte, got {len(data)}"
            )
        byte = data[0]
        return cls(**{name: bool(byte & mask) for name, mask in cls._BITS})


@dataclass
class Descriptor:
    """A characteristic descriptor."""

    handle: Handle
    uuid: Uuid
    value: bytes = b""


@dataclass
class Characteristic:
    """A characteristic with its declaration and value handles."""

    declaration_handle: Handle
    value_handle: Handle
    uuid: Uuid
    properties: CharacteristicProperties
    descriptors: List[Descriptor] = field(default_factory=list)
    value: bytes = b""


@dataclass
class Service:
    """A service with its characteristics."""

    handle: Handle
    uuid: Uuid
    primary: bool = True
    characteristics: List[Characteristic] = field(default_factory=list)


Attribute = Union[Service, Characteristic, Descriptor]


def _attribute_handle(attr: Attribute) -> Handle:
    if isinstance(attr, Service):
        return attr.handle
    if isinstance(attr, Characteristic):
        return attr.declaration_handle
    if isinstance(attr, Descriptor):
        return attr.handle
    raise TypeError(f"not a GATT attribute: {attr!r}")


@dataclass
class AttributeDatabase:
    """Attributes keyed by their (declaration) handle."""

    attributes: Dict[Handle, Attribute] = field(default_factory=dict)

    def insert(self, attr: Attribute) -> None:
        """Store an attribute, replacing any previous one at the same handle."""
        self.attributes[_attribute_handle(attr)] = attr

    def respond_to_att_find_by_type_value_response(
        self, handle: Handle, value: bytes
    ) -> Optional[List[Handle]]:
        """Return the declaration and value handles of a characteristic at
        ``handle`` whose value equals ``value``, or None."""
        attr = self.attributes.get(handle)
        if isinstance(attr, Characteristic) and attr.value == bytes(value):
            return [attr.declaration_handle, attr.value_handle]
        return None