# hidgatt

Building blocks for a Bluetooth Low Energy peripheral. The package provides
codecs for the packets that pass between a host and its controller, a small
GATT attribute database, and the Security Manager functions used in LE
legacy pairing.

## Modules

- `hidgatt.crypto` holds the Security Manager functions. `e` is AES-128 on a
  single block. `ah` is the random address hash. `s1` generates keys and `c1`
  generates confirm values. The plain functions take values in the byte order
  of the specification, most significant byte first. `s1_rev` and `c1_rev`
  take and return values in the little-endian order in which they appear on
  the air. A value of the wrong length raises `ValueError`.
- `hidgatt.hci` parses and serializes H4 packets. It provides
  `parse_packet`, `serialize_packet`, `HciCommand`, `HciEvent`, `HciAclData`
  and `UnknownPacket`, together with the `PacketBoundaryFlag` and
  `BroadcastFlag` enums.
- `hidgatt.l2cap` covers L2CAP basic frames (`L2capPacket`) and the ATT and
  SMP PDUs they carry (`AttPdu` and `SmpPdu`). It also defines the packet
  errors.
- `hidgatt.event` decodes and encodes the HCI events LE Connection Complete,
  Command Complete and Command Status. It provides `parse_event`,
  `LeConnectionComplete`, `CommandComplete` and `CommandStatus`, along with
  the `Role`, `AddressType` and `ClockAccuracy` enums.
- `hidgatt.gatt` is a minimal attribute database. It provides
  `AttributeDatabase`, `Service`, `Characteristic`, `Descriptor`,
  `CharacteristicProperties`, `Uuid` and `Handle`.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Key generation with `s1`, using the example values from the Security Manager
specification:

```python
from hidgatt.crypto import s1

k = bytes(16)
r1 = bytes.fromhex("000f0e0d0c0b0a091122334455667788")
r2 = bytes.fromhex("010203040506070899aabbccddeeff00")
print(s1(k, r1, r2).hex())  # 9a1fe1f0e8b0f49b5b4216ae796da062
```

Parsing and rebuilding an H4 packet:

```python
from hidgatt.hci import HciCommand, parse_packet, serialize_packet

packet = parse_packet(bytes([0x01, 0x03, 0x0C, 0x00]))  # HCI Reset
assert isinstance(packet, HciCommand)
print(hex(packet.opcode))  # 0xc03
assert serialize_packet(packet) == bytes([0x01, 0x03, 0x0C, 0x00])
```

Building an ACL packet that carries an ATT PDU:

```python
from hidgatt.hci import HciAclData
from hidgatt.l2cap import AttPdu, L2capPacket

acl = HciAclData(handle=0x0040, data=L2capPacket(AttPdu(0x12, b"\x1a\x00\x01")))
print(acl.to_bytes().hex(" "))  # 40 00 08 00 04 00 04 00 12 1a 00 01
```

Parsing an HCI event:

```python
from hidgatt.event import CommandComplete, parse_event

event = parse_event(bytes([0x0E, 0x04, 0x01, 0x03, 0x0C, 0x00]))
assert isinstance(event, CommandComplete)
print(hex(event.command_opcode))  # 0xc03
```

## Errors

Malformed input raises an exception. `hidgatt.hci` and `hidgatt.l2cap` raise
subclasses of `PacketParseError`, such as `InsufficientDataError`,
`TooMuchDataError` and `InvalidHandleError`. Encoding a packet that does not
fit its length fields raises `DataTooLongError`, which is a
`PacketSerializeError`. `hidgatt.event` raises `EventParseError` and
`EventSerializationError`. `hidgatt.gatt` raises `GattParseError`.

## What the package does not do

The package is a library only. It installs no command and does not open a
Bluetooth socket or talk to a controller. It does not advertise, accept
connections or run a pairing exchange. It does not decode SMP PDUs into
typed pairing messages: `SmpPdu` exposes only the code and the raw parameter
bytes. To drive a real device, you must supply the transport and the
protocol logic yourself. The codecs and security functions here are the
pieces that logic needs.