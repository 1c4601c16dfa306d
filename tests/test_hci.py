import pytest

from hidgatt.hci import (
    BroadcastFlag,
    HciAclData,
    HciCommand,
    HciEvent,
    PacketBoundaryFlag,
    UnknownPacket,
    parse_packet,
    serialize_packet,
)
from hidgatt.l2cap import (
    AttPdu,
    DataTooLongError,
    InsufficientDataError,
    InvalidHandleError,
    L2capPacket,
    SmpPdu,
    TooMuchDataError,
)

ATT_VALUE_PDU = AttPdu(0x12, bytes([0x1A, 0x00, 0x01]))


def test_parse_hci_command():
    result = parse_packet(bytes([0x01, 0x03, 0x0C, 0x00]))
    assert isinstance(result, HciCommand)
    assert result.opcode == 0x0C03
    assert result.data == b""


def test_parse_hci_command_with_params():
    result = parse_packet(bytes([0x01, 0xCD, 0xAB, 0x02, 0xFE, 0xDC]))
    assert isinstance(result, HciCommand)
    assert result.opcode == 0xABCD
    assert result.data == bytes([0xFE, 0xDC])


def test_parse_hci_command_ignores_trailing_bytes():
    result = parse_packet(bytes([0x01, 0x03, 0x0C, 0x00, 0xFF]))
    assert result == HciCommand(0x0C03, b"")


def test_parse_hci_event():
    result = parse_packet(bytes([0x04, 0x05, 0x04, 0x00, 0x40, 0x00, 0x13]))
    assert isinstance(result, HciEvent)
    assert result.event_code == 0x05
    assert len(result.data) == 4
    assert result.data == bytes([0x00, 0x40, 0x00, 0x13])


def test_parse_hci_acl_data():
    data = bytes([0x02, 0x40, 0x00, 8, 0, 4, 0, 4, 0, 0x12, 0x1A, 0x00, 0x01])
    result = parse_packet(data)
    assert isinstance(result, HciAclData)
    assert result.handle == 0x0040
    assert result.data.channel_id() == 0x0004
    assert result.data.payload == AttPdu(0x12, bytes([0x1A, 0x00, 0x01]))


def test_parse_unknown_packet():
    result = parse_packet(bytes([0x08, 0x01, 0x02, 0x03]))
    assert result == UnknownPacket(0x08, bytes([0x01, 0x02, 0x03]))


@pytest.mark.parametrize(
    "data",
    [
        b"",
        bytes([0x01]),
        bytes([0x01, 0x03]),
        bytes([0x02, 0x40, 0x00]),
        bytes([0x04]),
        bytes([0x04, 0x05]),
    ],
)
def test_insufficient_data_hci_header(data):
    with pytest.raises(InsufficientDataError):
        parse_packet(data)


@pytest.mark.parametrize(
    "data",
    [
        bytes([0x01, 0xCD, 0xAB, 0x02, 0xFE]),
        bytes([0x04, 0x05, 0x04, 0x00, 0x40, 0x00]),
        bytes([0x02, 0x40, 0x00, 8, 0, 4, 0, 4, 0, 0x12, 0x1A, 0x00]),
    ],
)
def test_insufficient_data_hci_payload(data):
    with pytest.raises(InsufficientDataError):
        parse_packet(data)


def test_insufficient_data_l2cap():
    with pytest.raises(InsufficientDataError):
        parse_packet(bytes([0x02, 0x40, 0x00, 8, 0, 5, 0, 4, 0, 0x12, 0x1A, 0x00, 0x01]))
    with pytest.raises(InsufficientDataError):
        parse_packet(bytes([0x02, 0x40, 0x00, 3, 0, 0, 0, 0]))


def test_too_much_data_l2cap():
    with pytest.raises(TooMuchDataError):
        parse_packet(bytes([0x02, 0x40, 0x00, 9, 0, 3, 0, 4, 0, 0x12, 0x1A, 0x00, 0x01]))


def test_insufficient_data_att_smp():
    with pytest.raises(InsufficientDataError):
        parse_packet(bytes([0x02, 0x40, 0x00, 4, 0, 0, 0, 4, 0]))
    with pytest.raises(InsufficientDataError):
        parse_packet(bytes([0x02, 0x40, 0x00, 4, 0, 0, 0, 6, 0]))


def test_parse_invalid_handle():
    with pytest.raises(InvalidHandleError) as info:
        parse_packet(bytes([0x02, 0xFF, 0x0F, 4, 0, 0, 0, 0x99, 0]))
    assert info.value.handle == 0x0FFF


def test_parse_invalid_broadcast_flag():
    with pytest.raises(InvalidHandleError) as info:
        parse_packet(bytes([0x02, 0x40, 0x80, 4, 0, 0, 0, 0x99, 0]))
    assert info.value.handle == 0x8040


def test_serialize_hci_command():
    cmd = HciCommand(0x0C03, b"")
    assert cmd.to_bytes() == bytes([0x03, 0x0C, 0x00])
    assert serialize_packet(cmd) == bytes([0x01, 0x03, 0x0C, 0x00])

    cmd_params = HciCommand(0xABCD, bytes([0xFE, 0xDC]))
    assert cmd_params.to_bytes() == bytes([0xCD, 0xAB, 0x02, 0xFE, 0xDC])
    assert serialize_packet(cmd_params) == bytes([0x01, 0xCD, 0xAB, 0x02, 0xFE, 0xDC])


def test_serialize_hci_command_too_long():
    with pytest.raises(DataTooLongError):
        HciCommand(0x0001, bytes(256)).to_bytes()


def test_serialize_hci_event():
    evt = HciEvent(0x05, bytes([0x00, 0x40, 0x00, 0x13]))
    assert evt.to_bytes() == bytes([0x05, 0x04, 0x00, 0x40, 0x00, 0x13])
    assert serialize_packet(evt) == bytes([0x04, 0x05, 0x04, 0x00, 0x40, 0x00, 0x13])


def test_serialize_hci_event_too_long():
    with pytest.raises(DataTooLongError):
        HciEvent(0x05, bytes(256)).to_bytes()


def test_serialize_hci_acl_data():
    acl = HciAclData(
        handle=0x0040,
        data=L2capPacket(ATT_VALUE_PDU),
        pb=PacketBoundaryFlag.FIRST_NON_FLUSHABLE,
        bc=BroadcastFlag.POINT_TO_POINT,
    )
    assert acl.to_bytes() == bytes([0x40, 0x00, 8, 0, 4, 0, 4, 0, 0x12, 0x1A, 0x00, 0x01])
    assert serialize_packet(acl) == bytes(
        [0x02, 0x40, 0x00, 8, 0, 4, 0, 4, 0, 0x12, 0x1A, 0x00, 0x01]
    )


def test_serialize_invalid_handle():
    acl = HciAclData(handle=0x0F00, data=L2capPacket(b"", 0xBEEF))
    with pytest.raises(InvalidHandleError) as info:
        acl.to_bytes()
    assert info.value.handle == 0x0F00


def test_serialize_hci_unknown_packet():
    assert serialize_packet(UnknownPacket(0x99, bytes([0x01, 0x02, 0x03]))) == bytes(
        [0x99, 0x01, 0x02, 0x03]
    )


def test_serialize_rejects_non_packet():
    with pytest.raises(TypeError):
        serialize_packet(b"\x01\x03\x0c\x00")


@pytest.mark.parametrize(
    "original",
    [
        HciCommand(0x1001, b""),
        HciEvent(0x0E, bytes([0x01, 0x01, 0x10, 0x00, 0x01, 0x02, 0x03, 0x04])),
        HciAclData(
            handle=0x0055,
            data=L2capPacket(AttPdu(0x52, bytes([0x2B, 0x00, 0x02, 0x03]))),
        ),
        HciAclData(
            handle=0x0066,
            data=L2capPacket(SmpPdu(0x02, bytes([0x11, 0x22, 0x33]))),
        ),
        UnknownPacket(0x99, bytes([0x01, 0x02])),
    ],
)
def test_round_trip(original):
    encoded = serialize_packet(original)
    parsed = parse_packet(encoded)
    assert parsed == original
    assert serialize_packet(parsed) == encoded


@pytest.mark.parametrize(
    "data, pb, bc",
    [
        (
            [0x02, 0x40, 0x00, 8, 0, 4, 0, 4, 0, 0x12, 0x1A, 0x00, 0x00],
            PacketBoundaryFlag.FIRST_NON_FLUSHABLE,
            BroadcastFlag.POINT_TO_POINT,
        ),
        (
            [0x02, 0x40, 0x10, 0x07, 0x00, 0x03, 0x00, 0x04, 0x00, 0x0A, 0x17, 0x00],
            PacketBoundaryFlag.CONTINUATION,
            BroadcastFlag.POINT_TO_POINT,
        ),
        (
            [0x02, 0x40, 0x20, 0x07, 0x00, 0x03, 0x00, 0x04, 0x00, 0x0A, 0x17, 0x00],
            PacketBoundaryFlag.FIRST_FLUSHABLE,
            BroadcastFlag.POINT_TO_POINT,
        ),
        (
            [0x02, 0x40, 0x30, 0x07, 0x00, 0x03, 0x00, 0x04, 0x00, 0x0A, 0x17, 0x00],
            PacketBoundaryFlag.DEPRECATED,
            BroadcastFlag.POINT_TO_POINT,
        ),
        (
            [0x02, 0x40, 0x40, 8, 0, 4, 0, 4, 0, 0x12, 0x1A, 0x00, 0x00],
            PacketBoundaryFlag.FIRST_NON_FLUSHABLE,
            BroadcastFlag.BD_EDR_BROADCAST,
        ),
    ],
)
def test_pb_bc_flag_parse(data, pb, bc):
    result = parse_packet(bytes(data))
    assert isinstance(result, HciAclData)
    assert result.handle == 0x0040
    assert result.pb == pb
    assert result.bc == bc


@pytest.mark.parametrize(
    "pb, bc, second",
    [
        (PacketBoundaryFlag.FIRST_NON_FLUSHABLE, BroadcastFlag.POINT_TO_POINT, 0x00),
        (PacketBoundaryFlag.CONTINUATION, BroadcastFlag.POINT_TO_POINT, 0x10),
        (PacketBoundaryFlag.FIRST_FLUSHABLE, BroadcastFlag.POINT_TO_POINT, 0x20),
        (PacketBoundaryFlag.DEPRECATED, BroadcastFlag.POINT_TO_POINT, 0x30),
        (PacketBoundaryFlag.FIRST_NON_FLUSHABLE, BroadcastFlag.BD_EDR_BROADCAST, 0x40),
    ],
)
def test_pb_bc_serialize_flags(pb, bc, second):
    acl = HciAclData(handle=0x0040, data=L2capPacket(b"", 0xBEEF), pb=pb, bc=bc)
    assert acl.to_bytes() == bytes([0x40, second, 0x04, 0x00, 0x00, 0x00, 0xEF, 0xBE])