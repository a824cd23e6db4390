import pytest

from safethrough.packets import (
    DATA_LEN,
    FILE_NAME_LEN,
    HEADER_SIZE,
    JID_LEN,
    DownloadRequest,
    FileData,
    FileListEntry,
    FileListRequest,
    FileNotice,
    Header,
    Online,
    PacketFlag,
    UserOffline,
    body_length,
    decode_packet,
    encode_packet,
    parse_header,
)


def test_online_header_wire_bytes():
    wire = encode_packet(Online("host"))
    assert wire[:HEADER_SIZE] == b"\x00\x47\x00\x00\x00\x00\x01\x00\x00"


def test_online_body_is_jid_field():
    wire = encode_packet(Online("host"))
    header = parse_header(wire)
    assert body_length(header) == JID_LEN
    assert wire[HEADER_SIZE:].rstrip(b"\0") == b"host"


def test_full_data_packet_matches_socket_buffer():
    wire = encode_packet(FileData(data=b"x"))
    assert len(wire) == 10641


def test_header_round_trip():
    header = Header(length=391, flag=PacketFlag.SEND_REQ)
    assert parse_header(header.pack()) == header


def test_header_too_short():
    with pytest.raises(ValueError):
        parse_header(b"\x00\x01")


def test_header_out_of_range():
    with pytest.raises(ValueError):
        Header(length=70000, flag=0).pack()


@pytest.mark.parametrize(
    "packet",
    [
        Online("alice"),
        UserOffline("bob"),
        FileListRequest("server"),
        FileListEntry("setup.exe"),
        DownloadRequest("client", "svrset.ini"),
    ],
)
def test_simple_round_trip(packet):
    assert decode_packet(encode_packet(packet)) == packet


@pytest.mark.parametrize(
    "flag",
    [
        PacketFlag.SEND_REQ,
        PacketFlag.REJECT_REQ,
        PacketFlag.ACCEPT_FILE,
        PacketFlag.OFFLINE_FILE,
        PacketFlag.SEND_COMPLETE,
        PacketFlag.SEND_CONTINUE,
    ],
)
def test_notice_round_trip(flag):
    notice = FileNotice(flag, "alice", "bob", "report.txt")
    decoded = decode_packet(encode_packet(notice))
    assert decoded == notice
    assert decoded.flag is flag


@pytest.mark.parametrize("flag", [PacketFlag.TRANS_DATA, PacketFlag.OFF_DATA])
def test_data_round_trip(flag):
    chunk = FileData(flag, "alice", "bob", "a.bin", total=5000, data=b"\x01\x02\x00\x03")
    decoded = decode_packet(encode_packet(chunk))
    assert decoded == chunk
    assert decoded.transferred == 4


def test_data_packets_have_fixed_size():
    small = encode_packet(FileData(data=b""))
    large = encode_packet(FileData(data=bytes(DATA_LEN)))
    assert len(small) == len(large)


def test_file_list_variants_distinguished_by_size():
    request = decode_packet(encode_packet(FileListRequest("me")))
    entry = decode_packet(encode_packet(FileListEntry("me")))
    assert request == FileListRequest("me")
    assert entry == FileListEntry("me")


def test_jid_too_long():
    with pytest.raises(ValueError):
        encode_packet(Online("a" * (JID_LEN + 1)))


def test_jid_exactly_full_fits():
    packet = Online("a" * JID_LEN)
    assert decode_packet(encode_packet(packet)) == packet


def test_filename_too_long():
    with pytest.raises(ValueError):
        encode_packet(DownloadRequest("c", "f" * (FILE_NAME_LEN + 1)))


def test_chunk_too_large():
    with pytest.raises(ValueError):
        FileData(data=bytes(DATA_LEN + 1))


def test_wrong_flag_for_notice():
    with pytest.raises(ValueError):
        FileNotice(PacketFlag.ONLINE)


def test_wrong_flag_for_data():
    with pytest.raises(ValueError):
        FileData(PacketFlag.SEND_REQ)


def test_truncated_packet():
    wire = encode_packet(FileNotice(PacketFlag.SEND_REQ, "a", "b", "c"))
    with pytest.raises(ValueError):
        decode_packet(wire[:-1])


def test_unknown_flag():
    wire = Header(length=HEADER_SIZE - 2 + JID_LEN, flag=99).pack() + bytes(JID_LEN)
    with pytest.raises(ValueError):
        decode_packet(wire)


def test_header_length_too_small():
    with pytest.raises(ValueError):
        body_length(Header(length=1, flag=0))


def test_version_byte_is_one():
    header = parse_header(encode_packet(DownloadRequest("c", "f")))
    assert header.version == 1
    assert header.flag == PacketFlag.DOWNLOAD_FILE