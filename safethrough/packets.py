"""Binary packets of the file transfer protocol.

Every packet starts with a packed 9-byte header: a big-endian length,
four reserved bytes, a version byte and a big-endian flag. The length
field counts the whole packet minus two bytes.
"""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import ClassVar, Union

__all__ = [
    "JID_LEN",
    "DATA_LEN",
    "FILE_NAME_LEN",
    "PACKET_PAD",
    "SOCK_BUF_LEN",
    "HEADER_SIZE",
    "PacketFlag",
    "Header",
    "Online",
    "UserOffline",
    "FileNotice",
    "FileData",
    "FileListRequest",
    "FileListEntry",
    "DownloadRequest",
    "Packet",
    "parse_header",
    "body_length",
    "encode_packet",
    "decode_packet",
]

JID_LEN = 64
DATA_LEN = 10240
FILE_NAME_LEN = 256
PACKET_PAD = 2
SOCK_BUF_LEN = DATA_LEN + 399 + PACKET_PAD

_HEADER = struct.Struct(">H4sBH")
HEADER_SIZE = _HEADER.size
_COUNTS = struct.Struct(">II")


class PacketFlag(enum.IntEnum):
    ONLINE = 0
    SEND_REQ = 1
    REJECT_REQ = 2
    TRANS_DATA = 3
    OFFLINE = 4
    ACCEPT_FILE = 5
    OFFLINE_FILE = 6
    SEND_COMPLETE = 7
    SEND_CONTINUE = 8
    OFF_DATA = 9
    DOWNLOAD_FILE = 10
    FILE_LIST = 11


_NOTICE_FLAGS = frozenset(
    {
        PacketFlag.SEND_REQ,
        PacketFlag.REJECT_REQ,
        PacketFlag.ACCEPT_FILE,
        PacketFlag.OFFLINE_FILE,
        PacketFlag.SEND_COMPLETE,
        PacketFlag.SEND_CONTINUE,
    }
)
_DATA_FLAGS = frozenset({PacketFlag.TRANS_DATA, PacketFlag.OFF_DATA})


@dataclass(frozen=True)
class Header:
    length: int
    flag: int
    version: int = 1
    reserved: bytes = bytes(4)

    def pack(self) -> bytes:
        """Return the 9 wire bytes of this header."""
        if len(self.reserved) != 4:
            raise ValueError("header reserved field must be 4 bytes")
        try:
            return _HEADER.pack(self.length, self.reserved, self.version, self.flag)
        except struct.error as exc:
            raise ValueError(f"header field out of range: {exc}") from exc


def parse_header(data: bytes) -> Header:
    """Read a header from the first bytes of ``data``."""
    if len(data) < HEADER_SIZE:
        raise ValueError(f"header needs {HEADER_SIZE} bytes, got {len(data)}")
    length, reserved, version, flag = _HEADER.unpack_from(data)
    return Header(length=length, flag=flag, version=version, reserved=reserved)


def body_length(header: Header) -> int:
    """Number of bytes that follow the header on the wire."""
    size = header.length - HEADER_SIZE + PACKET_PAD
    if size < 0:
        raise ValueError(f"header length {header.length} is too small")
    return size


def _pack_text(text: str, size: int) -> bytes:
    raw = text.encode("utf-8")
    if len(raw) > size:
        raise ValueError(f"{text!r} does not fit in {size} bytes")
    return raw.ljust(size, b"\0")


def _unpack_text(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _require(body: bytes, size: int, name: str) -> None:
    if len(body) < size:
        raise ValueError(f"{name} body needs {size} bytes, got {len(body)}")


@dataclass(frozen=True)
class Online:
    """A client announcing itself to the server."""

    jid: str = ""
    flag: ClassVar[PacketFlag] = PacketFlag.ONLINE

    def _payload(self) -> bytes:
        return _pack_text(self.jid, JID_LEN)

    @classmethod
    def _parse(cls, flag: PacketFlag, body: bytes) -> "Online":
        _require(body, JID_LEN, cls.__name__)
        return cls(_unpack_text(body[:JID_LEN]))


@dataclass(frozen=True)
class UserOffline(Online):
    """A user that went offline."""

    flag: ClassVar[PacketFlag] = PacketFlag.OFFLINE


@dataclass(frozen=True)
class FileNotice:
    """Request, accept, reject, offline, complete or continue notice for a file."""

    flag: PacketFlag
    sender: str = ""
    recipient: str = ""
    filename: str = ""

    def __post_init__(self) -> None:
        if self.flag not in _NOTICE_FLAGS:
            raise ValueError(f"{self.flag!r} is not a file notice flag")
        object.__setattr__(self, "flag", PacketFlag(self.flag))

    def _payload(self) -> bytes:
        return (
            _pack_text(self.sender, JID_LEN)
            + _pack_text(self.recipient, JID_LEN)
            + _pack_text(self.filename, FILE_NAME_LEN)
        )

    @classmethod
    def _parse(cls, flag: PacketFlag, body: bytes) -> "FileNotice":
        _require(body, 2 * JID_LEN + FILE_NAME_LEN, cls.__name__)
        return cls(
            flag,
            _unpack_text(body[:JID_LEN]),
            _unpack_text(body[JID_LEN : 2 * JID_LEN]),
            _unpack_text(body[2 * JID_LEN : 2 * JID_LEN + FILE_NAME_LEN]),
        )


@dataclass(frozen=True)
class FileData:
    """One chunk of file content, sent online or from offline storage."""

    flag: PacketFlag = PacketFlag.TRANS_DATA
    sender: str = ""
    recipient: str = ""
    filename: str = ""
    total: int = 0
    data: bytes = b""

    def __post_init__(self) -> None:
        if self.flag not in _DATA_FLAGS:
            raise ValueError(f"{self.flag!r} is not a file data flag")
        object.__setattr__(self, "flag", PacketFlag(self.flag))
        if len(self.data) > DATA_LEN:
            raise ValueError(f"chunk of {len(self.data)} bytes exceeds {DATA_LEN}")
        if not 0 <= self.total <= 0xFFFFFFFF:
            raise ValueError(f"total {self.total} out of range")

    @property
    def transferred(self) -> int:
        """Number of meaningful bytes in this chunk."""
        return len(self.data)

    def _payload(self) -> bytes:
        return (
            _pack_text(self.sender, JID_LEN)
            + _pack_text(self.recipient, JID_LEN)
            + _pack_text(self.filename, FILE_NAME_LEN)
            + _COUNTS.pack(self.total, self.transferred)
            + self.data.ljust(DATA_LEN, b"\0")
        )

    @classmethod
    def _parse(cls, flag: PacketFlag, body: bytes) -> "FileData":
        start = 2 * JID_LEN + FILE_NAME_LEN
        _require(body, start + _COUNTS.size, cls.__name__)
        total, transferred = _COUNTS.unpack_from(body, start)
        offset = start + _COUNTS.size
        size = min(transferred, DATA_LEN)
        _require(body, offset + size, cls.__name__)
        return cls(
            flag,
            _unpack_text(body[:JID_LEN]),
            _unpack_text(body[JID_LEN : 2 * JID_LEN]),
            _unpack_text(body[2 * JID_LEN : start]),
            total,
            bytes(body[offset : offset + size]),
        )


@dataclass(frozen=True)
class FileListRequest:
    """Ask the server for the list of downloadable files."""

    sender: str = ""
    flag: ClassVar[PacketFlag] = PacketFlag.FILE_LIST

    def _payload(self) -> bytes:
        return _pack_text(self.sender, JID_LEN)

    @classmethod
    def _parse(cls, flag: PacketFlag, body: bytes) -> "FileListRequest":
        _require(body, JID_LEN, cls.__name__)
        return cls(_unpack_text(body[:JID_LEN]))


@dataclass(frozen=True)
class FileListEntry:
    """One file name in the server's file list."""

    name: str = ""
    flag: ClassVar[PacketFlag] = PacketFlag.FILE_LIST

    def _payload(self) -> bytes:
        return _pack_text(self.name, FILE_NAME_LEN)

    @classmethod
    def _parse(cls, flag: PacketFlag, body: bytes) -> "FileListEntry":
        _require(body, FILE_NAME_LEN, cls.__name__)
        return cls(_unpack_text(body[:FILE_NAME_LEN]))


@dataclass(frozen=True)
class DownloadRequest:
    """Ask the server to send a stored file."""

    jid: str = ""
    filename: str = ""
    flag: ClassVar[PacketFlag] = PacketFlag.DOWNLOAD_FILE

    def _payload(self) -> bytes:
        return _pack_text(self.jid, JID_LEN) + _pack_text(self.filename, FILE_NAME_LEN)

    @classmethod
    def _parse(cls, flag: PacketFlag, body: bytes) -> "DownloadRequest":
        _require(body, JID_LEN + FILE_NAME_LEN, cls.__name__)
        return cls(
            _unpack_text(body[:JID_LEN]),
            _unpack_text(body[JID_LEN : JID_LEN + FILE_NAME_LEN]),
        )


Packet = Union[
    Online,
    UserOffline,
    FileNotice,
    FileData,
    FileListRequest,
    FileListEntry,
    DownloadRequest,
]


def encode_packet(packet: Packet) -> bytes:
    """Return the full wire form of ``packet``, header included."""
    payload = packet._payload()
    header = Header(length=HEADER_SIZE + len(payload) - PACKET_PAD, flag=packet.flag)
    return header.pack() + payload


def decode_packet(data: bytes) -> Packet:
    """Decode one complete packet from ``data``."""
    header = parse_header(data)
    size = body_length(header)
    body = bytes(data[HEADER_SIZE : HEADER_SIZE + size])
    if len(body) < size:
        raise ValueError(f"packet truncated: body needs {size} bytes, got {len(body)}")
    try:
        flag = PacketFlag(header.flag)
    except ValueError:
        raise ValueError(f"unknown packet flag {header.flag}") from None

    if flag is PacketFlag.ONLINE:
        return Online._parse(flag, body)
    if flag is PacketFlag.OFFLINE:
        return UserOffline._parse(flag, body)
    if flag in _NOTICE_FLAGS:
        return FileNotice._parse(flag, body)
    if flag in _DATA_FLAGS:
        return FileData._parse(flag, body)
    if flag is PacketFlag.DOWNLOAD_FILE:
        return DownloadRequest._parse(flag, body)
    # Both the list request and each list entry carry the FILE_LIST flag;
    # only their size tells them apart.
    if size == JID_LEN:
        return FileListRequest._parse(flag, body)
    return FileListEntry._parse(flag, body)