"""Handling of packets received from the file transfer server."""

from __future__ import annotations

import io
import logging
import time
from dataclasses import dataclass, field
from typing import BinaryIO, Callable

from .packets import (
    DATA_LEN,
    FileData,
    FileListEntry,
    FileListRequest,
    FileNotice,
    Packet,
    PacketFlag,
    UserOffline,
    decode_packet,
    parse_header,
)

__all__ = ["ClientEvents", "PacketHandler", "COMPLETE_DELAY"]

log = logging.getLogger(__name__)

COMPLETE_DELAY = 0.8
"""Seconds waited before announcing that a file was sent completely."""


def _ignore(*_args: object) -> None:
    return None


def _refuse(*_args: object) -> bool:
    return False


@dataclass
class ClientEvents:
    """Callbacks invoked while packets are handled."""

    offline: Callable[[str], None] = _ignore
    file_request: Callable[[str, str, str], bool] = _refuse
    accept_file_send: Callable[[str, str, str], None] = _ignore
    send_complete: Callable[[str, str, str], None] = _ignore
    progress: Callable[[int, int], None] = _ignore
    finished: Callable[[str, str], None] = _ignore
    add_share_file: Callable[[str], None] = _ignore


def _file_size(file: BinaryIO) -> int:
    position = file.tell()
    size = file.seek(0, io.SEEK_END)
    file.seek(position)
    return size


@dataclass
class PacketHandler:
    """Reacts to decoded server packets, sending replies through ``send``."""

    send: Callable[[Packet], None]
    events: ClientEvents = field(default_factory=ClientEvents)
    complete_delay: float = COMPLETE_DELAY
    sleep: Callable[[float], None] = time.sleep
    send_files: dict[str, BinaryIO] = field(default_factory=dict)
    receive_files: dict[str, BinaryIO] = field(default_factory=dict)
    offline_files: dict[str, BinaryIO] = field(default_factory=dict)
    file_list: list[str] = field(default_factory=list)
    _offline_done: dict[str, int] = field(default_factory=dict, repr=False)
    _sent: dict[str, int] = field(default_factory=dict, repr=False)

    def register_send(self, name: str, file: BinaryIO) -> None:
        """Register an open file to be sent when the server asks to continue."""
        self.send_files[name] = file

    def register_receive(self, name: str, file: BinaryIO) -> None:
        """Register an open file for an online transfer being received."""
        self.receive_files[name] = file

    def register_offline(self, name: str, file: BinaryIO) -> None:
        """Register an open file that stored (offline) data is written to."""
        self.offline_files[name] = file

    def handle(self, data: bytes) -> Packet | None:
        """Decode one complete packet and act on it.

        Returns the decoded packet, or None when its flag is unknown.
        Raises ValueError when the packet is malformed.
        """
        header = parse_header(data)
        if header.flag not in PacketFlag._value2member_map_:
            log.debug("ignoring packet with unknown flag %d", header.flag)
            return None
        packet = decode_packet(data)

        if isinstance(packet, UserOffline):
            self.events.offline(packet.jid)
        elif isinstance(packet, FileNotice):
            self._handle_notice(packet)
        elif isinstance(packet, FileData):
            if packet.flag is PacketFlag.OFF_DATA:
                self._handle_offline_data(packet)
        elif isinstance(packet, FileListEntry):
            self.file_list.append(packet.name)
            log.debug("shared file %s", packet.name)
            self.events.add_share_file(packet.name)
        elif isinstance(packet, FileListRequest):
            log.debug("ignoring file list request from %s", packet.sender)
        return packet

    def _handle_notice(self, notice: FileNotice) -> None:
        args = (notice.sender, notice.recipient, notice.filename)
        if notice.flag is PacketFlag.SEND_REQ:
            if self.events.file_request(*args):
                log.debug("accepted file transfer request for %s", notice.filename)
        elif notice.flag is PacketFlag.ACCEPT_FILE:
            self.events.accept_file_send(*args)
        elif notice.flag is PacketFlag.SEND_COMPLETE:
            self.events.send_complete(*args)
        elif notice.flag is PacketFlag.SEND_CONTINUE:
            self._continue_send(notice)

    def _handle_offline_data(self, chunk: FileData) -> None:
        name = chunk.filename
        file = self.offline_files.get(name)
        if file is None:
            log.debug("no registered file for offline data %s", name)
            return
        done = self._offline_done.get(name, 0) + chunk.transferred
        self._offline_done[name] = done
        self.events.progress(done, chunk.total)
        file.write(chunk.data)
        if done >= chunk.total:
            self._offline_done.pop(name, None)
            self.offline_files.pop(name, None)
            file.close()
            self.events.finished(chunk.sender, name)

    def _complete(self, notice: FileNotice, file: BinaryIO) -> None:
        file.close()
        self.send_files.pop(notice.filename, None)
        self._sent.pop(notice.filename, None)
        self.sleep(self.complete_delay)
        self.send(
            FileNotice(
                PacketFlag.SEND_COMPLETE,
                notice.sender,
                notice.recipient,
                notice.filename,
            )
        )

    def _continue_send(self, notice: FileNotice) -> None:
        name = notice.filename
        file = self.send_files.get(name)
        if file is None:
            log.debug("continue requested for unknown file %s", name)
            return
        size = _file_size(file)
        sent = self._sent.get(name, DATA_LEN)
        log.debug("continue %s -> %s: %s", notice.sender, notice.recipient, name)
        if sent >= size:
            self._complete(notice, file)
            return
        chunk = file.read(DATA_LEN)
        sent += len(chunk)
        self._sent[name] = sent
        self.send(
            FileData(
                PacketFlag.TRANS_DATA,
                notice.sender,
                notice.recipient,
                name,
                total=size,
                data=chunk,
            )
        )
        self.events.progress(sent, size)
        if sent >= size or not chunk:
            self._complete(notice, file)