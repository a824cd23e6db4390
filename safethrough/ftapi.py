"""High-level operations of the file transfer service."""

from __future__ import annotations

import enum
import logging
import os
import random
from pathlib import Path
from typing import BinaryIO, Callable

from .client import FileClient
from .packets import (
    DATA_LEN,
    DownloadRequest,
    FileData,
    FileNotice,
    Online,
    PacketFlag,
)

__all__ = ["Mode", "FileTransferApi", "PORT_SPREAD"]

log = logging.getLogger(__name__)

PORT_SPREAD = 11
"""Logins pick a port between the given one and ten above it."""

DOWNLOAD_JID = "client"


class Mode(enum.Enum):
    UPLOAD = "upload"
    DOWNLOAD = "download"


class FileTransferApi:
    """Login, requests and file sending over a :class:`FileClient`."""

    def __init__(self, client: FileClient | None = None, mode: Mode = Mode.UPLOAD) -> None:
        self.client = client if client is not None else FileClient()
        self.mode = mode
        self.file: BinaryIO | None = None

    def login(self, jid: str, host: str, port: int, rng: random.Random | None = None) -> bool:
        """Connect to the server and announce ``jid``; return whether connected."""
        source = rng if rng is not None else random
        port += source.randrange(PORT_SPREAD)
        log.debug("connecting to file server on port %d", port)
        if self.client.start(host, port):
            self.client.send(Online(jid))
        return self.client.connected

    def close(self) -> None:
        """Close the connection."""
        self.client.stop()

    def send_file_request(self, sender: str, recipient: str, filename: str) -> None:
        """Ask ``recipient`` to accept ``filename``."""
        self.client.send(FileNotice(PacketFlag.SEND_REQ, sender, recipient, filename))

    def reject_file(self, sender: str, recipient: str, filename: str) -> None:
        """Refuse a file offered by ``sender``."""
        self.client.send(FileNotice(PacketFlag.REJECT_REQ, sender, recipient, filename))

    def download_file(self, filename: str) -> None:
        """Create ``filename`` locally and ask the server to send its content."""
        file = open(filename, "wb")
        self.client.handler.register_offline(filename, file)
        self.client.send(DownloadRequest(DOWNLOAD_JID, filename))

    def send_file(
        self,
        sender: str,
        recipient: str,
        filename: str,
        progress: Callable[[int, int], None] | None = None,
    ) -> None:
        """Send the content of ``filename`` in data chunks.

        ``progress`` is called with bytes sent and total before each chunk goes out.
        """
        with open(filename, "rb") as file:
            total = os.fstat(file.fileno()).st_size
            done = 0
            while chunk := file.read(DATA_LEN):
                done += len(chunk)
                if progress is not None:
                    progress(done, total)
                self.client.send(
                    FileData(
                        PacketFlag.TRANS_DATA,
                        sender,
                        recipient,
                        filename,
                        total=total,
                        data=chunk,
                    )
                )

    def open_file(self, path: str | Path) -> BinaryIO:
        """Open ``path`` for the current mode and keep it as the current file."""
        if self.mode is Mode.UPLOAD:
            if not Path(path).exists():
                raise FileNotFoundError(f"No Specified File: {path}")
            file = open(path, "rb")
        else:
            file = open(path, "wb")
        self.file = file
        return file