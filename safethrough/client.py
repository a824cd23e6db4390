"""TCP client for the file transfer server."""

from __future__ import annotations

import ipaddress
import logging
import socket
import threading
import time
from typing import Callable

from .dispatch import ClientEvents, PacketHandler
from .packets import (
    HEADER_SIZE,
    SOCK_BUF_LEN,
    Packet,
    body_length,
    encode_packet,
    parse_header,
)

__all__ = ["FileClient"]

log = logging.getLogger(__name__)


class FileClient:
    """Connection to the file transfer server.

    Received packets are passed to ``handler``; with ``background`` set,
    a daemon thread started by :meth:`start` receives them.
    """

    def __init__(
        self,
        events: ClientEvents | None = None,
        *,
        background: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.handler = PacketHandler(
            send=self.send,
            events=events if events is not None else ClientEvents(),
            sleep=sleep,
        )
        self.background = background
        self.connected = False
        self._sock: socket.socket | None = None
        self._thread: threading.Thread | None = None
        self._send_lock = threading.Lock()

    def start(self, host: str, port: int) -> bool:
        """Connect to ``host``:``port``; return whether the connection is up.

        ``host`` must be an IP address.
        """
        if self.connected:
            self.stop()
        address = ipaddress.ip_address(host)
        family = socket.AF_INET6 if address.version == 6 else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, 2 * SOCK_BUF_LEN)
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, SOCK_BUF_LEN)
            sock.connect((str(address), port))
        except OSError as exc:
            log.debug("cannot connect to %s:%d: %s", host, port, exc)
            sock.close()
            self.connected = False
            return False
        self._sock = sock
        self.connected = True
        if self.background:
            self._thread = threading.Thread(target=self.run, daemon=True)
            self._thread.start()
        return True

    def stop(self) -> None:
        """Close the connection and end the receiving thread."""
        self.connected = False
        sock, self._sock = self._sock, None
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            sock.close()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    def send(self, packet: Packet) -> None:
        """Send ``packet``; nothing is sent while disconnected."""
        data = encode_packet(packet)
        with self._send_lock:
            sock = self._sock
            if not self.connected or sock is None:
                log.debug("not connected, dropping %s", type(packet).__name__)
                return
            sock.sendall(data)

    def _recv_exact(self, size: int) -> bytes | None:
        sock = self._sock
        if sock is None or not self.connected:
            return None
        chunks = bytearray()
        while len(chunks) < size:
            try:
                chunk = sock.recv(size - len(chunks))
            except OSError:
                chunk = b""
            if not chunk:
                self.connected = False
                return None
            chunks += chunk
        return bytes(chunks)

    def receive_packet(self) -> bytes | None:
        """Read one whole packet, header included.

        Returns None once the connection is closed.
        """
        head = self._recv_exact(HEADER_SIZE)
        if head is None:
            return None
        size = body_length(parse_header(head))
        body = self._recv_exact(size)
        if body is None:
            return None
        return head + body

    def run(self) -> None:
        """Receive and handle packets until the connection closes."""
        while self.connected:
            try:
                data = self.receive_packet()
            except ValueError as exc:
                log.debug("bad packet header, closing: %s", exc)
                self.stop()
                break
            if data is None:
                break
            try:
                self.handler.handle(data)
            except ValueError as exc:
                log.debug("dropping malformed packet: %s", exc)
        log.debug("receiver finished")