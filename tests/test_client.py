import socket
import threading

import pytest

from safethrough.client import FileClient
from safethrough.dispatch import ClientEvents
from safethrough.packets import (
    FileData,
    FileListEntry,
    Online,
    PacketFlag,
    encode_packet,
)


@pytest.fixture
def server():
    srv = socket.create_server(("127.0.0.1", 0))
    srv.settimeout(5)
    yield srv
    srv.close()


def _accept(srv):
    conn, _ = srv.accept()
    conn.settimeout(5)
    return conn


def _recv_exact(conn, size):
    data = b""
    while len(data) < size:
        chunk = conn.recv(size - len(data))
        assert chunk
        data += chunk
    return data


def test_start_and_send(server):
    client = FileClient(background=False)
    port = server.getsockname()[1]
    assert client.start("127.0.0.1", port) is True
    conn = _accept(server)
    try:
        client.send(Online("me"))
        expected = encode_packet(Online("me"))
        assert _recv_exact(conn, len(expected)) == expected
    finally:
        client.stop()
        conn.close()


def test_start_to_closed_port_fails():
    probe = socket.create_server(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    client = FileClient(background=False)
    assert client.start("127.0.0.1", port) is False
    assert client.connected is False


def test_start_rejects_host_name():
    client = FileClient(background=False)
    with pytest.raises(ValueError):
        client.start("not an address", 7000)


def test_receive_packet_handles_split_data(server):
    client = FileClient(background=False)
    client.start("127.0.0.1", server.getsockname()[1])
    conn = _accept(server)
    try:
        wire = encode_packet(
            FileData(PacketFlag.OFF_DATA, "a", "b", "f.bin", total=3, data=b"xyz")
        )
        conn.sendall(wire[:5])
        conn.sendall(wire[5:])
        assert client.receive_packet() == wire
    finally:
        client.stop()
        conn.close()


def test_receive_packet_returns_none_after_peer_closes(server):
    client = FileClient(background=False)
    client.start("127.0.0.1", server.getsockname()[1])
    conn = _accept(server)
    conn.close()
    assert client.receive_packet() is None
    assert client.connected is False
    client.stop()


def test_stop_disconnects(server):
    client = FileClient(background=True)
    client.start("127.0.0.1", server.getsockname()[1])
    conn = _accept(server)
    try:
        client.stop()
        assert client.connected is False
    finally:
        conn.close()


def test_background_run_dispatches_packets(server):
    names = []
    got = threading.Event()

    def add(name):
        names.append(name)
        got.set()

    client = FileClient(ClientEvents(add_share_file=add), background=True)
    client.start("127.0.0.1", server.getsockname()[1])
    conn = _accept(server)
    try:
        conn.sendall(encode_packet(FileListEntry("app.exe")))
        assert got.wait(5)
        assert names == ["app.exe"]
        assert client.handler.file_list == ["app.exe"]
    finally:
        client.stop()
        conn.close()