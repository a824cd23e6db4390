# safethrough

A client-side toolkit for a secure file-sharing service, using only the
standard library. It provides:

- `safethrough.packets` – the fixed-size binary packets exchanged with the
  file-transfer server, with encoding and decoding;
- `safethrough.dispatch` – `PacketHandler`, which acts on received packets
  and reports through `ClientEvents` callbacks;
- `safethrough.client` – `FileClient`, a blocking TCP client for the file
  server;
- `safethrough.ftapi` – `FileTransferApi`, for logging in, offering,
  rejecting, sending and downloading files;
- `safethrough.commands` – parsing and building of the XML commands used for
  single sign-on and one-time authorisation codes;
- `safethrough.session` – per-process session state;
- `safethrough.codes` – random code generation;
- `safethrough.util` – helpers for configuration files and application lists;
- `safethrough.resize` – edge hit-testing and resizing geometry for a
  frameless window.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Session and codes

```python
import random

from safethrough.codes import generate_code, generate_origin
from safethrough.session import current_session, reset_session

session = current_session()
code = generate_code(random.Random(1))   # 16 letters and digits
session.set_code("app", code)
assert session.get_code("app") == code
assert session.get_code("other") == ""

session.jid = "alice@example.com/safe"
assert session.bare_user() == "alice"

origin = generate_origin()               # 6 digits
session = reset_session()                # a fresh shared session
```

`Session` is a dataclass holding the host name, IP and port, the JID,
the password, the file server address, the application name, a
`confirmed` flag and the issued codes. `current_session()` returns the one
shared instance, creating it on first use. Every function that draws random
characters accepts an optional `rng` (a `random.Random`), so results can be
reproduced with a seeded generator.

## Packets

Every packet starts with a 9-byte header: a big-endian length, four reserved
bytes, a version byte and a big-endian flag (`PacketFlag`). The length field
counts the whole packet minus two bytes. JIDs take 64 bytes, file names 256
bytes and a data chunk up to 10240 bytes; text is UTF-8 padded with zero
bytes.

```python
from safethrough.packets import FileNotice, PacketFlag, decode_packet, encode_packet

notice = FileNotice(PacketFlag.SEND_REQ, "alice@example.com", "bob@example.com", "report.pdf")
wire = encode_packet(notice)
assert decode_packet(wire) == notice
```

Packet classes: `Online`, `UserOffline`, `FileNotice` (send request,
reject, accept, offline file, complete, continue), `FileData` (online or
offline chunks; `transferred` is the chunk length), `FileListRequest`,
`FileListEntry` and `DownloadRequest`. `Header.pack`, `parse_header` and
`body_length` let a reader find how many bytes follow a header. Malformed or
oversized input raises `ValueError`.

## Handling server packets

`PacketHandler(send=...)` takes one complete packet with `handle(data)` and
returns the decoded packet (or `None` for an unknown flag). It:

- calls `events.offline` for a user going offline;
- asks `events.file_request` about a send request, and calls
  `events.accept_file_send` and `events.send_complete` for the matching
  notices;
- writes offline data to files registered with `register_offline`, reports
  `events.progress`, and closes the file and calls `events.finished` once the
  total is reached;
- answers a continue notice for a file registered with `register_send` by
  sending the next chunk, and sends a completion notice (after
  `complete_delay` seconds) when the file is done;
- appends file list entries to `file_list` and calls `events.add_share_file`.

## Talking to the file server

```python
from safethrough.ftapi import FileTransferApi

api = FileTransferApi()
if api.login("alice", "192.0.2.10", 7000):
    api.send_file_request("alice", "bob", "report.pdf")
    api.download_file("setup.ini")
    api.close()
```

`FileClient.start(host, port)` connects to an IP address (not a host name)
and, unless created with `background=False`, starts a daemon thread that runs
`run()`, passing each packet from `receive_packet()` to its `handler`.
`send(packet)` does nothing while disconnected.

`FileTransferApi.login` adds a random offset of 0 to 10 to the port, connects
and announces the JID, returning whether the connection is up.
`send_file` sends a file in data chunks, calling `progress(done, total)`
before each one. `download_file` creates the file locally, registers it with
the handler and requests it from the server. `open_file` opens a path for
reading in `Mode.UPLOAD` (raising `FileNotFoundError` if it is missing) or
for writing in `Mode.DOWNLOAD`, and keeps it as `file`.

## Commands

```python
from safethrough.commands import CommandKind, parse_cmd, parse_login
from safethrough.session import Session

session = Session(jid="alice@example.com/safe")
session.set_code("app", "abc123")

kind, namespaces = parse_cmd("<CZXP><namespace>urn:demo</namespace></CZXP>")
assert kind is CommandKind.START and namespaces == ["urn:demo"]

reply = parse_login('<login app="editor" code="abc123"/>', session, confirm=lambda prompt: False)
assert reply == "<userAuth>alice</userAuth>"
```

- `parse_rand_code_iq(cmd, session)` checks a random-code IQ against the
  session's `"app"` code and returns a `RandCodeResult` with the reply to
  send and the reply that grants access;
- `parse_verify_iq(cmd)` returns the code and sender of a verification IQ;
- `parse_cmd(cmd)` classifies a command as `NORMAL` or `START`;
- `parse_get_auth(text, session)` issues and stores a new code for a
  `getcode` request;
- `parse_login(text, session, confirm)` returns a `userAuth` reply, asking
  `confirm(prompt)` when no code is given;
- `parse_ping(text)` returns the application name and a prompt;
- `create_search_iq(search, server)` builds a `jabber:iq:search` form;
- `create_id()` and `trim_string(text)` are small helpers.

Malformed input raises `ParseError` (a `ValueError` with a `code` attribute).

## Utilities

`split_jid_code`, `read_file_server_port`, `read_update_page`,
`size_to_string`, `load_apps` (returning `AppInfo` entries) and
`create_dynamic_code`, which returns a new code and the `jid:code` text to
give to the user.

## Window geometry

```python
from safethrough.resize import Direction, Rect, hit_test, resize_rect

rect = Rect(100, 100, 300, 200)
assert hit_test((100, 100), rect) is Direction.LEFT_TOP
assert resize_rect(rect, Direction.RIGHT, (450, 150)).width == 350
```

`hit_test` takes a `padding` (default 5) and a `strict` flag that limits the
side edges to between top and bottom and widens them outside the rectangle.

## What this package does not do

It has no graphical interface and no command-line program. It does not
connect to an XMPP server: the command functions only parse and build
messages, and sending them is up to the caller. There is no local server
that applications connect to, and no certificate-based signing for
logging in; `generate_origin` only produces the digits such a login would
sign.