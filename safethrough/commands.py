"""Parsing and building of the XML commands exchanged with local applications."""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass
from xml.dom import minidom
from xml.dom.minidom import Document, Element, Node
from xml.parsers.expat import ExpatError
from typing import Callable

from .codes import generate_code
from .session import Session

__all__ = [
    "TAG_NAME",
    "CommandKind",
    "RandCodeResult",
    "ParseError",
    "parse_rand_code_iq",
    "parse_verify_iq",
    "parse_cmd",
    "trim_string",
    "create_id",
    "create_search_iq",
    "parse_get_auth",
    "parse_login",
    "parse_ping",
]

TAG_NAME = "CZXP"
_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz123456789"
_ID_LENGTH = 5
_ERROR_AUTH = "<userAuth>error</userAuth>"


class CommandKind(enum.IntEnum):
    """Kinds of command an application can send."""

    NORMAL = 0
    START = 1
    LOGIN = 2
    PING = 3


class ParseError(ValueError):
    """A command could not be understood.

    ``code`` tells at which step parsing stopped.
    """

    def __init__(self, message: str, code: int = -1) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class RandCodeResult:
    """Outcome of checking a random-code authentication IQ.

    ``reply`` is the answer to send right away; ``approval_reply`` is the
    answer that grants access, for use when the user approves manually.
    """

    accepted: bool
    reply: str
    approval_reply: str


def _parse_xml(text: str, code: int = -1) -> Document:
    try:
        return minidom.parseString(text)
    except (ExpatError, ValueError) as exc:
        raise ParseError(f"malformed XML: {exc}", code) from exc


def _first_child_element(node: Node, name: str) -> Element | None:
    for child in node.childNodes:
        if child.nodeType == Node.ELEMENT_NODE and child.tagName == name:
            return child
    return None


def _last_child_value(node: Node) -> str:
    last = node.lastChild
    if last is not None and last.nodeType in (Node.TEXT_NODE, Node.CDATA_SECTION_NODE):
        return last.data
    return ""


def _jid_to_user(jid: str) -> str:
    pos = jid.find("@")
    return jid[:pos] if pos >= 0 else ""


def _auth_reply(to: str, iq_id: str, xmlns: str, user: str) -> str:
    return (
        f'<iq to="{to}"  id="{iq_id}" type="result">'
        f'<{TAG_NAME} xmlns="{xmlns}">'
        f"<userAuth>{user}</userAuth>"
        f"</{TAG_NAME}>"
        "</iq>"
    )


def parse_rand_code_iq(cmd: str, session: Session) -> RandCodeResult:
    """Check a random-code authentication IQ against the session's code.

    Stores the IQ's ``to`` address as the session JID.
    """
    doc = _parse_xml(cmd, 2)
    iq = _first_child_element(doc, "iq")
    if iq is None:
        raise ParseError("no iq element", 3)
    to_jid = iq.getAttribute("from")
    iq_id = iq.getAttribute("id")
    my_jid = iq.getAttribute("to")
    session.jid = my_jid
    user = _jid_to_user(my_jid)

    czxp = _first_child_element(iq, TAG_NAME)
    if czxp is None:
        raise ParseError(f"no {TAG_NAME} element", 5)
    xmlns = czxp.getAttribute("xmlns")
    user_auth = _first_child_element(czxp, "userAuth")
    if user_auth is None:
        raise ParseError("no userAuth element", 6)
    auth_code = _last_child_value(user_auth)

    approval = _auth_reply(to_jid, iq_id, xmlns, user)
    if session.get_code("app") != auth_code:
        return RandCodeResult(False, _auth_reply(to_jid, iq_id, xmlns, "error"), approval)
    return RandCodeResult(True, approval, approval)


def parse_verify_iq(cmd: str) -> tuple[str, str]:
    """Return ``(code, from_jid)`` of a verification request IQ."""
    doc = _parse_xml(cmd)
    iq = _first_child_element(doc, "iq")
    if iq is None:
        raise ParseError("no iq element")
    from_jid = iq.getAttribute("from")
    code_elem = _first_child_element(iq, "code")
    if code_elem is None:
        raise ParseError("no code element")
    return _last_child_value(code_elem), from_jid


def parse_cmd(cmd: str) -> tuple[CommandKind, list[str]]:
    """Classify an application command.

    A start command lists namespaces; they are returned with
    ``CommandKind.START``. Anything else valid is ``NORMAL`` with no
    namespaces.
    """
    if "<" + TAG_NAME not in cmd:
        raise ParseError(f"not a {TAG_NAME} command")
    if "iq" in cmd or "message" in cmd:
        return CommandKind.NORMAL, []
    doc = _parse_xml(cmd)
    root = doc.firstChild
    if root is None or root.nodeType != Node.ELEMENT_NODE:
        return CommandKind.NORMAL, []
    nodes = root.getElementsByTagName("namespace")
    if not nodes:
        return CommandKind.NORMAL, []
    return CommandKind.START, [_last_child_value(node) for node in nodes]


def trim_string(text: str) -> str:
    """Strip surrounding whitespace and cut at the first line break."""
    text = text.strip()
    for index, char in enumerate(text):
        if char in "\r\n":
            return text[:index]
    return text


def create_id(rng: random.Random | None = None) -> str:
    """Return a 5-character stanza id."""
    source = rng if rng is not None else random
    return "".join(source.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


def create_search_iq(search: str, server: str, rng: random.Random | None = None) -> str:
    """Build a ``jabber:iq:search`` form submission for ``search``."""
    doc = Document()

    def element(name: str, **attrs: str) -> Element:
        node = doc.createElement(name)
        for key, value in attrs.items():
            node.setAttribute(key, value)
        return node

    def field(parent: Element, field_type: str, var: str, value: str) -> None:
        node = element("field", type=field_type, var=var)
        value_node = element("value")
        value_node.appendChild(doc.createTextNode(value))
        node.appendChild(value_node)
        parent.appendChild(node)

    iq = element("iq", type="set", to=server, id=create_id(rng))
    query = element("query", xmlns="jabber:iq:search")
    iq.appendChild(query)
    form = element("x", xmlns="jabber:x:data", type="submit")
    query.appendChild(form)
    field(form, "hidden", "FORM_TYPE", "jabber:iq:search")
    for var in ("Username", "Name", "Email"):
        field(form, "boolean", var, "1")
    field(form, "text-single", "search", search)
    doc.appendChild(iq)
    return iq.toxml()


def parse_get_auth(
    text: str, session: Session, rng: random.Random | None = None
) -> str | None:
    """Handle a code request; return a new dynamic code for ``getcode``, else None."""
    doc = _parse_xml(text)
    root = doc.documentElement
    app = root.getAttribute("app")
    if app:
        session.app_name = app
    if root.getAttribute("type") != "getcode":
        return None
    code = generate_code(rng)
    session.set_code("app", code)
    return code


def parse_login(text: str, session: Session, confirm: Callable[[str], bool]) -> str:
    """Handle an application login and return the ``userAuth`` reply.

    Without a code the user is asked through ``confirm`` with a prompt.
    """
    doc = _parse_xml(text)
    root = doc.documentElement
    app = root.getAttribute("app")
    code = root.getAttribute("code")
    if app:
        session.app_name = app
    granted = f"<userAuth>{session.bare_user()}</userAuth>"
    if not code:
        prompt = f"是否允许 '{app}' 启动?"
        return granted if confirm(prompt) else _ERROR_AUTH
    if code == session.get_code("app"):
        return granted
    return _ERROR_AUTH


def parse_ping(text: str) -> tuple[str, str]:
    """Return ``(app, prompt)`` for a single sign-on ping."""
    if "ping" not in text:
        raise ParseError("not a ping command")
    doc = _parse_xml(text)
    app = doc.documentElement.getAttribute("app")
    return app, f"是否允许 '{app}' 登录?"