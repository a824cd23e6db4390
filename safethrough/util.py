"""Small helpers: configuration files, application lists and codes."""

from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path
from xml.dom import minidom
from xml.dom.minidom import Element, Node
from xml.parsers.expat import ExpatError

from .codes import generate_code
from .session import Session

__all__ = [
    "AppInfo",
    "split_jid_code",
    "read_file_server_port",
    "read_update_page",
    "size_to_string",
    "load_apps",
    "create_dynamic_code",
]

DEFAULT_UPDATE_CONF = "config/update.conf"


@dataclass
class AppInfo:
    """An application entry from an application list."""

    size: int = 0
    version: str = ""
    name: str = ""
    desc: str = ""
    url: str = ""
    author: str = ""


def split_jid_code(text: str) -> tuple[str, str]:
    """Split ``jid:code`` text into its JID and code."""
    parts = text.split(":")
    if len(parts) < 2:
        raise ValueError(f"{text!r} has no ':' separator")
    return parts[0], parts[1]


def read_file_server_port(path: str | Path, ip: str, port: int) -> tuple[str, int]:
    """Read ``IP`` and ``Port`` settings from ``path``.

    The given values are returned unchanged for settings the file lacks,
    or when the file cannot be read.
    """
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            lines = handle.readlines()
    except OSError:
        return ip, port
    for line in lines:
        if line.startswith("#"):
            continue
        parts = [part for part in line.split("=") if part]
        if len(parts) < 2:
            continue
        if "IP" in parts[0]:
            ip = parts[1].strip()
        elif "Port" in parts[0]:
            try:
                port = int(parts[1].strip())
            except ValueError:
                port = 0
    return ip, port


def read_update_page(path: str | Path = DEFAULT_UPDATE_CONF) -> str:
    """Return the ``mainpage`` value from the update configuration, or ''."""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            for line in handle:
                if "mainpage" in line:
                    return line[line.find("=") + 1 :].strip()
    except OSError:
        return ""
    return ""


def size_to_string(size: int) -> str:
    """Format a byte count for display."""
    ksize = size / 1024.0
    text = f"{ksize:.1f} K"
    ksize /= 1024.0
    if ksize > 1:
        text = f"{ksize / 1024.0:.1f} M"
    return text


def _child_elements(node: Node, name: str) -> list[Element]:
    return [
        child
        for child in node.childNodes
        if child.nodeType == Node.ELEMENT_NODE and child.tagName == name
    ]


def _child_value(node: Node, name: str) -> str | None:
    children = _child_elements(node, name)
    if not children:
        return None
    last = children[0].lastChild
    if last is not None and last.nodeType in (Node.TEXT_NODE, Node.CDATA_SECTION_NODE):
        return last.data
    return ""


def load_apps(path: str | Path) -> list[AppInfo]:
    """Read the ``app`` entries of an application list file."""
    raw = Path(path).read_bytes()
    try:
        doc = minidom.parseString(raw)
    except ExpatError as exc:
        raise ValueError(f"malformed application list {path}: {exc}") from exc
    apps = []
    for elem in _child_elements(doc.documentElement, "app"):
        app = AppInfo(
            version=elem.getAttribute("version"),
            url=elem.getAttribute("url"),
            name=elem.getAttribute("name"),
        )
        desc = _child_value(elem, "desc")
        if desc is not None:
            app.desc = desc
        size = _child_value(elem, "size")
        if size is not None:
            try:
                app.size = int(size.strip())
            except ValueError:
                app.size = 0
        author = _child_value(elem, "author")
        if author is not None:
            app.author = author
        apps.append(app)
    return apps


def create_dynamic_code(
    session: Session, rng: random.Random | None = None
) -> tuple[str, str]:
    """Return a new dynamic code and the ``jid:code`` text to hand to the user."""
    code = generate_code(rng)
    return code, f"{session.jid}:{code}"