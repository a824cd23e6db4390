"""Process-wide login session state."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["Session", "current_session", "reset_session"]


@dataclass
class Session:
    """State shared by the parts of the client during one login."""

    host_name: str = ""
    host_ip: str = ""
    host_port: int = 0
    jid: str = ""
    password: str = ""
    file_ip: str = ""
    file_port: int = 0
    app_name: str = ""
    confirmed: bool = False
    codes: dict[str, str] = field(default_factory=dict)

    def set_code(self, app: str, code: str) -> None:
        """Remember the dynamic code issued for ``app``."""
        self.codes[app] = code

    def get_code(self, app: str) -> str:
        """Return the dynamic code issued for ``app``, or an empty string."""
        return self.codes.get(app, "")

    def bare_user(self) -> str:
        """Return the user part of the JID (everything before ``@``)."""
        return self.jid.split("@", 1)[0]


_current: Session | None = None


def current_session() -> Session:
    """Return the shared session, creating it on first use."""
    global _current
    if _current is None:
        _current = Session()
    return _current


def reset_session() -> Session:
    """Discard the shared session and return a fresh one."""
    global _current
    _current = Session()
    return _current