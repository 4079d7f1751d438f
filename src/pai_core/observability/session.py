"""Session scope shared by every event a single emitter produces."""

from __future__ import annotations

import secrets
import time

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value <= 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_session_id() -> str:
    """Return an id like `ses_<epoch-ms base36>_<6 random base36 chars>`."""
    stamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"ses_{stamp}_{suffix}"


class SessionScope:
    """
    Holds the id of one logical agent session.

    The id is generated lazily on first use and stays the same for every
    event until `reset()` is called, typically on `session.end`.
    """

    def __init__(self, session_id: str | None = None) -> None:
        self._session_id = session_id or None

    @property
    def is_active(self) -> bool:
        return self._session_id is not None

    @property
    def session_id(self) -> str:
        if self._session_id is None:
            self._session_id = generate_session_id()
        return self._session_id

    def start(self) -> str:
        """Begin a session, keeping an id that is already set."""
        return self.session_id

    def set(self, session_id: str) -> None:
        self._session_id = session_id or None

    def reset(self) -> None:
        self._session_id = None
