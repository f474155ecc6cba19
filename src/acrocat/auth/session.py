# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Server-side browser sessions.

The cookie only carries a signed, opaque session id; the session's contents
(bound user id, pending CSRF token) live in a ``SessionStore``.
"""

from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer
from sqlalchemy.orm import Session

from acrocat.config import secret_key, session_max_age
from acrocat.errors import Unauthorized
from acrocat.infra.models import User

USER_KEY = "user_id"


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key=secret_key(), salt="acrocat.session.v1")


def sign_session(sid: str) -> str:
    return _serializer().dumps({"sid": sid})


def verify_session(token: str, *, max_age: Optional[int] = None) -> Optional[str]:
    if not token:
        return None
    try:
        data = _serializer().loads(token, max_age=max_age or session_max_age())
    except (BadSignature, BadTimeSignature):
        return None
    sid = str((data or {}).get("sid") or "").strip()
    return sid or None


class SessionStore:
    """In-memory session dictionaries keyed by session id, with idle expiry."""

    def __init__(self, *, max_age: Optional[int] = None):
        self.max_age = max_age if max_age is not None else session_max_age()
        self._lock = threading.Lock()
        self._data: Dict[str, Dict[str, Any]] = {}
        self._seen: Dict[str, float] = {}

    def _expired(self, sid: str, now: float) -> bool:
        return now - self._seen.get(sid, 0.0) > self.max_age

    def _purge(self, now: float) -> None:
        for sid in [s for s in self._data if self._expired(s, now)]:
            self._data.pop(sid, None)
            self._seen.pop(sid, None)

    def create(self) -> str:
        sid = secrets.token_urlsafe(32)
        now = time.monotonic()
        with self._lock:
            self._purge(now)
            self._data[sid] = {}
            self._seen[sid] = now
        return sid

    def exists(self, sid: str) -> bool:
        now = time.monotonic()
        with self._lock:
            if sid not in self._data or self._expired(sid, now):
                return False
            self._seen[sid] = now
            return True

    def get(self, sid: str, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(sid, {}).get(key, default)

    def set(self, sid: str, key: str, value: Any) -> None:
        with self._lock:
            self._data.setdefault(sid, {})[key] = value

    def pop(self, sid: str, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(sid, {}).pop(key, default)

    def clear(self, sid: str) -> None:
        with self._lock:
            if sid in self._data:
                self._data[sid] = {}

    def destroy(self, sid: str) -> None:
        with self._lock:
            self._data.pop(sid, None)
            self._seen.pop(sid, None)


@dataclass
class SessionHandle:
    """One browser session's view of the store.

    `rotate` swaps in a fresh, empty id; the middleware then reissues the cookie.
    """

    store: SessionStore
    sid: str

    def get(self, key: str, default: Any = None) -> Any:
        return self.store.get(self.sid, key, default)

    def set(self, key: str, value: Any) -> None:
        self.store.set(self.sid, key, value)

    def pop(self, key: str, default: Any = None) -> Any:
        return self.store.pop(self.sid, key, default)

    def rotate(self) -> None:
        old = self.sid
        self.sid = self.store.create()
        self.store.destroy(old)


def login(session: SessionHandle, user: User) -> None:
    # A pre-login id may have been planted; nothing from it survives.
    session.rotate()
    session.set(USER_KEY, int(user.id))


def logout(session: SessionHandle) -> None:
    session.pop(USER_KEY, None)


def current_user(db: Session, session: Optional[SessionHandle]) -> Optional[User]:
    if session is None:
        return None
    user_id = session.get(USER_KEY)
    if user_id is None:
        return None
    user = db.get(User, user_id)
    if user is None:
        # The bound user no longer exists.
        logout(session)
    return user


def require_authenticated(db: Session, session: Optional[SessionHandle]) -> User:
    user = current_user(db, session)
    if user is None:
        raise Unauthorized("Login required")
    return user
