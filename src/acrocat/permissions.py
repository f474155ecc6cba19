# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""FastAPI dependencies that resolve who is calling.

Page routes authenticate through the browser session; API routes through a
bearer token. Route groups attach `require_user` as a router-level guard.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from acrocat.auth import session as sessions
from acrocat.auth.session import SessionHandle
from acrocat.auth.tokens import user_for_token
from acrocat.config import cookie_secure
from acrocat.infra.db import get_db
from acrocat.infra.models import User

_bearer = HTTPBearer(auto_error=False)


def get_session(request: Request) -> Optional[SessionHandle]:
    return getattr(request.state, "session", None)


def current_user_optional(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    u = getattr(request.state, "user", None)
    if u is not None:
        return u
    return sessions.current_user(db, get_session(request))


def require_user(user: Optional[User] = Depends(current_user_optional)) -> User:
    if user:
        return user
    raise HTTPException(status_code=303, headers={"Location": "/login"})


def require_token_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    db: Session = Depends(get_db),
) -> User:
    user = user_for_token(db, credentials.credentials) if credentials else None
    if user is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid or missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def cookie_settings() -> dict:
    return {"httponly": True, "samesite": "lax", "secure": cookie_secure()}
