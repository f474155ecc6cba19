# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""One-time CSRF tokens.

A session holds at most one pending token. Rendering a mutating form issues a
new one (replacing any previous token); the submission consumes it whether or
not it matches.
"""

from __future__ import annotations

import base64
import hmac
import logging
import secrets
from typing import Optional

from acrocat.auth.session import SessionHandle
from acrocat.errors import CsrfMismatch

logger = logging.getLogger(__name__)

CSRF_KEY = "csrf_token"
TOKEN_BYTES = 16


def issue(session: SessionHandle) -> str:
    token = base64.b64encode(secrets.token_bytes(TOKEN_BYTES)).decode("ascii")
    session.set(CSRF_KEY, token)
    return token


def consume(session: SessionHandle, supplied: Optional[str]) -> None:
    expected = session.pop(CSRF_KEY, None)
    if not expected or not supplied:
        logger.warning("CSRF token missing (session has one: %s)", bool(expected))
        raise CsrfMismatch("Missing CSRF token")
    if not hmac.compare_digest(expected.encode("ascii"), supplied.encode("utf-8")):
        logger.warning("CSRF token mismatch")
        raise CsrfMismatch("CSRF token mismatch")
