# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import base64
import logging
import secrets
from typing import Optional

from sqlalchemy.orm import Session

from acrocat.infra.models import Token, User

logger = logging.getLogger(__name__)


def issue_token(db: Session, user: User) -> Token:
    value = base64.b64encode(secrets.token_bytes(16)).decode("ascii")
    token = Token(token=value, user=user)
    db.add(token)
    db.commit()
    db.refresh(token)
    logger.info("Issued API token for %s", user.username)
    return token


def user_for_token(db: Session, value: str) -> Optional[User]:
    if not value:
        return None
    token = db.query(Token).filter(Token.token == value).first()
    return token.user if token else None
