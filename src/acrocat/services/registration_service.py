# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy.orm import Session

from acrocat.auth.users import create_user
from acrocat.errors import ValidationFailed
from acrocat.infra.models import User

_USERNAME_RE = re.compile(r"[A-Za-z0-9]{3,}")


@dataclass(frozen=True)
class RegisterData:
    name: str
    username: str
    password: str
    confirm_password: str

    def validate(self) -> None:
        """Raise ValidationFailed with the first broken rule."""
        if not (self.name or "").strip():
            raise ValidationFailed("name is required")
        if not self.name.isascii():
            raise ValidationFailed("name must contain only ASCII characters")
        if not _USERNAME_RE.fullmatch(self.username or ""):
            raise ValidationFailed("username must be at least 3 alphanumeric characters")
        if len(self.password or "") < 8:
            raise ValidationFailed("password must be at least 8 characters")
        if self.password != self.confirm_password:
            raise ValidationFailed("passwords don't match")


def register(db: Session, data: RegisterData) -> User:
    data.validate()
    return create_user(db, name=data.name, username=data.username, password=data.password)
