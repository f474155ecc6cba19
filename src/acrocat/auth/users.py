# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml
from sqlalchemy.orm import Session

from acrocat.auth.passwords import burn_verification, hash_password, verify_password
from acrocat.config import users_path
from acrocat.errors import ValidationFailed
from acrocat.infra.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedUser:
    username: str
    name: str
    password_hash: str


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    u = (username or "").strip()
    if not u:
        return None
    return db.query(User).filter(User.username == u).first()


def authenticate(db: Session, username: str, password: str) -> Optional[User]:
    """Return the user when the password matches, None otherwise.

    Unknown usernames and wrong passwords are indistinguishable to the caller.
    """
    u = get_user_by_username(db, username)
    if u is None:
        burn_verification(password)
        return None
    if not verify_password(u.password_hash, password):
        return None
    return u


def create_user(db: Session, *, name: str, username: str, password: str) -> User:
    if get_user_by_username(db, username) is not None:
        raise ValidationFailed("username already taken")
    user = User(name=name, username=username.strip(), password_hash=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return user


def _load_users_file(path: Path) -> Dict[str, SeedUser]:
    if not path.exists():
        return {}
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    users = (raw.get("users") or {}) if isinstance(raw, dict) else {}
    out: Dict[str, SeedUser] = {}
    for uname, udata in users.items():
        if not isinstance(udata, dict):
            continue
        username = str(uname).strip()
        ph = str(udata.get("password_hash") or "").strip()
        if not username or not ph:
            continue
        name = str(udata.get("name") or username).strip()
        out[username] = SeedUser(username=username, name=name, password_hash=ph)
    return out


def seed_users(db: Session, *, path: Optional[Path] = None) -> int:
    """Insert users listed in the YAML seed file that are not in the database yet."""
    path = path or users_path()
    created = 0
    for seed in _load_users_file(path).values():
        if get_user_by_username(db, seed.username) is not None:
            continue
        db.add(User(name=seed.name, username=seed.username, password_hash=seed.password_hash))
        created += 1
    if created:
        db.commit()
        logger.info("Seeded %d user(s) from %s", created, path)
    return created
