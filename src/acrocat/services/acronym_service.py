# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Create, edit and delete acronyms together with their category tags.

Every mutation runs the same checks in order: authenticated session, CSRF
token (form submissions), ownership policy, field validation. Only then is
storage touched, and the entity plus its tags are committed together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from acrocat.auth import csrf
from acrocat.auth.session import SessionHandle, require_authenticated
from acrocat.config import EDIT_POLICY_ANY, edit_policy
from acrocat.errors import Forbidden, ValidationFailed
from acrocat.infra.models import Acronym, User
from acrocat.infra.queries import get_or_404
from acrocat.services.tag_service import reconcile_tags

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcronymForm:
    short: str
    long: str
    categories: List[str] = field(default_factory=list)
    csrf_token: str = ""

    def validate(self) -> None:
        if not (self.short or "").strip():
            raise ValidationFailed("short form is required")
        if not (self.long or "").strip():
            raise ValidationFailed("long form is required")


def may_modify(user: User, acronym: Acronym, *, policy: Optional[str] = None) -> bool:
    policy = policy or edit_policy()
    return policy == EDIT_POLICY_ANY or acronym.user_id == user.id


def require_may_modify(user: User, acronym: Acronym) -> None:
    if not may_modify(user, acronym):
        raise Forbidden(f"User {user.username} does not own acronym {acronym.id}")


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def create_acronym(db: Session, session: SessionHandle, form: AcronymForm) -> Acronym:
    user = require_authenticated(db, session)
    csrf.consume(session, form.csrf_token)
    form.validate()

    acronym = Acronym(short=form.short.strip(), long=form.long.strip(), user=user)
    db.add(acronym)
    db.flush()
    reconcile_tags(db, acronym, form.categories)
    _commit(db)
    db.refresh(acronym)
    logger.info("Created acronym %s (%s) for %s", acronym.id, acronym.short, user.username)
    return acronym


def edit_acronym(db: Session, session: SessionHandle, acronym_id: int, form: AcronymForm) -> Acronym:
    user = require_authenticated(db, session)
    csrf.consume(session, form.csrf_token)
    acronym = get_or_404(db, Acronym, acronym_id)
    require_may_modify(user, acronym)
    form.validate()

    acronym.short = form.short.strip()
    acronym.long = form.long.strip()
    reconcile_tags(db, acronym, form.categories)
    _commit(db)
    db.refresh(acronym)
    logger.info("Edited acronym %s by %s", acronym.id, user.username)
    return acronym


def delete_acronym(db: Session, session: SessionHandle, acronym_id: int) -> None:
    user = require_authenticated(db, session)
    acronym = get_or_404(db, Acronym, acronym_id)
    require_may_modify(user, acronym)

    db.delete(acronym)
    _commit(db)
    logger.info("Deleted acronym %s by %s", acronym_id, user.username)
