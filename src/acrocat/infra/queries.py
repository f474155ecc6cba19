# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Read helpers shared by pages, the JSON API and the services."""

from __future__ import annotations

from typing import List

from sqlalchemy.orm import Session

from acrocat.errors import NotFound
from acrocat.infra.models import Acronym, AcronymCategory, Category, User


def get_or_404(db: Session, model, ident: int):
    obj = db.get(model, ident)
    if obj is None:
        raise NotFound(f"{model.__name__} {ident} not found")
    return obj


def categories_for_acronym(db: Session, acronym_id: int) -> List[Category]:
    return (
        db.query(Category)
        .join(AcronymCategory, AcronymCategory.category_id == Category.id)
        .filter(AcronymCategory.acronym_id == acronym_id)
        .order_by(Category.name)
        .all()
    )


def acronyms_for_category(db: Session, category_id: int) -> List[Acronym]:
    return (
        db.query(Acronym)
        .join(AcronymCategory, AcronymCategory.acronym_id == Acronym.id)
        .filter(AcronymCategory.category_id == category_id)
        .order_by(Acronym.short)
        .all()
    )


def acronyms_for_user(db: Session, user_id: int) -> List[Acronym]:
    return db.query(Acronym).filter(Acronym.user_id == user_id).order_by(Acronym.short).all()


def all_acronyms(db: Session) -> List[Acronym]:
    return db.query(Acronym).order_by(Acronym.id).all()


def all_categories(db: Session) -> List[Category]:
    return db.query(Category).order_by(Category.name).all()


def all_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.username).all()
