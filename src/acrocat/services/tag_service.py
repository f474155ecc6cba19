# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Keep an acronym's categories in line with a submitted list of names.

Names compare case-sensitively: "Funny" and "funny" are different categories.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Set

from sqlalchemy.orm import Session

from acrocat.infra.models import Acronym, AcronymCategory, Category

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagDiff:
    to_add: FrozenSet[str]
    to_remove: FrozenSet[str]

    @property
    def empty(self) -> bool:
        return not self.to_add and not self.to_remove


def clean_names(names: Iterable[str]) -> Set[str]:
    """Strip surrounding whitespace and drop blanks; duplicates collapse."""
    out: Set[str] = set()
    for n in names or []:
        s = str(n or "").strip()
        if s:
            out.add(s)
    return out


def diff_tags(existing: Iterable[str], desired: Iterable[str]) -> TagDiff:
    existing_set = set(existing)
    desired_set = set(desired)
    return TagDiff(
        to_add=frozenset(desired_set - existing_set),
        to_remove=frozenset(existing_set - desired_set),
    )


def get_or_create_category(db: Session, name: str) -> Category:
    category = db.query(Category).filter(Category.name == name).first()
    if category is None:
        category = Category(name=name)
        db.add(category)
        db.flush()
    return category


def reconcile_tags(db: Session, acronym: Acronym, desired: Iterable[str]) -> TagDiff:
    """Add and remove join rows so the acronym is tagged with exactly `desired`.

    Only the join rows change; categories are never deleted since other
    acronyms may share them. The caller owns the transaction.
    """
    links = db.query(AcronymCategory).filter(AcronymCategory.acronym_id == acronym.id).all()
    by_name = {link.category.name: link for link in links}

    diff = diff_tags(by_name.keys(), clean_names(desired))

    for name in sorted(diff.to_add):
        category = get_or_create_category(db, name)
        db.add(AcronymCategory(acronym=acronym, category=category))

    for name in sorted(diff.to_remove):
        db.delete(by_name[name])

    db.flush()
    if not diff.empty:
        logger.info(
            "Acronym %s tags: +%s -%s",
            acronym.id,
            sorted(diff.to_add),
            sorted(diff.to_remove),
        )
    return diff
