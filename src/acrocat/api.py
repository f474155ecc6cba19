# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""JSON API: categories, plus bearer-token login for API clients."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy.orm import Session

from acrocat.auth.tokens import issue_token
from acrocat.auth.users import authenticate
from acrocat.infra.db import get_db
from acrocat.infra.models import Category
from acrocat.infra.queries import acronyms_for_category, all_categories, get_or_404
from acrocat.permissions import require_token_user
from acrocat.services.tag_service import get_or_create_category

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")
_basic = HTTPBasic()


class CategoryIn(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class AcronymOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    short: str
    long: str
    user_id: int


class TokenOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    token: str
    user_id: int


@router.get("/categories", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return all_categories(db)


@router.get("/categories/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return get_or_404(db, Category, category_id)


@router.get("/categories/{category_id}/acronyms", response_model=List[AcronymOut])
def get_category_acronyms(category_id: int, db: Session = Depends(get_db)):
    category = get_or_404(db, Category, category_id)
    return acronyms_for_category(db, category.id)


@router.post("/categories", response_model=CategoryOut)
def create_category(data: CategoryIn, db: Session = Depends(get_db), user=Depends(require_token_user)):
    category = get_or_create_category(db, data.name)
    db.commit()
    db.refresh(category)
    logger.info("API category %s (%s) by %s", category.id, category.name, user.username)
    return category


@router.post("/users/login", response_model=TokenOut)
def api_login(credentials: HTTPBasicCredentials = Depends(_basic), db: Session = Depends(get_db)):
    user = authenticate(db, credentials.username, credentials.password)
    if user is None:
        logger.info("API login failed for %s", credentials.username)
        raise HTTPException(
            status_code=401,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return issue_token(db, user)
