# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from acrocat.infra.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    username = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    acronyms = relationship("Acronym", back_populates="user", cascade="all, delete-orphan")
    tokens = relationship("Token", back_populates="user", cascade="all, delete-orphan")


class Acronym(Base):
    __tablename__ = "acronyms"

    id = Column(Integer, primary_key=True, index=True)
    short = Column(String, nullable=False)
    long = Column(String, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="acronyms")
    # Deleting an acronym removes its join rows; the categories stay.
    category_links = relationship(
        "AcronymCategory", back_populates="acronym", cascade="all, delete-orphan"
    )


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)

    acronym_links = relationship(
        "AcronymCategory", back_populates="category", cascade="all, delete-orphan"
    )


class AcronymCategory(Base):
    __tablename__ = "acronym_category"

    acronym_id = Column(Integer, ForeignKey("acronyms.id", ondelete="CASCADE"), primary_key=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True)

    acronym = relationship("Acronym", back_populates="category_links")
    category = relationship("Category", back_populates="acronym_links")


class Token(Base):
    __tablename__ = "tokens"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(64), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="tokens")
