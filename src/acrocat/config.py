# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Environment-driven configuration.

Values are read from the process environment (a local ``.env`` is loaded
first). Functions read at call time so tests can monkeypatch the environment.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parents[2]

EDIT_POLICY_OWNER = "owner"
EDIT_POLICY_ANY = "any"


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "y"}


def environment() -> str:
    return (os.getenv("ACROCAT_ENV") or "production").strip().lower()


def is_testing() -> bool:
    return environment() == "testing"


def database_url() -> str:
    override = os.getenv("ACROCAT_DATABASE_URL")
    if override:
        return override

    hostname = os.getenv("DATABASE_HOSTNAME", "localhost")
    username = os.getenv("DATABASE_USER", "acrocat")
    password = os.getenv("DATABASE_PASSWORD", "password")
    if is_testing():
        name = "acrocat-test"
        port = int(os.getenv("DATABASE_PORT", "5433"))
    else:
        name = os.getenv("DATABASE_DB", "acrocat")
        port = int(os.getenv("DATABASE_PORT", "5432"))
    return f"postgresql+psycopg2://{username}:{password}@{hostname}:{port}/{name}"


def secret_key() -> str:
    secret = os.getenv("ACROCAT_SECRET_KEY") or os.getenv("SECRET_KEY")
    if not secret:
        raise RuntimeError("Missing ACROCAT_SECRET_KEY (or SECRET_KEY) in environment")
    return secret


def cookie_name() -> str:
    return os.getenv("ACROCAT_COOKIE_NAME", "acrocat_session")


def session_max_age() -> int:
    return int(os.getenv("ACROCAT_SESSION_MAX_AGE", "28800"))  # 8 hours


def cookie_secure() -> bool:
    return _flag("ACROCAT_COOKIE_SECURE")


def edit_policy() -> str:
    policy = (os.getenv("ACROCAT_EDIT_POLICY") or EDIT_POLICY_OWNER).strip().lower()
    if policy not in {EDIT_POLICY_OWNER, EDIT_POLICY_ANY}:
        raise RuntimeError(f"Unknown ACROCAT_EDIT_POLICY: {policy!r}")
    return policy


def users_path() -> Path:
    return Path(os.getenv("ACROCAT_USERS_PATH", str(BASE_DIR / "data" / "users.yml"))).resolve()
