#!/usr/bin/env python3
from __future__ import annotations

import sys
from getpass import getpass

from acrocat.auth.passwords import hash_password
from acrocat.errors import ValidationFailed
from acrocat.infra.db import SessionLocal, init_db
from acrocat.services.registration_service import RegisterData, register


def main() -> None:
    if "--hash-only" in sys.argv[1:]:
        # Prints a hash for data/users.yml without touching the database.
        pw1 = getpass("Password: ")
        pw2 = getpass("Repeat password: ")
        if pw1 != pw2:
            raise SystemExit("Passwords don't match")
        print(hash_password(pw1))
        return

    name = input("Name: ").strip()
    username = input("Username: ").strip()
    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")

    init_db()
    with SessionLocal() as db:
        try:
            user = register(db, RegisterData(name=name, username=username, password=pw1, confirm_password=pw2))
        except ValidationFailed as e:
            raise SystemExit(e.reason)
    print(f"OK -> user {user.username} (id={user.id})")


if __name__ == "__main__":
    main()
