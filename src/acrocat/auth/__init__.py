# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (argon2)
- The credential store over the users table, plus seeding from data/users.yml
- Server-side sessions addressed by a signed cookie (itsdangerous)
- One-time CSRF tokens bound to a session
- Bearer tokens for the JSON API
"""
