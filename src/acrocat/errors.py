# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations


class AcrocatError(Exception):
    """Base class for errors the web layer knows how to answer."""


class NotFound(AcrocatError):
    pass


class Unauthorized(AcrocatError):
    pass


class Forbidden(AcrocatError):
    pass


class CsrfMismatch(AcrocatError):
    pass


class ValidationFailed(AcrocatError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
