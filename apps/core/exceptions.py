# PATH: apps/core/exceptions.py
"""
Domain errors raised by service modules.

Views translate them into ``{"detail": ...}`` responses (see
``apps.api.common.mixins.DomainErrorMixin``). Services never build HTTP
responses themselves.
"""
from __future__ import annotations


class DomainError(ValueError):
    status_code = 400

    def __init__(self, message: str = "", *, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class InvalidTransition(DomainError):
    status_code = 409


class AttendanceLocked(DomainError):
    status_code = 409


class RosterError(DomainError):
    pass


class OwnershipError(DomainError):
    status_code = 403


class PaymentError(DomainError):
    pass


class StockShortage(DomainError):
    status_code = 409

    def __init__(self, message: str = "", *, shortages=None):
        super().__init__(message)
        self.shortages = shortages or []
