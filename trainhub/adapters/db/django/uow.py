"""
Django Unit of Work: transaction.atomic wrapper (lazy import)
"""
from __future__ import annotations


class DjangoUnitOfWork:
    """Transaction boundary for multi-row service operations."""

    def __init__(self) -> None:
        self._atomic = None

    def __enter__(self) -> DjangoUnitOfWork:
        from django.db import transaction
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._atomic is not None:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)
            self._atomic = None

    def after_commit(self, fn) -> None:
        """Run ``fn`` once the outermost transaction commits."""
        from django.db import transaction
        transaction.on_commit(fn)

    def rollback(self) -> None:
        from django.db import transaction
        transaction.set_rollback(True)
