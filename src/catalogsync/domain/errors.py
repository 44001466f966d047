"""Domain-level reconciliation errors."""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for failures raised by the reconciliation engine."""


class ReconciliationLockedError(ReconciliationError):
    """Raised when another reconciliation run holds the catalog lock."""

    def __init__(self, name: str, *, holder: str | None = None) -> None:
        message = f"Reconciliation lock {name!r} is held"
        if holder:
            message = f"{message} by {holder}"
        super().__init__(message)
        self.name = name
        self.holder = holder
