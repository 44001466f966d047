"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ProductType(StrEnum):
    ONE_TIME = "one-time"
    RECURRING = "recurring"


class TaxBehavior(StrEnum):
    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"
    UNSPECIFIED = "unspecified"


class Action(StrEnum):
    """Convergence step a plan item may require."""

    CREATE_PRODUCT = "CREATE_PRODUCT"
    UPDATE_PRODUCT = "UPDATE_PRODUCT"
    CREATE_PRICE = "CREATE_PRICE"
    ATTACH_IMAGE = "ATTACH_IMAGE"


class RunMode(StrEnum):
    PLAN = "plan"
    DRY_RUN = "dry-run"
    EXECUTE = "execute"
    AUDIT = "audit"
