"""
Plinth — Common Primitives

Shared enums, base models, and utilities used by the interception and
resolver packages.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from datetime import datetime, timezone

from pydantic import BaseModel, Field
from ulid import ULID


def new_id() -> str:
    """Generate a new ULID string. Time-sortable, globally unique."""
    return str(ULID())


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


# ─── Enums ────────────────────────────────────────────────────────


class Severity(enum.IntFlag):
    """Soft-error severities. Values are bits so they compose into masks."""

    NOTICE = 1
    WARNING = 2
    ERROR = 4
    DEPRECATED = 8


ALL_SOFT: int = int(Severity.NOTICE | Severity.WARNING | Severity.ERROR | Severity.DEPRECATED)
NO_SEVERITIES: int = 0


def severity_from_code(code: int) -> Severity | None:
    """Return the single severity a code names, or None if unrecognized."""
    for severity in Severity:
        if code == severity.value:
            return severity
    return None


def mask_from_names(names: Iterable[str]) -> int:
    """
    Build a mask from severity names (case-insensitive).

    Raises ValueError on an unknown name.
    """
    mask = NO_SEVERITIES
    for name in names:
        try:
            mask |= Severity[name.strip().upper()]
        except KeyError:
            raise ValueError(
                f"Unknown severity {name!r}; expected one of "
                f"{[s.name.lower() for s in Severity]}"
            ) from None
    return int(mask)


def names_from_mask(mask: int) -> list[str]:
    """Inverse of ``mask_from_names``, in flag order."""
    return [s.name.lower() for s in Severity if mask & s]


# ─── Base Models ──────────────────────────────────────────────────


class PlinthBaseModel(BaseModel):
    """Base model for all Plinth primitives."""

    model_config = {"populate_by_name": True, "from_attributes": True}


class Timestamped(PlinthBaseModel):
    """Mixin for models with creation timestamps."""

    created_at: datetime = Field(default_factory=utc_now)


class Identified(PlinthBaseModel):
    """Mixin for models with ULID IDs."""

    id: str = Field(default_factory=new_id)
