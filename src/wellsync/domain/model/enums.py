"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Entity kinds handled by the reconciliation engine."""

    PLATFORM = "Platform"
    WELL = "Well"
