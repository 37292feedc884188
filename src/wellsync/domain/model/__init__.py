"""Domain model for platforms and wells."""

from __future__ import annotations

from .enums import EntityKind
from .platform import MAX_NAME_LENGTH, Platform, SyncedEntity, Well

__all__ = [
    "MAX_NAME_LENGTH",
    "EntityKind",
    "Platform",
    "SyncedEntity",
    "Well",
]
