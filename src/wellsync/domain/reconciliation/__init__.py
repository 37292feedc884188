"""Reconciliation of fetched platform/well records into the store."""

from __future__ import annotations

from .contracts import BatchResult, EntityReconcileResult, ReconcileAction, strongest_action
from .diff import (
    COORDINATE_TOLERANCE,
    PLATFORM_FIELDS,
    WELL_FIELDS,
    TrackedField,
    changed_fields,
)
from .engine import ReconciliationEngine, resolve_values

__all__ = [
    "COORDINATE_TOLERANCE",
    "PLATFORM_FIELDS",
    "WELL_FIELDS",
    "BatchResult",
    "EntityReconcileResult",
    "ReconcileAction",
    "ReconciliationEngine",
    "TrackedField",
    "changed_fields",
    "resolve_values",
    "strongest_action",
]
