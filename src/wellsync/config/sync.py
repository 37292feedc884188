"""Synchronization defaults for the platform/well sync."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_COORDINATE_TOLERANCE = 1e-6


@dataclass(frozen=True, slots=True)
class SyncConfig:
    use_fallback: bool = True
    coordinate_tolerance: float = DEFAULT_COORDINATE_TOLERANCE


def get_sync_config() -> SyncConfig:
    raw = os.getenv("WELLSYNC_USE_FALLBACK", "true").strip().lower()
    return SyncConfig(use_fallback=raw not in {"0", "false", "no", "off"})
