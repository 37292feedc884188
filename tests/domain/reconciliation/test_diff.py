from __future__ import annotations

import pytest

from tests.helpers.platform_wells import CREATED, UPDATED
from wellsync.domain.model import Platform, Well
from wellsync.domain.reconciliation import (
    COORDINATE_TOLERANCE,
    PLATFORM_FIELDS,
    WELL_FIELDS,
    TrackedField,
    changed_fields,
)


def _platform(**overrides: object) -> Platform:
    values: dict[str, object] = {
        "id": 1,
        "name": "PLATFORM-1",
        "latitude": 1.5,
        "longitude": 104.5,
        "created_at": CREATED,
        "updated_at": UPDATED,
    }
    values.update(overrides)
    return Platform(**values)  # type: ignore[arg-type]


def _values(**overrides: object) -> dict[str, object]:
    values: dict[str, object] = {
        "name": "PLATFORM-1",
        "latitude": 1.5,
        "longitude": 104.5,
        "created_at": CREATED,
        "updated_at": UPDATED,
    }
    values.update(overrides)
    return values


def test_identical_values_report_no_changes() -> None:
    assert changed_fields(_platform(), _values(), PLATFORM_FIELDS) == ()


@pytest.mark.parametrize("delta", [5e-7, -5e-7, 9e-7])
def test_coordinate_drift_within_tolerance_is_ignored(delta: float) -> None:
    platform = _platform()

    changed = changed_fields(platform, _values(latitude=1.5 + delta), PLATFORM_FIELDS)

    assert changed == ()


@pytest.mark.parametrize("delta", [2e-6, -2e-6, 0.01])
def test_coordinate_drift_beyond_tolerance_is_a_change(delta: float) -> None:
    platform = _platform()

    changed = changed_fields(platform, _values(longitude=104.5 + delta), PLATFORM_FIELDS)

    assert changed == ("longitude",)


def test_name_and_timestamps_compare_exactly() -> None:
    platform = _platform()
    later = UPDATED.replace(second=1)

    changed = changed_fields(
        platform,
        _values(name="PLATFORM-1b", updated_at=later),
        PLATFORM_FIELDS,
    )

    assert changed == ("name", "updated_at")


def test_well_fields_track_parent_reference() -> None:
    well = Well(
        id=11,
        platform_id=1,
        name="WELL-11",
        latitude=1.0,
        longitude=103.0,
        created_at=CREATED,
        updated_at=UPDATED,
    )
    values = {
        "platform_id": 2,
        "name": "WELL-11",
        "latitude": 1.0,
        "longitude": 103.0,
        "created_at": CREATED,
        "updated_at": UPDATED,
    }

    assert changed_fields(well, values, WELL_FIELDS) == ("platform_id",)


def test_tracked_field_without_tolerance_uses_equality() -> None:
    exact = TrackedField("latitude")
    tolerant = TrackedField("latitude", tolerance=COORDINATE_TOLERANCE)

    assert exact.differs(1.0, 1.0 + 5e-7)
    assert not tolerant.differs(1.0, 1.0 + 5e-7)
