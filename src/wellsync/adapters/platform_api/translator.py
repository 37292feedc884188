"""Translate platform/well API payloads into normalized domain records."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, cast

from pydantic import ValidationError

from wellsync.domain.model import EntityKind
from wellsync.domain.ports.fetching import PlatformRecord, RejectedRecord, WellRecord

from .schema import PlatformPayload, WellPayload

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .schema import TimestampedPayload

log = getLogger(__name__)

type PlatformPayloadInput = PlatformPayload | Mapping[str, object]


def _ensure_platform_payload(payload: PlatformPayloadInput) -> PlatformPayload:
    if isinstance(payload, PlatformPayload):
        return payload
    return PlatformPayload.model_validate(payload)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def resolve_timestamps(payload: TimestampedPayload) -> tuple[datetime | None, datetime | None]:
    """Return ``(created_at, updated_at)`` for ``payload``.

    ``lastUpdate`` stands in for both when the pair is absent; a lone member of
    the pair fills the other.
    """

    created_at = payload.created_at
    updated_at = payload.updated_at
    if created_at is None and updated_at is None:
        created_at = updated_at = payload.last_update
    elif created_at is None:
        created_at = updated_at
    elif updated_at is None:
        updated_at = created_at
    return _as_utc(created_at), _as_utc(updated_at)


def parse_well_record(payload: WellPayload, *, parent_id: int) -> WellRecord:
    created_at, updated_at = resolve_timestamps(payload)
    platform_id = payload.platform_id if payload.platform_id is not None else parent_id
    if platform_id != parent_id:
        log.debug(
            "Well %s is nested under platform %s but references platform %s",
            payload.id,
            parent_id,
            platform_id,
        )
    return WellRecord(
        id=payload.id,
        platform_id=platform_id,
        name=payload.unique_name,
        latitude=payload.latitude,
        longitude=payload.longitude,
        created_at=created_at,
        updated_at=updated_at,
    )


def _raw_id(item: object) -> int | None:
    if isinstance(item, WellPayload | PlatformPayload):
        return item.id
    if isinstance(item, Mapping):
        for key, value in cast(Mapping[object, object], item).items():
            if str(key).lower() == "id" and isinstance(value, int) and not isinstance(value, bool):
                return value
    return None


def reject(
    kind: EntityKind,
    item: object,
    exc: ValidationError,
    rejected: list[RejectedRecord] | None,
) -> None:
    """Log a malformed item and, when collecting, remember it as rejected."""

    raw_id = _raw_id(item)
    log.warning("Skipping malformed %s (id %s): %s", kind, raw_id, exc)
    if rejected is not None:
        reason = f"{exc.error_count()} validation error(s) for {exc.title}"
        rejected.append(RejectedRecord(kind=kind, id=raw_id, reason=reason))


def parse_well_records(
    platform: PlatformPayload,
    rejected: list[RejectedRecord] | None = None,
) -> list[WellRecord]:
    wells: list[WellRecord] = []
    for item in platform.wells:
        try:
            payload = WellPayload.model_validate(item)
        except ValidationError as exc:
            reject(EntityKind.WELL, item, exc, rejected)
            continue
        wells.append(parse_well_record(payload, parent_id=platform.id))
    return wells


def parse_platform_record(
    payload: PlatformPayloadInput,
    rejected: list[RejectedRecord] | None = None,
) -> PlatformRecord:
    """Translate one platform; malformed wells are skipped and appended to ``rejected``."""

    platform = _ensure_platform_payload(payload)
    created_at, updated_at = resolve_timestamps(platform)
    return PlatformRecord(
        id=platform.id,
        name=platform.unique_name,
        latitude=platform.latitude,
        longitude=platform.longitude,
        created_at=created_at,
        updated_at=updated_at,
        wells=tuple(parse_well_records(platform, rejected)),
    )


def parse_platform_records(
    payloads: Iterable[PlatformPayloadInput],
    rejected: list[RejectedRecord] | None = None,
) -> list[PlatformRecord]:
    return [parse_platform_record(payload, rejected) for payload in payloads]
