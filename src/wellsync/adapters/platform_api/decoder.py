"""Decode platform/well responses that arrive in one of several shapes.

Attempts run in order and the first one yielding records wins:

1. a bare JSON array of platforms;
2. an envelope object ``{"success", "message", "data", "errors"}``;
3. any object with a ``data`` property in whatever casing, or failing that a
   root array.

An attempt that raises or finds a different structure only hands over to the
next one. Items are validated one at a time, nested wells included, so a
malformed platform or well is skipped and reported as rejected instead of
discarding the whole response.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, cast

from pydantic import ValidationError

from wellsync.domain.model import EntityKind
from wellsync.domain.ports.fetching import RejectedRecord

from .schema import PlatformPayload, PlatformWellEnvelope
from .translator import parse_platform_records, reject

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from wellsync.domain.ports.fetching import PlatformRecord

log = getLogger(__name__)

_PREVIEW_LENGTH = 200


class PayloadShape(StrEnum):
    BARE_ARRAY = "bare_array"
    ENVELOPE = "envelope"
    DATA_PROPERTY = "data_property"
    ROOT_ARRAY = "root_array"


@dataclass(frozen=True, slots=True)
class Decoded:
    records: list[PlatformRecord]
    shape: PayloadShape
    rejected: tuple[RejectedRecord, ...] = ()

    @property
    def skipped(self) -> int:
        return len(self.rejected)


@dataclass(frozen=True, slots=True)
class NotRecognized:
    reason: str
    empty: bool = False


type DecodeResult = Decoded | NotRecognized
type DecodeAttempt = Callable[[str], DecodeResult]


class _ShapeMismatch(ValueError):
    pass


def _loads(raw: str) -> object:
    return json.loads(raw)


def _decode_items(items: Sequence[object], shape: PayloadShape) -> DecodeResult:
    if not items:
        return NotRecognized(f"{shape} held no records", empty=True)

    payloads: list[PlatformPayload] = []
    rejected: list[RejectedRecord] = []
    for item in items:
        try:
            payloads.append(PlatformPayload.model_validate(item))
        except ValidationError as exc:
            reject(EntityKind.PLATFORM, item, exc, rejected)

    if not payloads:
        raise _ShapeMismatch(f"none of the {len(items)} items in {shape} is a platform")
    records = parse_platform_records(payloads, rejected)
    return Decoded(records=records, shape=shape, rejected=tuple(rejected))


def decode_bare_array(raw: str) -> DecodeResult:
    document = _loads(raw)
    if not isinstance(document, list):
        raise _ShapeMismatch("root is not an array")
    return _decode_items(cast(list[object], document), PayloadShape.BARE_ARRAY)


def decode_envelope(raw: str) -> DecodeResult:
    document = _loads(raw)
    if not isinstance(document, dict):
        raise _ShapeMismatch("root is not an object")
    envelope = PlatformWellEnvelope.model_validate(document)
    if envelope.success is False:
        log.warning("API envelope reports failure: %s", envelope.message or envelope.errors)
    return _decode_items(envelope.data, PayloadShape.ENVELOPE)


def decode_generic(raw: str) -> DecodeResult:
    document = _loads(raw)
    if isinstance(document, dict):
        mapping = cast(dict[str, object], document)
        for key, value in mapping.items():
            if key.lower() == "data" and isinstance(value, list):
                return _decode_items(cast(list[object], value), PayloadShape.DATA_PROPERTY)
    if isinstance(document, list):
        return _decode_items(cast(list[object], document), PayloadShape.ROOT_ARRAY)
    raise _ShapeMismatch("no data property and root is not an array")


ATTEMPTS: tuple[DecodeAttempt, ...] = (decode_bare_array, decode_envelope, decode_generic)


def _preview(raw: str) -> str:
    if len(raw) > _PREVIEW_LENGTH:
        return raw[:_PREVIEW_LENGTH] + "..."
    return raw


def decode(raw: bytes | str, attempts: Sequence[DecodeAttempt] = ATTEMPTS) -> DecodeResult:
    """Run ``attempts`` in order and return the first non-empty ``Decoded``.

    ``NotRecognized.empty`` is set when at least one attempt understood the
    payload but found no records in it.
    """

    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            log.warning("Response body is not valid UTF-8: %s", exc)
            return NotRecognized(f"body is not valid UTF-8: {exc}")
    else:
        text = raw
    saw_empty = False
    reasons: list[str] = []

    for attempt in attempts:
        try:
            result = attempt(text)
        except ValueError as exc:
            # covers JSONDecodeError, ValidationError and _ShapeMismatch
            log.debug("Decode attempt %s did not match: %s", attempt.__name__, exc)
            reasons.append(f"{attempt.__name__}: {exc}")
            continue
        if isinstance(result, Decoded):
            log.debug("Decoded response as %s", result.shape)
            return result
        saw_empty = saw_empty or result.empty
        reasons.append(f"{attempt.__name__}: {result.reason}")

    if saw_empty:
        return NotRecognized("response contained no platform records", empty=True)

    log.warning("Could not parse response in any known format. Preview: %s", _preview(text))
    return NotRecognized("; ".join(reasons) or "no decode attempts configured")
