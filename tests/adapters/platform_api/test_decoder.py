from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from tests.helpers.platform_wells import platform_payload, well_payload
from wellsync.adapters.platform_api import Decoded, NotRecognized, PayloadShape, decode
from wellsync.domain.model import EntityKind


def _platforms() -> list[dict[str, object]]:
    return [
        platform_payload(1, wells=[well_payload(11, 1), well_payload(12, 1)]),
        platform_payload(2, wells=[well_payload(21, 2)]),
    ]


def _decoded(raw: str | bytes) -> Decoded:
    result = decode(raw)
    assert isinstance(result, Decoded), result
    return result


@pytest.mark.parametrize(
    ("document", "shape"),
    [
        (_platforms(), PayloadShape.BARE_ARRAY),
        (
            {"success": True, "message": "ok", "data": _platforms(), "errors": []},
            PayloadShape.ENVELOPE,
        ),
        ({"Data": _platforms(), "Total": 2}, PayloadShape.DATA_PROPERTY),
    ],
)
def test_every_known_shape_decodes_to_the_same_records(
    document: object,
    shape: PayloadShape,
) -> None:
    reference = _decoded(json.dumps(_platforms())).records

    result = _decoded(json.dumps(document))

    assert result.shape is shape
    assert result.records == reference


def test_nested_wells_are_flattened_with_parent_reference() -> None:
    result = _decoded(json.dumps(_platforms()))

    first = result.records[0]
    assert [well.id for well in first.wells] == [11, 12]
    assert {well.platform_id for well in first.wells} == {1}


def test_well_without_platform_id_inherits_parent() -> None:
    raw = json.dumps([platform_payload(3, wells=[well_payload(31, None)])])

    result = _decoded(raw)

    assert result.records[0].wells[0].platform_id == 3


def test_wells_key_accepts_plural_form() -> None:
    raw = json.dumps([platform_payload(4, wells=[well_payload(41, 4)], wells_key="wells")])

    assert [well.id for well in _decoded(raw).records[0].wells] == [41]


def test_field_names_match_case_insensitively() -> None:
    raw = json.dumps(
        [
            {
                "ID": 5,
                "UniqueName": "PLATFORM-5",
                "Latitude": 1.0,
                "LONGITUDE": 2.0,
                "CreatedAt": "2024-01-01T00:00:00Z",
                "updatedat": "2024-01-02T00:00:00Z",
                "Well": [],
            }
        ]
    )

    record = _decoded(raw).records[0]

    assert (record.id, record.name) == (5, "PLATFORM-5")
    assert (record.latitude, record.longitude) == (1.0, 2.0)
    assert record.updated_at == datetime(2024, 1, 2, tzinfo=UTC)


def test_last_update_fills_both_timestamps() -> None:
    payload = platform_payload(6, lastUpdate="2024-03-04T05:06:07Z")
    del payload["createdAt"]
    del payload["updatedAt"]

    record = _decoded(json.dumps([payload])).records[0]

    expected = datetime(2024, 3, 4, 5, 6, 7, tzinfo=UTC)
    assert record.created_at == expected
    assert record.updated_at == expected


def test_single_timestamp_fills_its_pair() -> None:
    payload = platform_payload(7)
    del payload["createdAt"]

    record = _decoded(json.dumps([payload])).records[0]

    assert record.created_at == record.updated_at == datetime(2024, 6, 1, 12, 30, tzinfo=UTC)


def test_naive_timestamps_are_read_as_utc() -> None:
    payload = platform_payload(8, createdAt="2024-01-01T08:00:00", updatedAt="2024-01-01T09:00:00")

    record = _decoded(json.dumps([payload])).records[0]

    assert record.created_at == datetime(2024, 1, 1, 8, tzinfo=UTC)


def test_blank_name_is_left_for_reconciliation_to_default() -> None:
    raw = json.dumps([platform_payload(9, uniqueName="   ")])

    assert _decoded(raw).records[0].name is None


def test_malformed_item_is_skipped_not_fatal() -> None:
    raw = json.dumps([platform_payload(1), {"uniqueName": "no id"}])

    result = _decoded(raw)

    assert [record.id for record in result.records] == [1]
    assert result.skipped == 1
    assert [(item.kind, item.id) for item in result.rejected] == [(EntityKind.PLATFORM, None)]


def test_malformed_well_drops_only_itself() -> None:
    wells = [well_payload(11, 1), well_payload(12, 1, longitude={"deg": 103})]
    raw = json.dumps([platform_payload(1, wells=wells), platform_payload(2)])

    result = _decoded(raw)

    assert [record.id for record in result.records] == [1, 2]
    assert [well.id for well in result.records[0].wells] == [11]
    assert [(item.kind, item.id) for item in result.rejected] == [(EntityKind.WELL, 12)]


def test_well_without_readable_id_is_rejected_without_id() -> None:
    raw = json.dumps([platform_payload(1, wells=[{"ID": "eleven", "uniqueName": "W"}])])

    result = _decoded(raw)

    assert result.records[0].wells == ()
    assert result.rejected[0].id is None


@pytest.mark.parametrize("raw", ["[]", '{"data": []}', '{"success": true, "data": []}'])
def test_known_shape_without_records_is_empty(raw: str) -> None:
    result = decode(raw)

    assert isinstance(result, NotRecognized)
    assert result.empty


@pytest.mark.parametrize(
    "raw",
    ["", "not json", "null", '{"message": "maintenance"}', '[{"foo": 1}]', '"just a string"'],
)
def test_unknown_shapes_are_not_recognized(raw: str) -> None:
    result = decode(raw)

    assert isinstance(result, NotRecognized)
    assert not result.empty


def test_bytes_with_bom_are_decoded() -> None:
    raw = b"\xef\xbb\xbf" + json.dumps(_platforms()).encode()

    assert len(_decoded(raw).records) == 2


def test_failing_attempt_falls_through_to_next() -> None:
    calls: list[str] = []

    def broken(raw: str) -> Decoded:
        calls.append("broken")
        raise ValueError("boom")

    def working(raw: str) -> NotRecognized:
        calls.append("working")
        return NotRecognized("nothing here", empty=True)

    result = decode("[]", attempts=(broken, working))

    assert calls == ["broken", "working"]
    assert isinstance(result, NotRecognized)
    assert result.empty


def test_invalid_utf8_is_not_recognized() -> None:
    raw = b'[{"id": 1, "uniqueName": "PLAT\xffFORM"}]'

    result = decode(raw)

    assert isinstance(result, NotRecognized)
    assert not result.empty
    assert "UTF-8" in result.reason
