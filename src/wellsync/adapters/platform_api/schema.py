"""Pydantic models describing the platform/well API payloads.

The upstream API is inconsistent about key casing, so every model lower-cases
incoming keys before validation and declares lower-case aliases.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import cast

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


def _lower_keys(value: object) -> object:
    if isinstance(value, Mapping):
        mapping_value = cast(Mapping[object, object], value)
        return {str(key).lower(): item for key, item in mapping_value.items()}
    return value


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _none_to_empty(value: object) -> object:
    return [] if value is None else value


class PlatformApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, value: object) -> object:
        return _lower_keys(value)


class TimestampedPayload(PlatformApiModel):
    created_at: datetime | None = Field(default=None, alias="createdat")
    updated_at: datetime | None = Field(default=None, alias="updatedat")
    last_update: datetime | None = Field(default=None, alias="lastupdate")

    _normalize_timestamps = field_validator(
        "created_at", "updated_at", "last_update", mode="before"
    )(_blank_to_none)


class WellPayload(TimestampedPayload):
    id: int
    platform_id: int | None = Field(default=None, alias="platformid")
    unique_name: str | None = Field(default=None, alias="uniquename")
    latitude: float | None = None
    longitude: float | None = None

    _normalize_name = field_validator("unique_name", mode="before")(_blank_to_none)


class PlatformPayload(TimestampedPayload):
    id: int
    unique_name: str | None = Field(default=None, alias="uniquename")
    latitude: float | None = None
    longitude: float | None = None
    # raw items; the translator validates each one as a WellPayload
    wells: list[object] = Field(
        default_factory=list,
        validation_alias=AliasChoices("well", "wells"),
    )

    _normalize_name = field_validator("unique_name", mode="before")(_blank_to_none)
    _normalize_wells = field_validator("wells", mode="before")(_none_to_empty)


class PlatformWellEnvelope(BaseModel):
    """``{"success", "message", "data", "errors"}`` wrapper used by some endpoints.

    Only ``data`` matters; its items are validated one by one by the decoder.
    Keys are matched exactly here, unlike the generic fallback in the decoder.
    """

    model_config = ConfigDict(extra="ignore")

    success: bool | None = None
    message: str | None = None
    data: list[object]
    errors: list[object] | None = None


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(PlatformApiModel):
    """Object-shaped login answer; the API usually returns a bare JSON string instead."""

    token: str
    expires: datetime | None = None
    success: bool | None = None
    message: str | None = None

    @field_validator("token")
    @classmethod
    def _require_token(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("empty token")
        return value
