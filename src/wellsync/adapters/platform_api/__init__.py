"""Public interface for the platform/well API adapter."""

from __future__ import annotations

from .auth import BearerToken, TokenManager
from .client import PlatformWellClient
from .decoder import Decoded, NotRecognized, PayloadShape, decode
from .schema import PlatformPayload, PlatformWellEnvelope, WellPayload
from .translator import parse_platform_record, parse_platform_records

__all__ = [
    "BearerToken",
    "Decoded",
    "NotRecognized",
    "PayloadShape",
    "PlatformPayload",
    "PlatformWellClient",
    "PlatformWellEnvelope",
    "TokenManager",
    "WellPayload",
    "decode",
    "parse_platform_record",
    "parse_platform_records",
]
