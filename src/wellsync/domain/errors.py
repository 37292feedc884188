"""Failure taxonomy for a sync run.

Fetch failures are recoverable through the orchestrator's fallback source;
``TransactionFailure`` is fatal for the run. Malformed single records never
raise: the reconciliation engine counts them instead.
"""

from __future__ import annotations


class SyncError(RuntimeError):
    """Base class for failures surfaced by a sync run."""

    reason: str = "sync failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


class FetchError(SyncError):
    """Raised when platform/well data could not be fetched."""

    reason = "fetch failed"


class AuthFailure(FetchError):
    """No bearer credential could be obtained (bad credentials or login transport error)."""

    reason = "authentication failed"


class TransportFailure(FetchError):
    """Timeout or connection error while talking to the API."""

    reason = "transport error"


class HttpFailure(FetchError):
    """The API answered with a non-success status."""

    reason = "unexpected HTTP status"

    def __init__(self, status: int, message: str | None = None) -> None:
        super().__init__(message or f"{self.reason} {status}")
        self.status = status


class UnparseableResponse(FetchError):
    """The response body matched none of the known payload shapes.

    ``empty`` is set when the body did parse into a known shape but held no
    records, which callers report as "nothing to sync".
    """

    reason = "response not recognised"

    def __init__(self, message: str | None = None, *, empty: bool = False) -> None:
        super().__init__(message)
        self.empty = empty


class TransactionFailure(SyncError):
    """The store rejected the batch; both tables were rolled back."""

    reason = "transaction failed"


class SyncCancelled(SyncError):
    """The run was aborted between stages."""

    reason = "sync cancelled"
