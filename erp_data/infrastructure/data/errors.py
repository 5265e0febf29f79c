"""
Errors raised by record sources (remote service, managed store).

Repositories treat every RecordSourceError as "this tier failed". Only
RemoteApplicationError is ever surfaced to callers, and only for strict writes.
"""

from __future__ import annotations

from typing import Any


class RecordSourceError(RuntimeError):
    """Base class for a failed call against a record tier."""

    def __init__(self, message: str, *, tier: str | None = None, original: Exception | None = None) -> None:
        super().__init__(message)
        self.tier = tier
        self.original = original


class RemoteTransportError(RecordSourceError):
    """The remote service could not be reached (connection error, timeout)."""


class RemoteApplicationError(RecordSourceError):
    """The remote service answered but reported a failure."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
        tier: str | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message, tier=tier, original=original)
        self.status_code = status_code
        self.payload = payload


class RemoteNotFoundError(RemoteApplicationError):
    """The remote service has no record with the requested id (HTTP 404)."""


class ManagedStoreError(RecordSourceError):
    """The managed store client raised or returned an error."""
