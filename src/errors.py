"""Error taxonomy for the content store.

Reads never raise these past the public API: storage and decode failures
are logged and collapsed to ``None``/``False``. They exist so the failure
cause can travel inside a :class:`~folio.storage.models.StorageResult` and
reach the logs.
"""

from __future__ import annotations


class FolioError(Exception):
    """Base class for all folio errors."""


class StorageFailure(FolioError):
    """A backend I/O operation failed (network, timeout, filesystem)."""

    def __init__(self, backend: str, operation: str, key: str, detail: str = "") -> None:
        self.backend = backend
        self.operation = operation
        self.key = key
        self.detail = detail
        message = f"{backend} {operation} failed for {key!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DecodeFailure(FolioError):
    """Stored text could not be decoded into an entity."""


class InvalidKeyError(FolioError, ValueError):
    """A slug or locale cannot be used as a storage key segment."""


class UnauthorizedError(FolioError):
    """A write was rejected by the configured capability verifier."""
