"""Typed results returned by storage backends.

Backends never raise for operational problems. They hand back a
``StorageResult`` whose ``cause`` names what went wrong, and the adapter
decides whether to fall through to the next backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from folio.errors import StorageFailure

T = TypeVar("T")


@dataclass(frozen=True)
class StorageResult(Generic[T]):
    """Outcome of one backend call: a value, or a failure cause."""

    value: T | None = None
    cause: StorageFailure | None = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.cause is None

    @property
    def found(self) -> bool:
        """True when the call succeeded and produced a usable value."""
        return self.cause is None and self.value is not None

    @classmethod
    def success(cls, value: T | None) -> StorageResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, cause: StorageFailure) -> StorageResult[T]:
        return cls(value=None, cause=cause)
