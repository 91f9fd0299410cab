"""Structured outcomes for booking operations.

Business failures are returned, not raised: a ``Result`` carries either a
value or a ``BookingError`` with a machine-readable kind and reason. The HTTP
adapter decides which status code each kind maps to.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class BookingError:
    """A recoverable, user-facing failure."""

    kind: ErrorKind
    reason: str
    message: str
    detail: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def validation(cls, reason: str, message: str, **detail: Any) -> "BookingError":
        return cls(ErrorKind.VALIDATION, reason, message, detail)

    @classmethod
    def conflict(cls, reason: str, message: str, **detail: Any) -> "BookingError":
        return cls(ErrorKind.CONFLICT, reason, message, detail)

    @classmethod
    def not_found(cls, reason: str, message: str, **detail: Any) -> "BookingError":
        return cls(ErrorKind.NOT_FOUND, reason, message, detail)


@dataclass(frozen=True)
class Result(Generic[T]):
    value: T | None = None
    error: BookingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BookingError) -> "Result[T]":
        return cls(error=error)
