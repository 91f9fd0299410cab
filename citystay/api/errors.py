"""Maps booking error kinds onto HTTP responses."""

from typing import TypeVar

from fastapi import HTTPException, status

from citystay.domain.results import BookingError, ErrorKind, Result

T = TypeVar("T")

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def to_http(error: BookingError) -> HTTPException:
    return HTTPException(
        status_code=STATUS_BY_KIND[error.kind],
        detail={"reason": error.reason, "message": error.message, **error.detail},
    )


def unwrap(result: Result[T]) -> T:
    """Return the result's value or raise the matching ``HTTPException``."""
    if not result.ok:
        raise to_http(result.error)
    return result.value
