"""
Mapping of component errors to HTTP responses.
"""

from typing import Any, NoReturn

from fastapi import HTTPException, status

from src.core.errors import AssetError, ErrorKind

RETRY_AFTER_SECONDS = 1

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CAPACITY_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_CATEGORY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_SECRET: status.HTTP_400_BAD_REQUEST,
    ErrorKind.ACCESS_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_detail(errors: list[AssetError]) -> dict[str, Any]:
    """Response body for a failed operation; the first error names the kind."""
    first = errors[0]
    detail: dict[str, Any] = {"kind": first.code.value, "message": first.message}
    if len(errors) > 1:
        detail["errors"] = [
            {"kind": e.code.value, "message": e.message, "field": e.field} for e in errors
        ]
    return detail


def raise_for_errors(errors: list[AssetError]) -> NoReturn:
    """Raise the HTTPException matching the first error."""
    if not errors:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unknown error")

    first = errors[0]
    headers = {"Retry-After": str(RETRY_AFTER_SECONDS)} if first.retryable else None
    raise HTTPException(
        status_code=STATUS_BY_KIND.get(first.code, status.HTTP_400_BAD_REQUEST),
        detail=error_detail(errors),
        headers=headers,
    )


def validation_error(message: str, field: str | None = None) -> NoReturn:
    raise_for_errors([AssetError(code=ErrorKind.VALIDATION, message=message, field=field)])
