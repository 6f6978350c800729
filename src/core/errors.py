"""
Error taxonomy shared by all components.

Components never let these escape as exceptions past their ``run_*`` entry
points; failures come back as ``AssetError`` values inside the output
models. ``StoreUnavailableError`` is the single exception adapters raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Failure kinds surfaced to callers."""

    VALIDATION = "validation_error"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    INVALID_CATEGORY = "invalid_category"
    NOT_SECRET = "not_secret"
    STORE_UNAVAILABLE = "store_unavailable"

    @property
    def retryable(self) -> bool:
        return self is ErrorKind.STORE_UNAVAILABLE


@dataclass(frozen=True)
class AssetError:
    """Structured failure with an actionable message."""

    code: ErrorKind
    message: str
    field: str | None = None

    @property
    def retryable(self) -> bool:
        return self.code.retryable


class StoreUnavailableError(Exception):
    """The asset store timed out or could not be reached; safe to retry."""


def not_found(asset_id: int) -> AssetError:
    return AssetError(
        code=ErrorKind.NOT_FOUND,
        message=f"Image {asset_id} not found",
        field="asset_id",
    )


def store_unavailable(exc: StoreUnavailableError) -> AssetError:
    return AssetError(
        code=ErrorKind.STORE_UNAVAILABLE,
        message=f"Asset store unavailable, retry later: {exc}",
    )
