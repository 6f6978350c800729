"""
Tokens component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.core.errors import AssetError


@dataclass(frozen=True)
class RotateTokenInput:
    """Rotate the token of the project the given asset belongs to."""

    asset_id: int


@dataclass(frozen=True)
class RotateProjectTokenInput:
    """Rotate the token shared by a project's secret assets."""

    project_id: int


@dataclass(frozen=True)
class RevokeAccessInput:
    """Seal one secret asset by clearing its token."""

    asset_id: int


@dataclass(frozen=True)
class RotateTokenOutput:
    """Output from a rotation; the new token is returned once, here."""

    access_token: str | None = None
    project_id: int | None = None
    asset_ids: list[int] = field(default_factory=list)
    errors: list[AssetError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RevokeAccessOutput:
    """Output from a revocation."""

    asset_id: int | None = None
    errors: list[AssetError] = field(default_factory=list)
    success: bool = True
