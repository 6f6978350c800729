"""
Access component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from src.core.entities import AssetCategory
from src.core.errors import AssetError


@dataclass(frozen=True)
class AccessRequest:
    """
    Requester credentials for one read.

    `is_admin` comes from the authentication layer in front of the API;
    the policy never derives it itself.
    """

    is_admin: bool = False
    presented_token: str | None = None


@dataclass(frozen=True)
class AccessDecision:
    """Whether a read is allowed and whether the token field may be shown."""

    allowed: bool
    include_token: bool = False
    errors: list[AssetError] = field(default_factory=list)


@dataclass(frozen=True)
class AssetView:
    """Asset metadata as returned to a caller."""

    id: int
    title: str
    description: str
    category: AssetCategory
    project_id: int | None
    content_type: str
    filename: str
    filepath: str
    upload_date: datetime | None
    access_token: str | None = None
    token_visible: bool = False
