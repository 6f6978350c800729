"""
Domain entities for the media vault.

- Asset: one stored binary plus its metadata row
- AccessState: tagged token state (public | secret | revoked)

The flat ``access_token`` column only exists at the store boundary; inside
the core the token is always carried by the access variant so an asset can
never be "secret without a token" by accident.

Invariants:
- I1: access is PublicAccess iff category is not "secret"
- I2: access_token is non-null iff access is SecretAccess
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, model_validator

AssetCategory = Literal["built", "unbuilt", "secret"]

ASSET_CATEGORIES: tuple[AssetCategory, ...] = ("built", "unbuilt", "secret")
DEFAULT_CATEGORY: AssetCategory = "unbuilt"


# --- Access state (tagged variant) ---


class PublicAccess(BaseModel):
    """Non-secret asset: no token ever."""

    kind: Literal["public"] = "public"


class SecretAccess(BaseModel):
    """Secret asset reachable with the project token."""

    kind: Literal["secret"] = "secret"
    token: str = Field(min_length=1)


class RevokedAccess(BaseModel):
    """Secret asset whose token was revoked; sealed until re-issued."""

    kind: Literal["revoked"] = "revoked"


AccessState = Annotated[
    PublicAccess | SecretAccess | RevokedAccess,
    Field(discriminator="kind"),
]


def access_from_column(category: str, access_token: str | None) -> AccessState:
    """Build the access variant from the flat (category, access_token) columns."""
    if category != "secret":
        return PublicAccess()
    if access_token:
        return SecretAccess(token=access_token)
    return RevokedAccess()


def access_to_column(access: AccessState) -> str | None:
    """Flatten the access variant into the nullable token column."""
    if isinstance(access, SecretAccess):
        return access.token
    return None


# --- Asset ---


class Asset(BaseModel):
    """
    Asset metadata row.

    Binary payload is kept out of the entity; it is read and written through
    the repository's content methods only.
    """

    id: int | None = None  # assigned by the store
    title: str = Field(min_length=1)
    description: str = ""
    category: AssetCategory = DEFAULT_CATEGORY
    project_id: int | None = None
    content_type: str = "application/octet-stream"
    filename: str = ""
    filepath: str = ""
    access: AccessState = Field(default_factory=PublicAccess)
    upload_date: datetime | None = None
    is_active: bool = True

    @model_validator(mode="after")
    def _check_access_matches_category(self) -> Asset:
        is_secret = self.category == "secret"
        if is_secret and isinstance(self.access, PublicAccess):
            raise ValueError("secret asset must carry a secret or revoked access state")
        if not is_secret and not isinstance(self.access, PublicAccess):
            raise ValueError(f"{self.category} asset cannot carry an access token")
        return self

    def evolve(self, **changes: Any) -> Asset:
        """Copy with changes applied, re-running validation."""
        data = self.model_dump()
        data.update(changes)
        return Asset.model_validate(data)

    @property
    def access_token(self) -> str | None:
        return access_to_column(self.access)

    @property
    def is_revoked(self) -> bool:
        return isinstance(self.access, RevokedAccess)
