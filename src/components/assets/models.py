"""
Assets component input/output models.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from src.components.access.models import AccessRequest, AssetView
from src.components.uploads.models import UploadedFile
from src.core.errors import AssetError

# --- Input Models ---


@dataclass(frozen=True)
class CreateAssetsInput:
    """Input for uploading a batch of files as new assets."""

    files: Sequence[UploadedFile]
    title: str | None
    description: str | None = None
    category: str | None = None
    project_id: int | str | None = None


@dataclass(frozen=True)
class UpdateAssetInput:
    """Input for replacing an asset's metadata. Omitted values reset to defaults."""

    asset_id: int
    title: str | None
    description: str | None = None
    category: str | None = None
    project_id: int | str | None = None


@dataclass(frozen=True)
class ReplaceContentInput:
    """Input for overwriting an asset's binary payload."""

    asset_id: int
    file: UploadedFile


@dataclass(frozen=True)
class DeleteAssetInput:
    """Input for soft-deleting an asset."""

    asset_id: int


@dataclass(frozen=True)
class GetAssetInput:
    """Input for reading one asset's metadata."""

    asset_id: int
    request: AccessRequest = field(default_factory=AccessRequest)


@dataclass(frozen=True)
class GetContentInput:
    """Input for reading one asset's binary payload."""

    asset_id: int
    request: AccessRequest = field(default_factory=AccessRequest)


@dataclass(frozen=True)
class ListAssetsInput:
    """Input for listing assets; filters are exact-match and combinable."""

    category: str | None = None
    project_id: int | str | None = None
    title: str | None = None
    request: AccessRequest = field(default_factory=AccessRequest)


@dataclass(frozen=True)
class GetProjectInput:
    """Input for reading a project's visible assets."""

    project_id: int
    request: AccessRequest = field(default_factory=AccessRequest)


# --- Output Models ---


@dataclass(frozen=True)
class CreateAssetsOutput:
    """Output from a batch upload."""

    items: list[AssetView] = field(default_factory=list)
    errors: list[AssetError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class AssetOutput:
    """Output carrying a single asset view."""

    asset: AssetView | None = None
    errors: list[AssetError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ContentOutput:
    """Output carrying an asset's binary payload."""

    data: bytes | None = None
    content_type: str | None = None
    errors: list[AssetError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class MutationOutput:
    """Output from a mutation that returns no asset body."""

    asset_id: int | None = None
    errors: list[AssetError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class AssetListOutput:
    """Output from a listing."""

    items: list[AssetView] = field(default_factory=list)
    errors: list[AssetError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ProjectOutput:
    """A project as the requester can see it."""

    project_id: int | None = None
    title: str = ""
    items: list[AssetView] = field(default_factory=list)
    errors: list[AssetError] = field(default_factory=list)
    success: bool = True

    @property
    def total(self) -> int:
        return len(self.items)
