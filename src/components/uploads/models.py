"""
Uploads component input/output models.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from src.core.entities import AssetCategory
from src.core.errors import AssetError

# --- Input Models ---


@dataclass(frozen=True)
class UploadedFile:
    """One file as handed over by the multipart layer, fully in memory."""

    data: bytes
    filename: str
    content_type: str
    size: int | None = None  # declared size; actual length wins when larger

    @property
    def byte_size(self) -> int:
        if self.size is None:
            return len(self.data)
        return max(self.size, len(self.data))


@dataclass(frozen=True)
class UploadBatchInput:
    """Input for validating an upload batch."""

    files: Sequence[UploadedFile]
    title: str | None
    description: str | None = None
    category: str | None = None
    project_id: int | str | None = None


@dataclass(frozen=True)
class ValidateFileInput:
    """Input for validating a single replacement file."""

    file: UploadedFile


# --- Configuration Models ---


@dataclass(frozen=True)
class UploadLimits:
    """Upload constraints applied to every batch."""

    max_files: int
    max_file_bytes: int
    allowed_mime_types: frozenset[str]
    allowed_extensions: frozenset[str]


# --- Output Models ---


@dataclass(frozen=True)
class ValidatedUpload:
    """A batch that passed validation, with metadata normalised."""

    files: tuple[UploadedFile, ...]
    title: str
    description: str
    category: AssetCategory
    project_id: int | None


@dataclass(frozen=True)
class UploadValidationOutput:
    """Output from batch validation."""

    upload: ValidatedUpload | None = None
    errors: list[AssetError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class FileValidationOutput:
    """Output from single-file validation."""

    file: UploadedFile | None = None
    errors: list[AssetError] = field(default_factory=list)
    success: bool = True
