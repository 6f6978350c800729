"""
Uploads component - Batch upload validation.

Accepts or rejects a whole batch of in-memory files before anything reaches
the store. Nothing is persisted here.

Invariants:
- I1: A batch is accepted whole or rejected whole
- I2: 1..max_files files per batch
- I3: Every file is non-empty and within max_file_bytes
- I4: A file's type passes if its MIME type OR its extension is allowed
- I5: Unknown or missing category normalises to "unbuilt"
"""

from __future__ import annotations

from pathlib import PurePath

from src.core.entities import ASSET_CATEGORIES, DEFAULT_CATEGORY, AssetCategory
from src.core.errors import AssetError, ErrorKind

from .models import (
    FileValidationOutput,
    UploadBatchInput,
    UploadedFile,
    UploadLimits,
    UploadValidationOutput,
    ValidatedUpload,
    ValidateFileInput,
)
from .ports import UploadRulesPort

# --- Default Configuration ---

MAX_FILE_BYTES = 10 * 1024 * 1024  # 10 MiB

DEFAULT_UPLOAD_LIMITS = UploadLimits(
    max_files=5,
    max_file_bytes=MAX_FILE_BYTES,
    allowed_mime_types=frozenset(
        {
            "image/jpeg",
            "image/jpg",
            "image/png",
            "image/gif",
            "image/webp",
            "image/svg+xml",
            "image/bmp",
            "image/tiff",
            "application/pdf",
            "text/csv",
            "application/vnd.ms-excel",
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            "application/octet-stream",
        }
    ),
    allowed_extensions=frozenset(
        {
            ".jpg",
            ".jpeg",
            ".png",
            ".gif",
            ".webp",
            ".svg",
            ".bmp",
            ".tif",
            ".tiff",
            ".pdf",
            ".csv",
            ".xls",
            ".xlsx",
        }
    ),
)


def _validation_error(message: str, field: str) -> AssetError:
    return AssetError(code=ErrorKind.VALIDATION, message=message, field=field)


# --- Normalisation ---


def normalize_category(value: str | None) -> AssetCategory:
    """Map user input onto the category enum; anything unknown becomes "unbuilt"."""
    if value in ASSET_CATEGORIES:
        return value  # type: ignore[return-value]
    return DEFAULT_CATEGORY


def parse_project_id(value: int | str | None) -> tuple[int | None, list[AssetError]]:
    """
    Parse the optional project id.

    Empty or missing means "no project". Returns (project_id, errors).
    """
    if value is None or value == "":
        return None, []

    if isinstance(value, bool):
        return None, [_validation_error("project_id must be an integer", "project_id")]

    try:
        project_id = int(str(value).strip())
    except ValueError:
        return None, [_validation_error(f"project_id '{value}' is not an integer", "project_id")]

    if project_id <= 0:
        return None, [_validation_error("project_id must be a positive integer", "project_id")]

    return project_id, []


# --- Validation Functions ---


def validate_title(title: str | None) -> list[AssetError]:
    """Title is required and must not be blank."""
    if title is None or not title.strip():
        return [_validation_error("Title is required", "title")]
    return []


def validate_batch_size(count: int, limits: UploadLimits) -> list[AssetError]:
    """Reject empty batches and batches over the per-request file limit."""
    if count == 0:
        return [_validation_error("Please upload at least one file", "images")]
    if count > limits.max_files:
        return [
            _validation_error(
                f"Maximum {limits.max_files} files allowed. You uploaded {count} files.",
                "images",
            )
        ]
    return []


def validate_file_size(
    file: UploadedFile,
    limits: UploadLimits,
    field: str = "image",
) -> list[AssetError]:
    """Reject empty files and files over the size limit."""
    if len(file.data) == 0:
        return [_validation_error(f'File "{file.filename}" is empty', field)]

    if file.byte_size > limits.max_file_bytes:
        return [
            _validation_error(
                f'File "{file.filename}" is {file.byte_size} bytes, '
                f"exceeding the {limits.max_file_bytes} byte limit",
                field,
            )
        ]
    return []


def is_allowed_type(file: UploadedFile, limits: UploadLimits) -> bool:
    """
    Accept when either the declared MIME type or the extension is allowed.

    Clients mis-report MIME types often enough that the extension alone is
    sufficient, and vice versa.
    """
    mime_ok = (file.content_type or "").lower() in limits.allowed_mime_types
    ext_ok = PurePath(file.filename or "").suffix.lower() in limits.allowed_extensions
    return mime_ok or ext_ok


def validate_file_type(
    file: UploadedFile,
    limits: UploadLimits,
    field: str = "image",
) -> list[AssetError]:
    """Reject files whose MIME type and extension both miss the allowlist."""
    if is_allowed_type(file, limits):
        return []
    return [
        _validation_error(
            f"Unsupported file type: {file.content_type or 'unknown'} ({file.filename}). "
            "Allowed types: images (jpg, png, gif, webp, svg, bmp, tiff), PDF, CSV, "
            "Excel files (xls, xlsx)",
            field,
        )
    ]


def validate_file(
    file: UploadedFile,
    limits: UploadLimits,
    field: str = "image",
) -> list[AssetError]:
    errors = validate_file_size(file, limits, field)
    errors.extend(validate_file_type(file, limits, field))
    return errors


def get_limits(rules: UploadRulesPort | None) -> UploadLimits:
    """Build upload limits from rules or defaults."""
    if rules is None:
        return DEFAULT_UPLOAD_LIMITS

    return UploadLimits(
        max_files=rules.get_max_files(),
        max_file_bytes=rules.get_max_upload_bytes(),
        allowed_mime_types=frozenset(m.lower() for m in rules.get_allowed_mime_types()),
        allowed_extensions=frozenset(e.lower() for e in rules.get_allowed_extensions()),
    )


# --- Component Entry Points ---


def run_validate(
    inp: UploadBatchInput,
    *,
    rules: UploadRulesPort | None = None,
) -> UploadValidationOutput:
    """
    Validate an upload batch.

    Every failing file is reported, not just the first one.

    Args:
        inp: Files plus declared metadata.
        rules: Optional rules port for limits.

    Returns:
        UploadValidationOutput with the normalised upload or errors.
    """
    limits = get_limits(rules)
    errors: list[AssetError] = []

    errors.extend(validate_batch_size(len(inp.files), limits))

    if len(inp.files) <= limits.max_files:
        for index, file in enumerate(inp.files):
            errors.extend(validate_file(file, limits, field=f"images[{index}]"))

    errors.extend(validate_title(inp.title))

    project_id, project_errors = parse_project_id(inp.project_id)
    errors.extend(project_errors)

    if errors:
        return UploadValidationOutput(upload=None, errors=errors, success=False)

    upload = ValidatedUpload(
        files=tuple(inp.files),
        title=(inp.title or "").strip(),
        description=inp.description or "",
        category=normalize_category(inp.category),
        project_id=project_id,
    )
    return UploadValidationOutput(upload=upload, errors=[], success=True)


def run_validate_file(
    inp: ValidateFileInput,
    *,
    rules: UploadRulesPort | None = None,
) -> FileValidationOutput:
    """Validate a single replacement file (size, emptiness, type)."""
    errors = validate_file(inp.file, get_limits(rules))
    if errors:
        return FileValidationOutput(file=None, errors=errors, success=False)
    return FileValidationOutput(file=inp.file, errors=[], success=True)


def run(
    inp: UploadBatchInput | ValidateFileInput,
    *,
    rules: UploadRulesPort | None = None,
) -> UploadValidationOutput | FileValidationOutput:
    """Main entry point; dispatches on input type."""
    if isinstance(inp, UploadBatchInput):
        return run_validate(inp, rules=rules)

    elif isinstance(inp, ValidateFileInput):
        return run_validate_file(inp, rules=rules)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
