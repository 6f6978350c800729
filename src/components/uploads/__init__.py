"""
Uploads component - Batch upload validation (count, size, type).
"""

from .component import (
    DEFAULT_UPLOAD_LIMITS,
    MAX_FILE_BYTES,
    get_limits,
    is_allowed_type,
    normalize_category,
    parse_project_id,
    run,
    run_validate,
    run_validate_file,
    validate_batch_size,
    validate_file,
    validate_file_size,
    validate_file_type,
    validate_title,
)
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

__all__ = [
    # Entry points
    "run",
    "run_validate",
    "run_validate_file",
    # Helper functions
    "get_limits",
    "is_allowed_type",
    "normalize_category",
    "parse_project_id",
    "validate_batch_size",
    "validate_file",
    "validate_file_size",
    "validate_file_type",
    "validate_title",
    # Configuration
    "DEFAULT_UPLOAD_LIMITS",
    "MAX_FILE_BYTES",
    "UploadLimits",
    # Input models
    "UploadBatchInput",
    "UploadedFile",
    "ValidateFileInput",
    # Output models
    "FileValidationOutput",
    "UploadValidationOutput",
    "ValidatedUpload",
    # Ports
    "UploadRulesPort",
]
