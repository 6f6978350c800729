"""
Uploads component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class UploadRulesPort(Protocol):
    """Port for accessing upload rules configuration."""

    def get_max_files(self) -> int:
        """Max files accepted in one batch."""
        ...

    def get_max_upload_bytes(self) -> int:
        """Max size of a single file."""
        ...

    def get_allowed_mime_types(self) -> list[str]:
        """Allowed declared MIME types."""
        ...

    def get_allowed_extensions(self) -> list[str]:
        """Allowed filename extensions, lowercase with leading dot."""
        ...
