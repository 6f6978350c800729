"""
Tokens component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class TokenRulesPort(Protocol):
    """Port for accessing token configuration."""

    def get_token_bytes(self) -> int:
        """Random bytes per token (hex length is twice this)."""
        ...
