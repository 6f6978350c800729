"""
Capacity component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.core.errors import AssetError


@dataclass(frozen=True)
class CapacityCheckInput:
    """Input for checking room before inserting new assets."""

    project_id: int | None
    incoming_count: int


@dataclass(frozen=True)
class ReassignCheckInput:
    """Input for checking room before moving one asset between projects."""

    target_project_id: int | None
    current_project_id: int | None


@dataclass(frozen=True)
class CapacityOutput:
    """Output from a capacity check."""

    project_id: int | None = None
    current_count: int = 0
    limit: int = 0
    errors: list[AssetError] = field(default_factory=list)
    success: bool = True
