"""
Capacity component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class ProjectCounterPort(Protocol):
    """Live count of active assets per project."""

    def count_active_in_project(self, project_id: int) -> int:
        """Count active assets in a project."""
        ...


class CapacityRulesPort(Protocol):
    """Port for accessing project capacity configuration."""

    def get_max_assets_per_project(self) -> int:
        """Max active assets in one project."""
        ...
