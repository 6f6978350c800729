"""
Assets component port definitions.

The lifecycle runs every operation inside one UnitOfWorkPort transaction.
Rules are optional; without them the component defaults apply.
"""

from __future__ import annotations

from typing import Protocol

from src.components.capacity.ports import CapacityRulesPort
from src.components.tokens.ports import TokenRulesPort
from src.components.uploads.ports import UploadRulesPort
from src.core.ports.db import AssetRepoPort, UnitOfWorkPort


class LifecycleRulesPort(UploadRulesPort, CapacityRulesPort, TokenRulesPort, Protocol):
    """Every limit the lifecycle consults, from one rules source."""


__all__ = [
    "AssetRepoPort",
    "LifecycleRulesPort",
    "UnitOfWorkPort",
]
