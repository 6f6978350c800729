# Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.db import AssetRepoPort, UnitOfWorkPort
from src.core.ports.time import TimePort

__all__ = [
    "AssetRepoPort",
    "TimePort",
    "UnitOfWorkPort",
]
