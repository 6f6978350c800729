"""
Database adapter interfaces.

Protocol-based interfaces for the asset store.
Implementations: SQLite (src.adapters.sqlite), in-memory (src.adapters.memory).

The store is the only synchronization point in the system: every component
operation runs inside one unit of work, which must give it an isolated,
all-or-nothing transaction with a bounded wait for locks.
"""

from __future__ import annotations

from typing import Any, Protocol

from src.core.entities import Asset, AssetCategory


class AssetRepoPort(Protocol):
    """
    Repository for asset rows.

    Every read except ``get_any`` only sees active rows (I: soft-deleted rows
    are invisible). Methods raise StoreUnavailableError on timeouts.
    """

    def get_active(self, asset_id: int) -> Asset | None:
        """Get active asset metadata by id."""
        ...

    def get_any(self, asset_id: int) -> Asset | None:
        """Get asset metadata by id, including soft-deleted rows."""
        ...

    def get_content(self, asset_id: int) -> tuple[bytes, str] | None:
        """Get (data, content_type) of an active asset."""
        ...

    def list_active(
        self,
        *,
        category: AssetCategory | None = None,
        project_id: int | None = None,
        title: str | None = None,
    ) -> list[Asset]:
        """List active assets, newest first."""
        ...

    def count_active_in_project(self, project_id: int) -> int:
        """Count active assets in a project."""
        ...

    def project_counts(self) -> dict[int, int]:
        """Active asset count per project id."""
        ...

    def find_project_token(self, project_id: int) -> str | None:
        """Live token shared by the project's active secret assets, if any."""
        ...

    def insert(self, asset: Asset, data: bytes) -> Asset:
        """Insert a new asset; returns it with id and upload_date assigned."""
        ...

    def update_metadata(self, asset: Asset) -> Asset:
        """Persist title, description, category, project and token."""
        ...

    def replace_content(self, asset_id: int, data: bytes, content_type: str) -> None:
        """Overwrite binary payload and content type."""
        ...

    def set_inactive(self, asset_id: int) -> None:
        """Soft delete."""
        ...

    def replace_project_tokens(self, project_id: int, token: str) -> list[int]:
        """Write token to every active secret asset in project; returns their ids."""
        ...


class UnitOfWorkPort(Protocol):
    """
    Unit of Work pattern for transaction management.

    Usage:
        with uow:
            uow.assets.insert(asset, data)
            uow.commit()
    """

    assets: AssetRepoPort

    def __enter__(self) -> UnitOfWorkPort:
        """Enter transaction context."""
        ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit transaction context (rollback when not committed)."""
        ...

    def commit(self) -> None:
        """Commit the transaction."""
        ...

    def rollback(self) -> None:
        """Rollback the transaction."""
        ...
