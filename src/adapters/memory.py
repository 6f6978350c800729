"""In-memory asset store adapter.

Implements AssetRepoPort / UnitOfWorkPort without a database. Transactions
are serialised behind one lock and rolled back by restoring a snapshot, so
the same component code runs against it as against SQLite. Suitable for
tests and single-process embedding.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from typing import Any

from src.adapters.clock import SystemClock
from src.core.entities import Asset, AssetCategory, SecretAccess
from src.core.errors import StoreUnavailableError
from src.core.ports.time import TimePort


@dataclass
class _Row:
    asset: Asset
    data: bytes


@dataclass
class InMemoryAssetStore:
    """Shared state behind every unit of work created for it."""

    rows: dict[int, _Row] = field(default_factory=dict)
    next_id: int = 1
    lock: threading.Lock = field(default_factory=threading.Lock)
    unavailable: bool = False  # simulate an unreachable store

    def clear(self) -> None:
        """Clear all rows - useful for testing."""
        self.rows.clear()
        self.next_id = 1


class InMemoryAssetRepo:
    """Asset repository over an InMemoryAssetStore; callers hold the store lock."""

    def __init__(self, store: InMemoryAssetStore, clock: TimePort | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def _active_row(self, asset_id: int) -> _Row | None:
        row = self._store.rows.get(asset_id)
        if row is None or not row.asset.is_active:
            return None
        return row

    def get_active(self, asset_id: int) -> Asset | None:
        row = self._active_row(asset_id)
        return row.asset if row else None

    def get_any(self, asset_id: int) -> Asset | None:
        row = self._store.rows.get(asset_id)
        return row.asset if row else None

    def get_content(self, asset_id: int) -> tuple[bytes, str] | None:
        row = self._active_row(asset_id)
        if row is None:
            return None
        return row.data, row.asset.content_type

    def list_active(
        self,
        *,
        category: AssetCategory | None = None,
        project_id: int | None = None,
        title: str | None = None,
    ) -> list[Asset]:
        items = [
            row.asset
            for row in self._store.rows.values()
            if row.asset.is_active
            and (category is None or row.asset.category == category)
            and (project_id is None or row.asset.project_id == project_id)
            and (title is None or row.asset.title == title)
        ]
        items.sort(key=lambda a: (a.upload_date, a.id), reverse=True)
        return items

    def count_active_in_project(self, project_id: int) -> int:
        return len(self.list_active(project_id=project_id))

    def project_counts(self) -> dict[int, int]:
        counts: dict[int, int] = {}
        for asset in self.list_active():
            if asset.project_id is not None:
                counts[asset.project_id] = counts.get(asset.project_id, 0) + 1
        return counts

    def find_project_token(self, project_id: int) -> str | None:
        for asset in self.list_active(category="secret", project_id=project_id):
            if asset.access_token:
                return asset.access_token
        return None

    def insert(self, asset: Asset, data: bytes) -> Asset:
        asset_id = self._store.next_id
        self._store.next_id += 1
        stored = asset.evolve(id=asset_id, upload_date=self._clock.now_utc(), is_active=True)
        self._store.rows[asset_id] = _Row(asset=stored, data=bytes(data))
        return stored

    def update_metadata(self, asset: Asset) -> Asset:
        if asset.id is None or asset.id not in self._store.rows:
            raise KeyError(f"Asset {asset.id} does not exist")
        row = self._store.rows[asset.id]
        row.asset = row.asset.evolve(
            title=asset.title,
            description=asset.description,
            category=asset.category,
            project_id=asset.project_id,
            access=asset.access,
        )
        return row.asset

    def replace_content(self, asset_id: int, data: bytes, content_type: str) -> None:
        row = self._store.rows[asset_id]
        row.data = bytes(data)
        row.asset = row.asset.evolve(content_type=content_type)

    def set_inactive(self, asset_id: int) -> None:
        row = self._store.rows[asset_id]
        row.asset = row.asset.evolve(is_active=False)

    def replace_project_tokens(self, project_id: int, token: str) -> list[int]:
        updated: list[int] = []
        for row in self._store.rows.values():
            a = row.asset
            if a.is_active and a.category == "secret" and a.project_id == project_id:
                row.asset = a.evolve(access=SecretAccess(token=token))
                updated.append(a.id)  # type: ignore[arg-type]
        return sorted(updated)


class InMemoryUnitOfWork:
    """Serialisable transactions over an InMemoryAssetStore."""

    def __init__(
        self,
        store: InMemoryAssetStore | None = None,
        *,
        clock: TimePort | None = None,
        timeout_seconds: float = 5.0,
    ) -> None:
        self.store = store or InMemoryAssetStore()
        self.assets = InMemoryAssetRepo(self.store, clock)
        self._timeout = timeout_seconds
        self._snapshot: tuple[dict[int, _Row], int] | None = None

    def __enter__(self) -> InMemoryUnitOfWork:
        if self.store.unavailable:
            raise StoreUnavailableError("in-memory store marked unavailable")
        if not self.store.lock.acquire(timeout=self._timeout):
            raise StoreUnavailableError(f"store lock not acquired within {self._timeout}s")
        self._take_snapshot()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        try:
            self.rollback()
        finally:
            self._snapshot = None
            self.store.lock.release()

    def _take_snapshot(self) -> None:
        self._snapshot = (copy.deepcopy(self.store.rows), self.store.next_id)

    def commit(self) -> None:
        self._take_snapshot()

    def rollback(self) -> None:
        """Discard changes made since the last commit."""
        if self._snapshot is None:
            return
        rows, next_id = self._snapshot
        self.store.rows = copy.deepcopy(rows)
        self.store.next_id = next_id
