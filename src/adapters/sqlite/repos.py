"""
SQLite asset repository.

Implements AssetRepoPort over the ``images`` table. The access variant is
flattened to the nullable ``access_token`` column here and nowhere else.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any

from src.adapters.clock import SystemClock
from src.core.entities import (
    Asset,
    AssetCategory,
    access_from_column,
    access_to_column,
)
from src.core.ports.time import TimePort

# Metadata columns; image_data is only read by get_content
_COLUMNS = (
    "id, title, description, category, project_id, content_type, "
    "filename, filepath, access_token, upload_date, is_active"
)


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    if not s:
        return None
    return datetime.fromisoformat(s)


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None


class SQLiteAssetRepo(SQLiteRepoBase):
    """SQLite implementation of AssetRepoPort."""

    def __init__(
        self,
        db_path: str,
        connection: sqlite3.Connection | None = None,
        clock: TimePort | None = None,
    ):
        super().__init__(db_path, connection)
        self._clock = clock or SystemClock()

    def _map_row(self, row: dict[str, Any]) -> Asset:
        return Asset(
            id=row["id"],
            title=row["title"],
            description=row["description"] or "",
            category=row["category"],
            project_id=row["project_id"],
            content_type=row["content_type"],
            filename=row["filename"],
            filepath=row["filepath"],
            access=access_from_column(row["category"], row["access_token"]),
            upload_date=parse_dt(row["upload_date"]),
            is_active=bool(row["is_active"]),
        )

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row: dict[str, Any] | None = conn.execute(sql, params).fetchone()
            return row
        finally:
            if self._should_close():
                conn.close()

    def _fetch_all(self, sql: str, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            rows: list[dict[str, Any]] = conn.execute(sql, params).fetchall()
            return rows
        finally:
            if self._should_close():
                conn.close()

    def _write(self, sql: str, params: tuple[Any, ...]) -> sqlite3.Cursor:
        conn = self._get_conn()
        try:
            cursor = conn.execute(sql, params)
            if self._should_close():
                conn.commit()
            return cursor
        finally:
            if self._should_close():
                conn.close()

    # --- Reads ---

    def get_active(self, asset_id: int) -> Asset | None:
        row = self._fetch_one(
            f"SELECT {_COLUMNS} FROM images WHERE id = ? AND is_active = 1", (asset_id,)
        )
        return self._map_row(row) if row else None

    def get_any(self, asset_id: int) -> Asset | None:
        row = self._fetch_one(f"SELECT {_COLUMNS} FROM images WHERE id = ?", (asset_id,))
        return self._map_row(row) if row else None

    def get_content(self, asset_id: int) -> tuple[bytes, str] | None:
        row = self._fetch_one(
            "SELECT image_data, content_type FROM images WHERE id = ? AND is_active = 1",
            (asset_id,),
        )
        if row is None:
            return None
        return bytes(row["image_data"]), row["content_type"]

    def list_active(
        self,
        *,
        category: AssetCategory | None = None,
        project_id: int | None = None,
        title: str | None = None,
    ) -> list[Asset]:
        query = f"SELECT {_COLUMNS} FROM images WHERE is_active = 1"
        params: list[Any] = []

        if category is not None:
            query += " AND category = ?"
            params.append(category)

        if project_id is not None:
            query += " AND project_id = ?"
            params.append(project_id)

        if title is not None:
            query += " AND title = ?"
            params.append(title)

        query += " ORDER BY upload_date DESC, id DESC"

        return [self._map_row(r) for r in self._fetch_all(query, tuple(params))]

    def count_active_in_project(self, project_id: int) -> int:
        row = self._fetch_one(
            "SELECT COUNT(*) AS count FROM images WHERE project_id = ? AND is_active = 1",
            (project_id,),
        )
        return int(row["count"]) if row else 0

    def project_counts(self) -> dict[int, int]:
        rows = self._fetch_all(
            """
            SELECT project_id, COUNT(*) AS count FROM images
            WHERE is_active = 1 AND project_id IS NOT NULL
            GROUP BY project_id ORDER BY project_id
            """,
            (),
        )
        return {r["project_id"]: r["count"] for r in rows}

    def find_project_token(self, project_id: int) -> str | None:
        row = self._fetch_one(
            """
            SELECT access_token FROM images
            WHERE project_id = ? AND category = 'secret' AND is_active = 1
              AND access_token IS NOT NULL
            ORDER BY id LIMIT 1
            """,
            (project_id,),
        )
        return row["access_token"] if row else None

    # --- Writes ---

    def insert(self, asset: Asset, data: bytes) -> Asset:
        upload_date = self._clock.now_utc()
        cursor = self._write(
            """
            INSERT INTO images (
                title, description, category, project_id, image_data,
                content_type, filename, filepath, access_token, upload_date, is_active
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1)
            """,
            (
                asset.title,
                asset.description,
                asset.category,
                asset.project_id,
                sqlite3.Binary(data),
                asset.content_type,
                asset.filename,
                asset.filepath,
                access_to_column(asset.access),
                upload_date.isoformat(),
            ),
        )
        return asset.evolve(id=cursor.lastrowid, upload_date=upload_date, is_active=True)

    def update_metadata(self, asset: Asset) -> Asset:
        if asset.id is None:
            raise ValueError("Cannot update an unsaved asset")

        self._write(
            """
            UPDATE images
            SET title = ?, description = ?, category = ?, project_id = ?, access_token = ?
            WHERE id = ?
            """,
            (
                asset.title,
                asset.description,
                asset.category,
                asset.project_id,
                access_to_column(asset.access),
                asset.id,
            ),
        )
        stored = self.get_any(asset.id)
        if stored is None:
            raise KeyError(f"Asset {asset.id} does not exist")
        return stored

    def replace_content(self, asset_id: int, data: bytes, content_type: str) -> None:
        self._write(
            "UPDATE images SET image_data = ?, content_type = ? WHERE id = ?",
            (sqlite3.Binary(data), content_type, asset_id),
        )

    def set_inactive(self, asset_id: int) -> None:
        self._write("UPDATE images SET is_active = 0 WHERE id = ?", (asset_id,))

    def replace_project_tokens(self, project_id: int, token: str) -> list[int]:
        where = "project_id = ? AND category = 'secret' AND is_active = 1"
        rows = self._fetch_all(f"SELECT id FROM images WHERE {where} ORDER BY id", (project_id,))
        if rows:
            self._write(f"UPDATE images SET access_token = ? WHERE {where}", (token, project_id))
        return [r["id"] for r in rows]
