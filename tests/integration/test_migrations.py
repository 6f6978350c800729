import sqlite3
from pathlib import Path

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


@pytest.fixture
def temp_db_path(tmp_path):
    return str(tmp_path / "test_db.sqlite")


@pytest.fixture
def migrations_dir():
    # Real migrations directory, so the SQL itself is exercised
    return str(MIGRATIONS_DIR)


def test_migrator_creates_migration_table(temp_db_path, migrations_dir):
    SQLiteMigrator(temp_db_path, migrations_dir).run_migrations()

    conn = sqlite3.connect(temp_db_path)
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='_migrations'"
    )
    assert cursor.fetchone() is not None
    conn.close()


def test_migrator_applies_images_table(temp_db_path, migrations_dir):
    applied = SQLiteMigrator(temp_db_path, migrations_dir).run_migrations()

    assert applied == ["001_images.sql"]
    conn = sqlite3.connect(temp_db_path)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='images'")
    assert cursor.fetchone() is not None
    conn.close()


def test_migrator_is_idempotent(temp_db_path, migrations_dir):
    migrator = SQLiteMigrator(temp_db_path, migrations_dir)

    migrator.run_migrations()
    assert migrator.run_migrations() == []
    assert migrator.pending() == []

    conn = sqlite3.connect(temp_db_path)
    cursor = conn.execute("SELECT count(*) FROM _migrations WHERE filename='001_images.sql'")
    assert cursor.fetchone()[0] == 1
    conn.close()


def test_migrator_creates_parent_dir(tmp_path, migrations_dir):
    path = tmp_path / "nested" / "media.db"

    SQLiteMigrator(str(path), migrations_dir).run_migrations()

    assert path.exists()


def test_missing_migrations_dir(temp_db_path, tmp_path):
    with pytest.raises(FileNotFoundError):
        SQLiteMigrator(temp_db_path, str(tmp_path / "nope")).run_migrations()


def test_broken_migration_is_rolled_back(temp_db_path, tmp_path):
    bad_dir = tmp_path / "bad"
    bad_dir.mkdir()
    (bad_dir / "001_bad.sql").write_text("CREATE TABLE ok (id INTEGER);\nNOT VALID SQL;")

    with pytest.raises(RuntimeError, match="001_bad.sql"):
        SQLiteMigrator(temp_db_path, str(bad_dir)).run_migrations()

    conn = sqlite3.connect(temp_db_path)
    assert conn.execute("SELECT count(*) FROM _migrations").fetchone()[0] == 0
    conn.close()


def test_schema_rejects_token_on_public_row(db_path):
    conn = sqlite3.connect(db_path)

    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO images (title, category, image_data, content_type, filename, "
            "filepath, access_token, upload_date) "
            "VALUES ('t', 'built', x'00', 'image/png', 'a.png', '/uploads/a.png', 'tok', '2024')"
        )
    conn.close()


def test_schema_rejects_unknown_category(db_path):
    conn = sqlite3.connect(db_path)

    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO images (title, category, image_data, content_type, filename, "
            "filepath, upload_date) "
            "VALUES ('t', 'private', x'00', 'image/png', 'a.png', '/uploads/a.png', '2024')"
        )
    conn.close()
