from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.unit_of_work import SQLiteUnitOfWork
from src.api.deps import Settings, get_settings
from src.api.main import app
from src.rules.loader import load_rules
from src.rules.models import Rules

ROOT = Path(__file__).resolve().parent.parent
RULES_PATH = ROOT / "rules.yaml"
MIGRATIONS_DIR = ROOT / "migrations"


@pytest.fixture
def rules() -> Rules:
    """Load the REAL rules from the project root."""
    return load_rules(RULES_PATH)


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Temporary SQLite database with every migration applied."""
    path = str(tmp_path / "data" / "media.db")
    SQLiteMigrator(path, str(MIGRATIONS_DIR)).run_migrations()
    return path


@pytest.fixture
def sqlite_uow(db_path: str) -> SQLiteUnitOfWork:
    return SQLiteUnitOfWork(db_path, timeout_seconds=2.0)


@pytest.fixture
def settings(tmp_path: Path, db_path: str) -> Settings:
    s = Settings()
    s.data_dir = tmp_path / "data"
    s.db_path = db_path
    s.rules_path = RULES_PATH
    s.migrations_dir = MIGRATIONS_DIR
    return s


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """API client bound to the temporary database."""
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()
