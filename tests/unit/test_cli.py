"""Operator CLI commands."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from src.adapters.sqlite.unit_of_work import SQLiteUnitOfWork
from src.app_shell.cli import main
from src.components.assets.component import run_create
from src.components.assets.models import CreateAssetsInput
from src.components.uploads.models import UploadedFile

PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    monkeypatch.setenv("MEDIA_DATA_DIR", str(data_dir))
    monkeypatch.setenv("MEDIA_RULES_PATH", str(PROJECT_ROOT / "rules.yaml"))
    monkeypatch.setenv("MEDIA_MIGRATIONS_DIR", str(PROJECT_ROOT / "migrations"))
    return data_dir


def seed(db_path: str, project_id: int, count: int, category: str = "secret") -> list[int]:
    result = run_create(
        CreateAssetsInput(
            files=[
                UploadedFile(data=b"1", filename=f"{i}.png", content_type="image/png")
                for i in range(count)
            ],
            title="Seed",
            category=category,
            project_id=project_id,
        ),
        uow=SQLiteUnitOfWork(db_path),
    )
    assert result.success
    return [v.id for v in result.items]


class TestMigrate:
    def test_applies_then_reports_up_to_date(self, env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["migrate"])
        assert "Applied 001_images.sql" in capsys.readouterr().out

        main(["migrate"])
        assert "Schema already up to date." in capsys.readouterr().out
        assert (env / "media.db").exists()


class TestCheckRules:
    def test_prints_limits(self, env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["check-rules"])

        out = capsys.readouterr().out
        assert "Rules OK: project-media-vault" in out
        assert "max assets/project:    5" in out

    def test_missing_rules_file_exits(self, env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MEDIA_RULES_PATH", str(env / "absent.yaml"))

        with pytest.raises(SystemExit) as exc:
            main(["check-rules"])

        assert exc.value.code == 1


class TestRotateToken:
    def test_rotate_by_asset(self, env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["migrate"])
        ids = seed(str(env / "media.db"), project_id=3, count=2)
        capsys.readouterr()

        main(["rotate-token", str(ids[0])])

        out = capsys.readouterr().out
        assert f"Rotated token for images {ids}" in out
        token = out.split("Token: ")[1].strip()
        assert len(token) == 64

    def test_rotate_by_project(self, env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["migrate"])
        ids = seed(str(env / "media.db"), project_id=4, count=1)
        capsys.readouterr()

        main(["rotate-token", "--project", "4"])

        assert f"Rotated token for images {ids}" in capsys.readouterr().out

    def test_rotate_public_image_exits(self, env: Path) -> None:
        main(["migrate"])
        ids = seed(str(env / "media.db"), project_id=5, count=1, category="built")

        with pytest.raises(SystemExit):
            main(["rotate-token", str(ids[0])])

    def test_requires_target(self, env: Path) -> None:
        main(["migrate"])

        with pytest.raises(SystemExit):
            main(["rotate-token"])


class TestProjects:
    def test_empty(self, env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["migrate"])
        capsys.readouterr()

        main(["projects"])

        assert capsys.readouterr().out.strip() == "No projects."

    def test_counts(self, env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["migrate"])
        seed(str(env / "media.db"), project_id=1, count=2, category="built")
        seed(str(env / "media.db"), project_id=2, count=1, category="unbuilt")
        capsys.readouterr()

        main(["projects"])

        out = capsys.readouterr().out
        assert "Project 1: 2 active image(s)" in out
        assert "Project 2: 1 active image(s)" in out


def test_unknown_command_exits() -> None:
    with pytest.raises(SystemExit):
        main(["explode"])


class TestStoreFailures:
    @pytest.fixture
    def fast_timeout(self, env: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        rules_text = (PROJECT_ROOT / "rules.yaml").read_text()
        path = tmp_path / "rules.yaml"
        path.write_text(rules_text.replace("timeout_seconds: 5.0", "timeout_seconds: 0.05"))
        monkeypatch.setenv("MEDIA_RULES_PATH", str(path))
        return env

    @pytest.mark.parametrize("argv", [["projects"], ["rotate-token", "1"]])
    def test_missing_database_exits(self, env: Path, argv: list[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main(argv)

        assert exc.value.code == 1
        assert not (env / "media.db").exists()

    def test_locked_database_exits_cleanly(self, fast_timeout: Path) -> None:
        main(["migrate"])
        blocker = sqlite3.connect(fast_timeout / "media.db", isolation_level=None)
        blocker.execute("BEGIN IMMEDIATE")
        try:
            with pytest.raises(SystemExit) as exc:
                main(["projects"])
        finally:
            blocker.execute("ROLLBACK")
            blocker.close()

        assert exc.value.code == 1
