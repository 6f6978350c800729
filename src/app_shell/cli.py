import argparse
import logging
import sys
from pathlib import Path

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.unit_of_work import SQLiteUnitOfWork
from src.app_shell.config import Settings, validate_ops_rules
from src.components.tokens.component import run_rotate, run_rotate_project
from src.components.tokens.models import (
    RotateProjectTokenInput,
    RotateTokenInput,
    RotateTokenOutput,
)
from src.core.errors import StoreUnavailableError
from src.rules.loader import load_rules
from src.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")


class _TokenRules:
    def __init__(self, rules: Rules):
        self._rules = rules

    def get_token_bytes(self) -> int:
        return self._rules.tokens.token_bytes


def _load(settings: Settings) -> Rules:
    if not settings.rules_path.exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)
    try:
        return load_rules(settings.rules_path)
    except ValueError as e:
        logger.error("%s", e)
        sys.exit(1)


def _open_store(settings: Settings, rules: Rules) -> SQLiteUnitOfWork:
    if not Path(settings.db_path).exists():
        logger.error("Database %s not found. Run `migrate` first.", settings.db_path)
        sys.exit(1)
    return SQLiteUnitOfWork(settings.db_path, timeout_seconds=rules.store.timeout_seconds)


def handle_migrate(settings: Settings) -> None:
    rules = _load(settings)
    validate_ops_rules(rules, settings.data_dir)
    applied = SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    if applied:
        for name in applied:
            print(f"Applied {name}")
    else:
        print("Schema already up to date.")


def handle_check_rules(settings: Settings) -> None:
    rules = _load(settings)
    print(f"Rules OK: {rules.project.slug} (version {rules.project.rules_version})")
    print(f"  max files per request: {rules.uploads.max_files_per_request}")
    print(f"  max upload bytes:      {rules.uploads.max_upload_bytes}")
    print(f"  max assets/project:    {rules.projects.max_assets_per_project}")


def handle_rotate_token(settings: Settings, args: argparse.Namespace) -> None:
    rules = _load(settings)
    uow = _open_store(settings, rules)

    result: RotateTokenOutput
    if args.project is not None:
        result = run_rotate_project(
            RotateProjectTokenInput(project_id=args.project), uow=uow, rules=_TokenRules(rules)
        )
    elif args.asset_id is not None:
        result = run_rotate(RotateTokenInput(asset_id=args.asset_id), uow=uow, rules=_TokenRules(rules))
    else:
        logger.error("Specify an image id or --project <id>.")
        sys.exit(1)

    if not result.success:
        logger.error(result.errors[0].message)
        sys.exit(1)

    print(f"Rotated token for images {result.asset_ids}")
    print(f"Token: {result.access_token}")


def handle_projects(settings: Settings) -> None:
    uow = _open_store(settings, _load(settings))
    try:
        with uow:
            counts = uow.assets.project_counts()
    except StoreUnavailableError as e:
        logger.error("Store unavailable: %s", e)
        sys.exit(1)

    if not counts:
        print("No projects.")
        return
    for project_id, count in counts.items():
        print(f"Project {project_id}: {count} active image(s)")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Project Media Vault CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # check-rules
    subparsers.add_parser("check-rules", help="Load and validate rules.yaml")

    # rotate-token
    rotate_parser = subparsers.add_parser("rotate-token", help="Rotate a project access token")
    rotate_parser.add_argument("asset_id", nargs="?", type=int, help="Any secret image of the project")
    rotate_parser.add_argument("--project", type=int, help="Rotate by project id instead")

    # projects
    subparsers.add_parser("projects", help="Active image count per project")

    args = parser.parse_args(argv)

    settings = Settings()

    if args.command == "migrate":
        handle_migrate(settings)
    elif args.command == "check-rules":
        handle_check_rules(settings)
    elif args.command == "rotate-token":
        handle_rotate_token(settings, args)
    elif args.command == "projects":
        handle_projects(settings)


if __name__ == "__main__":
    main()
