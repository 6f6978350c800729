import logging
import os
import sys
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class Settings:
    """Deployment settings read from the environment."""

    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("MEDIA_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "media.db")
        self.rules_path = Path(os.environ.get("MEDIA_RULES_PATH", "./rules.yaml"))
        self.migrations_dir = Path(os.environ.get("MEDIA_MIGRATIONS_DIR", "./migrations"))


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.

    Exits the process when a requirement is not met.
    """
    ops = rules.ops

    # 1. Data dir must exist (created if missing) and be writable
    if ops.data_dir_required:
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.critical("Cannot create data directory %s: %s", data_dir, e)
            sys.exit(1)
        if not os.access(data_dir, os.W_OK):
            logger.critical("Data directory %s is not writable", data_dir)
            sys.exit(1)

    # 2. Required env
    missing = [env_var for env_var in ops.required_env if env_var not in os.environ]
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    logger.info("Configuration validated.")
