from functools import lru_cache

from fastapi import Depends, Header, Query

from src.adapters.sqlite.unit_of_work import SQLiteUnitOfWork
from src.app_shell.config import Settings
from src.components.access.models import AccessRequest
from src.rules.loader import load_rules
from src.rules.models import Rules

ADMIN_HEADER_VALUE = "true"


# --- Settings ---
@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


class MediaRulesAdapter:
    """Adapter to map generic Rules to the component rules ports."""

    def __init__(self, rules: Rules):
        self._rules = rules

    # UploadRulesPort
    def get_max_files(self) -> int:
        return self._rules.uploads.max_files_per_request

    def get_max_upload_bytes(self) -> int:
        return self._rules.uploads.max_upload_bytes

    def get_allowed_mime_types(self) -> list[str]:
        return self._rules.uploads.allowlist_mime_types

    def get_allowed_extensions(self) -> list[str]:
        return self._rules.uploads.allowlist_extensions

    # CapacityRulesPort
    def get_max_assets_per_project(self) -> int:
        return self._rules.projects.max_assets_per_project

    # TokenRulesPort
    def get_token_bytes(self) -> int:
        return self._rules.tokens.token_bytes


def get_media_rules(rules: Rules = Depends(get_rules)) -> MediaRulesAdapter:
    return MediaRulesAdapter(rules)


# --- Unit of Work ---
def get_unit_of_work(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> SQLiteUnitOfWork:
    return SQLiteUnitOfWork(settings.db_path, timeout_seconds=rules.store.timeout_seconds)


# --- Requester ---
def get_access_request(
    x_admin_access: str | None = Header(default=None),
    access_token: str | None = Query(default=None),
) -> AccessRequest:
    """
    Requester credentials for read endpoints.

    The admin flag is asserted by whatever authenticates requests in front
    of this API; it is taken at face value here.
    """
    is_admin = (x_admin_access or "").strip().lower() == ADMIN_HEADER_VALUE
    return AccessRequest(is_admin=is_admin, presented_token=access_token or None)
