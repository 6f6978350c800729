"""
Tokens component - Project-scoped capability tokens for secret assets.

One token is shared by every active secret asset of a project. Tokens are
issued when an asset becomes secret, replaced across the whole project on
rotation, and cleared per asset on revocation.

Invariants:
- I1: access_token is non-null iff category is "secret" and not revoked
- I2: Active secret assets of one project share one token
- I3: After rotation commits, the previous token matches no asset
- I4: A revoked asset stays sealed until its project's token is rotated
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable

from src.core.entities import (
    AccessState,
    Asset,
    AssetCategory,
    PublicAccess,
    RevokedAccess,
    SecretAccess,
)
from src.core.errors import (
    AssetError,
    ErrorKind,
    StoreUnavailableError,
    not_found,
    store_unavailable,
)
from src.core.ports.db import AssetRepoPort, UnitOfWorkPort

from .models import (
    RevokeAccessInput,
    RevokeAccessOutput,
    RotateProjectTokenInput,
    RotateTokenInput,
    RotateTokenOutput,
)
from .ports import TokenRulesPort

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_BYTES = 32
MIN_TOKEN_BYTES = 16

TokenIssuer = Callable[[], str]


# --- Pure Functions ---


def generate_token(nbytes: int = DEFAULT_TOKEN_BYTES) -> str:
    """Random hex token; always 2 * nbytes characters."""
    if nbytes < MIN_TOKEN_BYTES:
        raise ValueError(f"Tokens need at least {MIN_TOKEN_BYTES} bytes of entropy")
    return secrets.token_hex(nbytes)


def _token_bytes(rules: TokenRulesPort | None) -> int:
    if rules is None:
        return DEFAULT_TOKEN_BYTES
    return rules.get_token_bytes()


def initial_access(
    category: AssetCategory,
    *,
    project_token: str | None,
    issue: TokenIssuer,
) -> AccessState:
    """Access state for a newly created asset."""
    if category != "secret":
        return PublicAccess()
    return SecretAccess(token=project_token or issue())


def transition_access(
    current: Asset,
    new_category: AssetCategory,
    new_project_id: int | None,
    *,
    project_token: str | None,
    issue: TokenIssuer,
) -> AccessState:
    """
    Access state after a metadata update.

    - non-secret -> secret: adopt the project's live token, else issue one
    - secret -> non-secret: token cleared
    - secret -> secret, same project: untouched
    - secret -> secret, other project: a live token never leaves its
      project; the asset adopts the target's token, else gets a fresh one
    """
    if new_category != "secret":
        return PublicAccess()

    if current.category != "secret":
        return SecretAccess(token=project_token or issue())

    access = current.access
    moved = new_project_id != current.project_id
    if moved and isinstance(access, SecretAccess):
        return SecretAccess(token=project_token or issue())
    return access


def project_token_for(repo: AssetRepoPort, project_id: int | None) -> str | None:
    """Live token of a project, or None for ungrouped assets and token-less projects."""
    if project_id is None:
        return None
    return repo.find_project_token(project_id)


# --- Component Entry Points ---


def run_rotate_project(
    inp: RotateProjectTokenInput,
    *,
    uow: UnitOfWorkPort,
    rules: TokenRulesPort | None = None,
) -> RotateTokenOutput:
    """
    Replace the token on every active secret asset of a project.

    Runs as one transaction so no reader sees a mix of old and new tokens.
    Revoked secret assets in the project are re-issued the new token.
    """
    token = generate_token(_token_bytes(rules))
    try:
        with uow:
            asset_ids = uow.assets.replace_project_tokens(inp.project_id, token)
            if not asset_ids:
                return RotateTokenOutput(
                    project_id=inp.project_id,
                    errors=[
                        AssetError(
                            code=ErrorKind.NOT_SECRET,
                            message=f"Project {inp.project_id} has no secret images",
                            field="project_id",
                        )
                    ],
                    success=False,
                )
            uow.commit()
    except StoreUnavailableError as exc:
        logger.warning("Token rotation for project %s failed: %s", inp.project_id, exc)
        return RotateTokenOutput(errors=[store_unavailable(exc)], success=False)

    logger.info("Rotated access token for project %s (%d assets)", inp.project_id, len(asset_ids))
    return RotateTokenOutput(access_token=token, project_id=inp.project_id, asset_ids=asset_ids)


def run_rotate(
    inp: RotateTokenInput,
    *,
    uow: UnitOfWorkPort,
    rules: TokenRulesPort | None = None,
) -> RotateTokenOutput:
    """
    Rotate the token of the project the asset belongs to.

    A secret asset without a project is its own single-asset group.
    """
    token = generate_token(_token_bytes(rules))
    try:
        with uow:
            asset = uow.assets.get_active(inp.asset_id)
            if asset is None:
                return RotateTokenOutput(errors=[not_found(inp.asset_id)], success=False)

            if asset.category != "secret":
                return RotateTokenOutput(
                    errors=[
                        AssetError(
                            code=ErrorKind.NOT_SECRET,
                            message="Only secret projects can have access tokens",
                            field="category",
                        )
                    ],
                    success=False,
                )

            if asset.project_id is None:
                uow.assets.update_metadata(asset.evolve(access=SecretAccess(token=token)))
                asset_ids = [inp.asset_id]
            else:
                asset_ids = uow.assets.replace_project_tokens(asset.project_id, token)
            uow.commit()
    except StoreUnavailableError as exc:
        logger.warning("Token rotation for image %s failed: %s", inp.asset_id, exc)
        return RotateTokenOutput(errors=[store_unavailable(exc)], success=False)

    logger.info(
        "Rotated access token via image %s (project %s, %d assets)",
        inp.asset_id,
        asset.project_id,
        len(asset_ids),
    )
    return RotateTokenOutput(access_token=token, project_id=asset.project_id, asset_ids=asset_ids)


def run_revoke(
    inp: RevokeAccessInput,
    *,
    uow: UnitOfWorkPort,
) -> RevokeAccessOutput:
    """
    Clear the token of one secret asset.

    The asset stays secret and listed for admins, but no token reaches it
    until the project token is rotated.
    """
    try:
        with uow:
            asset = uow.assets.get_active(inp.asset_id)
            if asset is None:
                return RevokeAccessOutput(errors=[not_found(inp.asset_id)], success=False)

            if asset.category != "secret":
                return RevokeAccessOutput(
                    errors=[
                        AssetError(
                            code=ErrorKind.INVALID_CATEGORY,
                            message="Only secret projects can have access revoked",
                            field="category",
                        )
                    ],
                    success=False,
                )

            uow.assets.update_metadata(asset.evolve(access=RevokedAccess()))
            uow.commit()
    except StoreUnavailableError as exc:
        logger.warning("Revoking access to image %s failed: %s", inp.asset_id, exc)
        return RevokeAccessOutput(errors=[store_unavailable(exc)], success=False)

    logger.info("Revoked access token of image %s", inp.asset_id)
    return RevokeAccessOutput(asset_id=inp.asset_id)


def run(
    inp: RotateTokenInput | RotateProjectTokenInput | RevokeAccessInput,
    *,
    uow: UnitOfWorkPort,
    rules: TokenRulesPort | None = None,
) -> RotateTokenOutput | RevokeAccessOutput:
    """Main entry point; dispatches on input type."""
    if isinstance(inp, RotateTokenInput):
        return run_rotate(inp, uow=uow, rules=rules)

    elif isinstance(inp, RotateProjectTokenInput):
        return run_rotate_project(inp, uow=uow, rules=rules)

    elif isinstance(inp, RevokeAccessInput):
        return run_revoke(inp, uow=uow)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
