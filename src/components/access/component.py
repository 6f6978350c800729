"""
Access component - Read authorization for assets.

Pure decision procedure: given an asset and the requester's credentials,
decide whether metadata and/or binary content may be returned, and whether
the token field is shown.

| category   | admin | token matches | metadata                 | content |
|------------|-------|---------------|--------------------------|---------|
| non-secret | any   | n/a           | allow, token only admin  | allow   |
| secret     | yes   | n/a           | allow with token         | allow unless revoked |
| secret     | no    | yes           | allow, token stripped    | allow   |
| secret     | no    | no / absent   | deny                     | deny    |
| revoked    | no    | n/a           | deny (misconfigured)     | deny    |

Invariants:
- I1: Content checks never reuse a metadata decision
- I2: A revoked asset's content is unreachable, even for admins
- I3: Listings drop denied rows instead of failing
"""

from __future__ import annotations

import hmac
from collections.abc import Iterable

from src.core.entities import Asset, RevokedAccess, SecretAccess
from src.core.errors import AssetError, ErrorKind

from .models import AccessDecision, AccessRequest, AssetView

MSG_TOKEN_REQUIRED = "Access denied. This is a secret project that requires a valid access token."
MSG_NO_TOKEN_CONFIGURED = "This secret project has no access token configured."


def _denied(message: str) -> AccessDecision:
    return AccessDecision(
        allowed=False,
        errors=[AssetError(code=ErrorKind.ACCESS_DENIED, message=message, field="access_token")],
    )


def tokens_match(presented: str | None, expected: str | None) -> bool:
    """Constant-time token comparison; empty values never match."""
    if not presented or not expected:
        return False
    return hmac.compare_digest(presented.encode(), expected.encode())


def decide_metadata_access(asset: Asset, request: AccessRequest) -> AccessDecision:
    """Decide whether asset metadata may be returned."""
    if asset.category != "secret":
        return AccessDecision(allowed=True, include_token=request.is_admin)

    if request.is_admin:
        return AccessDecision(allowed=True, include_token=True)

    if isinstance(asset.access, RevokedAccess):
        return _denied(MSG_NO_TOKEN_CONFIGURED)

    if tokens_match(request.presented_token, asset.access_token):
        return AccessDecision(allowed=True, include_token=False)

    return _denied(MSG_TOKEN_REQUIRED)


def decide_content_access(asset: Asset, request: AccessRequest) -> AccessDecision:
    """
    Decide whether binary content may be returned.

    Evaluated from scratch for every content read.
    """
    if asset.category != "secret":
        return AccessDecision(allowed=True)

    if not isinstance(asset.access, SecretAccess):
        return _denied(MSG_NO_TOKEN_CONFIGURED)

    if request.is_admin or tokens_match(request.presented_token, asset.access.token):
        return AccessDecision(allowed=True)

    return _denied(MSG_TOKEN_REQUIRED)


def to_view(asset: Asset, *, include_token: bool) -> AssetView:
    """Project an asset onto its caller-facing view."""
    if asset.id is None:
        raise ValueError("Cannot build a view of an unsaved asset")

    return AssetView(
        id=asset.id,
        title=asset.title,
        description=asset.description,
        category=asset.category,
        project_id=asset.project_id,
        content_type=asset.content_type,
        filename=asset.filename,
        filepath=asset.filepath,
        upload_date=asset.upload_date,
        access_token=asset.access_token if include_token else None,
        token_visible=include_token,
    )


def authorize_view(asset: Asset, request: AccessRequest) -> tuple[AssetView | None, list[AssetError]]:
    """Single-item read: the view, or the denial."""
    decision = decide_metadata_access(asset, request)
    if not decision.allowed:
        return None, decision.errors
    return to_view(asset, include_token=decision.include_token), []


def filter_listing(assets: Iterable[Asset], request: AccessRequest) -> list[AssetView]:
    """Apply the metadata decision per row, silently omitting denied rows."""
    views: list[AssetView] = []
    for asset in assets:
        decision = decide_metadata_access(asset, request)
        if decision.allowed:
            views.append(to_view(asset, include_token=decision.include_token))
    return views
