"""
Access component - Per-read authorization of asset metadata and content.
"""

from .component import (
    MSG_NO_TOKEN_CONFIGURED,
    MSG_TOKEN_REQUIRED,
    authorize_view,
    decide_content_access,
    decide_metadata_access,
    filter_listing,
    to_view,
    tokens_match,
)
from .models import AccessDecision, AccessRequest, AssetView

__all__ = [
    "authorize_view",
    "decide_content_access",
    "decide_metadata_access",
    "filter_listing",
    "to_view",
    "tokens_match",
    "MSG_NO_TOKEN_CONFIGURED",
    "MSG_TOKEN_REQUIRED",
    "AccessDecision",
    "AccessRequest",
    "AssetView",
]
