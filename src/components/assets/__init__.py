"""
Assets component - Asset lifecycle and authorized reads.
"""

from .component import (
    DEFAULT_CONTENT_TYPE,
    UPLOADS_PREFIX,
    build_asset,
    fallback_filename,
    run,
    run_create,
    run_delete,
    run_get,
    run_get_content,
    run_get_project,
    run_list,
    run_replace_content,
    run_update,
)
from .models import (
    AssetListOutput,
    AssetOutput,
    ContentOutput,
    CreateAssetsInput,
    CreateAssetsOutput,
    DeleteAssetInput,
    GetAssetInput,
    GetContentInput,
    GetProjectInput,
    ListAssetsInput,
    MutationOutput,
    ProjectOutput,
    ReplaceContentInput,
    UpdateAssetInput,
)
from .ports import AssetRepoPort, LifecycleRulesPort, UnitOfWorkPort

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_delete",
    "run_get",
    "run_get_content",
    "run_get_project",
    "run_list",
    "run_replace_content",
    "run_update",
    # Helper functions
    "build_asset",
    "fallback_filename",
    # Configuration
    "DEFAULT_CONTENT_TYPE",
    "UPLOADS_PREFIX",
    # Input models
    "CreateAssetsInput",
    "DeleteAssetInput",
    "GetAssetInput",
    "GetContentInput",
    "GetProjectInput",
    "ListAssetsInput",
    "ReplaceContentInput",
    "UpdateAssetInput",
    # Output models
    "AssetListOutput",
    "AssetOutput",
    "ContentOutput",
    "CreateAssetsOutput",
    "MutationOutput",
    "ProjectOutput",
    # Ports
    "AssetRepoPort",
    "LifecycleRulesPort",
    "UnitOfWorkPort",
]
