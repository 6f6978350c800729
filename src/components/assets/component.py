"""
Assets component - Asset lifecycle (create, update, replace, soft delete, reads).

Orchestrates the upload validator, capacity guard, token manager and access
policy. Every operation runs inside one unit of work, so the capacity check
and the writes it guards commit or roll back together.

Invariants:
- I1: A batch is persisted whole or not at all
- I2: access_token is non-null iff category is "secret" and not revoked
- I3: Soft-deleted assets are invisible to every read; deletion is terminal
- I4: Content replacement never touches metadata or the token
- I5: Reads are authorized per request; content re-runs its own check
"""

from __future__ import annotations

import logging
import secrets
import time
from functools import partial

from src.components.access.component import (
    authorize_view,
    decide_content_access,
    filter_listing,
    to_view,
)
from src.components.capacity.component import run_check_capacity, run_check_reassign
from src.components.capacity.models import CapacityCheckInput, ReassignCheckInput
from src.components.tokens.component import (
    DEFAULT_TOKEN_BYTES,
    generate_token,
    initial_access,
    project_token_for,
    transition_access,
)
from src.components.uploads.component import (
    normalize_category,
    parse_project_id,
    run_validate,
    run_validate_file,
    validate_title,
)
from src.components.uploads.models import UploadBatchInput, UploadedFile, ValidateFileInput
from src.core.entities import ASSET_CATEGORIES, AccessState, Asset
from src.core.errors import (
    AssetError,
    ErrorKind,
    StoreUnavailableError,
    not_found,
    store_unavailable,
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
from .ports import LifecycleRulesPort, UnitOfWorkPort

logger = logging.getLogger(__name__)

UPLOADS_PREFIX = "/uploads/"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


# --- Helper Functions ---


def fallback_filename() -> str:
    """Name for a file uploaded without one: image-<unix-ms>-<random>."""
    return f"image-{int(time.time() * 1000)}-{secrets.randbelow(1_000_000_000)}"


def build_asset(
    file: UploadedFile,
    *,
    title: str,
    description: str,
    category: str,
    project_id: int | None,
    access: AccessState,
) -> Asset:
    """New, unsaved asset for one uploaded file."""
    filename = file.filename or fallback_filename()
    return Asset.model_validate(
        {
            "title": title,
            "description": description,
            "category": category,
            "project_id": project_id,
            "content_type": file.content_type or DEFAULT_CONTENT_TYPE,
            "filename": filename,
            "filepath": f"{UPLOADS_PREFIX}{filename}",
            "access": access,
        }
    )


def _token_bytes(rules: LifecycleRulesPort | None) -> int:
    if rules is None:
        return DEFAULT_TOKEN_BYTES
    return rules.get_token_bytes()


# --- Write Entry Points ---


def run_create(
    inp: CreateAssetsInput,
    *,
    uow: UnitOfWorkPort,
    rules: LifecycleRulesPort | None = None,
) -> CreateAssetsOutput:
    """
    Upload a batch of files, one asset per file.

    All files share the batch's title, description, category and project.
    A secret batch in a project shares one token, adopted from the project
    when it already has one. Ungrouped secret files each get their own.

    Args:
        inp: Files plus declared metadata.
        uow: Unit of work over the asset store.
        rules: Optional rules port for limits.

    Returns:
        CreateAssetsOutput with views of the new assets, token included.
    """
    validation = run_validate(
        UploadBatchInput(
            files=inp.files,
            title=inp.title,
            description=inp.description,
            category=inp.category,
            project_id=inp.project_id,
        ),
        rules=rules,
    )
    if not validation.success or validation.upload is None:
        return CreateAssetsOutput(errors=validation.errors, success=False)

    upload = validation.upload
    issue = partial(generate_token, _token_bytes(rules))

    try:
        with uow:
            capacity = run_check_capacity(
                CapacityCheckInput(project_id=upload.project_id, incoming_count=len(upload.files)),
                counter=uow.assets,
                rules=rules,
            )
            if not capacity.success:
                return CreateAssetsOutput(errors=capacity.errors, success=False)

            project_token = None
            if upload.category == "secret":
                project_token = project_token_for(uow.assets, upload.project_id)
            if upload.project_id is None:
                accesses = [
                    initial_access(upload.category, project_token=None, issue=issue)
                    for _ in upload.files
                ]
            else:
                shared = initial_access(upload.category, project_token=project_token, issue=issue)
                accesses = [shared] * len(upload.files)

            created = [
                uow.assets.insert(
                    build_asset(
                        file,
                        title=upload.title,
                        description=upload.description,
                        category=upload.category,
                        project_id=upload.project_id,
                        access=access,
                    ),
                    file.data,
                )
                for file, access in zip(upload.files, accesses)
            ]
            uow.commit()
    except StoreUnavailableError as exc:
        logger.warning("Upload of %d files failed: %s", len(upload.files), exc)
        return CreateAssetsOutput(errors=[store_unavailable(exc)], success=False)

    logger.info(
        "Created %d %s images in project %s: %s",
        len(created),
        upload.category,
        upload.project_id,
        [a.id for a in created],
    )
    return CreateAssetsOutput(items=[to_view(a, include_token=True) for a in created])


def run_update(
    inp: UpdateAssetInput,
    *,
    uow: UnitOfWorkPort,
    rules: LifecycleRulesPort | None = None,
) -> AssetOutput:
    """
    Replace an asset's metadata.

    Moving into another project is capacity-checked. Category changes drive
    the token: becoming secret issues or adopts one, leaving secret clears it.
    """
    errors = validate_title(inp.title)
    project_id, project_errors = parse_project_id(inp.project_id)
    errors.extend(project_errors)
    if errors:
        return AssetOutput(errors=errors, success=False)

    category = normalize_category(inp.category)
    issue = partial(generate_token, _token_bytes(rules))

    try:
        with uow:
            current = uow.assets.get_active(inp.asset_id)
            if current is None:
                return AssetOutput(errors=[not_found(inp.asset_id)], success=False)

            reassign = run_check_reassign(
                ReassignCheckInput(target_project_id=project_id, current_project_id=current.project_id),
                counter=uow.assets,
                rules=rules,
            )
            if not reassign.success:
                return AssetOutput(errors=reassign.errors, success=False)

            project_token = None
            if category == "secret":
                project_token = project_token_for(uow.assets, project_id)
            access = transition_access(
                current, category, project_id, project_token=project_token, issue=issue
            )

            updated = uow.assets.update_metadata(
                current.evolve(
                    title=(inp.title or "").strip(),
                    description=inp.description or "",
                    category=category,
                    project_id=project_id,
                    access=access,
                )
            )
            uow.commit()
    except StoreUnavailableError as exc:
        logger.warning("Update of image %s failed: %s", inp.asset_id, exc)
        return AssetOutput(errors=[store_unavailable(exc)], success=False)

    if current.category != updated.category:
        logger.info(
            "Image %s category changed %s -> %s", inp.asset_id, current.category, updated.category
        )
    logger.info("Updated image %s (project %s)", inp.asset_id, updated.project_id)
    return AssetOutput(asset=to_view(updated, include_token=True))


def run_replace_content(
    inp: ReplaceContentInput,
    *,
    uow: UnitOfWorkPort,
    rules: LifecycleRulesPort | None = None,
) -> MutationOutput:
    """Overwrite the binary payload and content type of an active asset."""
    validation = run_validate_file(ValidateFileInput(file=inp.file), rules=rules)
    if not validation.success:
        return MutationOutput(asset_id=inp.asset_id, errors=validation.errors, success=False)

    try:
        with uow:
            if uow.assets.get_active(inp.asset_id) is None:
                return MutationOutput(
                    asset_id=inp.asset_id, errors=[not_found(inp.asset_id)], success=False
                )
            uow.assets.replace_content(
                inp.asset_id, inp.file.data, inp.file.content_type or DEFAULT_CONTENT_TYPE
            )
            uow.commit()
    except StoreUnavailableError as exc:
        logger.warning("Replacing content of image %s failed: %s", inp.asset_id, exc)
        return MutationOutput(asset_id=inp.asset_id, errors=[store_unavailable(exc)], success=False)

    logger.info("Replaced content of image %s", inp.asset_id)
    return MutationOutput(asset_id=inp.asset_id)


def run_delete(
    inp: DeleteAssetInput,
    *,
    uow: UnitOfWorkPort,
) -> MutationOutput:
    """Soft delete. Deleting an already deleted asset is NotFound."""
    try:
        with uow:
            if uow.assets.get_active(inp.asset_id) is None:
                return MutationOutput(
                    asset_id=inp.asset_id, errors=[not_found(inp.asset_id)], success=False
                )
            uow.assets.set_inactive(inp.asset_id)
            uow.commit()
    except StoreUnavailableError as exc:
        logger.warning("Deleting image %s failed: %s", inp.asset_id, exc)
        return MutationOutput(asset_id=inp.asset_id, errors=[store_unavailable(exc)], success=False)

    logger.info("Soft-deleted image %s", inp.asset_id)
    return MutationOutput(asset_id=inp.asset_id)


# --- Read Entry Points ---


def run_get(
    inp: GetAssetInput,
    *,
    uow: UnitOfWorkPort,
) -> AssetOutput:
    """Get one asset's metadata, or an explicit denial."""
    try:
        with uow:
            asset = uow.assets.get_active(inp.asset_id)
    except StoreUnavailableError as exc:
        return AssetOutput(errors=[store_unavailable(exc)], success=False)

    if asset is None:
        return AssetOutput(errors=[not_found(inp.asset_id)], success=False)

    view, errors = authorize_view(asset, inp.request)
    if view is None:
        return AssetOutput(errors=errors, success=False)
    return AssetOutput(asset=view)


def run_get_content(
    inp: GetContentInput,
    *,
    uow: UnitOfWorkPort,
) -> ContentOutput:
    """Get the binary payload; authorization is evaluated here, not reused."""
    try:
        with uow:
            asset = uow.assets.get_active(inp.asset_id)
            if asset is None:
                return ContentOutput(errors=[not_found(inp.asset_id)], success=False)

            decision = decide_content_access(asset, inp.request)
            if not decision.allowed:
                return ContentOutput(errors=decision.errors, success=False)

            content = uow.assets.get_content(inp.asset_id)
    except StoreUnavailableError as exc:
        return ContentOutput(errors=[store_unavailable(exc)], success=False)

    if content is None:
        return ContentOutput(errors=[not_found(inp.asset_id)], success=False)

    data, content_type = content
    return ContentOutput(data=data, content_type=content_type)


def run_list(
    inp: ListAssetsInput,
    *,
    uow: UnitOfWorkPort,
) -> AssetListOutput:
    """
    List active assets visible to the requester.

    Empty filter values are ignored. An unknown category matches nothing.
    Denied rows are dropped silently.
    """
    project_id, errors = parse_project_id(inp.project_id)
    if errors:
        return AssetListOutput(errors=errors, success=False)

    category = inp.category or None
    if category is not None and category not in ASSET_CATEGORIES:
        return AssetListOutput(items=[])

    try:
        with uow:
            assets = uow.assets.list_active(
                category=category,  # type: ignore[arg-type]
                project_id=project_id,
                title=inp.title or None,
            )
    except StoreUnavailableError as exc:
        return AssetListOutput(errors=[store_unavailable(exc)], success=False)

    return AssetListOutput(items=filter_listing(assets, inp.request))


def run_get_project(
    inp: GetProjectInput,
    *,
    uow: UnitOfWorkPort,
) -> ProjectOutput:
    """A project's assets under the listing policy; NotFound when none are visible."""
    try:
        with uow:
            assets = uow.assets.list_active(project_id=inp.project_id)
    except StoreUnavailableError as exc:
        return ProjectOutput(project_id=inp.project_id, errors=[store_unavailable(exc)], success=False)

    items = filter_listing(assets, inp.request)
    if not items:
        return ProjectOutput(
            project_id=inp.project_id,
            errors=[
                AssetError(
                    code=ErrorKind.NOT_FOUND,
                    message=f"Project {inp.project_id} not found",
                    field="project_id",
                )
            ],
            success=False,
        )

    return ProjectOutput(project_id=inp.project_id, title=f"Project {inp.project_id}", items=items)


def run(
    inp: (
        CreateAssetsInput
        | UpdateAssetInput
        | ReplaceContentInput
        | DeleteAssetInput
        | GetAssetInput
        | GetContentInput
        | ListAssetsInput
        | GetProjectInput
    ),
    *,
    uow: UnitOfWorkPort,
    rules: LifecycleRulesPort | None = None,
) -> (
    CreateAssetsOutput
    | AssetOutput
    | MutationOutput
    | ContentOutput
    | AssetListOutput
    | ProjectOutput
):
    """
    Main entry point for the assets component.

    Dispatches to the appropriate handler based on input type.
    """
    if isinstance(inp, CreateAssetsInput):
        return run_create(inp, uow=uow, rules=rules)

    elif isinstance(inp, UpdateAssetInput):
        return run_update(inp, uow=uow, rules=rules)

    elif isinstance(inp, ReplaceContentInput):
        return run_replace_content(inp, uow=uow, rules=rules)

    elif isinstance(inp, DeleteAssetInput):
        return run_delete(inp, uow=uow)

    elif isinstance(inp, GetAssetInput):
        return run_get(inp, uow=uow)

    elif isinstance(inp, GetContentInput):
        return run_get_content(inp, uow=uow)

    elif isinstance(inp, ListAssetsInput):
        return run_list(inp, uow=uow)

    elif isinstance(inp, GetProjectInput):
        return run_get_project(inp, uow=uow)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
