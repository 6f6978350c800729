"""
Images API routes.

Provides endpoints for upload, metadata, content retrieval and the
access-token lifecycle of secret images.
"""

from typing import Any

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response

from src.api.deps import (
    MediaRulesAdapter,
    get_access_request,
    get_media_rules,
    get_rules,
    get_unit_of_work,
)
from src.api.errors import raise_for_errors, validation_error
from src.api.schemas import (
    ImageFileResponse,
    ImageUpdateRequest,
    ImageUpdateResponse,
    MessageResponse,
    TokenResponse,
    UploadResponse,
    serialize_image,
)
from src.components.access.models import AccessRequest
from src.components.assets.component import (
    run_create,
    run_delete,
    run_get,
    run_get_content,
    run_list,
    run_replace_content,
    run_update,
)
from src.components.assets.models import (
    CreateAssetsInput,
    DeleteAssetInput,
    GetAssetInput,
    GetContentInput,
    ListAssetsInput,
    ReplaceContentInput,
    UpdateAssetInput,
)
from src.components.tokens.component import run_revoke, run_rotate
from src.components.tokens.models import RevokeAccessInput, RotateTokenInput
from src.components.uploads.models import UploadedFile
from src.core.ports.db import UnitOfWorkPort
from src.rules.models import Rules

router = APIRouter()


def _to_uploaded(file: UploadFile, max_bytes: int, field: str) -> UploadedFile:
    # Size reported by the multipart parser; reject before buffering the part
    if file.size is not None and file.size > max_bytes:
        validation_error(
            f'File "{file.filename}" is {file.size} bytes, exceeding the {max_bytes} byte limit',
            field,
        )
    data = file.file.read()
    return UploadedFile(
        data=data,
        filename=file.filename or "",
        content_type=file.content_type or "",
        size=file.size,
    )


@router.get("")
def list_images(
    category: str | None = None,
    project_id: str | None = None,
    title: str | None = None,
    requester: AccessRequest = Depends(get_access_request),
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
) -> list[dict[str, Any]]:
    """List images visible to the requester; denied rows are left out."""
    inp = ListAssetsInput(category=category, project_id=project_id, title=title, request=requester)
    result = run_list(inp, uow=uow)

    if not result.success:
        raise_for_errors(result.errors)

    return [serialize_image(v) for v in result.items]


@router.post("", status_code=status.HTTP_201_CREATED)
def upload_images(
    images: list[UploadFile] | None = File(None),
    title: str | None = Form(None),
    description: str | None = Form(None),
    category: str | None = Form(None),
    project_id: str | None = Form(None),
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
    rules: Rules = Depends(get_rules),
    media_rules: MediaRulesAdapter = Depends(get_media_rules),
) -> dict[str, Any]:
    """Upload up to five files as one batch sharing title, category and project."""
    parts = images or []
    if len(parts) > rules.uploads.max_transport_parts:
        validation_error(
            f"Too many files in request: {len(parts)} (limit {rules.uploads.max_transport_parts})",
            "images",
        )

    inp = CreateAssetsInput(
        files=[
            _to_uploaded(f, rules.uploads.max_upload_bytes, f"images[{i}]")
            for i, f in enumerate(parts)
        ],
        title=title,
        description=description,
        category=category,
        project_id=project_id,
    )
    result = run_create(inp, uow=uow, rules=media_rules)

    if not result.success:
        raise_for_errors(result.errors)

    return UploadResponse(
        message=f"{len(result.items)} image(s) uploaded successfully",
        images=[serialize_image(v) for v in result.items],
    ).model_dump()


@router.get("/{image_id}")
def get_image(
    image_id: int,
    requester: AccessRequest = Depends(get_access_request),
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
) -> dict[str, Any]:
    """Get image metadata."""
    result = run_get(GetAssetInput(asset_id=image_id, request=requester), uow=uow)

    if not result.success or result.asset is None:
        raise_for_errors(result.errors)

    return serialize_image(result.asset)


@router.get("/{image_id}/data")
def get_image_data(
    image_id: int,
    requester: AccessRequest = Depends(get_access_request),
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
) -> Response:
    """Get raw image bytes with the stored content type."""
    result = run_get_content(GetContentInput(asset_id=image_id, request=requester), uow=uow)

    if not result.success or result.data is None:
        raise_for_errors(result.errors)

    return Response(content=result.data, media_type=result.content_type)


@router.put("/{image_id}")
def update_image(
    image_id: int,
    request: ImageUpdateRequest,
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
    media_rules: MediaRulesAdapter = Depends(get_media_rules),
) -> dict[str, Any]:
    """Replace image metadata; category changes drive the access token."""
    inp = UpdateAssetInput(
        asset_id=image_id,
        title=request.title,
        description=request.description,
        category=request.category,
        project_id=request.project_id,
    )
    result = run_update(inp, uow=uow, rules=media_rules)

    if not result.success or result.asset is None:
        raise_for_errors(result.errors)

    return ImageUpdateResponse(
        message="Image updated successfully",
        image=serialize_image(result.asset),
    ).model_dump()


@router.put("/{image_id}/file")
def replace_image_file(
    image_id: int,
    image: UploadFile | None = File(None),
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
    rules: Rules = Depends(get_rules),
    media_rules: MediaRulesAdapter = Depends(get_media_rules),
) -> dict[str, Any]:
    """Overwrite the stored bytes and content type; metadata is untouched."""
    if image is None:
        validation_error("Please upload an image file", "image")

    uploaded = _to_uploaded(image, rules.uploads.max_upload_bytes, "image")
    inp = ReplaceContentInput(asset_id=image_id, file=uploaded)
    result = run_replace_content(inp, uow=uow, rules=media_rules)

    if not result.success:
        raise_for_errors(result.errors)

    return ImageFileResponse(message="Image file updated successfully", image_id=image_id).model_dump()


@router.delete("/{image_id}")
def delete_image(
    image_id: int,
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
) -> dict[str, Any]:
    """Soft delete."""
    result = run_delete(DeleteAssetInput(asset_id=image_id), uow=uow)

    if not result.success:
        raise_for_errors(result.errors)

    return MessageResponse(message="Image deleted successfully").model_dump()


@router.post("/{image_id}/regenerate-token")
def regenerate_token(
    image_id: int,
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
    media_rules: MediaRulesAdapter = Depends(get_media_rules),
) -> dict[str, Any]:
    """Rotate the token shared by the image's project."""
    result = run_rotate(RotateTokenInput(asset_id=image_id), uow=uow, rules=media_rules)

    if not result.success or result.access_token is None:
        raise_for_errors(result.errors)

    return TokenResponse(
        message="Access token regenerated successfully for all project images",
        access_token=result.access_token,
    ).model_dump()


@router.post("/{image_id}/revoke-access")
def revoke_access(
    image_id: int,
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
) -> dict[str, Any]:
    """Clear the image's token; it stays listed for admins without content access."""
    result = run_revoke(RevokeAccessInput(asset_id=image_id), uow=uow)

    if not result.success:
        raise_for_errors(result.errors)

    return MessageResponse(message="Access revoked successfully").model_dump()
