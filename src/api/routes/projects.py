"""
Projects API routes.

A project is the group of active images sharing a project_id; it has no
record of its own.
"""

from typing import Any

from fastapi import APIRouter, Depends

from src.api.deps import get_access_request, get_unit_of_work
from src.api.errors import raise_for_errors
from src.api.schemas import ProjectResponse, serialize_image
from src.components.access.models import AccessRequest
from src.components.assets.component import run_get_project
from src.components.assets.models import GetProjectInput
from src.core.ports.db import UnitOfWorkPort

router = APIRouter()


@router.get("/{project_id}")
def get_project(
    project_id: int,
    requester: AccessRequest = Depends(get_access_request),
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
) -> dict[str, Any]:
    """Images of a project visible to the requester."""
    result = run_get_project(GetProjectInput(project_id=project_id, request=requester), uow=uow)

    if not result.success:
        raise_for_errors(result.errors)

    return ProjectResponse(
        project_id=project_id,
        title=result.title,
        images=[serialize_image(v) for v in result.items],
        total_images=result.total,
    ).model_dump(by_alias=True)
