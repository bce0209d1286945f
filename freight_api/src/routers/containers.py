"""
Container type router.

The public listing feeds the quote form dropdown (active types only);
admins pass ``showAll=true`` to manage inactive types too.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from freight_api.src.dependencies import get_container_repository, require_admin
from freight_api.src.models.auth import CurrentUser
from freight_api.src.models.catalog import ContainerTypeCreate, ContainerTypeUpdate
from freight_api.src.models.common import ErrorResponse, serialize_document, serialize_documents
from freight_api.src.repositories.base import DuplicateResourceError
from freight_api.src.repositories.catalog_repo import ContainerTypeRepository

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/containers",
    tags=["Container Types"],
    responses={404: {"model": ErrorResponse, "description": "Container type not found"}}
)

ALREADY_EXISTS = "Container type already exists."


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Container type not found.")


@router.get("", summary="List Container Types")
async def list_container_types(
    show_all: bool = Query(False, alias="showAll", description="Include inactive types"),
    repo: ContainerTypeRepository = Depends(get_container_repository)
):
    types = await repo.list_by_name(show_all=show_all)
    return {"success": True, "types": serialize_documents(types)}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Container Type",
    responses={409: {"model": ErrorResponse, "description": ALREADY_EXISTS}}
)
async def create_container_type(
    container: ContainerTypeCreate,
    admin: CurrentUser = Depends(require_admin),
    repo: ContainerTypeRepository = Depends(get_container_repository)
):
    if await repo.name_exists(container.name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_EXISTS)

    try:
        created = await repo.create(container.to_document())
    except DuplicateResourceError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_EXISTS)

    logger.info("container_type_created", container_id=str(created["_id"]), name=created["name"])
    return {"success": True, "container": serialize_document(created)}


@router.put("/{container_id}", summary="Update Container Type")
async def update_container_type(
    container_id: str,
    update: ContainerTypeUpdate,
    admin: CurrentUser = Depends(require_admin),
    repo: ContainerTypeRepository = Depends(get_container_repository)
):
    try:
        container = await repo.update_by_id(container_id, update.to_document(partial=True))
    except DuplicateResourceError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_EXISTS)

    if container is None:
        raise _not_found()
    return {"success": True, "container": serialize_document(container)}


@router.delete("/{container_id}", summary="Delete Container Type")
async def delete_container_type(
    container_id: str,
    admin: CurrentUser = Depends(require_admin),
    repo: ContainerTypeRepository = Depends(get_container_repository)
):
    if await repo.delete_by_id(container_id) is None:
        raise _not_found()
    return {"success": True, "message": "Container type deleted."}
