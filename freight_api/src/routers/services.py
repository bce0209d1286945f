"""
Service catalog router.

Services are the offerings shown on the marketing site. Updates follow
"blank keeps current" semantics so the back-office can submit partial
forms.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from freight_api.src.dependencies import get_service_repository, require_admin
from freight_api.src.models.auth import CurrentUser
from freight_api.src.models.catalog import ServiceCreate, ServiceUpdate
from freight_api.src.models.common import ErrorResponse, serialize_document, serialize_documents
from freight_api.src.repositories.base import DuplicateResourceError
from freight_api.src.repositories.catalog_repo import ServiceRepository

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/services",
    tags=["Services"],
    responses={404: {"model": ErrorResponse, "description": "Service not found"}}
)

ALREADY_EXISTS = "Service already exists."


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found.")


@router.get("", summary="List Services")
async def list_services(
    show_all: bool = Query(False, alias="showAll", description="Include inactive services"),
    repo: ServiceRepository = Depends(get_service_repository)
):
    services = await repo.list_by_name(show_all=show_all)

    if services:
        message = "Services retrieved successfully." if show_all else "Active services retrieved successfully."
    else:
        message = "No services found." if show_all else "No active services found."

    return {"success": True, "services": serialize_documents(services), "message": message}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Service",
    responses={409: {"model": ErrorResponse, "description": ALREADY_EXISTS}}
)
async def create_service(
    service: ServiceCreate,
    admin: CurrentUser = Depends(require_admin),
    repo: ServiceRepository = Depends(get_service_repository)
):
    try:
        created = await repo.create(service.to_document())
    except DuplicateResourceError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_EXISTS)

    logger.info("service_created", service_id=str(created["_id"]), name=created["name"])
    return {
        "success": True,
        "service": serialize_document(created),
        "message": "Service created successfully."
    }


@router.put("/{service_id}", summary="Update Service")
async def update_service(
    service_id: str,
    update: ServiceUpdate,
    admin: CurrentUser = Depends(require_admin),
    repo: ServiceRepository = Depends(get_service_repository)
):
    """Blank or omitted name, description and status keep their current values."""
    try:
        service = await repo.update_by_id(service_id, update.to_document(partial=True))
    except DuplicateResourceError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_EXISTS)

    if service is None:
        raise _not_found()

    return {
        "success": True,
        "service": serialize_document(service),
        "message": "Service updated successfully."
    }


@router.delete("/{service_id}", summary="Delete Service")
async def delete_service(
    service_id: str,
    admin: CurrentUser = Depends(require_admin),
    repo: ServiceRepository = Depends(get_service_repository)
):
    if await repo.delete_by_id(service_id) is None:
        raise _not_found()
    return {"success": True, "message": "Service deleted successfully."}
