"""
Location router.

Locations are public reference data; only admins can change them.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from freight_api.src.dependencies import get_location_repository, require_admin
from freight_api.src.models.auth import CurrentUser
from freight_api.src.models.catalog import LocationCreate, LocationUpdate
from freight_api.src.models.common import ErrorResponse, serialize_document, serialize_documents
from freight_api.src.repositories.catalog_repo import LocationRepository

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/locations",
    tags=["Locations"],
    responses={404: {"model": ErrorResponse, "description": "Location not found"}}
)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")


@router.get("", summary="List Locations")
async def list_locations(repo: LocationRepository = Depends(get_location_repository)):
    locations = await repo.list_locations()
    return {"success": True, "locations": serialize_documents(locations)}


@router.get("/{location_id}", summary="Get Location")
async def get_location(
    location_id: str,
    repo: LocationRepository = Depends(get_location_repository)
):
    location = await repo.find_by_id(location_id)
    if location is None:
        raise _not_found()
    return {"success": True, "location": serialize_document(location)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Location")
async def create_location(
    location: LocationCreate,
    admin: CurrentUser = Depends(require_admin),
    repo: LocationRepository = Depends(get_location_repository)
):
    """
    Add a pickup or drop-off location.

    ``postalCode`` must be 2-10 letters, digits, spaces or hyphens and
    ``coordinates`` exactly ``[longitude, latitude]``.
    """
    created = await repo.create(location.to_document())
    logger.info("location_created", location_id=str(created["_id"]), name=created["name"], admin_id=admin.id)
    return {"success": True, "location": serialize_document(created)}


@router.put("/{location_id}", summary="Update Location")
async def update_location(
    location_id: str,
    update: LocationUpdate,
    admin: CurrentUser = Depends(require_admin),
    repo: LocationRepository = Depends(get_location_repository)
):
    location = await repo.update_by_id(location_id, update.to_document(partial=True))
    if location is None:
        raise _not_found()
    return {"success": True, "location": serialize_document(location)}


@router.delete("/{location_id}", summary="Delete Location")
async def delete_location(
    location_id: str,
    admin: CurrentUser = Depends(require_admin),
    repo: LocationRepository = Depends(get_location_repository)
):
    if await repo.delete_by_id(location_id) is None:
        raise _not_found()
    return {"success": True, "message": "Location deleted"}
