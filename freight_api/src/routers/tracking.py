"""
Tracking event router.

Admins record checkpoints against a shipment; the shipment's owner and
admins can read the history.
"""

import structlog
from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, status

from freight_api.src.dependencies import (
    get_current_user,
    get_shipment_repository,
    get_tracking_repository,
    require_admin,
)
from freight_api.src.models.auth import CurrentUser
from freight_api.src.models.common import ErrorResponse, serialize_document, serialize_documents
from freight_api.src.models.shipments import TrackingEventCreate
from freight_api.src.repositories.shipment_repo import ShipmentRepository, TrackingEventRepository

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/tracking",
    tags=["Tracking"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        404: {"model": ErrorResponse, "description": "Not Found"},
    }
)


@router.get("/{shipment_id}", summary="Tracking History", responses={403: {"model": ErrorResponse}})
async def list_tracking_events(
    shipment_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    shipment_repo: ShipmentRepository = Depends(get_shipment_repository),
    tracking_repo: TrackingEventRepository = Depends(get_tracking_repository)
):
    """Events of one shipment, oldest first."""
    shipment = await shipment_repo.find_by_id(shipment_id)

    if shipment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shipment not found")

    if not current_user.is_admin() and not current_user.owns(shipment):
        logger.warning("tracking_access_denied", shipment_id=shipment_id, user_id=current_user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied: You can only track your own shipments."
        )

    events = await tracking_repo.list_for_shipment(shipment["_id"])
    return {"success": True, "events": serialize_documents(events)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Add Tracking Event")
async def create_tracking_event(
    event: TrackingEventCreate,
    admin: CurrentUser = Depends(require_admin),
    shipment_repo: ShipmentRepository = Depends(get_shipment_repository),
    tracking_repo: TrackingEventRepository = Depends(get_tracking_repository)
):
    """
    Record a checkpoint.

    ``status`` must be one of: pending, picked up, in transit, custom
    clearance, arrived at destination, out for delivery, delivered.
    The creating admin is stored as the event's ``user``.
    """
    if await shipment_repo.find_by_id(event.shipment) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shipment not found")

    created = await tracking_repo.create({**event.to_document(), "user": ObjectId(admin.id)})

    logger.info(
        "tracking_event_created",
        event_id=str(created["_id"]),
        shipment_id=event.shipment,
        status=created["status"]
    )

    return {
        "success": True,
        "message": "Tracking event created successfully",
        "trackingEvent": serialize_document(created)
    }


@router.delete("/{event_id}", summary="Delete Tracking Event")
async def delete_tracking_event(
    event_id: str,
    admin: CurrentUser = Depends(require_admin),
    tracking_repo: TrackingEventRepository = Depends(get_tracking_repository)
):
    if await tracking_repo.delete_by_id(event_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return {"success": True, "message": "Tracking event deleted."}
