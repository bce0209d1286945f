"""
Shipment router.

Admins create shipments from quotes and manage them; customers see only
their own shipments.
"""

import structlog
from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, status

from freight_api.src.dependencies import (
    get_current_user,
    get_quote_repository,
    get_shipment_repository,
    require_admin,
)
from freight_api.src.models.auth import CurrentUser
from freight_api.src.models.common import ErrorResponse, serialize_document, serialize_documents
from freight_api.src.models.shipments import ShipmentCreate, ShipmentUpdate
from freight_api.src.repositories.base import DuplicateResourceError
from freight_api.src.repositories.quote_repo import QuoteRepository
from freight_api.src.repositories.shipment_repo import ShipmentRepository

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/shipments",
    tags=["Shipments"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        404: {"model": ErrorResponse, "description": "Not Found"},
    }
)

DUPLICATE_TRACKING_NUMBER = "A shipment with this tracking number already exists."


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shipment not found")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Shipment",
    description="""
    Create a shipment for an existing quote request.

    **Authentication:** Required (admin role)

    The shipment belongs to the customer who requested the quote.

    **Error Responses:**
    - 400: Missing required fields
    - 404: Quote request not found
    - 409: Tracking number already in use
    """,
    responses={409: {"model": ErrorResponse}}
)
async def create_shipment(
    shipment: ShipmentCreate,
    admin: CurrentUser = Depends(require_admin),
    shipment_repo: ShipmentRepository = Depends(get_shipment_repository),
    quote_repo: QuoteRepository = Depends(get_quote_repository)
):
    quote = await quote_repo.find_by_id(shipment.quote_request_id)

    if quote is None:
        logger.warning("shipment_quote_not_found", quote_id=shipment.quote_request_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote not found.")

    try:
        created = await shipment_repo.create_shipment({**shipment.to_document(), "user": quote["user"]})
    except DuplicateResourceError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_TRACKING_NUMBER)

    logger.info(
        "shipment_created",
        shipment_id=str(created["_id"]),
        tracking_number=created["trackingNumber"],
        user_id=str(quote["user"]),
        admin_id=admin.id
    )

    return {"success": True, "shipment": serialize_document(created)}


@router.get("", summary="List Shipments")
async def list_shipments(
    current_user: CurrentUser = Depends(get_current_user),
    shipment_repo: ShipmentRepository = Depends(get_shipment_repository)
):
    """All shipments for admins, the caller's own otherwise; latest first."""
    user_id = None if current_user.is_admin() else ObjectId(current_user.id)
    shipments = await shipment_repo.list_shipments(user_id=user_id)
    return {"success": True, "shipments": serialize_documents(shipments)}


@router.get(
    "/{tracking_number}",
    summary="Get Shipment by Tracking Number",
    responses={403: {"model": ErrorResponse}}
)
async def get_shipment(
    tracking_number: str,
    current_user: CurrentUser = Depends(get_current_user),
    shipment_repo: ShipmentRepository = Depends(get_shipment_repository)
):
    shipment = await shipment_repo.get_by_tracking_number(tracking_number)

    if shipment is None:
        raise _not_found()

    if not current_user.is_admin() and not current_user.owns(shipment):
        logger.warning(
            "shipment_access_denied",
            tracking_number=tracking_number,
            user_id=current_user.id
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied: Not your shipment."
        )

    return {"success": True, "shipment": serialize_document(shipment)}


@router.put("/{shipment_id}", summary="Update Shipment", responses={409: {"model": ErrorResponse}})
async def update_shipment(
    shipment_id: str,
    update: ShipmentUpdate,
    admin: CurrentUser = Depends(require_admin),
    shipment_repo: ShipmentRepository = Depends(get_shipment_repository)
):
    """Free-form update; any status may follow any other."""
    try:
        shipment = await shipment_repo.update_by_id(shipment_id, update.to_document(partial=True))
    except DuplicateResourceError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_TRACKING_NUMBER)

    if shipment is None:
        raise _not_found()

    logger.info(
        "shipment_updated",
        shipment_id=shipment_id,
        status=shipment.get("status"),
        admin_id=admin.id
    )
    return {"success": True, "shipment": serialize_document(shipment)}


@router.delete("/{shipment_id}", summary="Delete Shipment")
async def delete_shipment(
    shipment_id: str,
    admin: CurrentUser = Depends(require_admin),
    shipment_repo: ShipmentRepository = Depends(get_shipment_repository)
):
    if await shipment_repo.delete_by_id(shipment_id) is None:
        raise _not_found()
    logger.info("shipment_deleted", shipment_id=shipment_id, admin_id=admin.id)
    return {"success": True, "message": "Shipment deleted"}
