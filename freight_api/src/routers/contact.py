"""
Contact message router.

Anyone can submit the contact form; the support inbox is admin-only.
"""

import structlog
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from freight_api.src.dependencies import get_client_ip, get_contact_repository, require_admin
from freight_api.src.models.auth import CurrentUser
from freight_api.src.models.common import ErrorResponse, serialize_document, serialize_documents
from freight_api.src.models.contact import ContactMessageCreate, ContactStatus, ContactStatusUpdate
from freight_api.src.repositories.contact_repo import ContactMessageRepository

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/contact",
    tags=["Contact"],
    responses={404: {"model": ErrorResponse, "description": "Message not found"}}
)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found.")


@router.post("", status_code=status.HTTP_201_CREATED, summary="Send Contact Message")
async def create_contact_message(
    contact_message: ContactMessageCreate,
    repo: ContactMessageRepository = Depends(get_contact_repository),
    client_ip: str = Depends(get_client_ip)
):
    """Public contact form. All fields are required; the message needs 10+ characters."""
    created = await repo.create_message(contact_message.to_document())

    logger.info(
        "contact_message_received",
        message_id=str(created["_id"]),
        subject=created["subject"],
        ip_address=client_ip
    )

    return {
        "success": True,
        "message": "Message sent successfully.",
        "data": serialize_document(created)
    }


@router.get("", summary="List Contact Messages")
async def list_contact_messages(
    status_filter: Optional[ContactStatus] = Query(None, alias="status"),
    admin: CurrentUser = Depends(require_admin),
    repo: ContactMessageRepository = Depends(get_contact_repository)
):
    """Support inbox, newest first; optionally filtered by status."""
    messages = await repo.list_messages(status=status_filter)
    return {"success": True, "messages": serialize_documents(messages)}


@router.get("/{message_id}", summary="Get Contact Message")
async def get_contact_message(
    message_id: str,
    admin: CurrentUser = Depends(require_admin),
    repo: ContactMessageRepository = Depends(get_contact_repository)
):
    message = await repo.find_by_id(message_id)
    if message is None:
        raise _not_found()
    return {"success": True, "message": serialize_document(message)}


@router.put("/{message_id}/status", summary="Update Message Status")
async def update_contact_message_status(
    message_id: str,
    update: ContactStatusUpdate,
    admin: CurrentUser = Depends(require_admin),
    repo: ContactMessageRepository = Depends(get_contact_repository)
):
    message = await repo.update_by_id(message_id, {"status": update.status.value})
    if message is None:
        raise _not_found()

    logger.info("contact_message_status_updated", message_id=message_id, status=update.status.value)
    return {"success": True, "message": serialize_document(message)}


@router.delete("/{message_id}", summary="Delete Contact Message")
async def delete_contact_message(
    message_id: str,
    admin: CurrentUser = Depends(require_admin),
    repo: ContactMessageRepository = Depends(get_contact_repository)
):
    if await repo.delete_by_id(message_id) is None:
        raise _not_found()
    return {"success": True, "message": "Contact message deleted."}
