"""
Quote request router.

Customers submit quote requests and list their own; admins list every
request and price them.
"""

import structlog
from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, status

from freight_api.src.dependencies import get_current_user, get_quote_repository, require_admin
from freight_api.src.models.auth import CurrentUser
from freight_api.src.models.common import ErrorResponse, serialize_document, serialize_documents
from freight_api.src.models.quotes import QuoteRequestCreate, QuoteStatusUpdate
from freight_api.src.repositories.quote_repo import QuoteRepository

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/quotes",
    tags=["Quotes"],
    responses={
        400: {"model": ErrorResponse, "description": "Validation Error"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
    }
)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Request Quote")
async def create_quote(
    quote_request: QuoteRequestCreate,
    current_user: CurrentUser = Depends(get_current_user),
    quote_repo: QuoteRepository = Depends(get_quote_repository)
):
    """Submit a quote request owned by the caller."""
    quote = await quote_repo.create_quote(ObjectId(current_user.id), quote_request.to_document())

    logger.info(
        "quote_requested",
        quote_id=str(quote["_id"]),
        user_id=current_user.id,
        payment_term=quote["paymentTerm"]
    )

    return {"success": True, "quote": serialize_document(quote)}


@router.get("/my", summary="My Quotes")
async def list_my_quotes(
    current_user: CurrentUser = Depends(get_current_user),
    quote_repo: QuoteRepository = Depends(get_quote_repository)
):
    """The caller's quote requests, newest first, with references populated."""
    quotes = await quote_repo.list_quotes(user_id=ObjectId(current_user.id))
    return {"success": True, "quotes": serialize_documents(quotes)}


@router.get("", summary="All Quotes", responses={403: {"model": ErrorResponse}})
async def list_quotes(
    admin: CurrentUser = Depends(require_admin),
    quote_repo: QuoteRepository = Depends(get_quote_repository)
):
    """Every quote request with its customer and references populated."""
    quotes = await quote_repo.list_quotes(include_user=True)
    return {"success": True, "quotes": serialize_documents(quotes)}


@router.put(
    "/{quote_id}",
    summary="Price Quote",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def update_quote_status(
    quote_id: str,
    update: QuoteStatusUpdate,
    admin: CurrentUser = Depends(require_admin),
    quote_repo: QuoteRepository = Depends(get_quote_repository)
):
    """
    Set a quote's status and final amount.

    An omitted ``finalQuoteAmount`` keeps the stored amount.
    """
    quote = await quote_repo.set_status(quote_id, update.status.value, update.final_quote_amount)

    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote not found.")

    return {"success": True, "quote": serialize_document(quote)}
