"""
Quote request repository.

Listings come back with their references (locations, goods type,
container type and, for the admin view, the customer) populated.
"""

from typing import Any, Dict, List, Optional

import structlog

from freight_api.src import database
from freight_api.src.models.quotes import QuoteStatus
from freight_api.src.repositories.base import MongoRepository

logger = structlog.get_logger(__name__)

# reference field -> referenced collection
QUOTE_REFERENCES = (
    ("pickupLocation", database.LOCATIONS),
    ("dropLocation", database.LOCATIONS),
    ("goodsType", database.GOODS_TYPES),
    ("containerType", database.CONTAINER_TYPES),
)


class QuoteRepository(MongoRepository):
    collection_name = database.QUOTE_REQUESTS

    async def create_quote(self, user_id: Any, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new quote request owned by ``user_id`` in the Pending state."""
        return await self.create({**document, "user": user_id, "status": QuoteStatus.PENDING.value})

    async def list_quotes(self, user_id: Optional[Any] = None, include_user: bool = False) -> List[Dict[str, Any]]:
        """
        List quote requests, newest first.

        Args:
            user_id: Only this customer's quotes (all quotes when None)
            include_user: Populate the owning user (without password)

        Returns:
            Populated quote documents
        """
        query = {"user": user_id} if user_id is not None else {}
        quotes = await self.find(query, sort=[("createdAt", -1)])

        for field, collection in QUOTE_REFERENCES:
            await self.populate(quotes, field, collection)
        if include_user:
            await self.populate(quotes, "user", database.USERS, {"password": 0})
        return quotes

    async def set_status(
        self,
        quote_id: Any,
        status: str,
        final_quote_amount: Optional[float] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Set a quote's status and, when given, its final price.

        An omitted amount leaves the stored amount untouched.
        """
        changes: Dict[str, Any] = {"status": status}
        if final_quote_amount is not None:
            changes["finalQuoteAmount"] = final_quote_amount

        quote = await self.update_by_id(quote_id, changes)
        if quote is not None:
            logger.info(
                "quote_status_updated",
                quote_id=str(quote["_id"]),
                status=status,
                final_quote_amount=quote.get("finalQuoteAmount")
            )
        return quote
