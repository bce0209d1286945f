"""Contact message repository."""

from typing import Any, Dict, List, Optional

from freight_api.src import database
from freight_api.src.models.contact import ContactStatus
from freight_api.src.repositories.base import MongoRepository


class ContactMessageRepository(MongoRepository):
    collection_name = database.CONTACT_MESSAGES

    async def create_message(self, document: Dict[str, Any]) -> Dict[str, Any]:
        return await self.create({**document, "status": ContactStatus.PENDING.value})

    async def list_messages(self, status: Optional[ContactStatus] = None) -> List[Dict[str, Any]]:
        query = {"status": status.value} if status else {}
        return await self.find(query, sort=[("createdAt", -1)])
