"""
Base repository for MongoDB collections.

Provides async CRUD operations shared by every collection: timestamps on
insert/update, id parsing, duplicate-key translation and a small
``populate`` helper that replaces reference ids with the referenced
documents.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from freight_api.src.models.common import parse_object_id

logger = structlog.get_logger(__name__)

Document = Dict[str, Any]
SortSpec = Sequence[Tuple[str, int]]


class DuplicateResourceError(ValueError):
    """Raised when a write violates a unique index."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MongoRepository:
    """Repository for a single MongoDB collection."""

    collection_name: str = ""

    def __init__(self, db: AsyncDatabase):
        """
        Initialize repository.

        Args:
            db: Application database
        """
        self.db = db
        self.collection = db[self.collection_name]

    async def create(self, document: Document) -> Document:
        """
        Insert a document.

        Args:
            document: Document with camelCase keys

        Returns:
            Inserted document including ``_id`` and timestamps

        Raises:
            DuplicateResourceError: If a unique index is violated
        """
        now = utcnow()
        document = {**document, "createdAt": now, "updatedAt": now}
        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError as e:
            logger.warning(
                "document_duplicate",
                collection=self.collection_name,
                key=_duplicate_key(e)
            )
            raise DuplicateResourceError(_duplicate_key(e)) from e

        document["_id"] = result.inserted_id
        logger.debug(
            "document_created",
            collection=self.collection_name,
            id=str(result.inserted_id)
        )
        return document

    async def find_by_id(self, document_id: Any) -> Optional[Document]:
        """
        Get a document by id.

        Returns:
            Document or None when missing or when the id is not a valid ObjectId
        """
        oid = parse_object_id(document_id)
        if oid is None:
            logger.debug("document_invalid_id", collection=self.collection_name, id=str(document_id))
            return None
        return await self.collection.find_one({"_id": oid})

    async def find_one(self, query: Document) -> Optional[Document]:
        return await self.collection.find_one(query)

    async def find(
        self,
        query: Optional[Document] = None,
        sort: Optional[SortSpec] = None
    ) -> List[Document]:
        """
        List documents.

        Args:
            query: Filter (all documents when omitted)
            sort: Sort specification, e.g. ``[("createdAt", -1)]``

        Returns:
            Matching documents
        """
        cursor = self.collection.find(query or {})
        if sort:
            cursor = cursor.sort(list(sort))
        return await cursor.to_list(length=None)

    async def update_by_id(self, document_id: Any, changes: Document) -> Optional[Document]:
        """
        Apply a partial update.

        Args:
            document_id: Document id
            changes: Fields to set (camelCase keys)

        Returns:
            Updated document, or None if it does not exist

        Raises:
            DuplicateResourceError: If a unique index is violated
        """
        oid = parse_object_id(document_id)
        if oid is None:
            return None
        try:
            updated = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": {**changes, "updatedAt": utcnow()}},
                return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError as e:
            logger.warning(
                "document_duplicate",
                collection=self.collection_name,
                key=_duplicate_key(e)
            )
            raise DuplicateResourceError(_duplicate_key(e)) from e

        if updated is not None:
            logger.debug(
                "document_updated",
                collection=self.collection_name,
                id=str(oid),
                fields=sorted(changes)
            )
        return updated

    async def delete_by_id(self, document_id: Any) -> Optional[Document]:
        """
        Delete a document.

        Returns:
            The deleted document, or None if it did not exist
        """
        oid = parse_object_id(document_id)
        if oid is None:
            return None
        deleted = await self.collection.find_one_and_delete({"_id": oid})
        if deleted is not None:
            logger.info("document_deleted", collection=self.collection_name, id=str(oid))
        return deleted

    async def populate(
        self,
        documents: List[Document],
        field: str,
        collection_name: str,
        projection: Optional[Document] = None
    ) -> List[Document]:
        """
        Replace reference ids in ``field`` with the referenced documents.

        References to documents that no longer exist become None.

        Args:
            documents: Documents to populate (modified in place)
            field: Reference field name
            collection_name: Collection the references point to
            projection: Optional projection for the referenced documents

        Returns:
            The same documents
        """
        ids = {doc[field] for doc in documents if doc.get(field) is not None}
        if not ids:
            return documents

        cursor = self.db[collection_name].find({"_id": {"$in": list(ids)}}, projection)
        referenced = {ref["_id"]: ref for ref in await cursor.to_list(length=None)}

        for doc in documents:
            if field in doc:
                doc[field] = referenced.get(doc[field])
        return documents


def _duplicate_key(error: DuplicateKeyError) -> str:
    details = error.details or {}
    key_value = details.get("keyValue") or {}
    return ", ".join(key_value) or "unique key"
