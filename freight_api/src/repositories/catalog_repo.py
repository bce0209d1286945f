"""
Repositories for the reference catalogs.

Locations, container types, goods types and services are plain
collections; the catalogs with an availability flag can be listed either
active-only (public dropdowns) or in full (back-office).
"""

from typing import Any, Dict, List

from freight_api.src import database
from freight_api.src.models.common import ActiveStatus
from freight_api.src.repositories.base import MongoRepository

NEWEST_FIRST = [("createdAt", -1)]
BY_NAME = [("name", 1)]


class LocationRepository(MongoRepository):
    collection_name = database.LOCATIONS

    async def list_locations(self) -> List[Dict[str, Any]]:
        return await self.find(sort=NEWEST_FIRST)


class StatusCatalogRepository(MongoRepository):
    """Catalog whose documents carry an ``active``/``inactive`` status."""

    async def list_by_name(self, show_all: bool = False) -> List[Dict[str, Any]]:
        """
        List catalog entries sorted by name.

        Args:
            show_all: Include inactive entries
        """
        query = {} if show_all else {"status": ActiveStatus.ACTIVE.value}
        return await self.find(query, sort=BY_NAME)

    async def name_exists(self, name: str) -> bool:
        return await self.find_one({"name": name}) is not None


class ContainerTypeRepository(StatusCatalogRepository):
    collection_name = database.CONTAINER_TYPES


class GoodsTypeRepository(StatusCatalogRepository):
    collection_name = database.GOODS_TYPES


class ServiceRepository(StatusCatalogRepository):
    collection_name = database.SERVICES
