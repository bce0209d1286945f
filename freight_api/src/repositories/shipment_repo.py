"""
Shipment and tracking event repositories.
"""

from typing import Any, Dict, List, Optional

from freight_api.src import database
from freight_api.src.repositories.base import MongoRepository, utcnow

LOCATION_FIELDS = ("pickupLocation", "dropOffLocation")


class ShipmentRepository(MongoRepository):
    collection_name = database.SHIPMENTS

    async def create_shipment(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a shipment with its lifecycle defaults.

        Raises:
            DuplicateResourceError: If the tracking number is taken
        """
        shipment = {
            "status": "pending",
            "paymentStatus": "pending",
            "shipmentDate": utcnow(),
            **document,
        }
        return await self.create(shipment)

    async def list_shipments(self, user_id: Optional[Any] = None) -> List[Dict[str, Any]]:
        """
        List shipments with their locations, latest shipment date first.

        Args:
            user_id: Only this customer's shipments (all when None)
        """
        query = {"user": user_id} if user_id is not None else {}
        shipments = await self.find(query, sort=[("shipmentDate", -1)])
        return await self._populate_locations(shipments)

    async def get_by_tracking_number(self, tracking_number: str) -> Optional[Dict[str, Any]]:
        shipment = await self.find_one({"trackingNumber": tracking_number})
        if shipment is None:
            return None
        populated = await self._populate_locations([shipment])
        return populated[0]

    async def _populate_locations(self, shipments: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        for field in LOCATION_FIELDS:
            await self.populate(shipments, field, database.LOCATIONS)
        return shipments


class TrackingEventRepository(MongoRepository):
    collection_name = database.TRACKING_EVENTS

    async def list_for_shipment(self, shipment_id: Any) -> List[Dict[str, Any]]:
        """Events of one shipment in chronological order."""
        return await self.find({"shipment": shipment_id}, sort=[("eventTime", 1)])
