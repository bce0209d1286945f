"""
API tests for quote requests, shipments and tracking events.

Tests cover:
- Quote submission, customer and admin listings, pricing
- Shipment creation from a quote (owner copied, duplicate tracking numbers)
- Shipment visibility and ownership checks
- Tracking history access and event recording
"""

import pytest
from bson import ObjectId

from freight_api.src.dependencies import (
    get_quote_repository,
    get_shipment_repository,
    get_tracking_repository,
)
from freight_api.src.repositories.base import DuplicateResourceError


PICKUP_ID = ObjectId("65b000000000000000000001")
DROP_ID = ObjectId("65b000000000000000000002")
GOODS_ID = ObjectId("65b000000000000000000003")
CONTAINER_ID = ObjectId("65b000000000000000000004")
QUOTE_ID = ObjectId("65b000000000000000000005")
SHIPMENT_ID = ObjectId("65b000000000000000000006")

QUOTE_REQUEST = {
    "pickupLocation": str(PICKUP_ID),
    "dropLocation": str(DROP_ID),
    "goodsType": str(GOODS_ID),
    "containerType": str(CONTAINER_ID),
    "dimensions": {"length": 120, "width": 80, "height": 100, "weight": 450},
    "paymentTerm": "Prepaid",
    "additionalNotes": "Fragile",
}

NEW_SHIPMENT = {
    "quoteRequestId": str(QUOTE_ID),
    "pickupLocation": str(PICKUP_ID),
    "dropOffLocation": str(DROP_ID),
    "trackingNumber": "TRK-1001",
    "goodsType": "Electronics",
    "containerType": "20ft Standard",
}


@pytest.fixture
def quote_repo(override_repo):
    return override_repo(get_quote_repository)


@pytest.fixture
def shipment_repo(override_repo):
    return override_repo(get_shipment_repository)


@pytest.fixture
def tracking_repo(override_repo):
    return override_repo(get_tracking_repository)


# ============================================================================
# QUOTES
# ============================================================================


class TestQuotes:
    """Tests for /api/quotes."""

    def test_create_quote(self, client, quote_repo, login_as, customer_user):
        login_as(customer_user)
        quote_repo.create_quote.side_effect = lambda user_id, doc: {
            "_id": QUOTE_ID, **doc, "user": user_id, "status": "Pending"
        }

        response = client.post("/api/quotes", json=QUOTE_REQUEST)

        assert response.status_code == 201
        quote = response.json()["quote"]
        assert quote["status"] == "Pending"
        assert quote["user"] == customer_user.id

        user_id, document = quote_repo.create_quote.call_args.args
        assert user_id == ObjectId(customer_user.id)
        assert document["pickupLocation"] == PICKUP_ID
        assert document["paymentTerm"] == "Prepaid"
        assert document["dimensions"]["weight"] == 450

    def test_create_quote_requires_login(self, client, quote_repo, login_as):
        login_as(None)

        response = client.post("/api/quotes", json=QUOTE_REQUEST)

        assert response.status_code == 401

    def test_create_quote_invalid_payment_term(self, client, quote_repo, login_as, customer_user):
        login_as(customer_user)

        response = client.post("/api/quotes", json={**QUOTE_REQUEST, "paymentTerm": "Barter"})

        assert response.status_code == 400
        quote_repo.create_quote.assert_not_called()

    def test_create_quote_invalid_reference(self, client, quote_repo, login_as, customer_user):
        login_as(customer_user)

        response = client.post("/api/quotes", json={**QUOTE_REQUEST, "goodsType": "electronics"})

        assert response.status_code == 400
        assert "not a valid id" in response.json()["message"]

    def test_my_quotes(self, client, quote_repo, login_as, customer_user):
        login_as(customer_user)
        quote_repo.list_quotes.return_value = []

        response = client.get("/api/quotes/my")

        assert response.json() == {"success": True, "quotes": []}
        quote_repo.list_quotes.assert_awaited_once_with(user_id=ObjectId(customer_user.id))

    def test_all_quotes_admin_only(self, client, quote_repo, login_as, customer_user):
        login_as(customer_user)

        response = client.get("/api/quotes")

        assert response.status_code == 403

    def test_all_quotes_include_customer(self, client, quote_repo, login_as, admin_user):
        login_as(admin_user)
        quote_repo.list_quotes.return_value = [{
            "_id": QUOTE_ID,
            "user": {"_id": ObjectId(), "name": "Jane", "email": "jane@shipper.example.com"},
            "status": "Pending",
        }]

        response = client.get("/api/quotes")

        assert response.status_code == 200
        assert response.json()["quotes"][0]["user"]["name"] == "Jane"
        quote_repo.list_quotes.assert_awaited_once_with(include_user=True)

    def test_price_quote(self, client, quote_repo, login_as, admin_user):
        login_as(admin_user)
        quote_repo.set_status.return_value = {"_id": QUOTE_ID, "status": "Quoted", "finalQuoteAmount": 1850.0}

        response = client.put(f"/api/quotes/{QUOTE_ID}", json={"status": "Quoted", "finalQuoteAmount": 1850})

        assert response.status_code == 200
        assert response.json()["quote"]["finalQuoteAmount"] == 1850.0
        quote_repo.set_status.assert_awaited_once_with(str(QUOTE_ID), "Quoted", 1850)

    def test_price_quote_invalid_status(self, client, quote_repo, login_as, admin_user):
        login_as(admin_user)

        response = client.put(f"/api/quotes/{QUOTE_ID}", json={"status": "Accepted"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid status provided."

    def test_price_missing_quote(self, client, quote_repo, login_as, admin_user):
        login_as(admin_user)
        quote_repo.set_status.return_value = None

        response = client.put("/api/quotes/nope", json={"status": "Rejected"})

        assert response.status_code == 404
        assert response.json()["message"] == "Quote not found."


# ============================================================================
# SHIPMENTS
# ============================================================================


class TestShipments:
    """Tests for /api/shipments."""

    def test_create_shipment_copies_quote_owner(self, client, quote_repo, shipment_repo, login_as, admin_user, customer_user):
        login_as(admin_user)
        owner = ObjectId(customer_user.id)
        quote_repo.find_by_id.return_value = {"_id": QUOTE_ID, "user": owner}
        shipment_repo.create_shipment.side_effect = lambda doc: {
            "_id": SHIPMENT_ID, "status": "pending", "paymentStatus": "pending", **doc
        }

        response = client.post("/api/shipments", json=NEW_SHIPMENT)

        assert response.status_code == 201
        shipment = response.json()["shipment"]
        assert shipment["user"] == customer_user.id
        assert shipment["trackingNumber"] == "TRK-1001"

        document = shipment_repo.create_shipment.call_args.args[0]
        assert document["user"] == owner
        assert document["quoteRequestId"] == QUOTE_ID

    def test_create_shipment_unknown_quote(self, client, quote_repo, shipment_repo, login_as, admin_user):
        login_as(admin_user)
        quote_repo.find_by_id.return_value = None

        response = client.post("/api/shipments", json=NEW_SHIPMENT)

        assert response.status_code == 404
        assert response.json()["message"] == "Quote not found."
        shipment_repo.create_shipment.assert_not_called()

    def test_create_shipment_duplicate_tracking_number(self, client, quote_repo, shipment_repo, login_as, admin_user):
        login_as(admin_user)
        quote_repo.find_by_id.return_value = {"_id": QUOTE_ID, "user": ObjectId()}
        shipment_repo.create_shipment.side_effect = DuplicateResourceError("trackingNumber")

        response = client.post("/api/shipments", json=NEW_SHIPMENT)

        assert response.status_code == 409
        assert response.json()["message"] == "A shipment with this tracking number already exists."

    def test_create_shipment_missing_fields(self, client, quote_repo, shipment_repo, login_as, admin_user):
        login_as(admin_user)

        response = client.post("/api/shipments", json={"quoteRequestId": str(QUOTE_ID)})

        assert response.status_code == 400
        assert "trackingNumber" in response.json()["message"]

    def test_customer_lists_own_shipments(self, client, shipment_repo, login_as, customer_user):
        login_as(customer_user)
        shipment_repo.list_shipments.return_value = []

        client.get("/api/shipments")

        shipment_repo.list_shipments.assert_awaited_once_with(user_id=ObjectId(customer_user.id))

    def test_admin_lists_all_shipments(self, client, shipment_repo, login_as, admin_user):
        login_as(admin_user)
        shipment_repo.list_shipments.return_value = []

        client.get("/api/shipments")

        shipment_repo.list_shipments.assert_awaited_once_with(user_id=None)

    def test_get_own_shipment_by_tracking_number(self, client, shipment_repo, login_as, customer_user):
        login_as(customer_user)
        shipment_repo.get_by_tracking_number.return_value = {
            "_id": SHIPMENT_ID, "trackingNumber": "TRK-1001", "user": ObjectId(customer_user.id)
        }

        response = client.get("/api/shipments/TRK-1001")

        assert response.status_code == 200
        assert response.json()["shipment"]["_id"] == str(SHIPMENT_ID)

    def test_get_someone_elses_shipment(self, client, shipment_repo, login_as, customer_user, other_customer):
        login_as(customer_user)
        shipment_repo.get_by_tracking_number.return_value = {
            "_id": SHIPMENT_ID, "trackingNumber": "TRK-1001", "user": ObjectId(other_customer.id)
        }

        response = client.get("/api/shipments/TRK-1001")

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied: Not your shipment."

    def test_get_unknown_tracking_number(self, client, shipment_repo, login_as, customer_user):
        login_as(customer_user)
        shipment_repo.get_by_tracking_number.return_value = None

        response = client.get("/api/shipments/NOPE")

        assert response.status_code == 404
        assert response.json()["message"] == "Shipment not found"

    def test_update_shipment_status(self, client, shipment_repo, login_as, admin_user):
        login_as(admin_user)
        shipment_repo.update_by_id.return_value = {"_id": SHIPMENT_ID, "status": "delivered"}

        response = client.put(f"/api/shipments/{SHIPMENT_ID}", json={"status": "delivered"})

        assert response.status_code == 200
        shipment_repo.update_by_id.assert_awaited_once_with(str(SHIPMENT_ID), {"status": "delivered"})

    def test_update_shipment_invalid_status(self, client, shipment_repo, login_as, admin_user):
        login_as(admin_user)

        response = client.put(f"/api/shipments/{SHIPMENT_ID}", json={"status": "lost"})

        assert response.status_code == 400

    def test_delete_shipment(self, client, shipment_repo, login_as, admin_user):
        login_as(admin_user)
        shipment_repo.delete_by_id.return_value = {"_id": SHIPMENT_ID}

        response = client.delete(f"/api/shipments/{SHIPMENT_ID}")

        assert response.json() == {"success": True, "message": "Shipment deleted"}


# ============================================================================
# TRACKING
# ============================================================================


class TestTracking:
    """Tests for /api/tracking."""

    EVENT = {
        "shipment": str(SHIPMENT_ID),
        "event": "Departed origin port",
        "location": "Jebel Ali",
        "status": "in transit",
        "eventTime": "2024-07-20T08:00:00Z",
    }

    def test_owner_reads_history(self, client, shipment_repo, tracking_repo, login_as, customer_user):
        login_as(customer_user)
        shipment_repo.find_by_id.return_value = {"_id": SHIPMENT_ID, "user": ObjectId(customer_user.id)}
        tracking_repo.list_for_shipment.return_value = [{"_id": ObjectId(), "event": "Picked up"}]

        response = client.get(f"/api/tracking/{SHIPMENT_ID}")

        assert response.status_code == 200
        assert response.json()["events"][0]["event"] == "Picked up"
        tracking_repo.list_for_shipment.assert_awaited_once_with(SHIPMENT_ID)

    def test_other_customer_denied(self, client, shipment_repo, tracking_repo, login_as, customer_user, other_customer):
        login_as(customer_user)
        shipment_repo.find_by_id.return_value = {"_id": SHIPMENT_ID, "user": ObjectId(other_customer.id)}

        response = client.get(f"/api/tracking/{SHIPMENT_ID}")

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied: You can only track your own shipments."

    def test_unknown_shipment(self, client, shipment_repo, tracking_repo, login_as, admin_user):
        login_as(admin_user)
        shipment_repo.find_by_id.return_value = None

        response = client.get("/api/tracking/garbage")

        assert response.status_code == 404

    def test_admin_records_event(self, client, shipment_repo, tracking_repo, login_as, admin_user):
        login_as(admin_user)
        shipment_repo.find_by_id.return_value = {"_id": SHIPMENT_ID}
        tracking_repo.create.side_effect = lambda doc: {"_id": ObjectId(), **doc}

        response = client.post("/api/tracking", json=self.EVENT)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Tracking event created successfully"
        assert body["trackingEvent"]["user"] == admin_user.id
        document = tracking_repo.create.call_args.args[0]
        assert document["shipment"] == SHIPMENT_ID
        assert document["status"] == "in transit"

    def test_record_event_invalid_status(self, client, shipment_repo, tracking_repo, login_as, admin_user):
        login_as(admin_user)

        response = client.post("/api/tracking", json={**self.EVENT, "status": "teleported"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid status: teleported"

    def test_record_event_for_missing_shipment(self, client, shipment_repo, tracking_repo, login_as, admin_user):
        login_as(admin_user)
        shipment_repo.find_by_id.return_value = None

        response = client.post("/api/tracking", json=self.EVENT)

        assert response.status_code == 404
        tracking_repo.create.assert_not_called()

    def test_customer_cannot_record_event(self, client, shipment_repo, tracking_repo, login_as, customer_user):
        login_as(customer_user)

        response = client.post("/api/tracking", json=self.EVENT)

        assert response.status_code == 403

    def test_delete_missing_event(self, client, tracking_repo, login_as, admin_user):
        login_as(admin_user)
        tracking_repo.delete_by_id.return_value = None

        response = client.delete(f"/api/tracking/{ObjectId()}")

        assert response.status_code == 404
        assert response.json()["message"] == "Event not found"
