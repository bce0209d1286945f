"""
Unit tests for the MongoDB repositories.

The collections are mocked; these tests check the queries, sort orders
and document shapes the repositories hand to pymongo.
"""

from collections import defaultdict
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from freight_api.src import database
from freight_api.src.models.auth import Role
from freight_api.src.models.contact import ContactStatus
from freight_api.src.repositories.base import DuplicateResourceError, MongoRepository
from freight_api.src.repositories.catalog_repo import ContainerTypeRepository, LocationRepository
from freight_api.src.repositories.contact_repo import ContactMessageRepository
from freight_api.src.repositories.quote_repo import QuoteRepository
from freight_api.src.repositories.shipment_repo import ShipmentRepository, TrackingEventRepository
from freight_api.src.repositories.user_repo import UserRepository


def make_cursor(documents):
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=documents)
    return cursor


def make_collection(documents=None):
    collection = MagicMock()
    collection.find.return_value = make_cursor(documents or [])
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)
    return collection


@pytest.fixture
def collections():
    return defaultdict(make_collection)


@pytest.fixture
def db(collections):
    mock_db = MagicMock()
    mock_db.__getitem__.side_effect = lambda name: collections[name]
    return mock_db


class ThingRepository(MongoRepository):
    collection_name = "things"


# ============================================================================
# BASE REPOSITORY
# ============================================================================


class TestMongoRepository:
    """Tests for the shared CRUD operations."""

    async def test_create_adds_timestamps_and_id(self, db, collections):
        repo = ThingRepository(db)

        document = await repo.create({"name": "thing"})

        assert document["_id"] == collections["things"].insert_one.return_value.inserted_id
        assert document["createdAt"] == document["updatedAt"]
        inserted = collections["things"].insert_one.call_args.args[0]
        assert inserted["name"] == "thing"

    async def test_create_does_not_mutate_input(self, db):
        repo = ThingRepository(db)
        original = {"name": "thing"}

        await repo.create(original)

        assert original == {"name": "thing"}

    async def test_duplicate_key_mapped(self, db, collections):
        collections["things"].insert_one.side_effect = DuplicateKeyError(
            "E11000 duplicate key",
            code=11000,
            details={"keyValue": {"name": "thing"}}
        )
        repo = ThingRepository(db)

        with pytest.raises(DuplicateResourceError, match="name"):
            await repo.create({"name": "thing"})

    async def test_duplicate_key_without_details(self, db, collections):
        collections["things"].find_one_and_update.side_effect = DuplicateKeyError("E11000", code=11000)
        repo = ThingRepository(db)

        with pytest.raises(DuplicateResourceError, match="unique key"):
            await repo.update_by_id(ObjectId(), {"name": "thing"})

    @pytest.mark.parametrize("method", ["find_by_id", "delete_by_id"])
    async def test_invalid_id_returns_none(self, db, collections, method):
        repo = ThingRepository(db)

        assert await getattr(repo, method)("not-an-id") is None
        collections["things"].find_one.assert_not_called()
        collections["things"].find_one_and_delete.assert_not_called()

    async def test_update_sets_changes_and_timestamp(self, db, collections):
        oid = ObjectId()
        collections["things"].find_one_and_update.return_value = {"_id": oid, "name": "new"}
        repo = ThingRepository(db)

        updated = await repo.update_by_id(str(oid), {"name": "new"})

        assert updated == {"_id": oid, "name": "new"}
        query, update = collections["things"].find_one_and_update.call_args.args
        assert query == {"_id": oid}
        assert update["$set"]["name"] == "new"
        assert "updatedAt" in update["$set"]

    async def test_find_with_sort(self, db, collections):
        repo = ThingRepository(db)

        await repo.find({"a": 1}, sort=[("createdAt", -1)])

        collections["things"].find.assert_called_once_with({"a": 1})
        collections["things"].find.return_value.sort.assert_called_once_with([("createdAt", -1)])

    async def test_populate_replaces_references(self, db, collections):
        kept, gone = ObjectId(), ObjectId()
        collections["locations"].find.return_value = make_cursor([{"_id": kept, "name": "Dubai"}])
        repo = ThingRepository(db)
        documents = [{"place": kept}, {"place": gone}, {"other": 1}]

        await repo.populate(documents, "place", "locations")

        assert documents == [{"place": {"_id": kept, "name": "Dubai"}}, {"place": None}, {"other": 1}]

    async def test_populate_without_references(self, db, collections):
        repo = ThingRepository(db)

        assert await repo.populate([{"other": 1}], "place", "locations") == [{"other": 1}]
        collections["locations"].find.assert_not_called()


# ============================================================================
# USERS
# ============================================================================


class TestUserRepository:
    """Tests for UserRepository."""

    async def test_create_user_strips_password(self, db, collections):
        repo = UserRepository(db)

        user = await repo.create_user(
            name="Jane",
            email="jane@example.com",
            password_hash="$2b$hash",
            role=Role.CUSTOMER,
            company_name="Acme"
        )

        inserted = collections[database.USERS].insert_one.call_args.args[0]
        assert inserted["password"] == "$2b$hash"
        assert inserted["companyName"] == "Acme"
        assert "phone" not in inserted
        assert "password" not in user

    async def test_lookup_by_email_is_case_insensitive(self, db, collections):
        repo = UserRepository(db)

        await repo.get_user_by_email("Jane@Example.com")

        assert collections[database.USERS].find_one.call_args.args[0] == {"email": "jane@example.com"}

    async def test_password_projected_away(self, db, collections):
        repo = UserRepository(db)

        await repo.get_user_by_id(ObjectId())

        assert collections[database.USERS].find_one.call_args.args[1] == {"password": 0}


# ============================================================================
# CATALOGS
# ============================================================================


class TestCatalogRepositories:
    """Tests for the catalog listings."""

    async def test_locations_newest_first(self, db, collections):
        await LocationRepository(db).list_locations()

        collections[database.LOCATIONS].find.return_value.sort.assert_called_once_with([("createdAt", -1)])

    async def test_active_only_by_default(self, db, collections):
        await ContainerTypeRepository(db).list_by_name()

        collections[database.CONTAINER_TYPES].find.assert_called_once_with({"status": "active"})

    async def test_show_all(self, db, collections):
        await ContainerTypeRepository(db).list_by_name(show_all=True)

        collections[database.CONTAINER_TYPES].find.assert_called_once_with({})


# ============================================================================
# QUOTES, SHIPMENTS, TRACKING, CONTACT
# ============================================================================


class TestQuoteRepository:
    """Tests for QuoteRepository."""

    async def test_new_quote_is_pending(self, db, collections):
        user_id = ObjectId()

        quote = await QuoteRepository(db).create_quote(user_id, {"paymentTerm": "Prepaid"})

        assert quote["status"] == "Pending"
        assert quote["user"] == user_id

    async def test_list_for_customer(self, db, collections):
        user_id = ObjectId()

        await QuoteRepository(db).list_quotes(user_id=user_id)

        collections[database.QUOTE_REQUESTS].find.assert_called_once_with({"user": user_id})

    async def test_amount_kept_when_omitted(self, db, collections):
        quote_id = ObjectId()
        collections[database.QUOTE_REQUESTS].find_one_and_update.return_value = {"_id": quote_id}

        await QuoteRepository(db).set_status(quote_id, "Rejected")

        update = collections[database.QUOTE_REQUESTS].find_one_and_update.call_args.args[1]
        assert update["$set"]["status"] == "Rejected"
        assert "finalQuoteAmount" not in update["$set"]


class TestShipmentRepositories:
    """Tests for ShipmentRepository and TrackingEventRepository."""

    async def test_create_defaults(self, db):
        shipment = await ShipmentRepository(db).create_shipment({"trackingNumber": "TRK-1", "status": "shipped"})

        assert shipment["status"] == "shipped"
        assert shipment["paymentStatus"] == "pending"
        assert "shipmentDate" in shipment

    async def test_unknown_tracking_number(self, db):
        assert await ShipmentRepository(db).get_by_tracking_number("NOPE") is None

    async def test_events_chronological(self, db, collections):
        shipment_id = ObjectId()

        await TrackingEventRepository(db).list_for_shipment(shipment_id)

        events = collections[database.TRACKING_EVENTS]
        events.find.assert_called_once_with({"shipment": shipment_id})
        events.find.return_value.sort.assert_called_once_with([("eventTime", 1)])


class TestContactRepository:
    """Tests for ContactMessageRepository."""

    async def test_new_message_is_pending(self, db):
        message = await ContactMessageRepository(db).create_message({"subject": "Hi"})

        assert message["status"] == "pending"

    async def test_status_filter(self, db, collections):
        await ContactMessageRepository(db).list_messages(status=ContactStatus.REVIEWED)

        collections[database.CONTACT_MESSAGES].find.assert_called_once_with({"status": "reviewed"})
