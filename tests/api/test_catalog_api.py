"""
API tests for the reference catalogs.

Tests cover:
- Locations CRUD with coordinate and postal code validation
- Container and goods types (active-only listing, showAll, duplicates)
- Services listing messages and "blank keeps current" updates
- Admin gate (401 anonymous, 403 customer)
- Invalid ids answering 404
"""

import pytest
from bson import ObjectId

from freight_api.src.dependencies import (
    get_container_repository,
    get_goods_repository,
    get_location_repository,
    get_service_repository,
)
from freight_api.src.repositories.base import DuplicateResourceError


LOCATION_ID = ObjectId("65a000000000000000000001")

VALID_LOCATION = {
    "name": "Jebel Ali Hub",
    "type": "pickup",
    "country": "UAE",
    "city": "Dubai",
    "address": "Gate 5",
    "postalCode": "00000",
    "coordinates": [55.0272, 24.9857],
}

VALID_CONTAINER = {
    "name": "20ft Standard",
    "description": "General purpose dry container",
    "dimensions": {
        "insideLength": 5.9,
        "insideWidth": 2.35,
        "insideHeight": 2.39,
        "doorWidth": 2.34,
        "doorHeight": 2.28,
        "cbmCapacity": 33.2,
    },
    "tareWeight": 2300,
    "maxCargoWeight": 28200,
}


# ============================================================================
# LOCATIONS
# ============================================================================


class TestLocations:
    """Tests for /api/locations."""

    @pytest.fixture
    def repo(self, override_repo):
        return override_repo(get_location_repository)

    def test_list_locations_is_public(self, client, repo, now):
        repo.list_locations.return_value = [{"_id": LOCATION_ID, **VALID_LOCATION, "createdAt": now}]

        response = client.get("/api/locations")

        assert response.status_code == 200
        location = response.json()["locations"][0]
        assert location["_id"] == str(LOCATION_ID)
        assert location["createdAt"] == now.isoformat()

    def test_get_location_not_found(self, client, repo):
        repo.find_by_id.return_value = None

        response = client.get("/api/locations/not-an-id")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Location not found"}

    def test_create_location_as_admin(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.create.side_effect = lambda doc: {"_id": LOCATION_ID, **doc}

        response = client.post("/api/locations", json=VALID_LOCATION)

        assert response.status_code == 201
        document = repo.create.call_args.args[0]
        assert document["postalCode"] == "00000"
        assert document["status"] == "active"
        assert response.json()["location"]["type"] == "pickup"

    def test_create_location_requires_admin(self, client, repo, login_as, customer_user):
        login_as(customer_user)

        response = client.post("/api/locations", json=VALID_LOCATION)

        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "Forbidden: Admins only"}
        repo.create.assert_not_called()

    def test_create_location_anonymous(self, client, repo, login_as):
        login_as(None)

        response = client.post("/api/locations", json=VALID_LOCATION)

        assert response.status_code == 401

    @pytest.mark.parametrize("coordinates", [[55.0], [181, 20], [10, -91]])
    def test_create_location_bad_coordinates(self, client, repo, login_as, admin_user, coordinates):
        login_as(admin_user)

        response = client.post("/api/locations", json={**VALID_LOCATION, "coordinates": coordinates})

        assert response.status_code == 400
        assert response.json()["message"] == "Coordinates must be [longitude, latitude]"

    def test_create_location_bad_postal_code(self, client, repo, login_as, admin_user):
        login_as(admin_user)

        response = client.post("/api/locations", json={**VALID_LOCATION, "postalCode": "#"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid postal code"

    def test_update_location_partial(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.update_by_id.return_value = {"_id": LOCATION_ID, **VALID_LOCATION, "status": "inactive"}

        response = client.put(f"/api/locations/{LOCATION_ID}", json={"status": "inactive"})

        assert response.status_code == 200
        repo.update_by_id.assert_awaited_once_with(str(LOCATION_ID), {"status": "inactive"})

    def test_delete_location(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.delete_by_id.return_value = {"_id": LOCATION_ID}

        response = client.delete(f"/api/locations/{LOCATION_ID}")

        assert response.json() == {"success": True, "message": "Location deleted"}

    def test_delete_missing_location(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.delete_by_id.return_value = None

        response = client.delete(f"/api/locations/{LOCATION_ID}")

        assert response.status_code == 404


# ============================================================================
# CONTAINER TYPES
# ============================================================================


class TestContainerTypes:
    """Tests for /api/containers."""

    @pytest.fixture
    def repo(self, override_repo):
        return override_repo(get_container_repository)

    def test_list_active_only_by_default(self, client, repo):
        repo.list_by_name.return_value = []

        response = client.get("/api/containers")

        assert response.json() == {"success": True, "types": []}
        repo.list_by_name.assert_awaited_once_with(show_all=False)

    def test_list_show_all(self, client, repo):
        repo.list_by_name.return_value = []

        client.get("/api/containers?showAll=true")

        repo.list_by_name.assert_awaited_once_with(show_all=True)

    def test_create_container(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.name_exists.return_value = False
        repo.create.side_effect = lambda doc: {"_id": ObjectId(), **doc}

        response = client.post("/api/containers", json=VALID_CONTAINER)

        assert response.status_code == 201
        document = repo.create.call_args.args[0]
        assert document["dimensions"]["cbmCapacity"] == 33.2
        assert document["maxCargoWeight"] == 28200
        assert response.json()["container"]["name"] == "20ft Standard"

    def test_create_duplicate_container(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.name_exists.return_value = True

        response = client.post("/api/containers", json=VALID_CONTAINER)

        assert response.status_code == 409
        assert response.json()["message"] == "Container type already exists."

    def test_create_duplicate_container_race(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.name_exists.return_value = False
        repo.create.side_effect = DuplicateResourceError("name")

        response = client.post("/api/containers", json=VALID_CONTAINER)

        assert response.status_code == 409

    def test_create_container_inside_length_minimum(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        body = {**VALID_CONTAINER, "dimensions": {**VALID_CONTAINER["dimensions"], "insideLength": 0.5}}

        response = client.post("/api/containers", json=body)

        assert response.status_code == 400
        assert "insideLength" in response.json()["message"]

    def test_delete_missing_container(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.delete_by_id.return_value = None

        response = client.delete("/api/containers/abc")

        assert response.status_code == 404
        assert response.json()["message"] == "Container type not found."


# ============================================================================
# GOODS TYPES
# ============================================================================


class TestGoodsTypes:
    """Tests for /api/goods."""

    @pytest.fixture
    def repo(self, override_repo):
        return override_repo(get_goods_repository)

    def test_create_goods_type(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.name_exists.return_value = False
        repo.create.side_effect = lambda doc: {"_id": ObjectId(), **doc}

        response = client.post("/api/goods", json={"name": "Electronics", "description": "Fragile"})

        assert response.status_code == 201
        assert response.json()["goodsType"]["status"] == "active"

    def test_create_duplicate_goods_type(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.name_exists.return_value = True

        response = client.post("/api/goods", json={"name": "Electronics", "description": "Fragile"})

        assert response.status_code == 409
        assert response.json()["message"] == "Goods type already exists."

    def test_update_goods_type_invalid_status(self, client, repo, login_as, admin_user):
        login_as(admin_user)

        response = client.put(f"/api/goods/{ObjectId()}", json={"status": "archived"})

        assert response.status_code == 400
        repo.update_by_id.assert_not_called()

    def test_update_missing_goods_type(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.update_by_id.return_value = None

        response = client.put(f"/api/goods/{ObjectId()}", json={"status": "inactive"})

        assert response.status_code == 404
        assert response.json()["message"] == "Goods type not found."


# ============================================================================
# SERVICES
# ============================================================================


class TestServices:
    """Tests for /api/services."""

    @pytest.fixture
    def repo(self, override_repo):
        return override_repo(get_service_repository)

    @pytest.mark.parametrize("query,found,message", [
        ("", True, "Active services retrieved successfully."),
        ("", False, "No active services found."),
        ("?showAll=true", True, "Services retrieved successfully."),
        ("?showAll=true", False, "No services found."),
    ])
    def test_list_messages(self, client, repo, query, found, message):
        repo.list_by_name.return_value = [{"_id": ObjectId(), "name": "Air Freight"}] if found else []

        response = client.get(f"/api/services{query}")

        assert response.status_code == 200
        assert response.json()["message"] == message

    def test_create_service(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.create.side_effect = lambda doc: {"_id": ObjectId(), **doc}

        response = client.post("/api/services", json={"name": "Air Freight", "description": "Fast"})

        assert response.status_code == 201
        assert response.json()["message"] == "Service created successfully."

    def test_create_duplicate_service(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.create.side_effect = DuplicateResourceError("name")

        response = client.post("/api/services", json={"name": "Air Freight", "description": "Fast"})

        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "Service already exists."}

    def test_update_service_blank_keeps_current(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        service_id = ObjectId()
        repo.update_by_id.return_value = {"_id": service_id, "name": "Air Freight", "status": "inactive"}

        response = client.put(
            f"/api/services/{service_id}",
            json={"name": "", "description": "   ", "status": "inactive"}
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Service updated successfully."
        repo.update_by_id.assert_awaited_once_with(str(service_id), {"status": "inactive"})

    def test_delete_service(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.delete_by_id.return_value = {"_id": ObjectId()}

        response = client.delete(f"/api/services/{ObjectId()}")

        assert response.json()["message"] == "Service deleted successfully."
