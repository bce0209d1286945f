"""
API tests for the contact form and support inbox.

Tests cover:
- Public submission and validation
- Admin inbox listing with status filter
- Status updates and deletion
"""

import pytest
from bson import ObjectId

from freight_api.src.dependencies import get_contact_repository


MESSAGE_ID = ObjectId("65c000000000000000000001")

CONTACT_FORM = {
    "name": "Jane Shipper",
    "email": "Jane@Shipper.example.com",
    "phone": "+14155550100",
    "subject": "Rates to Rotterdam",
    "message": "Please send me your current rates.",
}


@pytest.fixture
def repo(override_repo):
    return override_repo(get_contact_repository)


class TestContactForm:
    """Tests for POST /api/contact."""

    def test_submit_message(self, client, repo):
        repo.create_message.side_effect = lambda doc: {"_id": MESSAGE_ID, "status": "pending", **doc}

        response = client.post("/api/contact", json=CONTACT_FORM)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Message sent successfully."
        assert body["data"]["email"] == "jane@shipper.example.com"
        assert body["data"]["status"] == "pending"

    def test_short_message_rejected(self, client, repo):
        response = client.post("/api/contact", json={**CONTACT_FORM, "message": "Hi"})

        assert response.status_code == 400
        assert response.json()["success"] is False
        repo.create_message.assert_not_called()

    def test_invalid_email_rejected(self, client, repo):
        response = client.post("/api/contact", json={**CONTACT_FORM, "email": "not-an-email"})

        assert response.status_code == 400


class TestSupportInbox:
    """Tests for the admin side of /api/contact."""

    def test_list_requires_admin(self, client, repo, login_as, customer_user):
        login_as(customer_user)

        response = client.get("/api/contact")

        assert response.status_code == 403

    def test_list_messages(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.list_messages.return_value = [{"_id": MESSAGE_ID, **CONTACT_FORM}]

        response = client.get("/api/contact")

        assert response.status_code == 200
        assert response.json()["messages"][0]["_id"] == str(MESSAGE_ID)
        repo.list_messages.assert_awaited_once_with(status=None)

    def test_list_messages_filtered(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.list_messages.return_value = []

        client.get("/api/contact?status=resolved")

        repo.list_messages.assert_awaited_once_with(status="resolved")

    def test_get_message(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.find_by_id.return_value = {"_id": MESSAGE_ID, **CONTACT_FORM}

        response = client.get(f"/api/contact/{MESSAGE_ID}")

        assert response.json()["message"]["subject"] == "Rates to Rotterdam"

    def test_update_status(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.update_by_id.return_value = {"_id": MESSAGE_ID, "status": "reviewed"}

        response = client.put(f"/api/contact/{MESSAGE_ID}/status", json={"status": "reviewed"})

        assert response.status_code == 200
        repo.update_by_id.assert_awaited_once_with(str(MESSAGE_ID), {"status": "reviewed"})

    def test_update_invalid_status(self, client, repo, login_as, admin_user):
        login_as(admin_user)

        response = client.put(f"/api/contact/{MESSAGE_ID}/status", json={"status": "spam"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid status."

    def test_delete_missing_message(self, client, repo, login_as, admin_user):
        login_as(admin_user)
        repo.delete_by_id.return_value = None

        response = client.delete(f"/api/contact/{MESSAGE_ID}")

        assert response.status_code == 404
        assert response.json()["message"] == "Message not found."
