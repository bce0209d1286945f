"""
User repository for database operations.

Provides async lookups and writes for user accounts. The stored password
hash is only returned by ``get_user_with_password``; every other read
projects it away.
"""

from typing import Any, Dict, Optional

import structlog

from freight_api.src import database
from freight_api.src.models.auth import Role
from freight_api.src.models.common import parse_object_id
from freight_api.src.repositories.base import MongoRepository

logger = structlog.get_logger(__name__)

WITHOUT_PASSWORD = {"password": 0}


class UserRepository(MongoRepository):
    """Repository for user database operations."""

    collection_name = database.USERS

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: Role = Role.CUSTOMER,
        phone: Optional[str] = None,
        company_name: Optional[str] = None,
        address: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a new user.

        Args:
            name: Display name
            email: Email address (already lower-cased)
            password_hash: Hashed password
            role: Role name
            phone: Optional phone number
            company_name: Optional company name
            address: Optional postal address

        Returns:
            Created user document (without password)

        Raises:
            DuplicateResourceError: If the email already exists
        """
        document = {
            "name": name,
            "email": email,
            "password": password_hash,
            "role": role.value,
        }
        optional = {"phone": phone, "companyName": company_name, "address": address}
        document.update({k: v for k, v in optional.items() if v})

        user = await self.create(document)
        logger.info("user_created", user_id=str(user["_id"]), email=email, role=role.value)

        return {k: v for k, v in user.items() if k != "password"}

    async def get_user_by_id(self, user_id: Any) -> Optional[Dict[str, Any]]:
        """
        Get user by ID.

        Returns:
            User (without password) or None if not found
        """
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        user = await self.collection.find_one({"_id": oid}, WITHOUT_PASSWORD)
        if not user:
            logger.debug("user_not_found", user_id=str(user_id))
        return user

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Get user by email, without the password hash."""
        return await self.collection.find_one({"email": email.lower()}, WITHOUT_PASSWORD)

    async def get_user_with_password(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Get user by email including the password hash.

        Only used to verify credentials at login.
        """
        user = await self.collection.find_one({"email": email.lower()})
        if not user:
            logger.debug("user_not_found", email=email)
        return user

    async def update_profile(self, user_id: Any, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update profile fields.

        Args:
            user_id: User ID
            changes: Fields to set (camelCase keys); empty dict is a no-op

        Returns:
            Updated user (without password) or None if not found
        """
        if changes:
            updated = await self.update_by_id(user_id, changes)
            if updated is None:
                return None
            logger.info("user_profile_updated", user_id=str(user_id), fields=sorted(changes))
        return await self.get_user_by_id(user_id)
