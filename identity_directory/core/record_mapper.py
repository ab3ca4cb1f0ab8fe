"""Record ↔ JSON transformations for the identity provider and directory.

This module provides the wire mapping for both clients:

- ``UserCreationRecord`` → Keycloak user representation (one-way)
- directory JSON ↔ ``DirectoryUser`` (bidirectional)

Usage:
    payload = UserRecordMapper.creation_to_keycloak(record)
    users = UserRecordMapper.parse_user_listing(resp.json())
"""
from __future__ import annotations
from typing import Any, Dict, List

from .exceptions import ParseError
from .records import DIRECTORY_OPTIONAL_FIELDS, DirectoryUser, UserCreationRecord

# Value placed in the credentials block of every created user. The record's
# own password only decides whether the block is sent at all.
INITIAL_PASSWORD = "logipad"


class UserRecordMapper:
    """Stateless mapper between domain records and wire JSON."""

    @staticmethod
    def creation_to_keycloak(
        record: UserCreationRecord,
        initial_password: str = INITIAL_PASSWORD,
    ) -> Dict[str, Any]:
        """Convert a creation record to a Keycloak user representation.

        Args:
            record: User to create
            initial_password: Temporary password written to the credentials block

        Returns:
            JSON-ready dict for ``POST /admin/realms/{realm}/users``

        Example:
            >>> payload = UserRecordMapper.creation_to_keycloak(
            ...     UserCreationRecord("alice", "alice@example.com", "Alice", "Smith", "pw")
            ... )
            >>> payload["credentials"][0]["temporary"]
            True
        """
        payload: Dict[str, Any] = {
            "username": record.username,
            "email": record.email,
            "firstName": record.first_name,
            "lastName": record.last_name,
            "enabled": record.enabled,
            "emailVerified": record.email_verified,
        }
        if record.password:
            payload["credentials"] = [
                {
                    "type": "password",
                    "value": initial_password,
                    "temporary": True,
                }
            ]
        return payload

    @staticmethod
    def directory_user_from_json(entry: Any) -> DirectoryUser:
        """Build a ``DirectoryUser`` from one directory JSON object.

        Optional attributes are copied only when present and non-null.
        ``is_active`` defaults to True and ``is_reportable`` to False when
        absent; a present null flag is rejected.

        Raises:
            ParseError: If the entry is not an object, lacks a string ``guid``,
                or carries a value of the wrong type (including a null flag)
        """
        if not isinstance(entry, dict):
            raise ParseError(f"User entry must be an object, got {type(entry).__name__}")

        guid = entry.get("guid")
        if not isinstance(guid, str):
            raise ParseError("User entry is missing a string 'guid'")

        user = DirectoryUser(guid=guid)
        for name in DIRECTORY_OPTIONAL_FIELDS:
            value = entry.get(name)
            if value is None:
                continue
            if not isinstance(value, str):
                raise ParseError(f"Field '{name}' of user {guid} must be a string")
            setattr(user, name, value)

        for name, default in (("is_active", True), ("is_reportable", False)):
            value = entry.get(name, default)
            if not isinstance(value, bool):
                raise ParseError(f"Field '{name}' of user {guid} must be a boolean")
            setattr(user, name, value)

        return user

    @staticmethod
    def directory_user_to_json(user: DirectoryUser) -> Dict[str, Any]:
        """Convert a ``DirectoryUser`` back to its wire form.

        Unset optional attributes are omitted; both flags are always emitted.
        """
        payload: Dict[str, Any] = {"guid": user.guid}
        for name in DIRECTORY_OPTIONAL_FIELDS:
            value = getattr(user, name)
            if value is not None:
                payload[name] = value
        payload["is_active"] = user.is_active
        payload["is_reportable"] = user.is_reportable
        return payload

    @staticmethod
    def parse_user_listing(payload: Any) -> List[DirectoryUser]:
        """Parse a ``GET /users`` body.

        Accepts a top-level array of user objects or an object with a
        ``users`` array. Any other shape yields an empty list.

        Raises:
            ParseError: If an entry cannot be mapped
        """
        if isinstance(payload, list):
            entries = payload
        elif isinstance(payload, dict) and isinstance(payload.get("users"), list):
            entries = payload["users"]
        else:
            return []
        return [UserRecordMapper.directory_user_from_json(entry) for entry in entries]
