"""Domain records exchanged with the identity provider and the directory."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class UserCreationRecord:
    """Input for creating a user in an identity provider realm.

    Only ever serialised towards the provider; never parsed back.
    """
    username: str
    email: str
    first_name: str = ""
    last_name: str = ""
    password: str = ""
    enabled: bool = True
    email_verified: bool = True


# Optional string attributes of a directory user, in wire order.
DIRECTORY_OPTIONAL_FIELDS: Tuple[str, ...] = (
    "created_at",
    "created_by",
    "modified_at",
    "modified_by",
    "last_login_at",
    "last_activity_at",
    "last_document_service_activity",
    "last_eform_service_activity",
    "last_briefing_service_activity",
    "name",
    "type",
    "full_name",
    "email",
    "three_lc",
    "department",
    "description",
)


@dataclass
class DirectoryUser:
    """User profile record returned by the directory service.

    ``None`` on an optional attribute means the source did not carry a
    non-null value for it.
    """
    guid: str
    created_at: Optional[str] = None
    created_by: Optional[str] = None
    modified_at: Optional[str] = None
    modified_by: Optional[str] = None
    last_login_at: Optional[str] = None
    last_activity_at: Optional[str] = None
    last_document_service_activity: Optional[str] = None
    last_eform_service_activity: Optional[str] = None
    last_briefing_service_activity: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    three_lc: Optional[str] = None
    department: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True
    is_reportable: bool = False

    def present_fields(self) -> set[str]:
        """Names of the optional attributes that carry a value."""
        return {name for name in DIRECTORY_OPTIONAL_FIELDS if getattr(self, name) is not None}
