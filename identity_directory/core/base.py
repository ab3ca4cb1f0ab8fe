"""Shared token state and the capability interface implemented by both clients."""
from __future__ import annotations
import hashlib
import logging
from typing import List, Optional, Protocol, Tuple, runtime_checkable

from .records import DirectoryUser, UserCreationRecord


def token_fingerprint(token: str) -> str:
    """Short SHA256 digest of a token, safe to write to logs."""
    if not token:
        return "none"
    return hashlib.sha256(token.encode()).hexdigest()[:12]


class TokenHolder:
    """Holds the bearer token of a client.

    A holder is authenticated iff its token is non-empty. The token carries
    no expiry information; it is trusted until explicitly cleared.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._access_token = ""
        self.logger = logger or logging.getLogger(__name__)

    @property
    def access_token(self) -> str:
        return self._access_token

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def _store_token(self, token: str) -> None:
        self._access_token = token
        self.logger.debug(f"Stored access token | token_hash={token_fingerprint(token)}")

    def _clear_token(self) -> None:
        self._access_token = ""

    def _bearer_headers(self) -> dict:
        headers = {"Accept": "application/json"}
        token = self.access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers


@runtime_checkable
class IdentityCapability(Protocol):
    """Authentication and user provisioning against an identity provider."""

    def authenticate(self) -> bool:
        ...

    def create_user(self, record: UserCreationRecord, realm: str) -> bool:
        ...


@runtime_checkable
class UserDirectoryCapability(IdentityCapability, Protocol):
    """Full capability set: provisioning plus directory listing."""

    def get_all_users(self, api_host: str, api_port: int) -> Tuple[List[DirectoryUser], bool]:
        ...
