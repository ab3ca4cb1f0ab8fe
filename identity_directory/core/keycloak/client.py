"""Identity provider client: password-grant authentication and user creation.

Talks to a Keycloak-compatible server over a single ``TransportSession``.
Public methods never raise; failures are reported as ``False`` together
with a human-readable ``last_error``.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Optional

import requests

from ..base import TokenHolder
from ..exceptions import (
    ConfigurationError,
    ConflictError,
    ParseError,
    ProtocolError,
    TransportError,
)
from ..record_mapper import INITIAL_PASSWORD, UserRecordMapper
from ..records import UserCreationRecord
from ..transport import TransportSession


def token_path(realm: str) -> str:
    return f"/realms/{realm}/protocol/openid-connect/token"


def users_path(realm: str) -> str:
    return f"/admin/realms/{realm}/users"


class IdentityProviderClient(TokenHolder):
    """Client for a Keycloak realm using the resource-owner password grant.

    Usage:
        client = IdentityProviderClient("kc.example.com", 443, "master", "admin-cli", "admin", "secret")
        if client.authenticate():
            client.create_user(UserCreationRecord("alice", "alice@example.com"), "demo")
        else:
            print(client.last_error)
    """

    def __init__(
        self,
        host: str,
        port: int,
        realm: str,
        client_id: str,
        username: str,
        password: str,
        session: Optional[TransportSession] = None,
        verify: bool = True,
        initial_password: str = INITIAL_PASSWORD,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the client.

        Args:
            host: Identity provider host
            port: Identity provider port
            realm: Realm holding the authenticating user
            client_id: OAuth client used for the password grant
            username: Resource-owner username
            password: Resource-owner password
            session: Transport to use (a new one bound to host:port by default)
            verify: Verify TLS certificates when creating the default session
            initial_password: Temporary password written for created users
            logger: Logger receiving client events (module logger by default)
        """
        super().__init__(logger or logging.getLogger(__name__))
        self._host = host
        self._port = port
        self._realm = realm
        self._client_id = client_id
        self._username = username
        self._password = password
        self._initial_password = initial_password
        self._last_error = ""
        self._session = session or TransportSession(host, port, verify=verify, logger=self.logger)

    @classmethod
    def from_settings(cls, settings, logger: Optional[logging.Logger] = None) -> "IdentityProviderClient":
        """Build a client from ``IdentityProviderSettings``."""
        return cls(
            settings.host,
            settings.port,
            settings.realm,
            settings.client_id,
            settings.username,
            settings.password,
            verify=settings.verify_tls,
            logger=logger,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Accessors
    # ─────────────────────────────────────────────────────────────────────
    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def realm(self) -> str:
        return self._realm

    @property
    def client_id(self) -> str:
        return self._client_id

    @property
    def username(self) -> str:
        return self._username

    @property
    def last_error(self) -> str:
        return self._last_error

    @property
    def session(self) -> TransportSession:
        return self._session

    def set_credentials(self, username: str, password: str) -> None:
        """Replace the resource-owner credentials and drop any held token."""
        self._username = username
        self._password = password
        self._clear_token()
        self.logger.info(f"Credentials replaced for {self._host} realm={self._realm}; token cleared")

    # ─────────────────────────────────────────────────────────────────────
    # Authentication
    # ─────────────────────────────────────────────────────────────────────
    def authenticate(self) -> bool:
        """Obtain an access token via the password grant.

        Returns:
            True when a token was stored, False otherwise (see ``last_error``)
        """
        self._last_error = ""
        self._clear_token()

        try:
            token = self._request_token()
        except ConfigurationError as exc:
            self._last_error = str(exc)
        except TransportError as exc:
            self._last_error = "Authentication request failed"
            if exc.detail:
                self._last_error += f": {exc.detail}"
        except ProtocolError as exc:
            self._last_error = f"Authentication failed with status: {exc.status_code}"
            if exc.body:
                self._last_error += f" - {exc.body}"
        except ParseError as exc:
            self._last_error = str(exc)
        else:
            self._store_token(token)
            self.logger.info(f"Authenticated '{self._username}' against {self._host} realm={self._realm}")
            return True

        self.logger.warning(f"Authentication against {self._host} realm={self._realm} failed: {self._last_error}")
        return False

    def _request_token(self) -> str:
        """POST the password grant and return the access token.

        Raises:
            ConfigurationError: Username or password not set
            TransportError: No response received
            ProtocolError: Status other than 200
            ParseError: Body is not JSON or lacks ``access_token``
        """
        if not self._username or not self._password:
            raise ConfigurationError("Username or password not set")

        path = token_path(self._realm)
        data = {
            "client_id": self._client_id,
            "grant_type": "password",
            "username": self._username,
            "password": self._password,
        }
        resp = self._session.post_form(path, data)
        if resp.status_code != 200:
            raise ProtocolError(resp.status_code, resp.text, self._session.url_for(path))

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ParseError(f"Failed to parse JSON response: {exc}") from exc

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise ParseError("Access token not found in response")
        if not isinstance(token, str):
            raise ParseError("Failed to parse JSON response: access_token is not a string")
        return token

    def _ensure_authenticated(self) -> bool:
        if self.is_authenticated:
            return True
        return self.authenticate()

    # ─────────────────────────────────────────────────────────────────────
    # User management
    # ─────────────────────────────────────────────────────────────────────
    def create_user(self, record: UserCreationRecord, realm: str) -> bool:
        """Create a user in ``realm``, authenticating first if no token is held.

        Args:
            record: User to create
            realm: Target realm (may differ from the authentication realm)

        Returns:
            True on HTTP 201, False otherwise (see ``last_error``)
        """
        self._last_error = ""

        try:
            self._validate_record(record)
        except ConfigurationError as exc:
            self._last_error = str(exc)
            self.logger.warning(f"Refusing to create user: {self._last_error}")
            return False

        if not self._ensure_authenticated():
            self._last_error = f"Not authenticated: {self._last_error}"
            return False

        try:
            self._post_user(record, realm)
        except ConflictError as exc:
            self._last_error = f"User with username '{exc.username}' already exists"
        except ProtocolError as exc:
            self._last_error = f"Failed to create user. Status: {exc.status_code}"
            detail = self._error_detail(exc.body)
            if detail:
                self._last_error += f" - {detail}"
        except TransportError as exc:
            self._last_error = "Request failed to create user"
            if exc.detail:
                self._last_error += f": {exc.detail}"
        else:
            self.logger.info(f"User '{record.username}' created in realm={realm}")
            return True

        self.logger.warning(f"User '{record.username}' not created in realm={realm}: {self._last_error}")
        return False

    @staticmethod
    def _validate_record(record: UserCreationRecord) -> None:
        if not record.username:
            raise ConfigurationError("Username is required")
        if not record.email:
            raise ConfigurationError("Email is required")

    def _post_user(self, record: UserCreationRecord, realm: str) -> requests.Response:
        """POST the user representation.

        Raises:
            ConflictError: HTTP 409
            ProtocolError: Any status other than 201
            TransportError: No response received
        """
        path = users_path(realm)
        payload = UserRecordMapper.creation_to_keycloak(record, self._initial_password)
        headers = self._bearer_headers()
        headers["Content-Type"] = "application/json"

        resp = self._session.post_json(path, payload, headers=headers)
        if resp.status_code == 201:
            return resp
        endpoint = self._session.url_for(path)
        if resp.status_code == 409:
            raise ConflictError(record.username, resp.text, endpoint)
        raise ProtocolError(resp.status_code, resp.text, endpoint)

    @staticmethod
    def _error_detail(body: str) -> str:
        """Prefer Keycloak's ``errorMessage`` over the raw body."""
        if not body:
            return ""
        try:
            error: Any = json.loads(body)
        except ValueError:
            return body
        message = error.get("errorMessage") if isinstance(error, dict) else None
        if isinstance(message, str):
            return message
        return body

    # ─────────────────────────────────────────────────────────────────────
    # Resources
    # ─────────────────────────────────────────────────────────────────────
    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "IdentityProviderClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "authenticated" if self.is_authenticated else "unauthenticated"
        return f"IdentityProviderClient({self._host!r}, {self._port}, realm={self._realm!r}, {state})"
