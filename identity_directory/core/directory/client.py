"""Directory service client.

Authentication is delegated to an embedded ``IdentityProviderClient``; the
token it obtains is then presented to the directory's ``GET /users``
endpoint on a separate host. Listing failures collapse to ``False`` without
any error detail kept on the client.
"""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, List, Optional, Tuple

from ..base import TokenHolder
from ..exceptions import IdentityDirectoryError, ParseError, ProtocolError
from ..keycloak.client import IdentityProviderClient
from ..record_mapper import UserRecordMapper
from ..records import DirectoryUser, UserCreationRecord
from ..transport import TransportSession

if TYPE_CHECKING:
    from ...config.settings import AppConfig, DirectorySettings

USERS_PATH = "/users"


class DirectoryClient(TokenHolder):
    """Client for the directory service's user listing.

    Usage:
        client = DirectoryClient("kc.example.com", 443, "demo", "directory-app", "sysadm", "secret")
        if client.authenticate():
            users, ok = client.get_all_users("directory.example.com", 443)
    """

    def __init__(
        self,
        host: str,
        port: int,
        realm: str,
        client_id: str,
        username: str,
        password: str,
        verify: bool = True,
        directory: Optional[DirectorySettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(logger or logging.getLogger(__name__))
        self._verify = verify
        self._directory = directory
        self._session = TransportSession(host, port, verify=verify, logger=self.logger)
        self._identity_provider = IdentityProviderClient(
            host,
            port,
            realm,
            client_id,
            username,
            password,
            session=self._session,
            logger=self.logger,
        )
        self._users: List[DirectoryUser] = []

    @classmethod
    def from_settings(cls, config: AppConfig, logger: Optional[logging.Logger] = None) -> "DirectoryClient":
        """Build a client from an ``AppConfig``, including the directory location."""
        idp = config.identity_provider
        return cls(
            idp.host,
            idp.port,
            idp.realm,
            idp.client_id,
            idp.username,
            idp.password,
            verify=idp.verify_tls,
            directory=config.directory,
            logger=logger,
        )

    @property
    def identity_provider(self) -> IdentityProviderClient:
        return self._identity_provider

    @property
    def users(self) -> List[DirectoryUser]:
        """Result of the most recent listing call."""
        return self._users

    @property
    def access_token(self) -> str:
        """Token held by the embedded identity provider client."""
        return self._identity_provider.access_token

    @property
    def directory(self) -> Optional[DirectorySettings]:
        return self._directory

    def set_credentials(self, username: str, password: str) -> None:
        self._identity_provider.set_credentials(username, password)

    def authenticate(self) -> bool:
        """Authenticate through the embedded identity provider client."""
        return self._identity_provider.authenticate()

    def create_user(self, record: UserCreationRecord, realm: str) -> bool:
        """Forwarded to the embedded identity provider client."""
        return self._identity_provider.create_user(record, realm)

    def get_all_users(self, api_host: str, api_port: int) -> Tuple[List[DirectoryUser], bool]:
        """List every user known to the directory service.

        Requires a token from a previous ``authenticate()``; no
        re-authentication is attempted here. A dedicated session is opened
        for ``api_host:api_port`` and closed before returning.

        Returns:
            (users, True) on success, ([], False) on any failure
        """
        self._users = []
        if not self.is_authenticated:
            self.logger.warning("Directory listing skipped: no access token held")
            return self._users, False

        try:
            with TransportSession(api_host, api_port, verify=self._verify, logger=self.logger) as session:
                users = self._fetch_users(session)
        except IdentityDirectoryError as exc:
            self.logger.warning(f"Directory listing from {api_host}:{api_port} failed: {exc}")
            return self._users, False

        self._users = users
        self.logger.info(f"Retrieved {len(users)} users from {api_host}:{api_port}")
        return self._users, True

    def get_directory_users(self) -> Tuple[List[DirectoryUser], bool]:
        """``get_all_users`` against the directory configured at construction."""
        if self._directory is None:
            self._users = []
            self.logger.warning("Directory listing skipped: no directory host configured")
            return self._users, False
        return self.get_all_users(self._directory.host, self._directory.port)

    def _fetch_users(self, session: TransportSession) -> List[DirectoryUser]:
        """GET the user listing and map it.

        Raises:
            TransportError: No response received
            ProtocolError: Status other than 200
            ParseError: Body is not JSON or an entry cannot be mapped
        """
        resp = session.get(USERS_PATH, headers=self._bearer_headers())
        if resp.status_code != 200:
            raise ProtocolError(resp.status_code, resp.text, session.url_for(USERS_PATH))
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ParseError(f"Failed to parse JSON response: {exc}") from exc
        return UserRecordMapper.parse_user_listing(payload)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "DirectoryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "authenticated" if self.is_authenticated else "unauthenticated"
        return f"DirectoryClient({self._session.host!r}, {self._session.port}, {state})"
