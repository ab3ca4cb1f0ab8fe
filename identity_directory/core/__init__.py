"""Identity provider and directory client library.

Architecture:
- transport.py: HTTPS session bound to one host:port with fixed timeouts
- base.py: Token state shared by both clients and the capability protocols
- keycloak/client.py: Password-grant authentication and user creation
- directory/client.py: User listing on the directory service
- records.py / record_mapper.py: Domain records and their JSON mapping
- exceptions.py: Typed exceptions used inside the clients

Usage:
    from identity_directory.core import DirectoryClient, IdentityProviderClient

    kc = IdentityProviderClient("kc.example.com", 443, "master", "admin-cli", "admin", "secret")
    if kc.authenticate():
        kc.create_user(UserCreationRecord("alice", "alice@example.com"), "demo")

    directory = DirectoryClient("kc.example.com", 443, "demo", "directory-app", "sysadm", "secret")
    if directory.authenticate():
        users, ok = directory.get_all_users("directory.example.com", 443)
"""
from .base import IdentityCapability, TokenHolder, UserDirectoryCapability, token_fingerprint
from .directory import DirectoryClient
from .exceptions import (
    ConfigurationError,
    ConflictError,
    IdentityDirectoryError,
    ParseError,
    ProtocolError,
    TransportError,
)
from .keycloak import IdentityProviderClient
from .record_mapper import INITIAL_PASSWORD, UserRecordMapper
from .records import DIRECTORY_OPTIONAL_FIELDS, DirectoryUser, UserCreationRecord
from .transport import CONNECT_TIMEOUT, READ_TIMEOUT, TransportSession

__all__ = [
    # Clients
    "IdentityProviderClient",
    "DirectoryClient",
    "TransportSession",
    "CONNECT_TIMEOUT",
    "READ_TIMEOUT",

    # Capabilities
    "IdentityCapability",
    "UserDirectoryCapability",
    "TokenHolder",
    "token_fingerprint",

    # Records
    "UserCreationRecord",
    "DirectoryUser",
    "DIRECTORY_OPTIONAL_FIELDS",
    "UserRecordMapper",
    "INITIAL_PASSWORD",

    # Exceptions
    "IdentityDirectoryError",
    "ConfigurationError",
    "TransportError",
    "ProtocolError",
    "ConflictError",
    "ParseError",
]
