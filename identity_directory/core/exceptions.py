"""Typed exceptions for identity provider and directory operations.

These never escape the public client methods: they are raised by the
private request helpers and converted into a boolean result (and, for the
identity provider client, a ``last_error`` message) at the call boundary.
"""
from __future__ import annotations


class IdentityDirectoryError(Exception):
    """Base exception for all client operations."""
    pass


class ConfigurationError(IdentityDirectoryError):
    """Missing or invalid input detected before any network call."""
    pass


class TransportError(IdentityDirectoryError):
    """Connection or send failure - no HTTP response was received.

    Attributes:
        endpoint: URL that could not be reached
    """

    def __init__(self, endpoint: str, detail: str = ""):
        self.endpoint = endpoint
        self.detail = detail
        message = f"Request to {endpoint} failed"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class ProtocolError(IdentityDirectoryError):
    """Unexpected HTTP status from a remote endpoint.

    Attributes:
        status_code: HTTP status code
        body: Raw response body
        endpoint: API endpoint that failed
    """

    def __init__(self, status_code: int, body: str, endpoint: str):
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {body}")


class ConflictError(ProtocolError):
    """User creation failed - username already exists (HTTP 409)."""

    def __init__(self, username: str, body: str, endpoint: str):
        self.username = username
        super().__init__(409, body, endpoint)


class ParseError(IdentityDirectoryError):
    """A successful response carried malformed or unexpected JSON."""
    pass
