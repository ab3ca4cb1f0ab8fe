"""Keycloak identity provider client."""
from .client import IdentityProviderClient, token_path, users_path

__all__ = ["IdentityProviderClient", "token_path", "users_path"]
