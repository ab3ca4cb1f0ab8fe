"""Directory service client."""
from .client import DirectoryClient, USERS_PATH

__all__ = ["DirectoryClient", "USERS_PATH"]
