"""Configuration module for the identity directory clients."""
from .settings import AppConfig, DirectorySettings, IdentityProviderSettings, load_settings

__all__ = ["AppConfig", "DirectorySettings", "IdentityProviderSettings", "load_settings"]
