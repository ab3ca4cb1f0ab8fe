"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from identity_directory.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _load_password(secret_name: str) -> Optional[str]:
    """Read the identity provider password.

    The Docker secret /run/secrets/{secret_name} wins over IDP_PASSWORD.
    """
    secret_file = Path("/run/secrets") / secret_name
    if secret_file.is_file():
        try:
            password = secret_file.read_text().strip()
        except OSError as e:
            logger.warning(f"[settings] Failed to read {secret_file}: {e}")
        else:
            if password:
                logger.info(f"[settings] Loaded password from {secret_file}")
                return password
    return os.getenv("IDP_PASSWORD") or None


def _require(var_name: str) -> str:
    value = os.environ.get(var_name)
    if not value:
        raise ConfigurationError(f"Environment variable {var_name} is required.")
    return value


def _parse_port(var_name: str, raw: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise ConfigurationError(f"{var_name} must be an integer, got {raw!r}") from None
    if not 1 <= port <= 65535:
        raise ConfigurationError(f"{var_name} must be between 1 and 65535, got {port}")
    return port


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class IdentityProviderSettings:
    """Connection and credential settings for the identity provider."""
    host: str
    username: str
    password: str
    port: int = 443
    realm: str = "master"
    client_id: str = "admin-cli"
    verify_tls: bool = True

    def __repr__(self) -> str:
        return (
            f"IdentityProviderSettings(host={self.host!r}, port={self.port}, "
            f"realm={self.realm!r}, client_id={self.client_id!r}, "
            f"username={self.username!r}, password='***')"
        )


@dataclass
class DirectorySettings:
    """Location of the directory service."""
    host: str
    port: int = 443


@dataclass
class AppConfig:
    """Application configuration container."""
    identity_provider: IdentityProviderSettings
    directory: DirectorySettings


def load_settings(password_secret: str = "idp_password") -> AppConfig:
    """Load settings from environment variables and /run/secrets.

    Args:
        password_secret: File name under /run/secrets holding the password

    Raises:
        ConfigurationError: If a required value is missing or malformed
    """
    host = _require("IDP_HOST")
    username = _require("IDP_USERNAME")
    password: Optional[str] = _load_password(password_secret)
    if not password:
        raise ConfigurationError(
            f"Identity provider password not found in /run/secrets/{password_secret} or IDP_PASSWORD."
        )

    port = _parse_port("IDP_PORT", os.environ.get("IDP_PORT", "443"))
    identity_provider = IdentityProviderSettings(
        host=host,
        port=port,
        realm=os.environ.get("IDP_REALM", "master"),
        client_id=os.environ.get("IDP_CLIENT_ID", "admin-cli"),
        username=username,
        password=password,
        verify_tls=_parse_bool(os.environ.get("IDP_VERIFY_TLS", "true")),
    )

    directory = DirectorySettings(
        host=os.environ.get("DIRECTORY_HOST") or host,
        port=_parse_port("DIRECTORY_PORT", os.environ.get("DIRECTORY_PORT") or str(port)),
    )

    config = AppConfig(
        identity_provider=identity_provider,
        directory=directory,
    )
    logger.info(f"[settings] Identity provider {identity_provider.host}:{identity_provider.port} "
                f"realm={identity_provider.realm} directory={directory.host}:{directory.port}")
    return config
