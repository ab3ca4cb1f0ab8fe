"""TLS transport bound to a single host:port.

Thin wrapper around ``requests.Session`` that fixes the scheme, the target
host and the connect/read timeouts at construction time. Both clients talk
to the network exclusively through this class.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

import requests

from .exceptions import TransportError

CONNECT_TIMEOUT = 10
READ_TIMEOUT = 10


class TransportSession:
    """HTTPS session scoped to one host and port.

    Usage:
        with TransportSession("kc.example.com", 443) as session:
            resp = session.get("/users", headers={"Accept": "application/json"})
    """

    def __init__(
        self,
        host: str,
        port: int = 443,
        verify: bool = True,
        connect_timeout: float = CONNECT_TIMEOUT,
        read_timeout: float = READ_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self.host = host
        self.port = port
        self.verify = verify
        self.timeout = (connect_timeout, read_timeout)
        self.base_url = f"https://{host}:{port}"
        self._log = logger or logging.getLogger(__name__)
        self._session: Optional[requests.Session] = requests.Session()

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send a request and return the response whatever its status.

        Raises:
            TransportError: On connection failure, timeout, or a closed session
        """
        url = self.url_for(path)
        if self._session is None:
            raise TransportError(url, "session is closed")
        self._log.debug(f"{method} {url}")
        try:
            resp = self._session.request(
                method,
                url,
                timeout=self.timeout,
                verify=self.verify,
                **kwargs,
            )
        except requests.RequestException as exc:
            self._log.warning(f"{method} {url} failed: {exc}")
            raise TransportError(url, str(exc)) from exc
        self._log.debug(f"{method} {url} -> {resp.status_code}")
        return resp

    def get(self, path: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        return self.request("GET", path, headers=headers or {})

    def post_form(
        self,
        path: str,
        data: Dict[str, str],
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """POST an ``application/x-www-form-urlencoded`` body."""
        return self.request("POST", path, data=data, headers=headers or {})

    def post_json(
        self,
        path: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """POST a JSON body."""
        return self.request("POST", path, json=payload, headers=headers or {})

    @property
    def closed(self) -> bool:
        return self._session is None

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "TransportSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"TransportSession({self.host!r}, {self.port})"
