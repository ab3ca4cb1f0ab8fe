"""Pytest shared fixtures for client tests."""
import json
import pathlib
import sys
from typing import Any, Callable, Dict, List, Optional, Tuple

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests


class StubResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        if text is None:
            text = "" if payload is None else json.dumps(payload)
        self.text = text

    def json(self):
        return json.loads(self.text)


class FakeHttp:
    """Routes ``requests.Session.request`` calls to canned responses.

    Routes are keyed by (method, url). A route value may be a
    ``StubResponse``, an exception instance to raise, or a callable
    receiving the request kwargs.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.calls: List[Dict[str, Any]] = []

    def add(self, method: str, url: str, response: Any) -> None:
        self.routes[(method.upper(), url)] = response

    def __call__(self, method, url, **kwargs):
        self.calls.append({"method": method.upper(), "url": url, **kwargs})
        try:
            route = self.routes[(method.upper(), url)]
        except KeyError:
            raise AssertionError(f"Unexpected HTTP {method} in unit test: {url}") from None
        if isinstance(route, Exception):
            raise route
        if callable(route) and not isinstance(route, StubResponse):
            return route(**kwargs)
        return route

    def calls_to(self, url: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["url"] == url]


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """Prevent unit tests from opening real connections.

    Tests marked with @pytest.mark.integration may reach the network.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(session, method, url, **kwargs):
        raise RuntimeError(f"Unexpected network access in tests: {method} {url}")

    monkeypatch.setattr(requests.Session, "request", _refuse)


@pytest.fixture()
def http(monkeypatch) -> FakeHttp:
    """Install a ``FakeHttp`` router in place of ``requests.Session.request``."""
    fake = FakeHttp()
    monkeypatch.setattr(requests.Session, "request", fake)
    return fake


@pytest.fixture()
def stub_response() -> Callable[..., StubResponse]:
    return StubResponse
