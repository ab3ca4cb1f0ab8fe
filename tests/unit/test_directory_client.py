"""Unit tests for the directory client."""
import pytest
import requests

from identity_directory.config import AppConfig, DirectorySettings, IdentityProviderSettings
from identity_directory.core import (
    DIRECTORY_OPTIONAL_FIELDS,
    DirectoryClient,
    TransportSession,
    UserCreationRecord,
    UserDirectoryCapability,
)

TOKEN_URL = "https://kc.example.com:443/realms/Corp/protocol/openid-connect/token"
LIST_URL = "https://directory.example.com:8443/users"


@pytest.fixture()
def client():
    directory = DirectoryClient("kc.example.com", 443, "Corp", "directory-app", "sysadm", "secret")
    yield directory
    directory.close()


@pytest.fixture()
def authed(http, stub_response, client):
    http.add("POST", TOKEN_URL, stub_response(200, {"access_token": "tok"}))
    assert client.authenticate() is True
    return client


def test_client_satisfies_full_capability(client):
    assert isinstance(client, UserDirectoryCapability)


def test_authenticate_mirrors_identity_provider_token(authed):
    assert authed.access_token == "tok"
    assert authed.identity_provider.access_token == "tok"
    assert authed.is_authenticated is True


def test_authenticate_failure_clears_mirrored_token(http, stub_response, authed):
    http.add("POST", TOKEN_URL, stub_response(401, text="denied"))

    assert authed.authenticate() is False
    assert authed.access_token == ""
    assert "401" in authed.identity_provider.last_error


def test_authenticate_shares_owned_session_with_delegate(client):
    assert client.identity_provider.session is client._session


def test_get_all_users_without_token_makes_no_request(http, client):
    users, ok = client.get_all_users("directory.example.com", 8443)

    assert ok is False
    assert users == []
    assert client.users == []
    assert http.calls == []


def test_get_all_users_does_not_reauthenticate(http, stub_response, authed):
    authed.set_credentials("sysadm", "new-secret")
    calls_before = len(http.calls)

    users, ok = authed.get_all_users("directory.example.com", 8443)

    assert ok is False
    assert len(http.calls) == calls_before


def test_get_all_users_top_level_array(http, stub_response, authed):
    http.add("GET", LIST_URL, stub_response(200, [{"guid": "g1"}]))

    users, ok = authed.get_all_users("directory.example.com", 8443)

    assert ok is True
    assert len(users) == 1
    user = users[0]
    assert user.guid == "g1"
    assert user.is_active is True
    assert user.is_reportable is False
    assert all(getattr(user, name) is None for name in DIRECTORY_OPTIONAL_FIELDS)


def test_get_all_users_users_envelope(http, stub_response, authed):
    http.add(
        "GET",
        LIST_URL,
        stub_response(200, {"users": [{"guid": "g2", "email": "a@b.com", "is_active": False}]}),
    )

    users, ok = authed.get_all_users("directory.example.com", 8443)

    assert ok is True
    assert len(users) == 1
    assert users[0].guid == "g2"
    assert users[0].email == "a@b.com"
    assert users[0].is_active is False
    assert users[0].is_reportable is False


def test_get_all_users_sends_bearer_to_api_host(http, stub_response, authed):
    http.add("GET", LIST_URL, stub_response(200, []))

    authed.get_all_users("directory.example.com", 8443)

    call = http.calls_to(LIST_URL)[0]
    assert call["headers"]["Authorization"] == "Bearer tok"
    assert call["headers"]["Accept"] == "application/json"


def test_get_all_users_opens_and_closes_session_per_call(http, stub_response, authed, monkeypatch):
    opened = []
    real_init = TransportSession.__init__

    def tracking_init(self, host, *args, **kwargs):
        real_init(self, host, *args, **kwargs)
        opened.append(self)

    monkeypatch.setattr(TransportSession, "__init__", tracking_init)
    http.add("GET", LIST_URL, stub_response(200, []))

    authed.get_all_users("directory.example.com", 8443)
    authed.get_all_users("directory.example.com", 8443)

    assert len(opened) == 2
    assert opened[0] is not opened[1]
    assert all(session.host == "directory.example.com" for session in opened)
    assert all(session.closed for session in opened)
    assert not authed.identity_provider.session.closed


def test_get_all_users_replaces_previous_result(http, stub_response, authed):
    http.add("GET", LIST_URL, stub_response(200, [{"guid": "a"}, {"guid": "b"}]))
    first, _ = authed.get_all_users("directory.example.com", 8443)
    assert [u.guid for u in first] == ["a", "b"]

    http.add("GET", LIST_URL, stub_response(200, [{"guid": "c"}]))
    second, ok = authed.get_all_users("directory.example.com", 8443)

    assert ok is True
    assert [u.guid for u in second] == ["c"]
    assert [u.guid for u in authed.users] == ["c"]


@pytest.mark.parametrize(
    "route",
    [
        "non_200",
        "bad_json",
        "transport",
        "bad_entry",
        "null_flag",
    ],
)
def test_get_all_users_failures_collapse_to_false(http, stub_response, authed, route):
    http.add("GET", LIST_URL, stub_response(200, [{"guid": "old"}]))
    authed.get_all_users("directory.example.com", 8443)

    responses = {
        "non_200": stub_response(500, text="boom"),
        "bad_json": stub_response(200, text="not json"),
        "transport": requests.ConnectionError("unreachable"),
        "bad_entry": stub_response(200, [{"name": "no guid"}]),
        "null_flag": stub_response(200, [{"guid": "g", "is_active": None}]),
    }
    http.add("GET", LIST_URL, responses[route])

    users, ok = authed.get_all_users("directory.example.com", 8443)

    assert ok is False
    assert users == []
    assert authed.users == []
    assert not hasattr(authed, "last_error")


def test_get_all_users_unknown_shape_yields_empty_success(http, stub_response, authed):
    http.add("GET", LIST_URL, stub_response(200, {"items": []}))

    users, ok = authed.get_all_users("directory.example.com", 8443)

    assert ok is True
    assert users == []


def test_set_credentials_clears_both_tokens(authed):
    authed.set_credentials("someone", "else")

    assert authed.is_authenticated is False
    assert authed.identity_provider.is_authenticated is False


def test_create_user_forwards_to_identity_provider(http, stub_response, authed):
    users_url = "https://kc.example.com:443/admin/realms/Corp/users"
    http.add("POST", users_url, stub_response(201, text=""))

    ok = authed.create_user(UserCreationRecord("bob", "bob@example.com"), "Corp")

    assert ok is True
    assert http.calls_to(users_url)[0]["headers"]["Authorization"] == "Bearer tok"


def test_delegate_credential_update_clears_directory_token(http, authed):
    authed.identity_provider.set_credentials("x", "y")

    assert authed.is_authenticated is False
    assert authed.access_token == ""

    users, ok = authed.get_all_users("directory.example.com", 8443)
    assert ok is False
    assert http.calls_to(LIST_URL) == []


def test_create_user_lazy_authentication_is_visible_on_directory_client(http, stub_response, client):
    users_url = "https://kc.example.com:443/admin/realms/Corp/users"
    http.add("POST", TOKEN_URL, stub_response(200, {"access_token": "tok"}))
    http.add("POST", users_url, stub_response(201, text=""))

    assert client.create_user(UserCreationRecord("bob", "bob@example.com"), "Corp") is True
    assert client.access_token == "tok"


def test_from_settings_lists_configured_directory(http, stub_response):
    config = AppConfig(
        identity_provider=IdentityProviderSettings(
            host="kc.example.com", username="sysadm", password="secret", realm="Corp", client_id="directory-app"
        ),
        directory=DirectorySettings("directory.example.com", 8443),
    )
    http.add("POST", TOKEN_URL, stub_response(200, {"access_token": "tok"}))
    http.add("GET", LIST_URL, stub_response(200, [{"guid": "g1"}]))

    with DirectoryClient.from_settings(config) as directory:
        assert directory.authenticate() is True
        users, ok = directory.get_directory_users()

    assert ok is True
    assert [u.guid for u in users] == ["g1"]
    assert http.calls_to(TOKEN_URL)[0]["data"]["client_id"] == "directory-app"


def test_get_directory_users_without_configured_directory(http, authed):
    users, ok = authed.get_directory_users()

    assert ok is False
    assert users == []
    assert http.calls_to(LIST_URL) == []
