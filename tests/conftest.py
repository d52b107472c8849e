"""Pytest shared fixtures for connector tests."""
import json
import pathlib
import sys
from unittest.mock import MagicMock

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from guard_connector.config.settings import ConnectorConfig
from guard_connector.core.attributes import Uid


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from hitting a live Atlassian Guard directory.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _blocked(*args, **kwargs):
        raise AssertionError(f"Unexpected network call: {args[0] if args else kwargs.get('url')}")

    for method in ("get", "post", "patch", "delete"):
        monkeypatch.setattr(requests, method, _blocked)


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code: int = 200, url: str = "https://api.example/scim"):
        self._payload = payload
        self.status_code = status_code
        self.url = url
        self.text = json.dumps(payload) if payload is not None else ""

    def json(self):
        return self._payload


@pytest.fixture
def stub_response():
    return StubResponse


# ─────────────────────────────────────────────────────────────────────────────
# Connector fixtures
# ─────────────────────────────────────────────────────────────────────────────
def make_config(**overrides) -> ConnectorConfig:
    base = dict(
        base_url="https://api.example",
        directory_id="dir-1",
        api_token="token-123",
        default_page_size=50,
        ignore_groups=frozenset(),
        unique_check_group_display_name=False,
        strict_schema=False,
        request_timeout=5,
    )
    base.update(overrides)
    return ConnectorConfig(**base)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def mock_client():
    """MagicMock transport implementing the REST client contract."""
    client = MagicMock()
    client.create_user.return_value = Uid("user-1", "foo")
    client.create_group.return_value = Uid("group-1", "Engineering")
    client.get_group_by_name.return_value = None
    return client


@pytest.fixture
def user_model():
    """User record as returned by Atlassian Guard."""
    return {
        "schemas": ["urn:ietf:params:scim:schemas:core:2.0:User"],
        "id": "user-1",
        "userName": "foo",
        "name": {
            "formatted": "Foo Bar",
            "familyName": "Bar",
            "givenName": "Foo",
        },
        "displayName": "Foo Bar",
        "nickName": "",
        "title": "Engineer",
        "active": True,
        "emails": [
            {"value": "other@example.com", "primary": False},
            {"value": "foo@example.com", "primary": True},
        ],
        "phoneNumbers": [{"value": "012-3456-7890", "type": "work", "primary": True}],
        "groups": [
            {"value": "group-1", "type": "Group", "display": "Engineering"},
            {"value": "other", "type": "Other"},
        ],
        "meta": {
            "resourceType": "User",
            "created": "2024-11-14T05:56:39.79755Z",
            "lastModified": "2024-11-15T01:02:03Z",
        },
    }


@pytest.fixture
def group_model():
    """Group record as returned by Atlassian Guard."""
    return {
        "schemas": ["urn:ietf:params:scim:schemas:core:2.0:Group"],
        "id": "group-1",
        "displayName": "Engineering",
        "members": [
            {"value": "user-1", "type": "User", "display": "foo"},
            {"value": "user-2", "type": "User", "display": "bar"},
            {"value": "group-9", "type": "Group"},
        ],
        "meta": {
            "resourceType": "Group",
            "created": "2024-11-14T05:56:39Z",
            "lastModified": "2024-11-14T05:56:39Z",
        },
    }


@pytest.fixture
def config_factory():
    return make_config
