"""REST facade used by the user and group handlers.

Bundles ``UserService`` and ``GroupService`` behind the flat method set the
handlers call (``create_user``, ``get_groups``, ...).
"""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Optional

from ..attributes import Name, Uid
from .client import GuardClient
from .resources import GroupService, UserService

if TYPE_CHECKING:
    from ...config.settings import ConnectorConfig

logger = logging.getLogger(__name__)


class GuardRESTClient:
    """Transport for one Atlassian Guard directory.

    Usage:
        client = GuardRESTClient(load_settings())
        uid = client.create_user({"userName": "alice"})
    """

    def __init__(self, configuration: "ConnectorConfig", http_client: Optional[GuardClient] = None):
        self.configuration = configuration
        self.http = http_client or GuardClient(
            configuration.scim_base_url,
            configuration.api_token,
            timeout=configuration.request_timeout,
        )
        self.users = UserService(self.http, configuration.default_page_size)
        self.groups = GroupService(self.http, configuration.default_page_size)

    def test(self) -> None:
        """Check connectivity and credentials with a one-record user query."""
        self.http.get("/Users", params={"startIndex": 1, "count": 1})
        logger.info(f"[test] Connected to directory {self.configuration.directory_id}")

    # Users
    def create_user(self, model: Dict[str, Any]) -> Uid:
        return self.users.create(model)

    def patch_user(self, uid: Uid, patch: Any) -> None:
        self.users.patch(uid, patch)

    def get_user(self, uid: Uid, fetch_fields: Optional[Iterable[str]] = None) -> Optional[Dict[str, Any]]:
        return self.users.get(uid, fetch_fields)

    def get_user_by_name(self, name: Name, fetch_fields: Optional[Iterable[str]] = None) -> Optional[Dict[str, Any]]:
        return self.users.get_by_name(name, fetch_fields)

    def get_users(self, handler: Callable[[Dict[str, Any]], bool], page_size: int = 0, page_offset: int = 0,
                  fetch_fields: Optional[Iterable[str]] = None) -> int:
        return self.users.list(handler, page_size, page_offset, fetch_fields)

    def delete_user(self, uid: Uid) -> None:
        self.users.delete(uid)

    # Groups
    def create_group(self, model: Dict[str, Any]) -> Uid:
        return self.groups.create(model)

    def patch_group(self, uid: Uid, patch: Any) -> None:
        self.groups.patch(uid, patch)

    def get_group(self, uid: Uid, fetch_fields: Optional[Iterable[str]] = None) -> Optional[Dict[str, Any]]:
        return self.groups.get(uid, fetch_fields)

    def get_group_by_name(self, name: Name, fetch_fields: Optional[Iterable[str]] = None,
                          page_size: int = 1) -> Optional[Dict[str, Any]]:
        return self.groups.get_by_name(name, fetch_fields, page_size=page_size)

    def get_groups(self, handler: Callable[[Dict[str, Any]], bool], page_size: int = 0, page_offset: int = 0,
                   fetch_fields: Optional[Iterable[str]] = None) -> int:
        return self.groups.list(handler, page_size, page_offset, fetch_fields)

    def delete_group(self, uid: Uid) -> None:
        self.groups.delete(uid)
