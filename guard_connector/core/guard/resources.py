"""SCIM resource operations (Users, Groups) on top of ``GuardClient``."""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Iterable, Optional

from ..attributes import Name, Uid
from .client import GuardClient
from .exceptions import AlreadyExistsError, GuardAPIError, UnknownIdentityError

logger = logging.getLogger(__name__)

QueryHandler = Callable[[Dict[str, Any]], bool]


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class ResourceService:
    """Create/patch/get/list/delete for one SCIM endpoint."""

    endpoint = ""
    name_field = ""

    def __init__(self, client: GuardClient, default_page_size: int = 50):
        """Initialize resource service.

        Args:
            client: Configured Guard client
            default_page_size: Page size used when the caller does not page
        """
        self.client = client
        self.default_page_size = default_page_size

    @staticmethod
    def _attributes_param(fetch_fields: Optional[Iterable[str]]) -> Dict[str, str]:
        if not fetch_fields:
            return {}
        return {"attributes": ",".join(sorted(fetch_fields))}

    def create(self, model: Dict[str, Any]) -> Uid:
        """Create a resource and return the vendor-assigned Uid.

        Raises:
            AlreadyExistsError: On 409 Conflict
        """
        try:
            resp = self.client.post(self.endpoint, json=model)
        except GuardAPIError as exc:
            if exc.status_code == 409:
                raise AlreadyExistsError(f"{model.get(self.name_field)!r} already exists: {exc.message}") from exc
            raise
        created = resp.json()
        return Uid(created["id"], created.get(self.name_field))

    def patch(self, uid: Uid, operations: Any) -> None:
        """Send a SCIM PatchOp body.

        Raises:
            UnknownIdentityError: On 404 Not Found
        """
        try:
            self.client.patch(f"{self.endpoint}/{uid.value}", json=operations.to_dict())
        except GuardAPIError as exc:
            if exc.status_code == 404:
                raise UnknownIdentityError(f"{self.endpoint}/{uid.value} not found") from exc
            raise

    def delete(self, uid: Uid) -> None:
        """Delete a resource.

        Raises:
            UnknownIdentityError: On 404 Not Found
        """
        try:
            self.client.delete(f"{self.endpoint}/{uid.value}")
        except GuardAPIError as exc:
            if exc.status_code == 404:
                raise UnknownIdentityError(f"{self.endpoint}/{uid.value} not found") from exc
            raise

    def get(self, uid: Uid, fetch_fields: Optional[Iterable[str]] = None) -> Optional[Dict[str, Any]]:
        """Return the resource or None if it does not exist."""
        try:
            resp = self.client.get(f"{self.endpoint}/{uid.value}", params=self._attributes_param(fetch_fields))
        except GuardAPIError as exc:
            if exc.status_code == 404:
                return None
            raise
        return resp.json()

    def get_by_name(self, name: Name, fetch_fields: Optional[Iterable[str]] = None,
                    page_size: int = 1) -> Optional[Dict[str, Any]]:
        """Look up a resource with ``<name_field> eq "<name>"``; None if no match."""
        params = {
            "filter": f"{self.name_field} eq {_quote(name.value)}",
            "startIndex": 1,
            "count": page_size,
            **self._attributes_param(fetch_fields),
        }
        resp = self.client.get(self.endpoint, params=params)
        resources = resp.json().get("Resources") or []
        return resources[0] if resources else None

    def _get_page(self, start_index: int, count: int, fetch_fields: Optional[Iterable[str]]) -> Dict[str, Any]:
        params = {"startIndex": start_index, "count": count, **self._attributes_param(fetch_fields)}
        return self.client.get(self.endpoint, params=params).json()

    def list(self, handler: QueryHandler, page_size: int = 0, page_offset: int = 0,
             fetch_fields: Optional[Iterable[str]] = None) -> int:
        """Feed resources to ``handler`` until it returns False or pages run out.

        A positive ``page_offset`` (1-based) requests exactly one page;
        otherwise every page is fetched from the start.

        Returns:
            totalResults reported by the vendor
        """
        count = page_size if page_size > 0 else self.default_page_size

        if page_offset >= 1:
            body = self._get_page(page_offset, count, fetch_fields)
            for resource in body.get("Resources") or []:
                if not handler(resource):
                    break
            return body.get("totalResults", 0)

        start_index = 1
        while True:
            body = self._get_page(start_index, count, fetch_fields)
            resources = body.get("Resources") or []
            total = body.get("totalResults", 0)
            for resource in resources:
                if not handler(resource):
                    logger.debug(f"[search] Handler stopped {self.endpoint} scan at index {start_index}")
                    return total
            start_index += len(resources)
            if not resources or start_index > total:
                return total


class UserService(ResourceService):
    """Service for Atlassian Guard users."""

    endpoint = "/Users"
    name_field = "userName"


class GroupService(ResourceService):
    """Service for Atlassian Guard groups."""

    endpoint = "/Groups"
    name_field = "displayName"
