"""Low-level HTTP client for the Atlassian Guard SCIM API.

Handles the bearer header, SCIM content type and HTTP error mapping.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

import requests

from .exceptions import GuardAPIError

REQUEST_TIMEOUT = 10
SCIM_CONTENT_TYPE = "application/scim+json"

logger = logging.getLogger(__name__)


class GuardClient:
    """HTTP client for one Atlassian Guard SCIM directory.

    Usage:
        client = GuardClient("https://api.atlassian.com/scim/directory/abc", "api-token")
        response = client.get("/Users", params={"count": 10})
    """

    def __init__(self, base_url: str, api_token: str, timeout: int = REQUEST_TIMEOUT):
        """Initialize client.

        Args:
            base_url: SCIM directory root URL
            api_token: Directory API key, sent as a bearer token
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self._api_token = api_token
        self.timeout = timeout

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_token}",
            "Accept": SCIM_CONTENT_TYPE,
        }
        if extra:
            headers.update(extra)
        return headers

    def get(self, path: str, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute GET request.

        Raises:
            GuardAPIError: On HTTP error
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url} params={params}")
        resp = requests.get(url, params=params, headers=self._headers(kwargs.pop("headers", None)),
                            timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def post(self, path: str, json: Optional[Dict[str, Any]] = None, **kwargs) -> requests.Response:
        """Execute POST request with a SCIM JSON body.

        Raises:
            GuardAPIError: On HTTP error
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"POST {url}")
        headers = self._headers({"Content-Type": SCIM_CONTENT_TYPE, **(kwargs.pop("headers", None) or {})})
        resp = requests.post(url, json=json, headers=headers, timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def patch(self, path: str, json: Optional[Dict[str, Any]] = None, **kwargs) -> requests.Response:
        """Execute PATCH request with a SCIM PatchOp body.

        Raises:
            GuardAPIError: On HTTP error
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"PATCH {url}")
        headers = self._headers({"Content-Type": SCIM_CONTENT_TYPE, **(kwargs.pop("headers", None) or {})})
        resp = requests.patch(url, json=json, headers=headers, timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def delete(self, path: str, **kwargs) -> requests.Response:
        """Execute DELETE request.

        Raises:
            GuardAPIError: On HTTP error
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"DELETE {url}")
        resp = requests.delete(url, headers=self._headers(kwargs.pop("headers", None)),
                               timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.

        Raises:
            GuardAPIError: If response status indicates error
        """
        if resp.status_code >= 400:
            raise GuardAPIError(resp.status_code, resp.text, resp.url)
