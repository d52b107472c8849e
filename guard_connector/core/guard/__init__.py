"""Atlassian Guard SCIM API client library.

Architecture:
- client.py: HTTP client with bearer token and error mapping
- resources.py: User and Group REST operations (create, patch, get, list, delete)
- rest.py: GuardRESTClient, the transport the handlers call
- exceptions.py: Typed exceptions for error handling

Usage:
    from guard_connector.core.guard import GuardClient, UserService

    client = GuardClient("https://api.atlassian.com/scim/directory/abc", "api-token")
    users = UserService(client)
    user = users.get_by_name(Name("alice@example.com"))
"""
from .client import (
    GuardClient,
    REQUEST_TIMEOUT,
    SCIM_CONTENT_TYPE,
)
from .exceptions import (
    GuardError,
    GuardAPIError,
    AlreadyExistsError,
    UnknownIdentityError,
    InvalidAttributeValueError,
    UnsupportedAttributeError,
    InvalidObjectClassError,
    ConfigurationError,
)
from .resources import (
    ResourceService,
    UserService,
    GroupService,
)
from .rest import GuardRESTClient

__all__ = [
    # Client
    "GuardClient",
    "REQUEST_TIMEOUT",
    "SCIM_CONTENT_TYPE",

    # Exceptions
    "GuardError",
    "GuardAPIError",
    "AlreadyExistsError",
    "UnknownIdentityError",
    "InvalidAttributeValueError",
    "UnsupportedAttributeError",
    "InvalidObjectClassError",
    "ConfigurationError",

    # Services
    "ResourceService",
    "UserService",
    "GroupService",
    "GuardRESTClient",
]
