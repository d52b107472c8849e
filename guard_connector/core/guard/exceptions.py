"""Connector exceptions for error handling."""


class GuardError(Exception):
    """Base exception for all connector operations."""
    pass


class GuardAPIError(GuardError):
    """Non-2xx response; carries the status, the SCIM detail text and the request path."""

    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class AlreadyExistsError(GuardError):
    """Creation failed - userName or group displayName already taken."""
    pass


class UnknownIdentityError(GuardError):
    """Update or delete targeted a resource that does not exist."""
    pass


class InvalidAttributeValueError(GuardError):
    """Attribute value is malformed or may not be written."""
    pass


class UnsupportedAttributeError(GuardError):
    """Attribute is not part of the schema (strict schema mode)."""
    pass


class InvalidObjectClassError(GuardError):
    """Object class is neither User nor Group."""
    pass


class ConfigurationError(GuardError):
    """Connector configuration is incomplete or invalid."""
    pass
