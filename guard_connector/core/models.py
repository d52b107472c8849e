"""Vendor resource records.

Users and groups are handled as plain dicts mirroring the SCIM JSON returned by
Atlassian Guard; these helpers create blank records and read the few typed
fields that need conversion.
"""
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Optional

import dateutil.parser

SCIM_USER_SCHEMA = "urn:ietf:params:scim:schemas:core:2.0:User"
SCIM_GROUP_SCHEMA = "urn:ietf:params:scim:schemas:core:2.0:Group"


def new_user_model() -> Dict[str, Any]:
    return {"schemas": [SCIM_USER_SCHEMA]}


def new_group_model() -> Dict[str, Any]:
    return {"schemas": [SCIM_GROUP_SCHEMA]}


def ensure_composite(model: Dict[str, Any], field: str) -> Dict[str, Any]:
    """Return the nested record ``model[field]``, allocating it on first write."""
    composite = model.get(field)
    if composite is None:
        composite = {}
        model[field] = composite
    return composite


def composite_value(model: Dict[str, Any], field: str, key: str) -> Any:
    composite = model.get(field)
    if not composite:
        return None
    return composite.get(key)


def parse_iso8601(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, e.g. ``2024-11-14T05:56:39.79755Z`` or ``20241114T055639+0900``."""
    if not value or not value.strip():
        return None
    return dateutil.parser.isoparse(value.strip())


def meta_timestamp(model: Dict[str, Any], key: str) -> Optional[datetime]:
    return parse_iso8601(composite_value(model, "meta", key))
