"""User object class: schema declaration and handler.

Atlassian Guard supports SCIM v2.0 users:
https://support.atlassian.com/provisioning-users/docs/understand-user-provisioning/
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Optional

from .attributes import ENABLE_NAME, Name, ObjectClass, Uid
from .handler import ObjectHandler
from .models import composite_value, ensure_composite, meta_timestamp, new_user_model
from .patch import PatchOperations
from .schema import Flags, SchemaBuilder, SchemaDefinition, Types
from .validators import join_value_type, split_value_type

logger = logging.getLogger(__name__)

NAME_PARTS = ("formatted", "familyName", "givenName", "middleName", "honorificPrefix", "honorificSuffix")
SIMPLE_STRING_FIELDS = ("displayName", "nickName", "title", "preferredLanguage", "timezone")


def _set_field(field: str) -> Callable[[Any, Dict[str, Any]], None]:
    def create(value: Any, dest: Dict[str, Any]) -> None:
        dest[field] = value
    return create


def _set_name_part(part: str) -> Callable[[Any, Dict[str, Any]], None]:
    def create(value: Any, dest: Dict[str, Any]) -> None:
        ensure_composite(dest, "name")[part] = value
    return create


def _replace(path: str) -> Callable[[Optional[str], PatchOperations], None]:
    return lambda value, dest: dest.replace(path, value)


def _replace_bool(path: str) -> Callable[[Optional[bool], PatchOperations], None]:
    return lambda value, dest: dest.replace_bool(path, value)


def _primary(items: Optional[list]) -> Optional[Dict[str, Any]]:
    if not items:
        return None
    return next((item for item in items if item.get("primary")), None)


# primaryEmail: one scalar backed by the "emails" list

def _email(value: str) -> Dict[str, Any]:
    return {"value": value, "primary": True}


def _create_primary_email(value: str, dest: Dict[str, Any]) -> None:
    dest["emails"] = [_email(value)]


def _replace_primary_email(value: Optional[str], dest: PatchOperations) -> None:
    dest.replace_single("emails", _email(value) if value is not None else None)


def _read_primary_email(source: Dict[str, Any]) -> Optional[str]:
    email = _primary(source.get("emails"))
    return email.get("value") if email else None


# primaryPhoneNumber: "value/type" backed by the "phoneNumbers" list

def _phone_number(encoded: str) -> Dict[str, Any]:
    value, type_ = split_value_type(encoded, "primaryPhoneNumber")
    return {"value": value, "type": type_, "primary": True}


def _create_primary_phone_number(value: str, dest: Dict[str, Any]) -> None:
    phone_number = _phone_number(value)
    dest["phoneNumbers"] = [phone_number]


def _replace_primary_phone_number(value: Optional[str], dest: PatchOperations) -> None:
    if value is None:
        dest.replace_single("phoneNumbers", None)
        return
    dest.replace_single("phoneNumbers", _phone_number(value))


def _read_primary_phone_number(source: Dict[str, Any]) -> Optional[str]:
    phone_number = _primary(source.get("phoneNumbers"))
    if not phone_number:
        return None
    return join_value_type(phone_number.get("value"), phone_number.get("type"))


def _read_groups(source: Dict[str, Any]):
    groups = source.get("groups")
    if groups is None:
        return None
    return [g.get("value") for g in groups if g.get("type") == "Group"]


def create_user_schema() -> SchemaDefinition:
    sb = SchemaBuilder(ObjectClass.USER)

    # __UID__
    # The id for the user. Must be unique and unchangeable.
    sb.add_uid("userId", Types.STRING_CASE_IGNORE, read_fn=lambda source: source.get("id"), fetch_field="id")

    # userName (__NAME__)
    # Unique and changeable, case-sensitive.
    sb.add_name(
        "userName",
        Types.STRING,
        create_fn=_set_field("userName"),
        replace_fn=_replace("userName"),
        read_fn=lambda source: source.get("userName"),
    )

    # __ENABLE__
    sb.add(
        ENABLE_NAME,
        Types.BOOLEAN,
        create_fn=_set_field("active"),
        replace_fn=_replace_bool("active"),
        read_fn=lambda source: source.get("active"),
        fetch_field="active",
    )

    for part in NAME_PARTS:
        sb.add(
            f"name.{part}",
            Types.STRING,
            create_fn=_set_name_part(part),
            replace_fn=_replace(f"name.{part}"),
            read_fn=lambda source, part=part: composite_value(source, "name", part),
        )

    for field in SIMPLE_STRING_FIELDS:
        sb.add(
            field,
            Types.STRING,
            create_fn=_set_field(field),
            replace_fn=_replace(field),
            read_fn=lambda source, field=field: source.get(field),
        )

    sb.add(
        "active",
        Types.BOOLEAN,
        create_fn=_set_field("active"),
        replace_fn=_replace_bool("active"),
        read_fn=lambda source: source.get("active"),
    )
    sb.add(
        "primaryEmail",
        Types.STRING_CASE_IGNORE,
        create_fn=_create_primary_email,
        replace_fn=_replace_primary_email,
        read_fn=_read_primary_email,
        fetch_field="emails",
    )
    sb.add(
        "primaryPhoneNumber",
        Types.STRING,
        create_fn=_create_primary_phone_number,
        replace_fn=_replace_primary_phone_number,
        read_fn=_read_primary_phone_number,
        fetch_field="phoneNumbers",
    )

    # Association: populated by the vendor, group membership is managed from the Group side
    sb.add_as_multiple(
        "groups",
        Types.UUID,
        read_fn=_read_groups,
        flags=(Flags.NOT_CREATABLE, Flags.NOT_UPDATEABLE),
    )

    # Metadata (readonly)
    sb.add(
        "meta.created",
        Types.DATETIME,
        read_fn=lambda source: meta_timestamp(source, "created"),
        flags=(Flags.NOT_CREATABLE, Flags.NOT_UPDATEABLE),
    )
    sb.add(
        "meta.lastModified",
        Types.DATETIME,
        read_fn=lambda source: meta_timestamp(source, "lastModified"),
        flags=(Flags.NOT_CREATABLE, Flags.NOT_UPDATEABLE),
    )

    return sb.build()


class UserHandler(ObjectHandler):
    """Service for provisioning Atlassian Guard users."""

    object_class = ObjectClass.USER

    def _new_model(self) -> Dict[str, Any]:
        return new_user_model()

    def _vendor_create(self, model: Dict[str, Any]) -> Uid:
        return self.client.create_user(model)

    def _vendor_patch(self, uid: Uid, patch: PatchOperations) -> None:
        self.client.patch_user(uid, patch)

    def _vendor_delete(self, uid: Uid) -> None:
        self.client.delete_user(uid)

    def _vendor_get(self, uid: Uid, fetch_fields: set) -> Optional[Dict[str, Any]]:
        return self.client.get_user(uid, fetch_fields)

    def _vendor_get_by_name(self, name: Name, fetch_fields: set) -> Optional[Dict[str, Any]]:
        return self.client.get_user_by_name(name, fetch_fields)

    def _vendor_list(self, handler, page_size: int, page_offset: int, fetch_fields: set) -> int:
        return self.client.get_users(handler, page_size, page_offset, fetch_fields)
