"""Group object class: schema declaration, handler and member-containment search."""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional

from .attributes import Attribute, Name, ObjectClass, Uid
from .guard.exceptions import AlreadyExistsError
from .handler import ObjectHandler, ResultsHandler
from .models import meta_timestamp, new_group_model
from .patch import PatchOperations
from .schema import Flags, SchemaBuilder, SchemaDefinition, Types

logger = logging.getLogger(__name__)

MEMBERS_ATTRIBUTE = "members.User.value"


def _create_members(values: List[str], dest: Dict[str, Any]) -> None:
    dest["members"] = [{"value": v} for v in values]


def _read_members(source: Dict[str, Any]):
    members = source.get("members")
    if members is None:
        return None
    return [m.get("value") for m in members if m.get("type") == "User"]


def _member_ids(source: Dict[str, Any]) -> set:
    return {m.get("value") for m in source.get("members") or []}


def create_group_schema() -> SchemaDefinition:
    sb = SchemaBuilder(ObjectClass.GROUP)

    # __UID__
    # The id for the group. Must be unique and unchangeable.
    sb.add_uid("groupId", Types.STRING_CASE_IGNORE, read_fn=lambda source: source.get("id"), fetch_field="id")

    # displayName (__NAME__)
    # Not unique on the vendor side, treated as unique handle here. Case-insensitive.
    sb.add_name(
        "displayName",
        Types.STRING_CASE_IGNORE,
        create_fn=lambda value, dest: dest.__setitem__("displayName", value),
        replace_fn=lambda value, dest: dest.replace("displayName", value),
        read_fn=lambda source: source.get("displayName") or source.get("id"),
    )

    # Association
    sb.add_as_multiple(
        MEMBERS_ATTRIBUTE,
        Types.UUID,
        create_fn=_create_members,
        add_fn=lambda values, dest: dest.add_members(values),
        remove_fn=lambda values, dest: dest.remove_members(values),
        read_fn=_read_members,
        fetch_field="members",
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


class GroupHandler(ObjectHandler):
    """Service for provisioning Atlassian Guard groups."""

    object_class = ObjectClass.GROUP

    def _new_model(self) -> Dict[str, Any]:
        return new_group_model()

    def _vendor_create(self, model: Dict[str, Any]) -> Uid:
        return self.client.create_group(model)

    def _vendor_patch(self, uid: Uid, patch: PatchOperations) -> None:
        self.client.patch_group(uid, patch)

    def _vendor_delete(self, uid: Uid) -> None:
        self.client.delete_group(uid)

    def _vendor_get(self, uid: Uid, fetch_fields: set) -> Optional[Dict[str, Any]]:
        return self.client.get_group(uid, fetch_fields)

    def _vendor_get_by_name(self, name: Name, fetch_fields: set) -> Optional[Dict[str, Any]]:
        return self.client.get_group_by_name(name, fetch_fields)

    def _vendor_list(self, handler, page_size: int, page_offset: int, fetch_fields: set) -> int:
        return self.client.get_groups(handler, page_size, page_offset, fetch_fields)

    def create(self, attributes: Iterable[Attribute]) -> Uid:
        """Create the group, optionally refusing a case-insensitive duplicate displayName.

        The duplicate check is a single lookup before the create call; it is
        best-effort and races with concurrent creates.

        Raises:
            AlreadyExistsError: If the check is enabled and the name is taken
        """
        model = self.map_create(attributes)
        display_name = model.get("displayName")

        if self.configuration.unique_check_group_display_name and display_name:
            found = self.client.get_group_by_name(Name(display_name), set(), page_size=1)
            if found is not None and (found.get("displayName") or "").lower() == display_name.lower():
                raise AlreadyExistsError(f'Group "{display_name}" already exists')

        uid = self._vendor_create(model)
        logger.info(f"[create] Group '{display_name}' created (id={uid.value})")
        return uid

    def get_by_members(self, attribute: Attribute, handler: ResultsHandler,
                       attributes_to_get: Optional[set] = None, allow_partial_attribute_values: bool = False,
                       page_size: int = 0, page_offset: int = 0) -> int:
        """Find groups containing all the given member ids.

        The vendor API only filters groups by displayName, so every group page
        is fetched and filtered here.
        """
        member_ids = set(attribute.values)
        logger.debug(f"[search] Scanning groups for members {sorted(member_ids)}")

        def scan(group: Dict[str, Any]) -> bool:
            if self.configuration.is_ignored_group(group.get("displayName")):
                return True
            if not member_ids.issubset(_member_ids(group)):
                return True
            return handler(self.to_connector_object(group, attributes_to_get, allow_partial_attribute_values))

        fetch_fields = self.schema.fetch_fields(attributes_to_get) | {"members"}
        return self.client.get_groups(scan, page_size, page_offset, fetch_fields)
