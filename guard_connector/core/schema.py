"""Declarative attribute schema and the generic mappers built on it.

Each logical attribute is described once by an ``AttributeDescriptor``: its
type, its vendor field and up to five plain functions that move the value
between the generic attribute bag and the vendor record:

    create_fn(value, model)      write on create
    replace_fn(value, patch)     encode a replacement (None = clear) on update
    add_fn(values, patch)        encode added values (associations)
    remove_fn(values, patch)     encode removed values (associations)
    read_fn(model)               read back a value or an iterable of values

A ``SchemaDefinition`` is an immutable, ordered table of descriptors for one
object class, produced by ``SchemaBuilder``. It is built once and shared
read-only across requests.

Usage:
    sb = SchemaBuilder(ObjectClass.USER)
    sb.add_uid("userId", Types.STRING_CASE_IGNORE, read_fn=lambda m: m.get("id"), fetch_field="id")
    sb.add_name("userName", Types.STRING,
                create_fn=lambda v, m: m.__setitem__("userName", v),
                replace_fn=lambda v, p: p.replace("userName", v),
                read_fn=lambda m: m.get("userName"))
    schema = sb.build()

    model = schema.apply(attributes, new_user_model())
    patch = schema.apply_delta(deltas, PatchOperations())
    obj = to_connector_object(schema, model, None, False)
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .attributes import (
    NAME_NAME,
    UID_NAME,
    Attribute,
    AttributeDelta,
    ConnectorObject,
    Name,
    Uid,
)
from .guard.exceptions import InvalidAttributeValueError, UnsupportedAttributeError

logger = logging.getLogger(__name__)


class Types(str, Enum):
    """Semantic attribute types."""

    STRING = "string"
    STRING_CASE_IGNORE = "stringCaseIgnore"
    BOOLEAN = "boolean"
    DATETIME = "dateTime"
    UUID = "uuid"


class Flags(str, Enum):
    """Attribute metadata flags published with the schema."""

    REQUIRED = "REQUIRED"
    NOT_CREATABLE = "NOT_CREATABLE"
    NOT_UPDATEABLE = "NOT_UPDATEABLE"
    NOT_RETURNED_BY_DEFAULT = "NOT_RETURNED_BY_DEFAULT"
    MULTIVALUED = "MULTIVALUED"


_PYTHON_TYPES = {
    Types.STRING: str,
    Types.STRING_CASE_IGNORE: str,
    Types.UUID: str,
    Types.BOOLEAN: bool,
    Types.DATETIME: datetime,
}


@dataclass(frozen=True)
class AttributeInfo:
    """Externally published metadata of one attribute."""

    name: str
    type: Types
    flags: frozenset
    native_name: Optional[str] = None

    @property
    def multivalued(self) -> bool:
        return Flags.MULTIVALUED in self.flags

    @property
    def required(self) -> bool:
        return Flags.REQUIRED in self.flags

    @property
    def creatable(self) -> bool:
        return Flags.NOT_CREATABLE not in self.flags

    @property
    def updateable(self) -> bool:
        return Flags.NOT_UPDATEABLE not in self.flags

    @property
    def returned_by_default(self) -> bool:
        return Flags.NOT_RETURNED_BY_DEFAULT not in self.flags


@dataclass(frozen=True)
class ObjectClassInfo:
    type: str
    attribute_infos: Tuple[AttributeInfo, ...]

    def find(self, name: str) -> Optional[AttributeInfo]:
        return next((info for info in self.attribute_infos if info.name == name), None)


@dataclass(frozen=True)
class AttributeDescriptor:
    """Mapping rules for one logical attribute."""

    name: str
    type: Types
    multiple: bool = False
    fetch_field: Optional[str] = None
    flags: frozenset = frozenset()
    create_fn: Optional[Callable[[Any, Dict[str, Any]], None]] = None
    replace_fn: Optional[Callable[[Any, Any], None]] = None
    add_fn: Optional[Callable[[List[Any], Any], None]] = None
    remove_fn: Optional[Callable[[List[Any], Any], None]] = None
    read_fn: Optional[Callable[[Dict[str, Any]], Any]] = None
    is_uid: bool = False
    is_name: bool = False

    def __post_init__(self):
        object.__setattr__(self, "flags", frozenset(self.flags))
        if Flags.NOT_CREATABLE in self.flags and self.create_fn is not None:
            raise ValueError(f"Attribute '{self.name}' is NOT_CREATABLE but defines a create function")
        if Flags.NOT_UPDATEABLE in self.flags and (self.replace_fn or self.add_fn or self.remove_fn):
            raise ValueError(f"Attribute '{self.name}' is NOT_UPDATEABLE but defines an update function")

    @property
    def connector_name(self) -> str:
        if self.is_uid:
            return UID_NAME
        if self.is_name:
            return NAME_NAME
        return self.name

    @property
    def vendor_field(self) -> str:
        return self.fetch_field or self.name

    @property
    def returned_by_default(self) -> bool:
        return Flags.NOT_RETURNED_BY_DEFAULT not in self.flags

    @property
    def is_association(self) -> bool:
        return self.add_fn is not None or self.remove_fn is not None

    def info(self) -> AttributeInfo:
        flags = set(self.flags)
        if self.multiple:
            flags.add(Flags.MULTIVALUED)
        native = self.name if (self.is_uid or self.is_name) else None
        return AttributeInfo(self.connector_name, self.type, frozenset(flags), native)

    def _checked(self, values: Iterable[Any]) -> List[Any]:
        expected = _PYTHON_TYPES[self.type]
        result = []
        for value in values:
            if not isinstance(value, expected):
                raise InvalidAttributeValueError(
                    f"Invalid value for '{self.name}': expected {self.type.value}, got {type(value).__name__}"
                )
            result.append(value)
        return result

    def _single(self, values: List[Any]) -> Any:
        if len(values) > 1:
            raise InvalidAttributeValueError(f"Attribute '{self.name}' accepts a single value")
        return values[0] if values else None

    def apply(self, attribute: Attribute, model: Dict[str, Any]) -> None:
        """Write ``attribute`` into the vendor record for create."""
        if self.create_fn is None:
            if Flags.NOT_CREATABLE in self.flags and not self.is_uid and attribute.values:
                raise InvalidAttributeValueError(f"Attribute '{self.name}' cannot be set on create")
            return

        values = self._checked(attribute.values)
        if self.multiple:
            self.create_fn(values, model)
            return

        value = self._single(values)
        if value is None:
            return
        self.create_fn(value, model)

    def apply_delta(self, delta: AttributeDelta, patch: Any) -> None:
        """Encode ``delta`` as patch operations appended to ``patch``."""
        if self.is_association:
            if delta.values_to_add and self.add_fn is not None:
                self.add_fn(self._checked(delta.values_to_add), patch)
            if delta.values_to_remove and self.remove_fn is not None:
                self.remove_fn(self._checked(delta.values_to_remove), patch)

        if self.replace_fn is None or delta.values_to_replace is None:
            return

        values = self._checked(delta.values_to_replace)
        if self.multiple:
            self.replace_fn(values, patch)
        else:
            self.replace_fn(self._single(values), patch)

    def read(self, model: Dict[str, Any]) -> Optional[Attribute]:
        """Read the attribute from a vendor record; None when it has no value."""
        if self.read_fn is None:
            return None
        value = self.read_fn(model)
        if value is None:
            return None

        if self.multiple:
            values = tuple(v for v in value if v is not None and v != "")
            if not values:
                return None
            return Attribute(self.connector_name, values)

        if value == "":
            return None
        return Attribute(self.connector_name, (value,))


class SchemaDefinition:
    """Immutable, ordered descriptor table for one object class."""

    def __init__(self, object_class: str, descriptors: Iterable[AttributeDescriptor]):
        self.object_class = object_class
        ordered = {d.connector_name: d for d in descriptors}
        self._descriptors = MappingProxyType(ordered)
        self._native_names = MappingProxyType({d.name: d for d in ordered.values()})

        uids = [d for d in ordered.values() if d.is_uid]
        names = [d for d in ordered.values() if d.is_name]
        if len(uids) != 1 or len(names) != 1:
            raise ValueError(f"Schema '{object_class}' needs exactly one uid and one name attribute")
        self.uid_descriptor: AttributeDescriptor = uids[0]
        self.name_descriptor: AttributeDescriptor = names[0]
        self.object_class_info = ObjectClassInfo(
            object_class, tuple(d.info() for d in ordered.values())
        )

    def __iter__(self) -> Iterator[AttributeDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def get(self, name: str) -> Optional[AttributeDescriptor]:
        """Look up by connector name (``__NAME__``) or native name (``userName``)."""
        return self._descriptors.get(name) or self._native_names.get(name)

    @property
    def returned_by_default(self) -> Set[str]:
        return {d.connector_name for d in self if d.returned_by_default}

    def apply(self, attributes: Iterable[Attribute], model: Dict[str, Any], strict: bool = False) -> Dict[str, Any]:
        """Map caller attributes onto a blank vendor record (create).

        Raises:
            UnsupportedAttributeError: Unknown attribute in strict mode
            InvalidAttributeValueError: Malformed value or write to a read-only attribute
        """
        for attribute in attributes:
            descriptor = self.get(attribute.name)
            if descriptor is None:
                if strict:
                    raise UnsupportedAttributeError(
                        f"Attribute '{attribute.name}' is not supported by {self.object_class}"
                    )
                logger.debug(f"Ignoring unknown attribute '{attribute.name}' for {self.object_class}")
                continue
            descriptor.apply(attribute, model)
        return model

    def apply_delta(self, deltas: Iterable[AttributeDelta], patch: Any) -> Any:
        """Append the patch operations for ``deltas`` in their iteration order."""
        for delta in deltas:
            descriptor = self.get(delta.name)
            if descriptor is None:
                logger.debug(f"Ignoring delta for unknown attribute '{delta.name}' on {self.object_class}")
                continue
            descriptor.apply_delta(delta, patch)
        return patch

    def should_return(self, descriptor: AttributeDescriptor, attributes_to_get: Optional[Iterable[str]]) -> bool:
        if descriptor.is_uid or descriptor.is_name:
            return True
        # None or empty means "defaults only"
        if not attributes_to_get:
            return descriptor.returned_by_default
        return descriptor.connector_name in attributes_to_get or descriptor.name in attributes_to_get

    def fetch_fields(self, attributes_to_get: Optional[Iterable[str]]) -> Set[str]:
        """Vendor field paths needed to answer a read."""
        if attributes_to_get is not None:
            attributes_to_get = set(attributes_to_get)
        return {d.vendor_field for d in self if self.should_return(d, attributes_to_get)}


def to_connector_object(
    schema: SchemaDefinition,
    source: Optional[Dict[str, Any]],
    attributes_to_get: Optional[Iterable[str]],
    allow_partial_attribute_values: bool,
) -> Optional[ConnectorObject]:
    """Read a vendor record into a generic object; None when there is no record."""
    if source is None:
        return None
    if attributes_to_get is not None:
        attributes_to_get = set(attributes_to_get)

    uid_value = schema.uid_descriptor.read_fn(source)
    if not uid_value:
        raise InvalidAttributeValueError(f"{schema.object_class} record has no '{schema.uid_descriptor.name}'")
    # A record without its name (e.g. a user fetched without userName) is named by its id
    name_value = schema.name_descriptor.read_fn(source) or uid_value
    uid = Uid(uid_value, name_value)
    name = Name(name_value)

    attributes: Dict[str, Attribute] = {}
    for descriptor in schema:
        if descriptor.is_uid or descriptor.is_name:
            continue
        if not schema.should_return(descriptor, attributes_to_get):
            continue
        attribute = descriptor.read(source)
        if attribute is None:
            if allow_partial_attribute_values and descriptor.multiple and not descriptor.returned_by_default:
                attributes[descriptor.connector_name] = Attribute(descriptor.connector_name, (), complete=False)
            continue
        attributes[attribute.name] = attribute

    return ConnectorObject(schema.object_class, uid, name, attributes)


class SchemaBuilder:
    """Accumulates descriptors for one object class.

    Every attribute is registered exactly once; a duplicate registration is a
    programming error and fails immediately.
    """

    def __init__(self, object_class: str):
        self.object_class = object_class
        self._descriptors: List[AttributeDescriptor] = []
        self._names: Set[str] = set()
        self._has_uid = False
        self._has_name = False

    def _register(self, descriptor: AttributeDescriptor) -> AttributeDescriptor:
        if descriptor.name in self._names:
            raise ValueError(f"Attribute '{descriptor.name}' is already defined for {self.object_class}")
        self._names.add(descriptor.name)
        self._descriptors.append(descriptor)
        return descriptor

    def add_uid(self, name: str, type: Types, read_fn: Callable, fetch_field: Optional[str] = None) -> AttributeDescriptor:
        """Register the immutable, server-assigned identifier."""
        if self._has_uid:
            raise ValueError(f"Uid attribute is already defined for {self.object_class}")
        self._has_uid = True
        return self._register(AttributeDescriptor(
            name, type,
            fetch_field=fetch_field,
            flags=frozenset({Flags.NOT_CREATABLE, Flags.NOT_UPDATEABLE}),
            read_fn=read_fn,
            is_uid=True,
        ))

    def add_name(
        self,
        name: str,
        type: Types,
        create_fn: Callable,
        replace_fn: Callable,
        read_fn: Callable,
        fetch_field: Optional[str] = None,
        flags: Iterable[Flags] = (Flags.REQUIRED,),
    ) -> AttributeDescriptor:
        """Register the mutable, human-facing unique name."""
        if self._has_name:
            raise ValueError(f"Name attribute is already defined for {self.object_class}")
        self._has_name = True
        return self._register(AttributeDescriptor(
            name, type,
            fetch_field=fetch_field,
            flags=frozenset(flags),
            create_fn=create_fn,
            replace_fn=replace_fn,
            read_fn=read_fn,
            is_name=True,
        ))

    def add(
        self,
        name: str,
        type: Types,
        create_fn: Optional[Callable] = None,
        replace_fn: Optional[Callable] = None,
        read_fn: Optional[Callable] = None,
        fetch_field: Optional[str] = None,
        flags: Iterable[Flags] = (),
    ) -> AttributeDescriptor:
        return self._register(AttributeDescriptor(
            name, type,
            fetch_field=fetch_field,
            flags=frozenset(flags),
            create_fn=create_fn,
            replace_fn=replace_fn,
            read_fn=read_fn,
        ))

    def add_as_multiple(
        self,
        name: str,
        type: Types,
        create_fn: Optional[Callable] = None,
        add_fn: Optional[Callable] = None,
        remove_fn: Optional[Callable] = None,
        read_fn: Optional[Callable] = None,
        fetch_field: Optional[str] = None,
        flags: Iterable[Flags] = (),
    ) -> AttributeDescriptor:
        """Register a multi-valued attribute; associations pass an add/remove pair."""
        return self._register(AttributeDescriptor(
            name, type,
            multiple=True,
            fetch_field=fetch_field,
            flags=frozenset(flags),
            create_fn=create_fn,
            add_fn=add_fn,
            remove_fn=remove_fn,
            read_fn=read_fn,
        ))

    def build(self) -> SchemaDefinition:
        schema = SchemaDefinition(self.object_class, self._descriptors)
        logger.info(f"The constructed {self.object_class} schema has {len(schema)} attributes")
        return schema
