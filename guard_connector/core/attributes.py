"""Generic attribute containers exchanged with the identity-governance caller.

Objects are plain attribute bags: a name mapped to an ordered tuple of values.
Values are restricted to a closed set of variants (str, bool, datetime) so that
every transform in the schema layer can rely on what it receives.

Usage:
    attrs = {Name("alice"), Attribute.build("primaryEmail", "alice@example.com")}
    delta = AttributeDelta.build("name.givenName", [])  # clear the value
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple, Union

UID_NAME = "__UID__"
NAME_NAME = "__NAME__"
ENABLE_NAME = "__ENABLE__"

AttributeValue = Union[str, bool, datetime]
_VALUE_TYPES = (str, bool, datetime)


def _to_values(values: Optional[Iterable[Any]]) -> Optional[Tuple[AttributeValue, ...]]:
    if values is None:
        return None
    result = tuple(values)
    for value in result:
        if not isinstance(value, _VALUE_TYPES):
            raise TypeError(f"Unsupported attribute value type: {type(value).__name__}")
    return result


class ObjectClass:
    USER = "User"
    GROUP = "Group"


@dataclass(frozen=True)
class Attribute:
    """One named attribute with zero or more values.

    ``complete`` is False when only part of the values were returned
    (partial attribute values on search).
    """
    name: str
    values: Tuple[AttributeValue, ...] = ()
    complete: bool = True

    def __post_init__(self):
        object.__setattr__(self, "values", _to_values(self.values))

    @classmethod
    def build(cls, name: str, *values: Any) -> "Attribute":
        """Build an attribute; a single list/tuple argument is taken as the value sequence."""
        if len(values) == 1 and isinstance(values[0], (list, tuple, set, frozenset)):
            values = tuple(values[0])
        return cls(name, tuple(v for v in values if v is not None))

    @classmethod
    def enabled(cls, value: bool) -> "Attribute":
        return cls(ENABLE_NAME, (value,))

    def single_value(self) -> Optional[AttributeValue]:
        """Return the only value, None when empty."""
        if not self.values:
            return None
        if len(self.values) > 1:
            raise ValueError(f"Attribute '{self.name}' has {len(self.values)} values, expected one")
        return self.values[0]


class Uid(Attribute):
    """Server-assigned identifier, optionally carrying the name as a hint."""

    def __init__(self, value: str, name_hint: Optional[str] = None):
        super().__init__(UID_NAME, (value,))
        object.__setattr__(self, "name_hint", name_hint)

    @property
    def value(self) -> str:
        return self.values[0]

    def __repr__(self) -> str:
        return f"Uid({self.value!r}, name_hint={self.name_hint!r})"


class Name(Attribute):
    """Human-facing unique handle of an object."""

    def __init__(self, value: str):
        super().__init__(NAME_NAME, (value,))

    @property
    def value(self) -> str:
        return self.values[0]

    def __repr__(self) -> str:
        return f"Name({self.value!r})"


@dataclass(frozen=True)
class AttributeDelta:
    """Change description for one attribute.

    ``values_to_replace`` set to an empty tuple means "clear the value";
    ``None`` means no replacement was requested.
    """
    name: str
    values_to_replace: Optional[Tuple[AttributeValue, ...]] = None
    values_to_add: Optional[Tuple[AttributeValue, ...]] = None
    values_to_remove: Optional[Tuple[AttributeValue, ...]] = None

    def __post_init__(self):
        for attr in ("values_to_replace", "values_to_add", "values_to_remove"):
            object.__setattr__(self, attr, _to_values(getattr(self, attr)))

    @classmethod
    def build(cls, name: str, replace: Any) -> "AttributeDelta":
        """Replacement delta; a scalar becomes a one-element replacement."""
        if isinstance(replace, (list, tuple, set, frozenset)):
            return cls(name, values_to_replace=tuple(replace))
        if replace is None:
            return cls(name, values_to_replace=())
        return cls(name, values_to_replace=(replace,))

    @classmethod
    def build_multi(cls, name: str, add: Iterable[Any] = (), remove: Iterable[Any] = ()) -> "AttributeDelta":
        return cls(name, values_to_add=tuple(add), values_to_remove=tuple(remove))

    @classmethod
    def enabled(cls, value: bool) -> "AttributeDelta":
        return cls(ENABLE_NAME, values_to_replace=(value,))


@dataclass(frozen=True)
class ConnectorObject:
    """Read result: uid, name and the other attributes keyed by name."""
    object_class: str
    uid: Uid
    name: Name
    attributes: Dict[str, Attribute] = field(default_factory=dict)

    def get(self, name: str) -> Optional[Attribute]:
        if name == UID_NAME:
            return self.uid
        if name == NAME_NAME:
            return self.name
        return self.attributes.get(name)

    def values(self, name: str) -> Tuple[AttributeValue, ...]:
        attr = self.get(name)
        return attr.values if attr is not None else ()


@dataclass(frozen=True)
class OperationOptions:
    """Per-request options supplied by the caller."""
    attributes_to_get: Optional[frozenset] = None
    return_default_attributes: bool = False
    page_size: int = 0
    paged_results_offset: int = 0
    allow_partial_attribute_values: bool = False
