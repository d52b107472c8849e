"""Search filter algebra and its translation to Atlassian Guard lookups.

Callers describe searches with a small filter tree:

    EqualsFilter(Name("alice"))
    ContainsAllValuesFilter(Attribute.build("members.User.value", "id1", "id2"))
    AndFilter(EqualsFilter(...), NotFilter(StartsWithFilter(...)))

The vendor API only supports a direct lookup by id or by name, so just two
shapes are translatable:

    - equality on ``__UID__`` or ``__NAME__`` (any object class)
    - contains-all-values on ``members.User.value`` (Group only), answered by
      a client-side scan of every group page

``FilterTranslator.translate`` returns ``None`` for everything else,
including any negation; the caller then lists everything and evaluates the
tree with ``Filter.accept``.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .attributes import NAME_NAME, UID_NAME, Attribute, ConnectorObject, Name, ObjectClass, Uid
from .groups import MEMBERS_ATTRIBUTE

logger = logging.getLogger(__name__)


class Filter:
    """Base class of the filter tree."""

    def accept(self, obj: ConnectorObject) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class AttributeFilter(Filter):
    attribute: Attribute

    @property
    def name(self) -> str:
        return self.attribute.name


class EqualsFilter(AttributeFilter):
    def accept(self, obj: ConnectorObject) -> bool:
        return tuple(obj.values(self.name)) == tuple(self.attribute.values)


class ContainsAllValuesFilter(AttributeFilter):
    def accept(self, obj: ConnectorObject) -> bool:
        return set(self.attribute.values).issubset(obj.values(self.name))


class StartsWithFilter(AttributeFilter):
    def accept(self, obj: ConnectorObject) -> bool:
        if len(self.attribute.values) != 1 or not isinstance(self.attribute.values[0], str):
            return False
        prefix = self.attribute.values[0]
        return any(isinstance(v, str) and v.startswith(prefix) for v in obj.values(self.name))


@dataclass(frozen=True)
class NotFilter(Filter):
    filter: Filter

    def accept(self, obj: ConnectorObject) -> bool:
        return not self.filter.accept(obj)


@dataclass(frozen=True)
class AndFilter(Filter):
    left: Filter
    right: Filter

    def accept(self, obj: ConnectorObject) -> bool:
        return self.left.accept(obj) and self.right.accept(obj)


@dataclass(frozen=True)
class OrFilter(Filter):
    left: Filter
    right: Filter

    def accept(self, obj: ConnectorObject) -> bool:
        return self.left.accept(obj) or self.right.accept(obj)


class FilterType(str, Enum):
    """Translated lookup kinds."""

    EXACT_MATCH = "eq"
    CONTAINS_ALL_VALUES = "ca"


@dataclass(frozen=True)
class GuardFilter:
    """A filter the handlers can answer without a full client-side scan."""

    attribute_name: str
    filter_type: FilterType
    attribute: Attribute

    def is_by_uid(self) -> bool:
        return self.attribute_name == UID_NAME and self.filter_type == FilterType.EXACT_MATCH

    def is_by_name(self) -> bool:
        return self.attribute_name == NAME_NAME and self.filter_type == FilterType.EXACT_MATCH

    def is_by_members(self) -> bool:
        return self.attribute_name == MEMBERS_ATTRIBUTE and self.filter_type == FilterType.CONTAINS_ALL_VALUES


class FilterTranslator:
    """Translate a filter tree for one object class.

    Usage:
        guard_filter = FilterTranslator(ObjectClass.GROUP).translate(filter)
        if guard_filter is None:
            ...  # list everything and apply filter.accept()
    """

    def __init__(self, object_class: str):
        self.object_class = object_class

    def translate(self, filter: Optional[Filter]) -> Optional[GuardFilter]:
        if filter is None:
            return None
        if isinstance(filter, EqualsFilter):
            return self._equals(filter.attribute)
        if isinstance(filter, ContainsAllValuesFilter):
            return self._contains_all_values(filter.attribute)
        logger.debug(f"[search] {type(filter).__name__} is not translatable for {self.object_class}")
        return None

    def _equals(self, attribute: Attribute) -> Optional[GuardFilter]:
        if attribute.name not in (UID_NAME, NAME_NAME):
            # Not supported searching by other attributes
            return None
        if len(attribute.values) != 1:
            return None
        value = attribute.values[0]
        if not isinstance(value, str):
            return None
        if attribute.name == UID_NAME:
            return GuardFilter(UID_NAME, FilterType.EXACT_MATCH, attribute if isinstance(attribute, Uid) else Uid(value))
        return GuardFilter(NAME_NAME, FilterType.EXACT_MATCH, attribute if isinstance(attribute, Name) else Name(value))

    def _contains_all_values(self, attribute: Attribute) -> Optional[GuardFilter]:
        # User has no server-side "groups" filter; group membership is looked up from the Group side
        if self.object_class == ObjectClass.GROUP and attribute.name == MEMBERS_ATTRIBUTE:
            return GuardFilter(MEMBERS_ATTRIBUTE, FilterType.CONTAINS_ALL_VALUES, attribute)
        return None
