"""Connector facade: schema discovery and create/update/delete/search dispatch.

Usage:
    connector = GuardConnector(load_settings())
    uid = connector.create(ObjectClass.USER, {Name("alice"), Attribute.build("primaryEmail", "a@example.com")})
    connector.search(ObjectClass.GROUP, ContainsAllValuesFilter(Attribute.build("members.User.value", uid.value)),
                     results.append, OperationOptions())
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Set, Tuple

from ..config.settings import ConnectorConfig
from .attributes import Attribute, AttributeDelta, ConnectorObject, OperationOptions, Uid
from .filters import AndFilter, AttributeFilter, Filter, FilterTranslator, NotFilter, OrFilter
from .groups import GroupHandler, create_group_schema
from .guard.exceptions import InvalidObjectClassError
from .guard.rest import GuardRESTClient
from .handler import ObjectHandler, ResultsHandler
from .schema import ObjectClassInfo
from .users import UserHandler, create_user_schema

logger = logging.getLogger(__name__)

# Operation options honoured by search
OPERATION_OPTIONS = (
    "attributes_to_get",
    "return_default_attributes",
    "page_size",
    "paged_results_offset",
    "allow_partial_attribute_values",
)


@dataclass(frozen=True)
class ConnectorSchema:
    """Published schema: one ObjectClassInfo per object class plus search options."""

    object_classes: Tuple[ObjectClassInfo, ...]
    operation_options: Tuple[str, ...] = OPERATION_OPTIONS

    def find(self, object_class: str) -> Optional[ObjectClassInfo]:
        return next((info for info in self.object_classes if info.type == object_class), None)


class GuardSchema:
    """Builds the User and Group schemas once and binds a handler to each."""

    def __init__(self, configuration: ConnectorConfig, client: Any):
        self.configuration = configuration
        self.client = client
        self._handlers: Dict[str, ObjectHandler] = {}

        for schema, handler_cls in ((create_user_schema(), UserHandler), (create_group_schema(), GroupHandler)):
            self._handlers[schema.object_class] = handler_cls(configuration, client, schema)

        self.schema = ConnectorSchema(tuple(h.schema.object_class_info for h in self._handlers.values()))

    def get_schema_handler(self, object_class: str) -> Optional[ObjectHandler]:
        return self._handlers.get(object_class)


def _filter_attribute_names(filter: Filter) -> Set[str]:
    if isinstance(filter, AttributeFilter):
        return {filter.name}
    if isinstance(filter, NotFilter):
        return _filter_attribute_names(filter.filter)
    if isinstance(filter, (AndFilter, OrFilter)):
        return _filter_attribute_names(filter.left) | _filter_attribute_names(filter.right)
    return set()


class GuardConnector:
    """Entry point for an identity-governance caller."""

    def __init__(self, configuration: ConnectorConfig, client: Any = None):
        self.configuration = configuration
        self.client = client if client is not None else GuardRESTClient(configuration)
        self._schema: Optional[GuardSchema] = None

    def _guard_schema(self) -> GuardSchema:
        if self._schema is None:
            self._schema = GuardSchema(self.configuration, self.client)
        return self._schema

    def _handler(self, object_class: str) -> ObjectHandler:
        handler = self._guard_schema().get_schema_handler(object_class)
        if handler is None:
            raise InvalidObjectClassError(f"Unsupported object class: {object_class}")
        return handler

    def schema(self) -> ConnectorSchema:
        return self._guard_schema().schema

    def test(self) -> None:
        self.client.test()

    def create(self, object_class: str, attributes: Iterable[Attribute],
               options: Optional[OperationOptions] = None) -> Uid:
        return self._handler(object_class).create(attributes)

    def update_delta(self, object_class: str, uid: Uid, modifications: Iterable[AttributeDelta],
                     options: Optional[OperationOptions] = None) -> None:
        return self._handler(object_class).update_delta(uid, modifications)

    def delete(self, object_class: str, uid: Uid, options: Optional[OperationOptions] = None) -> None:
        self._handler(object_class).delete(uid)

    def _attributes_to_get(self, handler: ObjectHandler, options: OperationOptions) -> Optional[Set[str]]:
        """None or empty means "defaults only"; an explicit list may be widened with the defaults."""
        if not options.attributes_to_get:
            return None
        requested = set(options.attributes_to_get)
        if options.return_default_attributes:
            requested |= handler.schema.returned_by_default
        return requested

    def search(self, object_class: str, filter: Optional[Filter], handler: ResultsHandler,
               options: Optional[OperationOptions] = None) -> int:
        """Run a search and feed every match to ``handler``.

        Returns:
            Number of results reported by the vendor (totalResults for scans)
        """
        options = options or OperationOptions()
        object_handler = self._handler(object_class)
        attributes_to_get = self._attributes_to_get(object_handler, options)
        allow_partial = options.allow_partial_attribute_values
        page_size = options.page_size
        page_offset = options.paged_results_offset

        guard_filter = FilterTranslator(object_class).translate(filter)

        if guard_filter is not None:
            if guard_filter.is_by_uid():
                return object_handler.get_by_uid(guard_filter.attribute, handler, attributes_to_get, allow_partial)
            if guard_filter.is_by_name():
                return object_handler.get_by_name(guard_filter.attribute, handler, attributes_to_get, allow_partial)
            if guard_filter.is_by_members() and isinstance(object_handler, GroupHandler):
                return object_handler.get_by_members(guard_filter.attribute, handler, attributes_to_get,
                                                     allow_partial, page_size, page_offset)

        if filter is None:
            return object_handler.get_all(handler, attributes_to_get, allow_partial, page_size, page_offset)

        logger.info(f"[search] Filtering {object_class} client-side with {type(filter).__name__}")
        if attributes_to_get:
            attributes_to_get = attributes_to_get | _filter_attribute_names(filter)

        def accept(obj: ConnectorObject) -> bool:
            if not filter.accept(obj):
                return True
            return handler(obj)

        return object_handler.get_all(accept, attributes_to_get, allow_partial, page_size, page_offset)
