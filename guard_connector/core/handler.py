"""Shared create/update/delete/read flow for one object class.

Subclasses bind the flow to a vendor resource by declaring the schema and the
transport calls; all mapping goes through the ``SchemaDefinition``.
"""
from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Optional

from ..config.settings import ConnectorConfig
from .attributes import Attribute, AttributeDelta, ConnectorObject, Name, Uid
from .patch import PatchOperations
from .schema import SchemaDefinition, to_connector_object

logger = logging.getLogger(__name__)

ResultsHandler = Callable[[ConnectorObject], bool]


class ObjectHandler(ABC):
    """Base handler; subclasses implement the ``_vendor_*`` hooks."""

    object_class: str = ""

    def __init__(self, configuration: ConnectorConfig, client: Any, schema: SchemaDefinition):
        self.configuration = configuration
        self.client = client
        self.schema = schema

    # Vendor hooks
    @abstractmethod
    def _new_model(self) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def _vendor_create(self, model: Dict[str, Any]) -> Uid:
        raise NotImplementedError

    @abstractmethod
    def _vendor_patch(self, uid: Uid, patch: PatchOperations) -> None:
        raise NotImplementedError

    @abstractmethod
    def _vendor_delete(self, uid: Uid) -> None:
        raise NotImplementedError

    @abstractmethod
    def _vendor_get(self, uid: Uid, fetch_fields: set) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def _vendor_get_by_name(self, name: Name, fetch_fields: set) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def _vendor_list(self, handler: Callable[[Dict[str, Any]], bool], page_size: int, page_offset: int,
                     fetch_fields: set) -> int:
        raise NotImplementedError

    # Operations
    def map_create(self, attributes: Iterable[Attribute]) -> Dict[str, Any]:
        return self.schema.apply(attributes, self._new_model(), strict=self.configuration.strict_schema)

    def create(self, attributes: Iterable[Attribute]) -> Uid:
        """Create the resource; the returned Uid is the one assigned by the vendor."""
        model = self.map_create(attributes)
        uid = self._vendor_create(model)
        logger.info(f"[create] {self.object_class} created (id={uid.value})")
        return uid

    def update_delta(self, uid: Uid, modifications: Iterable[AttributeDelta]) -> None:
        """Apply attribute deltas with one PATCH call; no call when nothing changes."""
        patch = self.schema.apply_delta(modifications, PatchOperations())
        if not patch.has_attributes_change():
            logger.info(f"[update] No changes for {self.object_class} id={uid.value}, skipping PATCH")
            return None
        self._vendor_patch(uid, patch)
        logger.info(f"[update] {self.object_class} id={uid.value} patched with {len(patch)} operation(s)")
        return None

    def delete(self, uid: Uid) -> None:
        self._vendor_delete(uid)
        logger.info(f"[delete] {self.object_class} id={uid.value} deleted")

    def to_connector_object(self, source: Optional[Dict[str, Any]], attributes_to_get: Optional[set],
                            allow_partial_attribute_values: bool) -> Optional[ConnectorObject]:
        return to_connector_object(self.schema, source, attributes_to_get, allow_partial_attribute_values)

    def get_by_uid(self, uid: Uid, handler: ResultsHandler, attributes_to_get: Optional[set] = None,
                   allow_partial_attribute_values: bool = False) -> int:
        model = self._vendor_get(uid, self.schema.fetch_fields(attributes_to_get))
        if model is None:
            return 0
        handler(self.to_connector_object(model, attributes_to_get, allow_partial_attribute_values))
        return 1

    def get_by_name(self, name: Name, handler: ResultsHandler, attributes_to_get: Optional[set] = None,
                    allow_partial_attribute_values: bool = False) -> int:
        model = self._vendor_get_by_name(name, self.schema.fetch_fields(attributes_to_get))
        if model is None:
            return 0
        handler(self.to_connector_object(model, attributes_to_get, allow_partial_attribute_values))
        return 1

    def get_all(self, handler: ResultsHandler, attributes_to_get: Optional[set] = None,
                allow_partial_attribute_values: bool = False, page_size: int = 0, page_offset: int = 0) -> int:
        return self._vendor_list(
            lambda model: handler(self.to_connector_object(model, attributes_to_get, allow_partial_attribute_values)),
            page_size,
            page_offset,
            self.schema.fetch_fields(attributes_to_get),
        )
