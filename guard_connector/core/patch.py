"""SCIM PATCH operation accumulator (RFC 7644 Section 3.5.2).

Operations are appended in call order and applied by Atlassian Guard in that
order. Removal encodings follow what the API accepts:

  - plain string fields: ``replace`` with ``""``
  - emails / phoneNumbers: ``replace`` with ``[]`` (no null removal for
    composite multi-valued fields)
  - members: ``add`` / ``remove`` carrying only the changed ids
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional

SCIM_PATCH_OP_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:PatchOp"


class PatchOperations:
    """Ordered list of ``{"op", "path", "value"}`` dicts."""

    def __init__(self):
        self.operations: List[Dict[str, Any]] = []

    def _append(self, op: str, path: str, value: Any) -> None:
        self.operations.append({"op": op, "path": path, "value": value})

    def replace(self, path: str, value: Optional[str]) -> None:
        self._append("replace", path, "" if value is None else value)

    def replace_bool(self, path: str, value: Optional[bool]) -> None:
        if value is None:
            return
        self._append("replace", path, value)

    def replace_single(self, path: str, item: Optional[Dict[str, Any]]) -> None:
        """Replace a multi-valued composite field with one item, or clear it."""
        if item is None:
            self.remove_all(path)
            return
        self._append("replace", path, [item])

    def remove_all(self, path: str) -> None:
        self._append("replace", path, [])

    def add_members(self, values: Iterable[str]) -> None:
        self._append("add", "members", [{"value": v} for v in values])

    def remove_members(self, values: Iterable[str]) -> None:
        self._append("remove", "members", [{"value": v} for v in values])

    def has_attributes_change(self) -> bool:
        return bool(self.operations)

    def to_dict(self) -> Dict[str, Any]:
        return {"schemas": [SCIM_PATCH_OP_SCHEMA], "Operations": list(self.operations)}

    def __len__(self) -> int:
        return len(self.operations)

    def __repr__(self) -> str:
        return f"PatchOperations({self.operations!r})"
