from guard_connector.core.patch import SCIM_PATCH_OP_SCHEMA, PatchOperations


def test_empty_accumulator_has_no_changes():
    patch = PatchOperations()
    assert not patch.has_attributes_change()
    assert len(patch) == 0
    assert patch.to_dict() == {"schemas": [SCIM_PATCH_OP_SCHEMA], "Operations": []}


def test_replace_none_clears_with_empty_string():
    patch = PatchOperations()
    patch.replace("title", None)
    assert patch.operations == [{"op": "replace", "path": "title", "value": ""}]


def test_replace_bool_none_emits_nothing():
    patch = PatchOperations()
    patch.replace_bool("active", None)
    assert not patch.has_attributes_change()

    patch.replace_bool("active", False)
    assert patch.operations == [{"op": "replace", "path": "active", "value": False}]


def test_replace_single_wraps_item_or_clears_list():
    patch = PatchOperations()
    patch.replace_single("emails", {"value": "a@example.com", "primary": True})
    patch.replace_single("emails", None)
    assert patch.operations == [
        {"op": "replace", "path": "emails", "value": [{"value": "a@example.com", "primary": True}]},
        {"op": "replace", "path": "emails", "value": []},
    ]


def test_member_operations_keep_call_order():
    patch = PatchOperations()
    patch.remove_members(["u1"])
    patch.add_members(["u2", "u3"])

    body = patch.to_dict()
    assert body["schemas"] == ["urn:ietf:params:scim:api:messages:2.0:PatchOp"]
    assert body["Operations"] == [
        {"op": "remove", "path": "members", "value": [{"value": "u1"}]},
        {"op": "add", "path": "members", "value": [{"value": "u2"}, {"value": "u3"}]},
    ]
    assert len(patch) == 2


def test_to_dict_is_a_snapshot():
    patch = PatchOperations()
    patch.replace("title", "Lead")
    body = patch.to_dict()
    patch.replace("title", "Manager")
    assert len(body["Operations"]) == 1
