"""
Unit tests for guard_connector/core/groups.py

Membership mapping, the optional unique displayName check and the
member-containment scan over all group pages.
"""
import pytest

from guard_connector.core.attributes import Attribute, AttributeDelta, Name, Uid
from guard_connector.core.groups import MEMBERS_ATTRIBUTE, GroupHandler, create_group_schema
from guard_connector.core.guard.exceptions import AlreadyExistsError


@pytest.fixture
def handler(config, mock_client):
    return GroupHandler(config, mock_client, create_group_schema())


def _group(group_id, display_name, *member_ids):
    return {
        "id": group_id,
        "displayName": display_name,
        "members": [{"value": m, "type": "User"} for m in member_ids],
    }


def _serve_groups(mock_client, groups):
    """Make get_groups feed ``groups`` to the page handler until it stops."""
    def get_groups(handler, page_size, page_offset, fetch_fields):
        for group in groups:
            if not handler(group):
                break
        return len(groups)
    mock_client.get_groups.side_effect = get_groups


# ============================================================================
# Create / update
# ============================================================================

def test_create_group_with_members(handler, mock_client):
    uid = handler.create([Name("Engineering"), Attribute.build(MEMBERS_ATTRIBUTE, "user-1", "user-2")])

    assert uid.value == "group-1"
    model = mock_client.create_group.call_args[0][0]
    assert model["displayName"] == "Engineering"
    assert model["members"] == [{"value": "user-1"}, {"value": "user-2"}]


def test_membership_delta_adds_and_removes_only_changed_ids(handler, mock_client):
    handler.update_delta(Uid("group-1"), [
        AttributeDelta.build_multi(MEMBERS_ATTRIBUTE, add=["user-3", "user-4"], remove=["user-1"]),
    ])

    patch = mock_client.patch_group.call_args[0][1]
    assert patch.operations == [
        {"op": "add", "path": "members", "value": [{"value": "user-3"}, {"value": "user-4"}]},
        {"op": "remove", "path": "members", "value": [{"value": "user-1"}]},
    ]


def test_membership_delta_with_only_removal(handler, mock_client):
    handler.update_delta(Uid("group-1"), [AttributeDelta.build_multi(MEMBERS_ATTRIBUTE, remove=["user-1"])])

    patch = mock_client.patch_group.call_args[0][1]
    assert patch.to_dict() == {
        "schemas": ["urn:ietf:params:scim:api:messages:2.0:PatchOp"],
        "Operations": [{"op": "remove", "path": "members", "value": [{"value": "user-1"}]}],
    }


def test_rename_group(handler, mock_client):
    handler.update_delta(Uid("group-1"), [AttributeDelta.build("__NAME__", "Platform")])
    patch = mock_client.patch_group.call_args[0][1]
    assert patch.operations == [{"op": "replace", "path": "displayName", "value": "Platform"}]


def test_empty_membership_delta_skips_patch(handler, mock_client):
    handler.update_delta(Uid("group-1"), [AttributeDelta.build_multi(MEMBERS_ATTRIBUTE)])
    mock_client.patch_group.assert_not_called()


def test_delete_group(handler, mock_client):
    handler.delete(Uid("group-1"))
    mock_client.delete_group.assert_called_once_with(Uid("group-1"))


# ============================================================================
# Unique displayName check
# ============================================================================

def test_unique_check_disabled_does_not_look_up(handler, mock_client):
    handler.create([Name("Engineering")])
    mock_client.get_group_by_name.assert_not_called()
    mock_client.create_group.assert_called_once()


def test_unique_check_rejects_case_insensitive_duplicate(config_factory, mock_client):
    handler = GroupHandler(config_factory(unique_check_group_display_name=True), mock_client, create_group_schema())
    mock_client.get_group_by_name.return_value = {"id": "group-7", "displayName": "ENGINEERING"}

    with pytest.raises(AlreadyExistsError, match="Engineering"):
        handler.create([Name("Engineering")])

    mock_client.get_group_by_name.assert_called_once_with(Name("Engineering"), set(), page_size=1)
    mock_client.create_group.assert_not_called()


def test_unique_check_passes_when_name_is_free(config_factory, mock_client):
    handler = GroupHandler(config_factory(unique_check_group_display_name=True), mock_client, create_group_schema())
    mock_client.get_group_by_name.return_value = None

    uid = handler.create([Name("Engineering")])

    assert uid.value == "group-1"
    mock_client.create_group.assert_called_once()


# ============================================================================
# Read
# ============================================================================

def test_read_members_filters_user_references(handler, group_model):
    obj = handler.to_connector_object(group_model, None, False)
    assert obj.uid.value == "group-1"
    assert obj.name.value == "Engineering"
    assert obj.values(MEMBERS_ATTRIBUTE) == ("user-1", "user-2")


def test_read_name_falls_back_to_id(handler):
    obj = handler.to_connector_object({"id": "group-5", "members": []}, None, False)
    assert obj.name.value == "group-5"
    assert obj.get(MEMBERS_ATTRIBUTE) is None


# ============================================================================
# Member-containment scan
# ============================================================================

def test_get_by_members_skips_ignored_and_partial_groups(config_factory, mock_client):
    config = config_factory(ignore_groups=frozenset({"Service-Accounts"}))
    handler = GroupHandler(config, mock_client, create_group_schema())
    _serve_groups(mock_client, [
        _group("g1", "SERVICE-ACCOUNTS", "id1", "id2"),
        _group("g2", "only-one", "id1"),
        _group("g3", "both", "id1", "id2", "id3"),
    ])
    results = []

    def collect(obj):
        results.append(obj)
        return True

    handler.get_by_members(Attribute.build(MEMBERS_ATTRIBUTE, "id1", "id2"), collect)

    assert [obj.name.value for obj in results] == ["both"]


def test_get_by_members_stops_when_handler_returns_false(handler, mock_client):
    _serve_groups(mock_client, [
        _group("g1", "first", "id1"),
        _group("g2", "second", "id1"),
    ])
    results = []

    def collect_one(obj):
        results.append(obj)
        return False

    handler.get_by_members(Attribute.build(MEMBERS_ATTRIBUTE, "id1"), collect_one)

    assert [obj.uid.value for obj in results] == ["g1"]


def test_get_by_members_always_fetches_members(handler, mock_client):
    _serve_groups(mock_client, [])

    handler.get_by_members(Attribute.build(MEMBERS_ATTRIBUTE, "id1"), lambda obj: True,
                           attributes_to_get={"meta.created"}, page_size=20)

    args = mock_client.get_groups.call_args[0]
    assert args[1] == 20
    assert args[3] == {"id", "displayName", "members", "meta.created"}
