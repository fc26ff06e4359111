"""Tests for persisted chat groups."""

from tgbot_helpers.services.groups import Group, member_id
from tgbot_helpers.services.storage import MemoryStorage


class TestGroup:
    def test_add_is_idempotent(self, storage):
        group = Group("users", storage)

        assert group.add(42) is True
        assert group.is_member(42) is True
        assert group.add(42) is False
        assert group.members == ["42"]

    def test_numeric_and_string_ids_are_equivalent(self, storage):
        group = Group("users", storage)
        group.add("-100")

        assert group.is_member(-100)
        assert group.add(-100) is False
        assert group.is_member(12.0) is False
        group.add(12.0)
        assert group.is_member(12)

    def test_toggle_alternates_membership(self, storage):
        group = Group("users", storage)

        assert group.toggle(7) is True
        assert group.is_member(7)
        assert group.toggle(7) is False
        assert not group.is_member(7)

    def test_members_keep_insertion_order(self, storage):
        group = Group("users", storage)
        for chat_id in (3, 1, 2):
            group.add(chat_id)

        assert group.members == ["3", "1", "2"]
        assert storage.get_item("GROUP_users") == "3\n1\n2"

    def test_clear_returns_group(self, storage):
        group = Group("users", storage)
        group.add(1)

        assert group.clear() is group
        assert group.members == []

    def test_empty_lines_are_ignored(self):
        group = Group("users", MemoryStorage({"GROUP_users": "\n1\n\n2\n"}))

        assert group.members == ["1", "2"]

    def test_is_member_of_any_group(self, storage):
        a = Group("a", storage)
        b = Group("b", storage)
        b.add(5)

        assert Group.is_member_of([a, b], 5)
        assert Group.is_member_of(b, 5)
        assert not Group.is_member_of(a, 5)
        assert not Group.is_member_of([], 5)

    def test_str_is_name(self, storage):
        assert str(Group("users", storage)) == "users"


def test_member_id_normalizes_integral_floats():
    assert member_id(5.0) == "5"
    assert member_id(5.5) == "5.5"
    assert member_id("abc") == "abc"
