"""Tests for key-value storage backends."""

from tgbot_helpers.services.storage import MemoryStorage, SQLiteStorage


class TestMemoryStorage:
    def test_set_get_remove(self):
        storage = MemoryStorage()

        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"

        storage.remove_item("k")
        storage.remove_item("k")
        assert storage.get_item("k") is None


class TestSQLiteStorage:
    def test_creates_directory_and_persists(self, tmp_path):
        path = tmp_path / "nested" / "storage.db"
        storage = SQLiteStorage(path)

        storage.set_item("GROUP_a", "1\n2")
        storage.set_item("GROUP_a", "3")

        reopened = SQLiteStorage(path)
        assert reopened.get_item("GROUP_a") == "3"
        assert reopened.keys() == ["GROUP_a"]

    def test_remove_missing_key(self, tmp_path):
        storage = SQLiteStorage(tmp_path / "storage.db")

        storage.remove_item("missing")

        assert storage.get_item("missing") is None
