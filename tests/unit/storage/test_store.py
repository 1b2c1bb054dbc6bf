"""
Unit tests for the raw key-value stores.
"""

import json

import pytest

from eventscout.storage import InMemoryStore, JsonFileStore


class TestInMemoryStore:
    def test_get_set_remove(self):
        store = InMemoryStore({"a": "1"})
        store.set("b", "2")
        store.remove("a")
        store.remove("missing")

        assert store.get("a") is None
        assert store.get("b") == "2"
        assert store.keys() == ["b"]

    def test_clear(self):
        store = InMemoryStore({"a": "1"})
        store.clear()
        assert store.keys() == []


class TestJsonFileStore:
    """Tests for the file-backed store."""

    @pytest.fixture
    def path(self, tmp_path):
        return tmp_path / "nested" / "store.json"

    def test_missing_file_reads_empty(self, path):
        store = JsonFileStore(path)
        assert store.get("anything") is None
        assert store.keys() == []

    def test_set_persists(self, path):
        JsonFileStore(path).set("isLoggedIn", "true")

        assert json.loads(path.read_text(encoding="utf-8")) == {"isLoggedIn": "true"}
        assert JsonFileStore(path).get("isLoggedIn") == "true"

    def test_remove_and_clear(self, path):
        store = JsonFileStore(path)
        store.set("a", "1")
        store.set("b", "2")

        store.remove("a")
        assert store.keys() == ["b"]

        store.clear()
        assert store.keys() == []

    def test_no_temp_files_left(self, path):
        store = JsonFileStore(path)
        store.set("a", "1")
        store.set("a", "2")
        assert [p.name for p in path.parent.iterdir()] == ["store.json"]

    def test_corrupt_file_reads_empty(self, path):
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        store = JsonFileStore(path)
        assert store.get("a") is None

        store.set("a", "1")
        assert store.get("a") == "1"

    def test_non_string_values_ignored(self, path):
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"a": "1", "b": 2, "c": None}), encoding="utf-8")

        assert JsonFileStore(path).keys() == ["a"]

    def test_top_level_array_reads_empty(self, path):
        path.parent.mkdir(parents=True)
        path.write_text("[]", encoding="utf-8")
        assert JsonFileStore(path).keys() == []
