"""
Unit tests for the schema store.
"""

import json
from itertools import count

import pytest

from schema_builder.exceptions import DuplicateTitle, NotFound, StorageCorrupted
from schema_builder.schema_store import DEFAULT_COLLECTION_KEY, SchemaEntry, SchemaStore
from schema_builder.storage import MemoryKeyValueStore


def _sequential_ids():
    counter = count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def backend():
    return MemoryKeyValueStore()


@pytest.fixture
def store(backend):
    return SchemaStore(backend, id_factory=_sequential_ids())


def _persisted(backend, key=DEFAULT_COLLECTION_KEY):
    return json.loads(backend.get(key).decode('utf-8'))


class TestCreate:
    """Test cases for SchemaStore.create."""

    def test_create_persists_record_shape(self, store, backend):
        """Test the stored {id, title, schema} layout."""
        entry = store.create("Customer", {"name": "string"})

        assert entry == SchemaEntry(id="id-1", title="Customer", schema={"name": "string"})
        assert _persisted(backend) == [
            {"id": "id-1", "title": "Customer", "schema": {"name": "string"}}
        ]

    def test_create_appends_in_order(self, store):
        """Test that new entries go to the end."""
        store.create("A", {"a": "string"})
        store.create("B", {"b": "string"})

        assert [entry.title for entry in store.list_entries()] == ["A", "B"]

    def test_duplicate_title_rejected(self, store):
        """Test that a second create with the same title fails and stores nothing."""
        store.create("Foo", {"a": "string"})

        with pytest.raises(DuplicateTitle) as exc_info:
            store.create("Foo", {"b": "number"})

        assert exc_info.value.title == "Foo"
        assert len(store.list_entries()) == 1

    def test_titles_compare_case_sensitively(self, store):
        """Test that titles differing in case are distinct."""
        store.create("Foo", {})
        store.create("foo", {})

        assert len(store.list_entries()) == 2

    def test_schema_is_copied(self, store):
        """Test that later changes to the caller's dict are not stored."""
        schema = {"address": {"city": "string"}}
        store.create("Customer", schema)
        schema["address"]["zip"] = "number"

        assert store.get("id-1").schema_object == {"address": {"city": "string"}}

    def test_default_ids_are_unique(self, backend):
        """Test the default id factory."""
        store = SchemaStore(backend)
        first = store.create("A", {})
        second = store.create("B", {})

        assert first.id and second.id
        assert first.id != second.id


class TestRead:
    """Test cases for list_entries, get and find_by_title."""

    def test_empty_store(self, store):
        """Test an absent collection key."""
        assert store.list_entries() == []

    def test_get_and_find(self, store):
        """Test lookups by id and title."""
        store.create("A", {"a": "string"})

        assert store.get("id-1").title == "A"
        assert store.find_by_title("A").id == "id-1"
        assert store.find_by_title("missing") is None

    def test_get_missing_raises(self, store):
        """Test NotFound on unknown ids."""
        with pytest.raises(NotFound):
            store.get("nope")

    def test_custom_collection_key(self, backend):
        """Test storing under another key."""
        store = SchemaStore(backend, collection_key="other", id_factory=_sequential_ids())
        store.create("A", {})

        assert backend.get(DEFAULT_COLLECTION_KEY) is None
        assert _persisted(backend, "other")[0]["title"] == "A"


class TestUpdate:
    """Test cases for SchemaStore.update."""

    def test_update_keeps_id_and_position(self, store):
        """Test in-place replacement."""
        store.create("A", {"a": "string"})
        store.create("B", {"b": "string"})

        updated = store.update("id-1", "A2", {"a": "number"})

        assert updated.id == "id-1"
        assert [(e.id, e.title) for e in store.list_entries()] == [("id-1", "A2"), ("id-2", "B")]
        assert store.get("id-1").schema_object == {"a": "number"}

    def test_update_missing_raises(self, store):
        """Test NotFound leaves the collection untouched."""
        store.create("A", {})

        with pytest.raises(NotFound):
            store.update("nope", "B", {})

        assert [entry.title for entry in store.list_entries()] == ["A"]

    def test_update_can_keep_own_title(self, store):
        """Test re-saving an entry under its current title."""
        store.create("A", {})

        assert store.update("id-1", "A", {"x": "string"}).title == "A"

    def test_rename_collision_allowed_by_default(self, store):
        """Test that update does not check other titles unless asked."""
        store.create("A", {})
        store.create("B", {})

        store.update("id-2", "A", {})

        assert [entry.title for entry in store.list_entries()] == ["A", "A"]

    def test_rename_collision_rejected_when_enabled(self, backend):
        """Test the optional uniqueness check on update."""
        store = SchemaStore(backend, check_duplicates_on_update=True, id_factory=_sequential_ids())
        store.create("A", {})
        store.create("B", {})

        with pytest.raises(DuplicateTitle):
            store.update("id-2", "A", {})

        assert store.update("id-2", "B", {"b": "float"}).title == "B"


class TestDelete:
    """Test cases for SchemaStore.delete."""

    def test_delete_removes_entry(self, store):
        """Test removal keeps the order of the rest."""
        for title in ("A", "B", "C"):
            store.create(title, {})

        store.delete("id-2")

        assert [entry.title for entry in store.list_entries()] == ["A", "C"]

    def test_delete_missing_is_noop(self, store, backend):
        """Test that unknown ids are ignored without rewriting storage."""
        store.create("A", {})
        before = backend.get(DEFAULT_COLLECTION_KEY)

        store.delete("nope")

        assert backend.get(DEFAULT_COLLECTION_KEY) is before
        assert len(store.list_entries()) == 1


class TestCorruptStorage:
    """Test cases for unreadable collections."""

    def test_invalid_json_raises(self):
        """Test undecodable payloads."""
        store = SchemaStore(MemoryKeyValueStore({DEFAULT_COLLECTION_KEY: b"{not json"}))

        with pytest.raises(StorageCorrupted) as exc_info:
            store.list_entries()

        assert exc_info.value.key == DEFAULT_COLLECTION_KEY

    def test_non_list_root_raises(self):
        """Test a JSON object where a list is expected."""
        store = SchemaStore(MemoryKeyValueStore({DEFAULT_COLLECTION_KEY: b'{"id": "x"}'}))

        with pytest.raises(StorageCorrupted):
            store.list_entries()

    def test_invalid_entries_are_skipped(self):
        """Test that malformed records are dropped with the rest kept."""
        payload = json.dumps([
            {"id": "1", "title": "Good", "schema": {"a": "string"}},
            {"title": "No id"},
            "not a record",
            {"id": "2", "title": "Also good", "schema": {}},
        ]).encode('utf-8')
        store = SchemaStore(MemoryKeyValueStore({DEFAULT_COLLECTION_KEY: payload}))

        assert [entry.id for entry in store.list_entries()] == ["1", "2"]

    def test_invalid_entries_survive_writes(self):
        """Test that unreadable records are written back unchanged and in place."""
        legacy = {"id": 1, "title": "Legacy", "schema": {"a": "string"}}
        payload = json.dumps([
            legacy,
            {"id": "x", "title": "Good", "schema": {}},
        ]).encode('utf-8')
        backend = MemoryKeyValueStore({DEFAULT_COLLECTION_KEY: payload})
        store = SchemaStore(backend, id_factory=_sequential_ids())

        store.delete("does-not-exist")
        store.create("New", {"b": "number"})
        store.update("x", "Better", {})
        store.delete("id-1")

        assert _persisted(backend) == [
            legacy,
            {"id": "x", "title": "Better", "schema": {}},
        ]
        assert [entry.title for entry in store.list_entries()] == ["Better"]
