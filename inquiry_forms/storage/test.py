"""Tests for storage module.

Tests cover:
- Repository contract on both backends (CRUD, key errors, prefix listing)
- SQLite persistence across connections
- FormStore typed access to forms and signatures
"""

import pytest

from inquiry_forms.errors import StorageError
from inquiry_forms.schema import FieldType, Signature, create_form, new_field
from inquiry_forms.storage import (
    FormStore,
    InMemoryRepository,
    SQLiteRepository,
    open_repository,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(params=["memory", "sqlite"])
def repository(request, tmp_path):
    """Each repository backend, initialized."""
    if request.param == "memory":
        repo = InMemoryRepository()
    else:
        repo = SQLiteRepository(tmp_path / "forms.db")
    repo.initialize()
    yield repo
    repo.close()


@pytest.fixture
def store():
    """A FormStore over an in-memory repository."""
    return FormStore(InMemoryRepository())


# =============================================================================
# Repository Tests
# =============================================================================


class TestRepository:
    """Contract tests shared by every backend."""

    @pytest.mark.unit
    def test_create_and_read(self, repository):
        repository.create("form:a", {"id": "a", "fields": [1, 2]})
        assert repository.read("form:a") == {"id": "a", "fields": [1, 2]}

    @pytest.mark.unit
    def test_read_missing_returns_none(self, repository):
        assert repository.read("form:missing") is None

    @pytest.mark.unit
    def test_create_duplicate_raises(self, repository):
        repository.create("form:a", {})
        with pytest.raises(StorageError, match="already exists"):
            repository.create("form:a", {})

    @pytest.mark.unit
    def test_update_replaces_whole_snapshot(self, repository):
        repository.create("form:a", {"name": "old", "extra": True})
        repository.update("form:a", {"name": "new"})
        assert repository.read("form:a") == {"name": "new"}

    @pytest.mark.unit
    def test_update_missing_raises(self, repository):
        with pytest.raises(StorageError, match="not found"):
            repository.update("form:missing", {})

    @pytest.mark.unit
    def test_delete(self, repository):
        repository.create("form:a", {})
        repository.delete("form:a")
        assert repository.read("form:a") is None

    @pytest.mark.unit
    def test_delete_missing_raises(self, repository):
        with pytest.raises(StorageError):
            repository.delete("form:missing")

    @pytest.mark.unit
    def test_list_keys_by_prefix(self, repository):
        for key in ["form:b", "signature:x", "form:a", "form_%:z"]:
            repository.create(key, {})
        assert repository.list_keys("form:") == ["form:a", "form:b"]
        assert len(repository.list_keys()) == 4

    @pytest.mark.unit
    def test_read_returns_a_copy(self, repository):
        repository.create("form:a", {"items": []})
        snapshot = repository.read("form:a")
        snapshot["items"].append("mutated")
        assert repository.read("form:a") == {"items": []}


class TestSQLiteRepository:
    """SQLite-specific behavior."""

    @pytest.mark.unit
    def test_requires_initialize(self, tmp_path):
        repo = SQLiteRepository(tmp_path / "forms.db")
        with pytest.raises(RuntimeError, match="not initialized"):
            repo.read("form:a")

    @pytest.mark.unit
    def test_persists_across_connections(self, tmp_path):
        db_path = tmp_path / "nested" / "forms.db"
        first = SQLiteRepository(db_path)
        first.initialize()
        first.create("form:a", {"id": "a"})
        first.close()

        second = SQLiteRepository(db_path)
        second.initialize()
        assert second.read("form:a") == {"id": "a"}
        second.close()

    @pytest.mark.unit
    def test_open_repository_uses_env_path(self, tmp_path, monkeypatch):
        db_path = tmp_path / "env.db"
        monkeypatch.setenv("FORMS_DB_PATH", str(db_path))
        repo = open_repository()
        try:
            assert repo.db_path == db_path
            assert db_path.exists()
        finally:
            repo.close()


# =============================================================================
# FormStore Tests
# =============================================================================


class TestFormStore:
    """Tests for FormStore."""

    @pytest.mark.unit
    def test_create_and_get_form(self, store):
        form = create_form("Contact", form_id="f1")
        form.fields.append(new_field(FieldType.SELECT, field_id="topic"))
        store.create_form(form)

        loaded = store.get_form("f1")
        assert loaded.to_json_dict() == form.to_json_dict()
        assert loaded.fields[0].options == ["Option 1", "Option 2"]

    @pytest.mark.unit
    def test_get_missing_form(self, store):
        assert store.get_form("nope") is None
        with pytest.raises(StorageError):
            store.require_form("nope")

    @pytest.mark.unit
    def test_create_duplicate_form_raises(self, store):
        store.create_form(create_form(form_id="f1"))
        with pytest.raises(StorageError):
            store.create_form(create_form(form_id="f1"))

    @pytest.mark.unit
    def test_save_form_upserts(self, store):
        form = create_form("First", form_id="f1")
        store.save_form(form)
        form.name = "Renamed"
        store.save_form(form)
        assert store.get_form("f1").name == "Renamed"
        assert len(store.list_forms()) == 1

    @pytest.mark.unit
    def test_list_forms_most_recent_first(self, store):
        store.create_form(create_form("Old", form_id="a", timestamp="2024-01-01T00:00:00.000Z"))
        store.create_form(create_form("New", form_id="b", timestamp="2024-06-01T00:00:00.000Z"))
        assert [f.name for f in store.list_forms()] == ["New", "Old"]

    @pytest.mark.unit
    def test_list_forms_ignores_signatures(self, store):
        store.create_form(create_form(form_id="f1"))
        store.save_signature(Signature(id="s1", name="Default", content="Regards"))
        assert [f.id for f in store.list_forms()] == ["f1"]

    @pytest.mark.unit
    def test_delete_form(self, store):
        store.create_form(create_form(form_id="f1"))
        store.delete_form("f1")
        assert store.get_form("f1") is None
        with pytest.raises(StorageError):
            store.delete_form("f1")

    @pytest.mark.unit
    def test_signature_roundtrip(self, store):
        signature = Signature(
            id="s1", name="Sales", content="Best,\nSales", is_default=True
        )
        store.save_signature(signature)
        assert store.get_signature("s1") == signature
        assert store.list_signatures() == [signature]

        store.delete_signature("s1")
        assert store.list_signatures() == []
