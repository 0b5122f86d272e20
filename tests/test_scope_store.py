"""
Unit tests for the persistent scope store.

Run with:
    pytest tests/test_scope_store.py -v
"""

import sqlite3
import threading

import pytest

from scope_commit.storage.scope_store import (
    ScopeStore,
    StorageUnavailable,
    StorageWriteError,
    get_scope_store,
)


# ---------------------------------------------------------------------------
# open()
# ---------------------------------------------------------------------------

class TestOpen:

    def test_creates_file_and_parent_directories(self, store):
        assert not store.db_path.exists()
        store.open()
        assert store.db_path.exists()

    def test_repeated_open_reuses_handle(self, store):
        assert store.open() is store.open()

    def test_schema_enforces_unique_pairs(self, store):
        connection = store.open()
        connection.execute("INSERT INTO scopes VALUES ('widget', 'cache')")
        with pytest.raises(sqlite3.IntegrityError):
            connection.execute("INSERT INTO scopes VALUES ('widget', 'cache')")

    def test_reopens_after_close(self, store):
        first = store.open()
        store.close()
        second = store.open()
        assert second is not first
        second.execute("SELECT 1")

    def test_reopens_when_handle_closed_externally(self, store):
        first = store.open()
        first.close()
        assert store.open() is not first

    def test_reopens_when_file_removed(self, store):
        store.save_scope("widget", "cache")
        store.db_path.unlink()

        assert store.scopes_for_project("widget") == []
        assert store.db_path.exists()

    def test_unavailable_medium_raises(self, unavailable_store):
        with pytest.raises(StorageUnavailable):
            unavailable_store.open()


# ---------------------------------------------------------------------------
# scopes_for_project() / save_scope()
# ---------------------------------------------------------------------------

class TestScopes:

    def test_unknown_project_is_empty(self, store):
        assert store.scopes_for_project("nothing") == []

    def test_saved_scope_is_listed(self, store):
        store.save_scope("widget", "cache")
        assert store.scopes_for_project("widget") == ["cache"]

    def test_save_is_idempotent(self, store):
        store.save_scope("widget", "cache")
        once = store.scopes_for_project("widget")
        store.save_scope("widget", "cache")
        store.save_scope("widget", "cache")
        assert store.scopes_for_project("widget") == once == ["cache"]

    def test_sorted_regardless_of_insertion_order(self, store):
        for scope in ["parser", "cli", "zlib", "api", "cache"]:
            store.save_scope("widget", scope)
        assert store.scopes_for_project("widget") == ["api", "cache", "cli", "parser", "zlib"]

    def test_projects_are_partitioned(self, store):
        store.save_scope("alpha", "parser")
        store.save_scope("beta", "docs")

        assert store.scopes_for_project("alpha") == ["parser"]
        assert store.scopes_for_project("beta") == ["docs"]

    def test_same_scope_in_two_projects(self, store):
        store.save_scope("alpha", "core")
        store.save_scope("beta", "core")
        assert store.scopes_for_project("alpha") == ["core"]
        assert store.scopes_for_project("beta") == ["core"]

    def test_persists_across_instances(self, store):
        store.save_scope("widget", "cache")
        store.close()

        reopened = ScopeStore(store.db_path)
        try:
            assert reopened.scopes_for_project("widget") == ["cache"]
        finally:
            reopened.close()

    def test_projects_listing(self, store):
        store.save_scope("beta", "x")
        store.save_scope("alpha", "y")
        store.save_scope("alpha", "z")
        assert store.projects() == ["alpha", "beta"]


# ---------------------------------------------------------------------------
# Degradation
# ---------------------------------------------------------------------------

class TestUnavailable:

    def test_read_degrades_to_empty(self, unavailable_store):
        assert unavailable_store.scopes_for_project("widget") == []
        assert unavailable_store.projects() == []

    def test_save_raises_unavailable(self, unavailable_store):
        with pytest.raises(StorageUnavailable):
            unavailable_store.save_scope("widget", "cache")

    def test_write_failure_raises_write_error(self, store):
        connection = store.open()
        connection.execute("DROP TABLE scopes")
        # The handle is valid, so open() does not recreate the schema
        with pytest.raises(StorageWriteError):
            store.save_scope("widget", "cache")


# ---------------------------------------------------------------------------
# Process-wide handle
# ---------------------------------------------------------------------------

class TestSharedStore:

    def test_same_path_same_store(self, tmp_path):
        path = tmp_path / "shared.db"
        assert get_scope_store(path) is get_scope_store(str(path))

    def test_concurrent_saves_serialize(self, store):
        scopes = [f"scope{i:02d}" for i in range(20)]

        def worker():
            for scope in scopes:
                store.save_scope("widget", scope)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.scopes_for_project("widget") == scopes

    def test_relative_and_absolute_paths_share_store(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert get_scope_store("relative.db") is get_scope_store(tmp_path / "relative.db")
