import pytest

from scope_commit.storage.scope_store import ScopeStore


class ScriptedPrompter:
    """Prompter that replays fixed answers and records what it was offered."""

    def __init__(self, summary="", commit_type="", scope=""):
        self.summary = summary
        self.commit_type = commit_type
        self.scope = scope
        self.calls = []
        self.offered = {}

    def ask_summary(self):
        self.calls.append("summary")
        return self.summary

    def ask_type(self, candidates):
        self.calls.append("type")
        self.offered["type"] = list(candidates)
        return self.commit_type

    def ask_scope(self, candidates):
        self.calls.append("scope")
        self.offered["scope"] = list(candidates)
        return self.scope


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep settings, logs and the database out of the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.delenv("SCOPE_COMMIT_DB", raising=False)
    monkeypatch.delenv("SCOPE_COMMIT_STORE__PATH", raising=False)


@pytest.fixture
def store(tmp_path):
    scope_store = ScopeStore(tmp_path / "data" / "scopes.db")
    yield scope_store
    scope_store.close()


@pytest.fixture
def unavailable_store(tmp_path):
    """Store whose parent directory is a regular file, so it can never open."""
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    return ScopeStore(blocker / "scopes.db")


@pytest.fixture
def prompter_factory():
    return ScriptedPrompter
