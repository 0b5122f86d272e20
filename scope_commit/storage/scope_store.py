"""
Persistent per-project scope storage for Scope Commit.

Scopes are remembered as unique (project, scope) pairs in a small SQLite
database so they can be offered again as completion candidates.
"""

import sqlite3
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

from loguru import logger


SCHEMA = """
CREATE TABLE IF NOT EXISTS scopes (
    project TEXT NOT NULL,
    scope TEXT NOT NULL,
    UNIQUE (project, scope)
)
"""


class StorageError(Exception):
    """Base exception for scope storage failures."""


class StorageUnavailable(StorageError):
    """The backing database could not be opened or created."""


class StorageWriteError(StorageError):
    """A scope could not be written to an already opened database."""


class ScopeStore:
    """Project-partitioned set of known commit scopes."""

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path).expanduser()
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self._warned = False

    def open(self) -> sqlite3.Connection:
        """Return a usable connection, creating the database and schema if needed."""
        with self._lock:
            if self._connection is not None and self._is_valid():
                return self._connection

            self._discard()
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                connection = sqlite3.connect(str(self.db_path), check_same_thread=False)
            except (OSError, sqlite3.Error) as e:
                raise StorageUnavailable(f"Cannot open scope database {self.db_path}: {e}") from e

            try:
                with connection:
                    connection.execute(SCHEMA)
            except sqlite3.Error as e:
                connection.close()
                raise StorageUnavailable(f"Cannot initialize scope database {self.db_path}: {e}") from e

            self._connection = connection
            logger.debug(f"Opened scope database at {self.db_path}")
            return connection

    def _is_valid(self) -> bool:
        """Check that the cached handle is open and its file still exists."""
        if not self.db_path.exists():
            logger.debug(f"Scope database {self.db_path} disappeared, reopening")
            return False
        try:
            self._connection.execute("SELECT 1")
        except sqlite3.ProgrammingError:
            # Closed connection
            return False
        return True

    def _discard(self) -> None:
        if self._connection is not None:
            try:
                self._connection.close()
            except sqlite3.Error as e:
                logger.debug(f"Failed to close stale scope database handle: {e}")
            self._connection = None

    def close(self) -> None:
        """Drop the current handle; the next operation reopens it."""
        with self._lock:
            self._discard()

    def scopes_for_project(self, project: str) -> List[str]:
        """Get every scope saved for a project, sorted ascending.

        An unavailable database degrades to an empty list; the failure is
        logged as a warning the first time it happens.
        """
        with self._lock:
            try:
                connection = self.open()
                rows = connection.execute(
                    "SELECT scope FROM scopes WHERE project = ? ORDER BY scope ASC",
                    (project,)
                ).fetchall()
            except StorageUnavailable as e:
                self._warn_once(e)
                return []
            except sqlite3.Error as e:
                self._warn_once(StorageUnavailable(f"Cannot read scopes for {project}: {e}"))
                return []

        return [row[0] for row in rows]

    def save_scope(self, project: str, scope: str) -> None:
        """Remember a scope for a project. Saving an existing pair is a no-op."""
        with self._lock:
            try:
                connection = self.open()
            except StorageUnavailable as e:
                self._warn_once(e)
                raise
            try:
                with connection:
                    cursor = connection.execute(
                        "INSERT OR IGNORE INTO scopes (project, scope) VALUES (?, ?)",
                        (project, scope)
                    )
            except sqlite3.Error as e:
                raise StorageWriteError(f"Failed to save scope '{scope}' for {project}: {e}") from e

        if cursor.rowcount:
            logger.debug(f"Saved new scope '{scope}' for project {project}")
        else:
            logger.debug(f"Scope '{scope}' already known for project {project}")

    def projects(self) -> List[str]:
        """Get every project that has at least one saved scope, sorted ascending."""
        with self._lock:
            try:
                connection = self.open()
                rows = connection.execute(
                    "SELECT DISTINCT project FROM scopes ORDER BY project ASC"
                ).fetchall()
            except StorageUnavailable as e:
                self._warn_once(e)
                return []
            except sqlite3.Error as e:
                self._warn_once(StorageUnavailable(f"Cannot list projects: {e}"))
                return []

        return [row[0] for row in rows]

    def _warn_once(self, error: StorageError) -> None:
        if not self._warned:
            logger.warning(f"Scope cache unavailable, continuing without it: {error}")
            self._warned = True
        else:
            logger.debug(f"Scope cache still unavailable: {error}")


_stores: Dict[Path, ScopeStore] = {}
_stores_lock = threading.Lock()


def get_scope_store(db_path: Union[str, Path]) -> ScopeStore:
    """Get the process-wide store for a database path."""
    path = Path(db_path).expanduser().resolve()
    with _stores_lock:
        store = _stores.get(path)
        if store is None:
            store = ScopeStore(path)
            _stores[path] = store
        return store
