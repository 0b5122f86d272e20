"""
Commit message composition engine.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol

from loguru import logger

from .git_ops.repository import ProjectResolver
from .storage.scope_store import ScopeStore, StorageError, StorageUnavailable


class CommitType(str, Enum):
    """Commit types offered while composing. Advisory, never enforced."""

    BUILD = "build"
    CI = "ci"
    DOCS = "docs"
    FEAT = "feat"
    FIX = "fix"
    PERF = "perf"
    REFACTOR = "refactor"
    TEST = "test"


COMMIT_TYPES = [commit_type.value for commit_type in CommitType]


@dataclass(frozen=True)
class ComposedMessage:
    """A structured commit message header."""

    type: str
    scope: str
    summary: str

    def render(self) -> str:
        return f"{self.type}({self.scope}): {self.summary}\n\n"


class Prompter(Protocol):
    """Source of the three answers a composition session needs."""

    def ask_summary(self) -> str: ...

    def ask_type(self, candidates: List[str]) -> str: ...

    def ask_scope(self, candidates: List[str]) -> str: ...


class MessageBuffer(Protocol):
    """Text buffer the composed message is inserted into."""

    modified: bool

    def insert(self, text: str) -> None: ...


class MessageComposer:
    """Runs one interactive composition session against a scope store."""

    def __init__(
        self,
        store: ScopeStore,
        resolve_project: ProjectResolver,
        prompter: Prompter,
        commit_types: Optional[List[str]] = None,
    ):
        self.store = store
        self.resolve_project = resolve_project
        self.prompter = prompter
        self.commit_types = list(commit_types) if commit_types else list(COMMIT_TYPES)
        self._storage_warned = False

    def build_message(self) -> ComposedMessage:
        """Collect the message fields and remember the chosen scope.

        Raises EmptySummary when the author gives no summary; nothing is
        asked or saved after that.
        """
        summary = self.prompter.ask_summary().strip()
        if not summary:
            raise EmptySummary()

        project = self.resolve_project()
        logger.debug(f"Composing commit message for project {project}")

        commit_type = self.prompter.ask_type(self.commit_types).strip()
        scope = self.prompter.ask_scope(self.store.scopes_for_project(project)).strip()

        try:
            self.store.save_scope(project, scope)
        except StorageError as e:
            self._warn_storage(e)

        return ComposedMessage(type=commit_type, scope=scope, summary=summary)

    def compose(self, buffer: MessageBuffer) -> bool:
        """Compose a message and insert it into ``buffer``.

        Returns True when text was inserted.
        """
        try:
            message = self.build_message()
        except EmptySummary:
            return False

        try:
            buffer.insert(message.render())
        except OSError as e:
            raise ScopeCommitError(f"Failed to insert commit message: {e}") from e
        return True

    def _warn_storage(self, error: StorageError) -> None:
        # The store reports its own outages
        if self._storage_warned or isinstance(error, StorageUnavailable):
            logger.debug(f"Scope not remembered: {error}")
            return
        logger.warning(f"Scope not remembered: {error}")
        self._storage_warned = True


class ScopeCommitError(Exception):
    """Custom exception for Scope Commit operations."""


class EmptySummary(ScopeCommitError):
    """The author declined to write a summary."""
