"""
Scope Commit - structured commit messages with remembered scopes.

Composes ``type(scope): summary`` commit message headers and remembers, per
project, which scopes have been used so they can be offered again.
"""

__version__ = "1.0.0"

from scope_commit.core import MessageComposer, ComposedMessage, CommitType
from scope_commit.config.settings import Settings
from scope_commit.storage.scope_store import ScopeStore

__all__ = ["MessageComposer", "ComposedMessage", "CommitType", "Settings", "ScopeStore"]
