"""
Host integration: message buffers, setup wrapping and the git hook.
"""

import stat
from pathlib import Path
from typing import Callable, Iterable, Optional

from loguru import logger

from .core import MessageBuffer, MessageComposer, ScopeCommitError
from .git_ops.repository import GitRepository


HOOK_NAME = "prepare-commit-msg"
HOOK_MARKER = "# installed by scope-commit"
HOOK_SCRIPT = f"""#!/bin/sh
{HOOK_MARKER}
if (: < /dev/tty) 2>/dev/null; then
    exec scope-commit hook "$@" < /dev/tty
fi
"""

DEFAULT_SKIP_SOURCES = ("message", "merge", "squash", "commit")


class TextBuffer:
    """In-memory buffer with an insertion point."""

    def __init__(self, text: str = "", point: int = 0):
        self.text = text
        self.point = point
        self.modified = False

    def insert(self, text: str) -> None:
        self.text = self.text[:self.point] + text + self.text[self.point:]
        self.point += len(text)


class CommitMessageFile(TextBuffer):
    """Git's commit message file, loaded as a buffer with point at the top."""

    def __init__(self, path: Path):
        self.path = Path(path)
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            text = ""
        super().__init__(text)

    def save(self) -> bool:
        """Write the buffer back if it was modified."""
        if not self.modified:
            return False
        self.path.write_text(self.text, encoding="utf-8")
        self.modified = False
        logger.debug(f"Wrote commit message to {self.path}")
        return True


def after_setup(
    setup: Callable[..., MessageBuffer],
    compose: Callable[[MessageBuffer], bool],
) -> Callable[..., MessageBuffer]:
    """Wrap a host's message-buffer setup so a message is composed after it.

    The returned callable runs ``setup``, then ``compose`` on the buffer it
    returns, and marks the buffer modified when text was inserted so the
    host does not treat it as discardable.
    """
    def wrapped(*args, **kwargs) -> MessageBuffer:
        buffer = setup(*args, **kwargs)
        if compose(buffer):
            buffer.modified = True
        return buffer

    return wrapped


def run_prepare_commit_msg(
    message_file: Path,
    source: Optional[str],
    composer: MessageComposer,
    skip_sources: Iterable[str] = DEFAULT_SKIP_SOURCES,
) -> bool:
    """Entry point for git's prepare-commit-msg hook.

    Nothing is composed when git already supplied the message (``-m``,
    merges, squashes, amends). Returns True when the file was rewritten.
    """
    if source and source in set(skip_sources):
        logger.debug(f"Skipping composition for commit source '{source}'")
        return False

    setup = after_setup(CommitMessageFile, composer.compose)
    buffer = setup(message_file)
    try:
        return buffer.save()
    except OSError as e:
        raise ScopeCommitError(f"Failed to write {message_file}: {e}") from e


def install_hook(repo_path: Optional[Path] = None, force: bool = False) -> Path:
    """Install the prepare-commit-msg hook into a repository."""
    repository = GitRepository(repo_path)
    hook_path = repository.hooks_dir / HOOK_NAME

    if hook_path.exists() and not force:
        existing = hook_path.read_text(encoding="utf-8", errors="ignore")
        if HOOK_MARKER not in existing:
            raise HookInstallError(f"A different {HOOK_NAME} hook already exists: {hook_path}")

    hook_path.parent.mkdir(parents=True, exist_ok=True)
    hook_path.write_text(HOOK_SCRIPT, encoding="utf-8")
    hook_path.chmod(hook_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    logger.info(f"Installed {HOOK_NAME} hook at {hook_path}")
    return hook_path


class HookInstallError(ScopeCommitError):
    """Raised when the hook cannot be installed."""
