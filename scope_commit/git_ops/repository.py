"""
Git repository lookups used to name projects and install hooks.
"""

from pathlib import Path
from typing import Callable, Optional

from git import InvalidGitRepositoryError, NoSuchPathError, Repo
from loguru import logger


ProjectResolver = Callable[[], str]


class GitRepository:
    """Thin wrapper over the repository enclosing a path."""

    def __init__(self, repo_path: Optional[Path] = None):
        """Initialize Git repository."""
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        self.repo: Optional[Repo] = None
        self._initialize_repo()

    def _initialize_repo(self) -> None:
        """Initialize the Git repository object."""
        try:
            self.repo = Repo(self.repo_path, search_parent_directories=True)
            logger.debug(f"Initialized Git repository at {self.repo.working_dir}")
        except (InvalidGitRepositoryError, NoSuchPathError):
            raise GitRepositoryError(f"Not a Git repository: {self.repo_path}")

    @property
    def is_valid(self) -> bool:
        """Check if this is a valid, non-bare Git repository."""
        return self.repo is not None and not self.repo.bare

    @property
    def root(self) -> Path:
        """Top level of the working tree."""
        if not self.is_valid:
            raise GitRepositoryError(f"Bare repository has no working tree: {self.repo_path}")
        return Path(self.repo.working_tree_dir)

    @property
    def hooks_dir(self) -> Path:
        """Directory git reads hooks from, honouring core.hooksPath."""
        with self.repo.config_reader() as config:
            hooks_path = config.get_value("core", "hooksPath", default="")
        if hooks_path:
            path = Path(hooks_path).expanduser()
            return path if path.is_absolute() else self.root / path
        return Path(self.repo.git_dir) / "hooks"


def resolve_project_name(path: Optional[Path] = None) -> str:
    """Get a short name for the project enclosing ``path``.

    This is the name of the git working tree root, or the last segment of
    ``path`` itself when it is not inside a repository.
    """
    path = Path(path) if path else Path.cwd()
    try:
        return GitRepository(path).root.name
    except GitRepositoryError as e:
        logger.debug(f"Using directory name as project: {e}")
        return path.resolve().name


def project_resolver(path: Optional[Path] = None) -> ProjectResolver:
    """Build a zero-argument resolver bound to ``path`` (or the cwd at call time)."""
    return lambda: resolve_project_name(path)


class GitRepositoryError(Exception):
    """Custom exception for Git repository operations."""
