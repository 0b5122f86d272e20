"""
Configuration management with Pydantic validation and environment variable support.
"""

import json
import os
import platform
from pathlib import Path
from typing import List, Literal, Optional, Tuple, Type

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, JsonConfigSettingsSource, PydanticBaseSettingsSource


DEFAULT_COMMIT_TYPES = ["build", "ci", "docs", "feat", "fix", "perf", "refactor", "test"]


def _config_base() -> Path:
    if platform.system() == "Windows":
        return Path(os.environ.get("APPDATA", "~"))
    return Path(os.environ.get("XDG_CONFIG_HOME", "~/.config"))


def _cache_base() -> Path:
    if platform.system() == "Windows":
        return Path(os.environ.get("LOCALAPPDATA", "~"))
    return Path(os.environ.get("XDG_CACHE_HOME", "~/.cache"))


def default_config_path() -> Path:
    """Default location of the user's config file."""
    return (_config_base() / "scope-commit" / "config.json").expanduser()


def default_store_path() -> Path:
    """Default location of the scope database."""
    return (_config_base() / "scope-commit" / "scopes.db").expanduser()


class StoreSettings(BaseModel):
    """Scope store configuration."""

    path: Path = Field(
        default_factory=default_store_path,
        description="SQLite file holding remembered scopes"
    )

    @field_validator("path", mode="after")
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        return v.expanduser()


class CommitSettings(BaseModel):
    """Commit message composition configuration."""

    types: List[str] = Field(
        default_factory=lambda: list(DEFAULT_COMMIT_TYPES),
        description="Commit types offered as completion candidates"
    )
    skip_sources: List[str] = Field(
        default_factory=lambda: ["message", "merge", "squash", "commit"],
        description="prepare-commit-msg sources for which no message is composed"
    )


class UISettings(BaseModel):
    """User interface configuration."""

    use_colors: bool = Field(
        default=True,
        description="Use colored output"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    store: StoreSettings = Field(default_factory=StoreSettings)
    commit: CommitSettings = Field(default_factory=CommitSettings)
    ui: UISettings = Field(default_factory=UISettings)

    model_config = {
        "env_prefix": "SCOPE_COMMIT_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def __init__(self, **kwargs):
        # Short override for the database location
        db_override = os.getenv("SCOPE_COMMIT_DB")
        if db_override:
            store = dict(kwargs.get("store") or {})
            store["path"] = db_override
            kwargs["store"] = store

        super().__init__(**kwargs)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # The user's config file ranks below SCOPE_COMMIT_* variables
        return (
            init_settings,
            env_settings,
            JsonConfigSettingsSource(settings_cls, json_file=default_config_path()),
        )

    @classmethod
    def defaults(cls) -> "Settings":
        """Built-in defaults, ignoring the environment and the config file."""
        return cls.model_construct()

    @classmethod
    def from_file(cls, config_path: Path) -> "Settings":
        """Load settings from a configuration file."""
        if config_path.exists():
            with open(config_path) as f:
                config_data = json.load(f)
            return cls(**config_data)
        return cls()

    def save_to_file(self, config_path: Optional[Path] = None) -> Path:
        """Save current settings to a configuration file."""
        config_path = config_path or self.config_dir / "config.json"
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)
        return config_path

    @property
    def config_dir(self) -> Path:
        """Get the configuration directory."""
        return (_config_base() / "scope-commit").expanduser()

    @property
    def cache_dir(self) -> Path:
        """Get the cache directory."""
        return (_cache_base() / "scope-commit").expanduser()

    @property
    def log_file(self) -> Path:
        """Get the log file path."""
        return self.cache_dir / "scope-commit.log"
