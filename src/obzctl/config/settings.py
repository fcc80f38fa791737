"""ObzSettings: one frozen object per invocation.

A value set in more than one place resolves in this order:

- keyword arguments (the global CLI flags);
- ``OBZCTL_*`` environment variables, nested with ``__``
  (``OBZCTL_STORAGE__BACKEND=sqlite``);
- the ``obzctl.toml`` found by walking up from the working directory;
- the section model defaults.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from obzctl.config.discovery import find_config
from obzctl.config.models import ArchiveConfig, BoardConfig, StorageConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from an ``obzctl.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                self._data = tomllib.loads(toml_path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as exc:
                raise click.ClickException(f"Invalid TOML in {toml_path}: {exc}") from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during from_cli().
_tls = threading.local()


class ObzSettings(BaseSettings):
    """Resolved configuration for one obzctl invocation.

    Attributes:
        workspace_root: Directory that relative storage paths hang off
            (parent of ``obzctl.toml``, or CWD when none was found).
        config_path: The TOML file that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "OBZCTL_",
        "env_nested_delimiter": "__",
    }

    workspace_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    storage: StorageConfig = Field(default_factory=StorageConfig)
    board: BoardConfig = Field(default_factory=BoardConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)

    @property
    def storage_root(self) -> Path:
        """Absolute directory holding the board store."""
        path = Path(self.storage.path).expanduser()
        return path if path.is_absolute() else self.workspace_root / path

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, getattr(_tls, "toml_path", None)),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        workspace_root: Path | None = None,
        **cli_flags: Any,
    ) -> ObzSettings:
        """Build settings for a CLI run.

        An explicit *config_path* must exist; otherwise ``obzctl.toml`` is
        discovered by walking up from *workspace_root* (or CWD).
        """
        toml_path: Path | None
        if config_path:
            toml_path = Path(config_path)
            if not toml_path.is_file():
                raise click.ClickException(f"Config file not found: {config_path}")
        else:
            toml_path = find_config(workspace_root)

        root = workspace_root
        if root is None:
            root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(workspace_root=root, config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None
