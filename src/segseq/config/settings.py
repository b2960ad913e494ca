"""SegseqSettings: one object for CLI flags, environment and segseq.toml.

Sources, strongest first:

1. keyword arguments (the CLI flags Click parsed)
2. ``SEGSEQ_*`` environment variables, ``__`` separating nested keys
   (``SEGSEQ_DATABASE__URL``)
3. the segseq.toml picked by :func:`segseq.config.discovery.resolve_config_path`
4. defaults baked into :mod:`segseq.config.models`
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from segseq.config.discovery import resolve_config_path
from segseq.config.models import DatabaseConfig, GeneratorEntry, GeneratorOptions
from segseq.errors import ConfigurationError

# File the settings under construction read from; set by from_cli().
_config_file: ContextVar[Path | None] = ContextVar("segseq_config_file", default=None)


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*, reporting syntax errors as configuration errors."""
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigurationError(msg) from exc


class TomlFileSource(PydanticBaseSettingsSource):
    """Whole-document settings source over one segseq.toml."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None) -> None:
        super().__init__(settings_cls)
        self.path = path
        self.document: dict[str, Any] = read_toml(path) if path is not None else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self.document.get(field_name), field_name, True

    def __call__(self) -> dict[str, Any]:
        return dict(self.document)


class SegseqSettings(BaseSettings):
    """Settings for the segseq CLI and its generator registry.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
        database: Connection settings for the segment tables.
        defaults: Generator options shared by every generator.
        generators: Per-generator overrides keyed by generator name.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "SEGSEQ_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # global flags
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    # segseq.toml sections
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    defaults: GeneratorOptions = Field(default_factory=GeneratorOptions)
    generators: dict[str, GeneratorEntry] = Field(default_factory=dict)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml = TomlFileSource(settings_cls, _config_file.get())
        return init_settings, env_settings, toml

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> SegseqSettings:
        """Build settings for one CLI invocation.

        *config_path* is the ``--config`` value; without it the file comes
        from ``SEGSEQ_CONFIG`` or a walk-up from *start*.

        Raises:
            ConfigurationError: Missing explicit config file or invalid TOML.
        """
        path = resolve_config_path(config_path, start)
        token = _config_file.set(path)
        try:
            return cls(config_path=path, **cli_flags)
        finally:
            _config_file.reset(token)

    def options_for(self, name: str) -> GeneratorOptions:
        """Merge ``[defaults]`` with the overrides of generator *name*.

        Fields set explicitly in the generator's section win; everything
        else comes from ``[defaults]``.
        """
        entry = self.generators[name]
        overrides = {
            field: getattr(entry, field)
            for field in entry.model_fields_set
            if field in GeneratorOptions.model_fields
        }
        return self.defaults.model_copy(update=overrides)
