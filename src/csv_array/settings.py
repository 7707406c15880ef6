"""Settings for the :mod:`csv_array` command line.

Loaded with `pydantic-settings`. Sources, lowest to highest precedence:
1) `settings.toml` (current working directory)
2) `.env` (current working directory)
3) environment variables (prefix: `CSV_ARRAY_`)
4) explicit overrides (`Settings.load(...)` / CLI options)

Library callers pass options to :func:`csv_array.open_array` directly; these
settings only supply defaults for the CLI.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, TomlConfigSettingsSource

from csv_array.options import WriteBack

ENV_PREFIX = "CSV_ARRAY_"


def _coerce_log_level(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("log_level must be an int or a log level name")
    if isinstance(value, int):
        return value

    text = str(value).strip()
    if not text:
        return logging.WARNING
    if text.isdigit():
        return int(text)

    mapped = logging.getLevelNamesMapping().get(text.upper())
    if isinstance(mapped, int):
        return mapped
    raise ValueError(f"Invalid log_level: {value!r}")


class Settings(BaseSettings):
    """Defaults for opening arrays from the command line."""

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix=ENV_PREFIX,
        env_file=".env",
    )

    separator: str = Field(default=",", min_length=1, max_length=1)
    write_back: WriteBack = Field(default=WriteBack.DEFERRED)
    encoding: str = Field(default="utf-8")

    log_format: Literal["text", "ndjson"] = Field(default="text")
    log_level: int = Field(default=logging.WARNING)

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> int:
        return _coerce_log_level(value)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_files = None
        if hasattr(init_settings, "init_kwargs"):
            toml_files = init_settings.init_kwargs.get("_csv_array_toml_files")  # type: ignore[attr-defined]
        if toml_files is None:
            toml_files = [Path.cwd() / "settings.toml"]

        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=toml_files),
            file_secret_settings,
        )

    @classmethod
    def load(cls, *, cwd: Path | None = None, **overrides: Any) -> "Settings":
        cwd_path = (cwd or Path.cwd()).expanduser().resolve()
        cleaned = {key: value for key, value in overrides.items() if value is not None}
        return cls(
            _csv_array_toml_files=[cwd_path / "settings.toml"],
            _env_file=cwd_path / ".env",
            **cleaned,
        )


__all__ = ["ENV_PREFIX", "Settings"]
