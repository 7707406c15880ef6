"""Pydantic models for array construction options."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator


class WriteBack(str, Enum):
    """When a row handle writes its fields back to the line store."""

    IMMEDIATE = "immediate"
    DEFERRED = "deferred"


def _single_char(value: str | None, name: str, *, optional: bool = False) -> str | None:
    if value is None:
        if optional:
            return None
        raise ValueError(f"{name} is required")
    if len(value) != 1:
        raise ValueError(f"{name} must be a single character, got {value!r}")
    if value in "\r\n":
        raise ValueError(f"{name} cannot be a line break")
    return value


class CodecOptions(BaseModel):
    """Delimiter and quoting policy shared by every row of one array."""

    separator: str = ","
    quotechar: str = '"'
    escapechar: str | None = None
    doublequote: bool = True
    quoting: Literal["minimal", "all", "none"] = "minimal"
    skipinitialspace: bool = False
    strict: bool = True

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("separator", "quotechar")
    @classmethod
    def _validate_required_char(cls, value: str, info: ValidationInfo) -> str:
        return _single_char(value, info.field_name)  # type: ignore[return-value]

    @field_validator("escapechar")
    @classmethod
    def _validate_escapechar(cls, value: str | None) -> str | None:
        return _single_char(value, "escapechar", optional=True)

    @model_validator(mode="after")
    def _distinct_specials(self) -> "CodecOptions":
        if self.separator == self.quotechar:
            raise ValueError("separator and quotechar must differ")
        if self.escapechar is not None and self.escapechar == self.separator:
            raise ValueError("escapechar and separator must differ")
        return self


class FileStoreOptions(BaseModel):
    """Options for :class:`~csv_array.store.file.FileLineStore`."""

    encoding: str = "utf-8"
    newline: str = "\n"
    create: bool = True
    readonly: bool = False
    chunk_size: int = Field(default=64 * 1024, ge=1)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("newline")
    @classmethod
    def _validate_newline(cls, value: str) -> str:
        if not value:
            raise ValueError("newline must not be empty")
        return value


class ArrayOptions(BaseModel):
    """Options accepted by :func:`csv_array.open_array`."""

    write_back: WriteBack = WriteBack.DEFERRED
    cache_rows: bool = True
    line_store_options: dict[str, Any] = Field(default_factory=dict)
    codec_options: dict[str, Any] = Field(default_factory=dict)
    separator: str | None = None

    model_config = ConfigDict(extra="forbid")

    def codec(self) -> CodecOptions:
        """Build codec options; ``separator`` wins over a nested one."""
        values = dict(self.codec_options)
        if self.separator is not None:
            values["separator"] = self.separator
        return CodecOptions.model_validate(values)

    def file_store(self) -> FileStoreOptions:
        return FileStoreOptions.model_validate(self.line_store_options)


__all__ = [
    "ArrayOptions",
    "CodecOptions",
    "FileStoreOptions",
    "WriteBack",
]
