"""Error hierarchy for :mod:`csv_array`."""

from __future__ import annotations

from typing import Any, Sequence


class CsvArrayError(Exception):
    """Base class for csv_array exceptions."""


class ConstructionError(CsvArrayError):
    """Raised when the backing line store or the codec cannot be initialized."""


class StoreError(CsvArrayError):
    """Raised when the line store rejects an operation."""


class DecodeError(CsvArrayError):
    """Raised when a stored line cannot be parsed under the active configuration."""

    def __init__(self, message: str, *, line: str | None = None) -> None:
        super().__init__(message)
        self.line = line


class EncodeError(CsvArrayError):
    """Raised when fields cannot be serialized under the active configuration."""

    def __init__(self, message: str, *, fields: Sequence[Any] | None = None) -> None:
        super().__init__(message)
        self.fields = list(fields) if fields is not None else None


class SeveredWriteWarning(UserWarning):
    """A write was directed at a row whose backing line no longer exists."""


__all__ = [
    "ConstructionError",
    "CsvArrayError",
    "DecodeError",
    "EncodeError",
    "SeveredWriteWarning",
    "StoreError",
]
