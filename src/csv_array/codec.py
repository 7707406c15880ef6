"""Translate between one line of delimited text and a list of string fields."""

from __future__ import annotations

import csv
import io
from typing import Any, Iterable

from csv_array.errors import ConstructionError, DecodeError, EncodeError
from csv_array.options import CodecOptions

_QUOTING = {
    "minimal": csv.QUOTE_MINIMAL,
    "all": csv.QUOTE_ALL,
    "none": csv.QUOTE_NONE,
}

_LINE_BREAKS = ("\r", "\n")


def as_field(value: Any) -> str:
    """Coerce a field value to the string form stored in a record."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class RecordCodec:
    """Stateless encoder/decoder for single-line records.

    A codec is configured once and shared read-only by every row of an
    array. Fields with embedded line breaks are never encoded: one record
    always maps to exactly one stored line.
    """

    __slots__ = ("_options", "_dialect")

    def __init__(self, options: CodecOptions | None = None) -> None:
        self._options = options or CodecOptions()
        self._dialect = {
            "delimiter": self._options.separator,
            "quotechar": self._options.quotechar,
            "escapechar": self._options.escapechar,
            "doublequote": self._options.doublequote,
            "quoting": _QUOTING[self._options.quoting],
            "skipinitialspace": self._options.skipinitialspace,
            "strict": self._options.strict,
        }
        try:
            csv.writer(io.StringIO(), lineterminator="", **self._dialect)
        except (TypeError, csv.Error) as exc:
            raise ConstructionError(f"CSV dialect error: {exc}") from exc

    @property
    def options(self) -> CodecOptions:
        return self._options

    @property
    def separator(self) -> str:
        return self._options.separator

    def encode(self, fields: Iterable[Any]) -> str:
        values = [as_field(value) for value in fields]
        for position, value in enumerate(values):
            if any(brk in value for brk in _LINE_BREAKS):
                raise EncodeError(
                    f"CSV combine error: field {position} contains a line break",
                    fields=values,
                )

        dialect = self._dialect
        if self._options.skipinitialspace and any(value.startswith(" ") for value in values):
            # Leading spaces survive skipinitialspace only inside quotes.
            if self._options.quoting == "none":
                raise EncodeError(
                    "CSV combine error: leading spaces need quoting when skipinitialspace is set",
                    fields=values,
                )
            dialect = {**dialect, "quoting": csv.QUOTE_ALL}

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="", **dialect)
        try:
            writer.writerow(values)
        except csv.Error as exc:
            raise EncodeError(f"CSV combine error: {exc}", fields=values) from exc
        return buffer.getvalue()

    def decode(self, line: str) -> list[str]:
        if any(brk in line for brk in _LINE_BREAKS):
            raise DecodeError("CSV parse error: line contains a line break", line=line)

        try:
            rows = list(csv.reader([line], **self._dialect))
        except csv.Error as exc:
            raise DecodeError(f"CSV parse error: {exc}", line=line) from exc

        if not rows:
            return []
        if len(rows) > 1:
            raise DecodeError("CSV parse error: line holds more than one record", line=line)
        return rows[0]

    def __repr__(self) -> str:
        return f"RecordCodec({self._options!r})"


__all__ = ["RecordCodec", "as_field"]
