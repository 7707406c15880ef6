"""Live row handles.

A :class:`Row` wraps one decoded record and the index of the line it came
from. Mutations are written back to the line store either immediately or
once, when the row is flushed or released (``write_back="deferred"``).

A row whose line was removed by a structural change of the outer array is
*severed*: it stays usable as an in-memory list, but writes to storage are
dropped with a :class:`~csv_array.errors.SeveredWriteWarning`.
"""

from __future__ import annotations

import logging
import warnings
import weakref
from collections.abc import MutableSequence, Sequence
from typing import Any, Iterable, Iterator, overload

from csv_array.codec import RecordCodec, as_field
from csv_array.errors import CsvArrayError, SeveredWriteWarning
from csv_array.options import WriteBack
from csv_array.store.protocol import LineStore

logger = logging.getLogger(__name__)


class Generation:
    """Counter of structural changes, shared by an array and its uncached rows."""

    __slots__ = ("value",)

    def __init__(self) -> None:
        self.value = 0

    def bump(self) -> None:
        self.value += 1


class _RowState:
    # Kept apart from Row so the release finalizer never holds the row itself.
    __slots__ = ("fields", "index", "dirty", "generation", "seen")

    def __init__(self, fields: list[str], index: int | None, generation: Generation | None) -> None:
        self.fields = fields
        self.index = index
        self.dirty = False
        self.generation = generation
        self.seen = generation.value if generation is not None else 0

    def current_index(self) -> int | None:
        if self.index is not None and self.generation is not None and self.generation.value != self.seen:
            _sever_state(self)
        return self.index


def _sever_state(state: _RowState) -> None:
    if state.index is None:
        return
    logger.debug("Row severed", extra={"event": "row.severed", "data": {"index": state.index}})
    state.index = None


def _warn_severed(stacklevel: int) -> None:
    message = "Attempted to write out from a severed row"
    logger.warning(message, extra={"event": "row.severed_write"})
    warnings.warn(message, SeveredWriteWarning, stacklevel=stacklevel + 1)


def _write_state(state: _RowState, store: LineStore, codec: RecordCodec, *, stacklevel: int = 2) -> bool:
    """Write ``state`` to its line. Returns False when the write was dropped."""
    index = state.current_index()
    if index is None:
        state.dirty = False
        _warn_severed(stacklevel + 1)
        return False

    line = codec.encode(state.fields)
    store.set(index, line)
    state.dirty = False
    logger.debug("Row flushed", extra={"event": "row.flushed", "data": {"index": index}})
    return True


def _release_state(state: _RowState, store: LineStore, codec: RecordCodec) -> None:
    if not state.dirty:
        return
    if store.closed:
        logger.warning(
            "Dropped pending row write: line store already closed",
            extra={"event": "row.release_dropped", "data": {"index": state.index}},
        )
        return
    try:
        _write_state(state, store, codec)
    except CsvArrayError:
        # Finalizers cannot propagate; report instead.
        logger.exception("Failed to write released row", extra={"event": "row.release_failed"})


class Row(MutableSequence):
    """Mutable list-like proxy for one record of a :class:`~csv_array.array.CsvArray`."""

    def __init__(
        self,
        fields: Iterable[Any],
        *,
        index: int | None,
        store: LineStore,
        codec: RecordCodec,
        write_back: WriteBack = WriteBack.DEFERRED,
        generation: Generation | None = None,
    ) -> None:
        self._state = _RowState([as_field(v) for v in fields], index, generation)
        self._store = store
        self._codec = codec
        self._write_back = WriteBack(write_back)
        self._finalizer = weakref.finalize(self, _release_state, self._state, store, codec)

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #
    @property
    def index(self) -> int | None:
        """Current line index, or None once severed."""
        return self._state.current_index()

    @property
    def severed(self) -> bool:
        return self.index is None

    @property
    def dirty(self) -> bool:
        return self._state.dirty

    @property
    def write_back(self) -> WriteBack:
        return self._write_back

    def to_list(self) -> list[str]:
        return list(self._state.fields)

    # ------------------------------------------------------------------ #
    # Sequence protocol
    # ------------------------------------------------------------------ #
    def __len__(self) -> int:
        return len(self._state.fields)

    @overload
    def __getitem__(self, i: int) -> str: ...
    @overload
    def __getitem__(self, i: slice) -> list[str]: ...
    def __getitem__(self, i):
        return self._state.fields[i]

    def __setitem__(self, i, value) -> None:
        if isinstance(i, slice):
            self._state.fields[i] = [as_field(v) for v in value]
        else:
            self._state.fields[i] = as_field(value)
        self._touch()

    def __delitem__(self, i) -> None:
        del self._state.fields[i]
        self._touch()

    def __iter__(self) -> Iterator[str]:
        return iter(self._state.fields)

    def insert(self, i: int, value: Any) -> None:
        self._state.fields.insert(i, as_field(value))
        self._touch()

    def extend(self, values: Iterable[Any]) -> None:
        self._state.fields.extend(as_field(v) for v in values)
        self._touch()

    def clear(self) -> None:
        self.resize(0)

    def resize(self, size: int) -> None:
        """Truncate to ``size`` fields, or pad with empty strings."""
        if size < 0:
            raise ValueError("row size cannot be negative")
        fields = self._state.fields
        if size < len(fields):
            del fields[size:]
        else:
            fields.extend([""] * (size - len(fields)))
        self._touch()

    def shift(self) -> str | None:
        """Remove and return the first field (None when empty)."""
        if not self._state.fields:
            return None
        value = self._state.fields.pop(0)
        self._touch()
        return value

    def unshift(self, *values: Any) -> int:
        """Prepend ``values``; returns the new field count."""
        self._state.fields[0:0] = [as_field(v) for v in values]
        self._touch()
        return len(self._state.fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Row):
            return self._state.fields == other._state.fields
        if isinstance(other, Sequence) and not isinstance(other, str):
            return self._state.fields == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        index = "severed" if self._state.index is None else self._state.index
        return f"Row({self._state.fields!r}, index={index}, dirty={self._state.dirty})"

    # ------------------------------------------------------------------ #
    # Write-back
    # ------------------------------------------------------------------ #
    def flush(self) -> None:
        """Write pending changes now. Severed rows drop them with a warning."""
        if self._state.dirty:
            _write_state(self._state, self._store, self._codec, stacklevel=2)

    def release(self) -> None:
        """Flush and stop tracking this row for release-time writes."""
        self.flush()
        self._finalizer.detach()

    def __enter__(self) -> "Row":
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.flush()

    def _touch(self) -> None:
        state = self._state
        if self._write_back is WriteBack.DEFERRED:
            state.dirty = True
            return
        if state.current_index() is None:
            _warn_severed(3)
            return
        state.dirty = True
        _write_state(state, self._store, self._codec, stacklevel=3)

    # ------------------------------------------------------------------ #
    # Hooks for the owning array
    # ------------------------------------------------------------------ #
    def _rebind(self, index: int) -> None:
        if self._state.index is not None:
            self._state.index = index

    def _sever(self) -> None:
        _sever_state(self._state)

    def _replace(self, fields: list[str]) -> None:
        self._state.fields[:] = fields
        self._state.dirty = False


__all__ = ["Generation", "Row"]
