"""Two-level mutable array over a line store.

:class:`CsvArray` presents the lines of a :class:`~csv_array.store.LineStore`
as a list of rows, each row a mutable list of fields. Rows handed out by the
array are cached weakly, so holding a row keeps its identity stable, and
structural changes (insert, delete, splice) keep every held row pointing at
the right line or sever it when its line is removed.
"""

from __future__ import annotations

import logging
from collections.abc import MutableSequence
from typing import Any, Iterable, Iterator, Mapping, overload

from csv_array.cache import ReindexPlan, RowCache, SpliceMapping
from csv_array.codec import RecordCodec, as_field
from csv_array.options import ArrayOptions, WriteBack
from csv_array.row import Row
from csv_array.store.protocol import LineStore

logger = logging.getLogger(__name__)


def coerce_record(value: Any) -> list[str]:
    """Normalize a record value: a lone string is a one-field record."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Row):
        return value.to_list()
    return [as_field(v) for v in value]


class CsvArray(MutableSequence):
    """List of :class:`~csv_array.row.Row` handles backed by a line store."""

    def __init__(
        self,
        store: LineStore,
        codec: RecordCodec | None = None,
        *,
        write_back: WriteBack | str = WriteBack.DEFERRED,
    ) -> None:
        self._store = store
        self._codec = codec or RecordCodec()
        self._write_back = WriteBack(write_back)
        self._cache = RowCache()

    @classmethod
    def open(
        cls,
        target: Any = None,
        options: ArrayOptions | Mapping[str, Any] | None = None,
        /,
        **kwargs: Any,
    ) -> "CsvArray":
        """Open ``target`` with the given options; see :func:`csv_array.open_array`."""
        from csv_array.factory import open_array

        return open_array(target, options, **kwargs)

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #
    @property
    def store(self) -> LineStore:
        return self._store

    @property
    def codec(self) -> RecordCodec:
        return self._codec

    @property
    def write_back(self) -> WriteBack:
        return self._write_back

    @property
    def closed(self) -> bool:
        return self._store.closed

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #
    def __len__(self) -> int:
        return len(self._store)

    @overload
    def __getitem__(self, index: int) -> Row: ...
    @overload
    def __getitem__(self, index: slice) -> list[Row]: ...
    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]

        position = self._position(index)
        row = self._cached(position)
        if row is None:
            row = self._load(position)
            self._remember(position, row)
        return row

    def __iter__(self) -> Iterator[Row]:
        position = 0
        while position < len(self):
            yield self[position]
            position += 1

    def exists(self, index: int) -> bool:
        if index < 0:
            index += len(self)
        return self._store.exists(index)

    def records(self, start: int = 0, stop: int | None = None) -> Iterator[list[str]]:
        """Yield decoded records as stored, without creating row handles."""
        end = len(self) if stop is None else min(stop, len(self))
        for position in range(max(start, 0), end):
            yield self._codec.decode(self._store.get(position))

    # ------------------------------------------------------------------ #
    # Direct writes
    # ------------------------------------------------------------------ #
    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            start, stop, step = index.indices(len(self))
            if step != 1:
                raise ValueError("extended slice assignment is not supported")
            self.splice(start, max(stop - start, 0), *value)
            return

        position = self._position(index)
        fields = coerce_record(value)
        self._store.set(position, self._codec.encode(fields))
        live = self._cached(position)
        if live is not None:
            live._replace(fields)

    def __delitem__(self, index) -> None:
        if isinstance(index, slice):
            start, stop, step = index.indices(len(self))
            if step != 1:
                for position in sorted(range(start, stop, step), reverse=True):
                    self.splice(position, 1)
                return
            self.splice(start, max(stop - start, 0))
            return
        self.splice(self._position(index), 1)

    # ------------------------------------------------------------------ #
    # Structural changes
    # ------------------------------------------------------------------ #
    def splice(self, offset: int = 0, remove_count: int | None = None, *records: Any) -> list[list[str]]:
        """Replace ``remove_count`` rows at ``offset`` with ``records``.

        Returns the removed rows as plain lists. Held rows after the affected
        range are moved to their new index; held rows inside it are severed.
        Encoding and decoding happen before anything is changed, so a failure
        leaves both the store and the held rows untouched.
        """
        size = len(self)
        if offset < 0:
            offset += size
        offset = min(max(offset, 0), size)

        if remove_count is None:
            remove_count = size - offset
        elif remove_count < 0:
            remove_count = max(size - offset + remove_count, 0)
        remove_count = min(remove_count, size - offset)

        lines = [self._codec.encode(coerce_record(record)) for record in records]
        removed = [self._codec.decode(self._store.get(i)) for i in range(offset, offset + remove_count)]

        mapping = SpliceMapping(offset=offset, removed=remove_count, inserted=len(lines))
        plan = self._plan(mapping)
        self._store.splice(offset, remove_count, lines)
        self._commit(plan, mapping)

        logger.debug(
            "Spliced rows",
            extra={
                "event": "array.splice",
                "data": {"offset": offset, "removed": remove_count, "inserted": len(lines)},
            },
        )
        return removed

    def insert(self, index: int, value: Any) -> None:
        size = len(self)
        if index < 0:
            index = max(index + size, 0)
        self.splice(min(index, size), 0, value)

    def remove_range(self, offset: int, count: int) -> list[list[str]]:
        return self.splice(offset, count)

    def push(self, *records: Any) -> int:
        """Append ``records``; returns the new length."""
        self.splice(len(self), 0, *records)
        return len(self)

    def append(self, value: Any) -> None:
        self.push(value)

    def extend(self, values: Iterable[Any]) -> None:
        self.push(*values)

    def pop(self, index: int = -1) -> list[str] | None:
        """Remove and return one row as a plain list; None when empty."""
        if not len(self):
            return None
        removed = self.splice(self._position(index), 1)
        return removed[0]

    def shift(self) -> list[str] | None:
        removed = self.splice(0, 1)
        return removed[0] if removed else None

    def unshift(self, *records: Any) -> int:
        self.splice(0, 0, *records)
        return len(self)

    def resize(self, size: int) -> None:
        """Truncate to ``size`` rows or pad with empty records."""
        if size < 0:
            raise ValueError("array size cannot be negative")
        current = len(self)
        if size < current:
            self.splice(size)
        elif size > current:
            self.push(*([] for _ in range(size - current)))

    def clear(self) -> None:
        self.splice(0)

    def reverse(self) -> None:
        size = len(self)
        for low in range(size // 2):
            high = size - 1 - low
            first = self._codec.decode(self._store.get(low))
            last = self._codec.decode(self._store.get(high))
            self[low] = last
            self[high] = first

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def flush(self) -> None:
        """Write every held row with pending changes, then flush the store."""
        for row in self._live_rows():
            row.flush()
        self._store.flush()

    def close(self) -> None:
        if self._store.closed:
            return
        self.flush()
        self._store.close()

    def __enter__(self) -> "CsvArray":
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._store!r}, write_back={self._write_back.value!r})"

    # ------------------------------------------------------------------ #
    # Row tracking hooks
    # ------------------------------------------------------------------ #
    def _position(self, index: int) -> int:
        size = len(self)
        position = index + size if index < 0 else index
        if not 0 <= position < size:
            raise IndexError(f"row index {index} out of range")
        return position

    def _load(self, position: int) -> Row:
        fields = self._codec.decode(self._store.get(position))
        return Row(
            fields,
            index=position,
            store=self._store,
            codec=self._codec,
            write_back=self._write_back,
        )

    def _cached(self, position: int) -> Row | None:
        return self._cache.get(position)

    def _remember(self, position: int, row: Row) -> None:
        self._cache.insert(position, row)

    def _live_rows(self) -> Iterator[Row]:
        return self._cache.live_rows()

    def _plan(self, mapping: SpliceMapping) -> ReindexPlan | None:
        return self._cache.plan(mapping)

    def _commit(self, plan: ReindexPlan | None, mapping: SpliceMapping) -> None:
        if plan is not None:
            self._cache.commit(plan)


__all__ = ["CsvArray", "coerce_record"]
