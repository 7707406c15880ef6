"""Outer array that never caches row handles.

Every read decodes a fresh :class:`~csv_array.row.Row`, so reading the same
index twice gives two independent rows. The array only keeps weak references
to the rows it handed out, so :meth:`flush` and :meth:`close` can write their
pending changes. It cannot follow rows across structural changes: any insert,
delete or splice that moves or removes existing lines severs every row read
before it, and writes to those rows are dropped with a
:class:`~csv_array.errors.SeveredWriteWarning`. Appends leave rows bound.
"""

from __future__ import annotations

import itertools
import weakref
from typing import Iterator

from csv_array.array import CsvArray
from csv_array.cache import ReindexPlan, SpliceMapping
from csv_array.codec import RecordCodec
from csv_array.options import WriteBack
from csv_array.row import Generation, Row
from csv_array.store.protocol import LineStore


class StreamingCsvArray(CsvArray):
    """:class:`CsvArray` variant for scans over large files."""

    def __init__(
        self,
        store: LineStore,
        codec: RecordCodec | None = None,
        *,
        write_back: WriteBack | str = WriteBack.DEFERRED,
    ) -> None:
        super().__init__(store, codec, write_back=write_back)
        self._generation = Generation()
        # Rows are unhashable, so they are keyed by a serial number.
        self._handed_out: weakref.WeakValueDictionary[int, Row] = weakref.WeakValueDictionary()
        self._serial = itertools.count()

    @property
    def generation(self) -> int:
        return self._generation.value

    def _load(self, position: int) -> Row:
        fields = self._codec.decode(self._store.get(position))
        return Row(
            fields,
            index=position,
            store=self._store,
            codec=self._codec,
            write_back=self._write_back,
            generation=self._generation,
        )

    def _cached(self, position: int) -> Row | None:
        return None

    def _remember(self, position: int, row: Row) -> None:
        self._handed_out[next(self._serial)] = row

    def _live_rows(self) -> Iterator[Row]:
        # Severed rows report their dropped writes on their own flush or release.
        return iter([row for row in list(self._handed_out.values()) if not row.severed])

    def _plan(self, mapping: SpliceMapping) -> ReindexPlan | None:
        return None

    def _commit(self, plan: ReindexPlan | None, mapping: SpliceMapping) -> None:
        old_length = len(self) - mapping.inserted + mapping.removed
        if mapping.removed or (mapping.inserted and mapping.offset < old_length):
            self._generation.bump()


__all__ = ["StreamingCsvArray"]
