"""Weak cache of live row handles, keyed by line index."""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from typing import Iterator

from csv_array.row import Row

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpliceMapping:
    """Where a line index lands after ``splice(offset, removed, <inserted lines>)``."""

    offset: int
    removed: int
    inserted: int

    @property
    def delta(self) -> int:
        return self.inserted - self.removed

    @property
    def descending(self) -> bool:
        # Growth moves entries up, so process from the top to avoid collisions.
        return self.delta > 0

    def __call__(self, index: int) -> int | None:
        if index < self.offset:
            return index
        if index < self.offset + self.removed:
            return None
        return index + self.delta


@dataclass(frozen=True)
class ReindexPlan:
    """Staged cache changes; nothing is applied until :meth:`RowCache.commit`."""

    moves: tuple[tuple[int, int | None], ...]

    def __len__(self) -> int:
        return len(self.moves)


class RowCache:
    """Maps line index to a weakly held :class:`Row`.

    The cache never keeps a row alive: an entry disappears as soon as the
    last outside reference to its row goes away.
    """

    def __init__(self) -> None:
        self._rows: weakref.WeakValueDictionary[int, Row] = weakref.WeakValueDictionary()

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, index: object) -> bool:
        return index in self._rows

    def get(self, index: int) -> Row | None:
        return self._rows.get(index)

    def insert(self, index: int, row: Row) -> None:
        existing = self._rows.get(index)
        if existing is not None and existing is not row:
            raise RuntimeError(f"a live row is already cached for index {index}")
        self._rows[index] = row

    def live_rows(self) -> Iterator[Row]:
        # Snapshot values: the dictionary may shrink while the caller iterates.
        yield from list(self._rows.values())

    def plan(self, mapping: SpliceMapping) -> ReindexPlan:
        """Compute the moves ``mapping`` implies for every live entry."""
        indices = sorted(self._rows.keys(), reverse=mapping.descending)
        moves: list[tuple[int, int | None]] = []
        for index in indices:
            target = mapping(index)
            if target == index:
                continue
            moves.append((index, target))
        return ReindexPlan(tuple(moves))

    def commit(self, plan: ReindexPlan) -> None:
        """Apply a staged plan: sever removed rows, move the rest."""
        severed = moved = 0
        for index, target in plan.moves:
            row = self._rows.pop(index, None)
            if row is None:
                continue
            if target is None:
                row._sever()
                severed += 1
                continue
            row._rebind(target)
            self._rows[target] = row
            moved += 1

        if plan.moves:
            logger.debug(
                "Reindexed row cache",
                extra={"event": "cache.reindexed", "data": {"moved": moved, "severed": severed}},
            )

    def reindex(self, mapping: SpliceMapping) -> None:
        self.commit(self.plan(mapping))


__all__ = ["ReindexPlan", "RowCache", "SpliceMapping"]
