from __future__ import annotations

import pytest

from csv_array.errors import StoreError
from csv_array.store import LineStore, MemoryLineStore


def test_memory_store_satisfies_protocol() -> None:
    assert isinstance(MemoryLineStore(), LineStore)


def test_get_set_and_bounds() -> None:
    store = MemoryLineStore(["a", "b"])

    assert len(store) == 2
    assert store.get(1) == "b"
    assert store.exists(1) and not store.exists(2) and not store.exists(-1)
    with pytest.raises(IndexError):
        store.get(2)

    store.set(3, "d")
    assert store.lines == ["a", "b", "", "d"]


def test_splice_returns_removed_lines() -> None:
    store = MemoryLineStore(["a", "b", "c", "d"])

    removed = store.splice(1, 2, ["x"])

    assert removed == ["b", "c"]
    assert store.lines == ["a", "x", "d"]


def test_line_breaks_are_rejected() -> None:
    store = MemoryLineStore()
    with pytest.raises(StoreError):
        store.splice(0, 0, ["a\nb"])
    with pytest.raises(StoreError):
        MemoryLineStore(["x\r"])


def test_closed_store_rejects_access() -> None:
    store = MemoryLineStore(["a"])
    store.close()

    assert store.closed
    with pytest.raises(StoreError):
        store.get(0)
