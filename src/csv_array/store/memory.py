"""List-backed line store."""

from __future__ import annotations

from typing import Iterable, Sequence

from csv_array.errors import StoreError


class MemoryLineStore:
    """Keeps every line in a Python list."""

    def __init__(self, lines: Iterable[str] = ()) -> None:
        self._lines = [_checked(line) for line in lines]
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def lines(self) -> list[str]:
        """Copy of the current content."""
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def get(self, index: int) -> str:
        self._check_open()
        if not 0 <= index < len(self._lines):
            raise IndexError(f"line index {index} out of range")
        return self._lines[index]

    def set(self, index: int, line: str) -> None:
        self._check_open()
        if index < 0:
            raise IndexError(f"line index {index} out of range")
        if index >= len(self._lines):
            self._lines.extend([""] * (index - len(self._lines) + 1))
        self._lines[index] = _checked(line)

    def splice(self, offset: int, count: int, lines: Sequence[str] = ()) -> list[str]:
        self._check_open()
        offset = min(max(offset, 0), len(self._lines))
        end = min(offset + max(count, 0), len(self._lines))
        removed = self._lines[offset:end]
        self._lines[offset:end] = [_checked(line) for line in lines]
        return removed

    def exists(self, index: int) -> bool:
        return 0 <= index < len(self._lines)

    def flush(self) -> None:
        return None

    def close(self) -> None:
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise StoreError("line store is closed")

    def __repr__(self) -> str:
        return f"MemoryLineStore(lines={len(self._lines)})"


def _checked(line: str) -> str:
    if "\n" in line or "\r" in line:
        raise StoreError("a stored line cannot contain a line break")
    return line


__all__ = ["MemoryLineStore"]
