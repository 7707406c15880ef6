"""Protocol describing the line store consumed by the outer array."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class LineStore(Protocol):
    """Ordered, randomly addressable sequence of raw text lines.

    Indices are non-negative; callers normalize negative positions.
    """

    @property
    def closed(self) -> bool: ...
    def __len__(self) -> int: ...
    def get(self, index: int) -> str: ...
    def set(self, index: int, line: str) -> None: ...
    def splice(self, offset: int, count: int, lines: Sequence[str] = ()) -> list[str]: ...
    def exists(self, index: int) -> bool: ...
    def flush(self) -> None: ...
    def close(self) -> None: ...


__all__ = ["LineStore"]
