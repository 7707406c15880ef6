"""Line store backed by a text file.

Only the byte offset of each line start is kept in memory; line content is
read on demand. Structural changes rewrite the file from the first affected
line onward, moving the tail in ``chunk_size`` pieces.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Sequence

from csv_array.errors import DecodeError, StoreError
from csv_array.options import FileStoreOptions

logger = logging.getLogger(__name__)


class FileLineStore:
    """Randomly addressable lines of a file on disk."""

    def __init__(self, path: str | os.PathLike[str], options: FileStoreOptions | None = None) -> None:
        self.path = Path(path)
        self.options = options or FileStoreOptions()
        self._encoding = self.options.encoding
        self._newline = self.options.newline
        self._sep = self._newline.encode(self._encoding)
        self._chunk_size = self.options.chunk_size

        if not self.path.exists():
            if self.options.readonly or not self.options.create:
                raise StoreError(f"Cannot open file {self.path}: no such file")
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch()
        if self.path.is_dir():
            raise StoreError(f"Cannot open file {self.path}: is a directory")

        self._fh: BinaryIO = self.path.open("rb" if self.options.readonly else "r+b")
        self._starts: list[int] = []
        self._size = 0
        self._scan()

        logger.debug(
            "Opened line store",
            extra={"event": "store.opened", "data": {"path": str(self.path), "lines": len(self._starts)}},
        )

    # ------------------------------------------------------------------ #
    # Read side
    # ------------------------------------------------------------------ #
    @property
    def closed(self) -> bool:
        return self._fh.closed

    def __len__(self) -> int:
        return len(self._starts)

    def exists(self, index: int) -> bool:
        return 0 <= index < len(self._starts)

    def get(self, index: int) -> str:
        self._check_open()
        if not 0 <= index < len(self._starts):
            raise IndexError(f"line index {index} out of range")

        start, end = self._bounds(index)
        self._fh.seek(start)
        raw = self._fh.read(end - start)
        if raw.endswith(self._sep):
            raw = raw[: -len(self._sep)]
        try:
            return raw.decode(self._encoding)
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Line {index} is not valid {self._encoding}", line=None) from exc

    # ------------------------------------------------------------------ #
    # Write side
    # ------------------------------------------------------------------ #
    def set(self, index: int, line: str) -> None:
        if index < 0:
            raise IndexError(f"line index {index} out of range")
        count = len(self._starts)
        if index < count:
            self.splice(index, 1, [line])
            return
        # Writing past the end pads with empty lines.
        self.splice(count, 0, [""] * (index - count) + [line])

    def splice(self, offset: int, count: int, lines: Sequence[str] = ()) -> list[str]:
        self._check_writable()
        total = len(self._starts)
        offset = min(max(offset, 0), total)
        end = min(offset + max(count, 0), total)

        block = b"".join(self._encode_line(line) for line in lines)
        removed = [self.get(i) for i in range(offset, end)]

        self._terminate_last_line()
        region_start = self._starts[offset] if offset < total else self._size
        region_end = self._starts[end] if end < total else self._size
        diff = len(block) - (region_end - region_start)

        self._move(region_end, region_end + diff, self._size - region_end)
        self._fh.seek(region_start)
        self._fh.write(block)

        new_size = self._size + diff
        if diff < 0:
            self._fh.truncate(new_size)
        self._size = new_size

        inserted: list[int] = []
        position = region_start
        for line in lines:
            inserted.append(position)
            position += len(line.encode(self._encoding)) + len(self._sep)
        tail = [start + diff for start in self._starts[end:]]
        self._starts = self._starts[:offset] + inserted + tail
        return removed

    def flush(self) -> None:
        if not self._fh.closed:
            self._fh.flush()

    def close(self) -> None:
        if self._fh.closed:
            return
        self._fh.flush()
        self._fh.close()
        logger.debug("Closed line store", extra={"event": "store.closed", "data": {"path": str(self.path)}})

    def __enter__(self) -> "FileLineStore":
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"FileLineStore({str(self.path)!r}, lines={len(self._starts)})"

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _scan(self) -> None:
        sep = self._sep
        starts: list[int] = []
        line_start = 0
        base = 0
        buffer = b""

        self._fh.seek(0)
        while True:
            chunk = self._fh.read(self._chunk_size)
            if not chunk:
                break
            buffer += chunk
            search_from = 0
            while True:
                hit = buffer.find(sep, search_from)
                if hit < 0:
                    break
                starts.append(line_start)
                search_from = hit + len(sep)
                line_start = base + search_from
            # Keep enough bytes to match a separator split across chunks.
            keep_from = max(search_from, len(buffer) - len(sep) + 1)
            base += keep_from
            buffer = buffer[keep_from:]

        size = base + len(buffer)
        if line_start < size:
            starts.append(line_start)
        self._starts = starts
        self._size = size

    def _bounds(self, index: int) -> tuple[int, int]:
        start = self._starts[index]
        end = self._starts[index + 1] if index + 1 < len(self._starts) else self._size
        return start, end

    def _terminate_last_line(self) -> None:
        if not self._starts:
            return
        start, end = self._bounds(len(self._starts) - 1)
        if end - start >= len(self._sep):
            self._fh.seek(end - len(self._sep))
            if self._fh.read(len(self._sep)) == self._sep:
                return
        self._fh.seek(end)
        self._fh.write(self._sep)
        self._size = end + len(self._sep)

    def _move(self, src: int, dst: int, length: int) -> None:
        if length <= 0 or src == dst:
            return
        chunk = self._chunk_size
        if dst < src:
            done = 0
            while done < length:
                size = min(chunk, length - done)
                self._fh.seek(src + done)
                data = self._fh.read(size)
                self._fh.seek(dst + done)
                self._fh.write(data)
                done += size
            return

        remaining = length
        while remaining > 0:
            size = min(chunk, remaining)
            remaining -= size
            self._fh.seek(src + remaining)
            data = self._fh.read(size)
            self._fh.seek(dst + remaining)
            self._fh.write(data)

    def _encode_line(self, line: str) -> bytes:
        if "\n" in line or "\r" in line or self._newline in line:
            raise StoreError("a stored line cannot contain a line break")
        return line.encode(self._encoding) + self._sep

    def _check_open(self) -> None:
        if self._fh.closed:
            raise StoreError(f"line store for {self.path} is closed")

    def _check_writable(self) -> None:
        self._check_open()
        if self.options.readonly:
            raise StoreError(f"line store for {self.path} is read-only")


__all__ = ["FileLineStore"]
