"""Line stores: randomly addressable sequences of raw text lines."""

from csv_array.store.file import FileLineStore
from csv_array.store.memory import MemoryLineStore
from csv_array.store.protocol import LineStore

__all__ = ["FileLineStore", "LineStore", "MemoryLineStore"]
