"""Public API for :mod:`csv_array`.

Present a delimited text file as a mutable list of mutable rows::

    from csv_array import open_array

    with open_array("people.csv") as people:
        people[0][2] = "Camel"
        people.append(["Ada", "Lovelace", "1815"])
"""

from importlib import metadata
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from csv_array.array import CsvArray
    from csv_array.codec import RecordCodec
    from csv_array.errors import (
        ConstructionError,
        CsvArrayError,
        DecodeError,
        EncodeError,
        SeveredWriteWarning,
        StoreError,
    )
    from csv_array.factory import open_array
    from csv_array.options import ArrayOptions, CodecOptions, FileStoreOptions, WriteBack
    from csv_array.row import Row
    from csv_array.store import FileLineStore, LineStore, MemoryLineStore
    from csv_array.streaming import StreamingCsvArray


def _resolve_version() -> str:
    try:
        return metadata.version("csv-array")
    except metadata.PackageNotFoundError:  # pragma: no cover
        return "unknown"


__version__ = _resolve_version()

_EXPORTS = {
    "ArrayOptions": ("csv_array.options", "ArrayOptions"),
    "CodecOptions": ("csv_array.options", "CodecOptions"),
    "ConstructionError": ("csv_array.errors", "ConstructionError"),
    "CsvArray": ("csv_array.array", "CsvArray"),
    "CsvArrayError": ("csv_array.errors", "CsvArrayError"),
    "DecodeError": ("csv_array.errors", "DecodeError"),
    "EncodeError": ("csv_array.errors", "EncodeError"),
    "FileLineStore": ("csv_array.store", "FileLineStore"),
    "FileStoreOptions": ("csv_array.options", "FileStoreOptions"),
    "LineStore": ("csv_array.store", "LineStore"),
    "MemoryLineStore": ("csv_array.store", "MemoryLineStore"),
    "RecordCodec": ("csv_array.codec", "RecordCodec"),
    "Row": ("csv_array.row", "Row"),
    "SeveredWriteWarning": ("csv_array.errors", "SeveredWriteWarning"),
    "StoreError": ("csv_array.errors", "StoreError"),
    "StreamingCsvArray": ("csv_array.streaming", "StreamingCsvArray"),
    "WriteBack": ("csv_array.options", "WriteBack"),
    "open_array": ("csv_array.factory", "open_array"),
}


def __getattr__(name: str):
    target = _EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = __import__(module_name, fromlist=[attr_name])
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))


__all__ = sorted(_EXPORTS) + ["__version__"]
