"""Construct arrays from a backing target and options."""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping

from pydantic import ValidationError

from csv_array.array import CsvArray
from csv_array.codec import RecordCodec
from csv_array.errors import ConstructionError, StoreError
from csv_array.options import ArrayOptions
from csv_array.store import FileLineStore, LineStore, MemoryLineStore
from csv_array.streaming import StreamingCsvArray

logger = logging.getLogger(__name__)


def _collect_options(target: Any, options: Any, overrides: Mapping[str, Any]) -> tuple[Any, dict[str, Any]]:
    values: dict[str, Any] = {}

    # A lone mapping is the options, with the file under its ``file`` key.
    if isinstance(target, Mapping) and options is None:
        target, options = None, target

    if isinstance(options, ArrayOptions):
        values.update(options.model_dump(exclude_unset=True))
    elif isinstance(options, Mapping):
        values.update(options)
    elif options is not None:
        raise ConstructionError(f"options must be a mapping, got {type(options).__name__}")

    values.update(overrides)
    file_option = values.pop("file", None)
    if target is None:
        target = file_option
    return target, values


def _open_store(target: Any, options: ArrayOptions) -> LineStore:
    if isinstance(target, LineStore):
        return target
    if isinstance(target, (list, tuple)):
        try:
            return MemoryLineStore(target)
        except StoreError as exc:
            raise ConstructionError(f"Cannot use lines as a line store: {exc}") from exc
    if isinstance(target, (str, os.PathLike)):
        try:
            return FileLineStore(target, options.file_store())
        except ValidationError as exc:
            raise ConstructionError(f"Invalid line_store_options: {exc}") from exc
        except (OSError, StoreError) as exc:
            raise ConstructionError(f"Cannot tie file {target}: {exc}") from exc
    raise ConstructionError(f"Unsupported backing target: {type(target).__name__}")


def open_array(
    target: Any = None,
    options: ArrayOptions | Mapping[str, Any] | None = None,
    /,
    **kwargs: Any,
) -> CsvArray:
    """Open a two-level array over ``target``.

    ``target`` is a path, an existing :class:`~csv_array.store.LineStore`, or a
    list of lines. It may also be given as the ``file`` option; a positional
    target wins over it. Options may be an :class:`ArrayOptions`, a mapping,
    keyword arguments, or a mix (keywords win)::

        open_array("data.csv")
        open_array("data.csv", {"separator": ";"})
        open_array("data.csv", separator=";", write_back="immediate")
        open_array(file="data.csv", codec_options={"quoting": "all"})
        open_array({"file": "data.csv", "cache_rows": False})
    """
    target, values = _collect_options(target, options, kwargs)
    if target is None:
        raise ConstructionError("Must specify a file")

    try:
        resolved = ArrayOptions.model_validate(values)
        codec_options = resolved.codec()
    except ValidationError as exc:
        raise ConstructionError(f"Invalid options: {exc}") from exc

    codec = RecordCodec(codec_options)
    store = _open_store(target, resolved)
    array_cls = CsvArray if resolved.cache_rows else StreamingCsvArray

    logger.debug(
        "Opened array",
        extra={
            "event": "array.opened",
            "data": {
                "target": str(target) if isinstance(target, (str, os.PathLike)) else type(target).__name__,
                "write_back": resolved.write_back.value,
                "cache_rows": resolved.cache_rows,
                "separator": codec_options.separator,
            },
        },
    )
    return array_cls(store, codec, write_back=resolved.write_back)


__all__ = ["open_array"]
