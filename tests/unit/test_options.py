from __future__ import annotations

import pytest
from pydantic import ValidationError

from csv_array.options import ArrayOptions, CodecOptions, FileStoreOptions, WriteBack


def test_array_options_defaults() -> None:
    options = ArrayOptions()

    assert options.write_back is WriteBack.DEFERRED
    assert options.cache_rows is True
    assert options.codec() == CodecOptions()
    assert options.file_store() == FileStoreOptions()


def test_separator_overrides_nested_codec_separator() -> None:
    options = ArrayOptions(separator="|", codec_options={"separator": ";", "quoting": "all"})

    codec = options.codec()

    assert codec.separator == "|"
    assert codec.quoting == "all"


def test_write_back_accepts_strings() -> None:
    assert ArrayOptions(write_back="immediate").write_back is WriteBack.IMMEDIATE


def test_unknown_option_is_rejected() -> None:
    with pytest.raises(ValidationError):
        ArrayOptions.model_validate({"hold_rows": True})


@pytest.mark.parametrize(
    "values",
    [
        {"separator": ""},
        {"separator": ";;"},
        {"separator": "\n"},
        {"separator": '"'},
        {"escapechar": ","},
        {"quoting": "nonnumeric"},
        {"delimiter": ";"},
    ],
)
def test_invalid_codec_options(values: dict) -> None:
    with pytest.raises(ValidationError):
        CodecOptions.model_validate(values)


def test_codec_options_are_frozen() -> None:
    options = CodecOptions()
    with pytest.raises(ValidationError):
        options.separator = ";"  # type: ignore[misc]


def test_file_store_options_validation() -> None:
    assert FileStoreOptions(newline="\r\n").newline == "\r\n"
    with pytest.raises(ValidationError):
        FileStoreOptions(newline="")
    with pytest.raises(ValidationError):
        FileStoreOptions(chunk_size=0)
