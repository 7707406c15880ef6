"""Pytest bootstrap: make ``tests/fixtures`` importable and share fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

TESTS_ROOT = Path(__file__).resolve().parent
if str(TESTS_ROOT) not in sys.path:
    sys.path.insert(0, str(TESTS_ROOT))

from fixtures.sample_inputs import ABC_LINES  # noqa: E402

from csv_array import CsvArray, MemoryLineStore  # noqa: E402


@pytest.fixture
def abc_store() -> MemoryLineStore:
    return MemoryLineStore(ABC_LINES)


@pytest.fixture
def abc_array(abc_store: MemoryLineStore) -> CsvArray:
    return CsvArray(abc_store)
