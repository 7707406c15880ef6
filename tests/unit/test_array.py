from __future__ import annotations

import gc
import random
import weakref

import pytest

from csv_array import CsvArray, MemoryLineStore
from csv_array.codec import RecordCodec
from csv_array.errors import DecodeError, EncodeError, SeveredWriteWarning
from csv_array.options import CodecOptions, WriteBack


def test_get_returns_decoded_row(abc_array: CsvArray) -> None:
    assert len(abc_array) == 3
    assert abc_array[1] == ["d", "e", "f"]
    assert abc_array[-1] == ["g", "h", "i"]
    with pytest.raises(IndexError):
        abc_array[3]
    with pytest.raises(IndexError):
        abc_array[-4]


def test_held_row_keeps_its_identity(abc_array: CsvArray) -> None:
    first = abc_array[0]
    second = abc_array[0]

    assert first is second
    first[0] = "shared"
    assert second[0] == "shared"


def test_unheld_rows_are_not_kept(abc_array: CsvArray) -> None:
    ref = weakref.ref(abc_array[0])
    gc.collect()

    assert ref() is None


def test_field_assignment_through_temporary_row_is_written(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    abc_array[2][1] = "Camel"
    gc.collect()

    assert abc_store.lines == ["a,b,c", "d,e,f", "g,Camel,i"]


def test_deferred_write_back_timing(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    row = abc_array[0]
    row[0] = "X"

    assert abc_store.get(0) == "a,b,c"

    row.flush()

    assert abc_store.get(0) == "X,b,c"


def test_immediate_write_back_timing(abc_store: MemoryLineStore) -> None:
    array = CsvArray(abc_store, write_back=WriteBack.IMMEDIATE)
    row = array[0]

    row[0] = "X"

    assert abc_store.get(0) == "X,b,c"


def test_scenario_remove_first_row_reindexes_held_row(abc_array: CsvArray) -> None:
    held = abc_array[1]
    assert held == ["d", "e", "f"]

    removed = abc_array.remove_range(0, 1)

    assert removed == [["a", "b", "c"]]
    assert abc_array[0] == ["d", "e", "f"]
    assert abc_array[0] is held
    assert held.index == 0


def test_scenario_write_to_removed_row_is_dropped(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    held = abc_array[0]
    abc_array.remove_range(0, 1)
    before = abc_store.lines

    held[0] = "X"
    with pytest.warns(SeveredWriteWarning):
        held.flush()

    assert held.severed
    assert held == ["X", "b", "c"]
    assert abc_store.lines == before == ["d,e,f", "g,h,i"]


def test_removed_rows_are_plain_lists(abc_array: CsvArray) -> None:
    held = abc_array[1]
    removed = abc_array.splice(1, 1)

    assert removed == [["d", "e", "f"]]
    assert type(removed[0]) is list
    assert removed[0] is not held


def test_set_overwrites_line_and_live_row(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    live = abc_array[1]
    live[0] = "pending"

    abc_array[1] = ["x", "y"]

    assert abc_store.get(1) == "x,y"
    assert live == ["x", "y"]
    assert not live.dirty


def test_set_with_plain_string_stores_one_field(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    abc_array[0] = "lonely, value"

    assert abc_store.get(0) == '"lonely, value"'
    assert abc_array[0] == ["lonely, value"]


def test_set_out_of_range_raises(abc_array: CsvArray) -> None:
    with pytest.raises(IndexError):
        abc_array[3] = ["nope"]


def test_insertion_moves_held_rows_up(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    rows = [abc_array[i] for i in range(3)]

    abc_array.splice(1, 0, ["n1"], ["n2"])

    assert [row.index for row in rows] == [0, 3, 4]
    assert abc_store.lines == ["a,b,c", "n1", "n2", "d,e,f", "g,h,i"]
    rows[2][0] = "G"
    rows[2].flush()
    assert abc_store.get(4) == "G,h,i"


def test_replacement_severs_rows_in_removed_range(abc_array: CsvArray) -> None:
    rows = [abc_array[i] for i in range(3)]

    removed = abc_array.splice(0, 2, ["only"])

    assert removed == [["a", "b", "c"], ["d", "e", "f"]]
    assert [row.index for row in rows] == [None, None, 1]
    assert abc_array[1] is rows[2]
    assert abc_array[0] == ["only"]
    assert abc_array[0] is not rows[0]


def test_pending_deferred_write_follows_the_move(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    row = abc_array[2]
    row[0] = "late"

    abc_array.unshift(["first"])
    del row
    gc.collect()

    assert abc_store.lines == ["first", "a,b,c", "d,e,f", "late,h,i"]


def test_splice_arguments_follow_list_conventions(abc_array: CsvArray) -> None:
    assert abc_array.splice(-1) == [["g", "h", "i"]]
    assert abc_array.splice(0, -1) == [["a", "b", "c"]]
    assert abc_array.splice(10, 5, ["end"]) == []
    assert [row.to_list() for row in abc_array] == [["d", "e", "f"], ["end"]]


def test_encode_failure_changes_nothing(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    rows = [abc_array[i] for i in range(3)]

    with pytest.raises(EncodeError):
        abc_array.splice(0, 1, ["fine"], ["broken\nrecord"])

    assert abc_store.lines == ["a,b,c", "d,e,f", "g,h,i"]
    assert [row.index for row in rows] == [0, 1, 2]


def test_decode_failure_of_removed_line_changes_nothing() -> None:
    store = MemoryLineStore(["a,b", '"broken', "c,d"])
    array = CsvArray(store)
    held = array[2]

    with pytest.raises(DecodeError):
        array.splice(0, 2)

    assert store.lines == ["a,b", '"broken', "c,d"]
    assert held.index == 2
    with pytest.raises(DecodeError):
        array[1]


def test_derived_operations(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    assert abc_array.push(["j"], ["k"]) == 5
    assert abc_array.pop() == ["k"]
    assert abc_array.shift() == ["a", "b", "c"]
    assert abc_array.unshift(["z"]) == 4
    abc_array.append(["tail"])
    abc_array.insert(1, ["second"])
    abc_array.insert(-100, ["front"])
    abc_array.extend([["e1"], ["e2"]])

    assert abc_store.lines == ["front", "z", "second", "d,e,f", "g,h,i", "j", "tail", "e1", "e2"]

    del abc_array[0]
    del abc_array[-2:]
    assert abc_store.lines == ["z", "second", "d,e,f", "g,h,i", "j", "tail"]


def test_pop_and_shift_on_empty_array() -> None:
    array = CsvArray(MemoryLineStore())

    assert array.pop() is None
    assert array.shift() is None
    assert len(array) == 0


def test_exists_checks_bounds_only(abc_array: CsvArray) -> None:
    assert abc_array.exists(0)
    assert abc_array.exists(-3)
    assert not abc_array.exists(3)
    assert not abc_array.exists(-4)


def test_resize_and_clear(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    held = abc_array[2]

    abc_array.resize(5)
    assert abc_store.lines == ["a,b,c", "d,e,f", "g,h,i", "", ""]
    assert abc_array[4] == []

    abc_array.resize(2)
    assert held.severed
    assert abc_store.lines == ["a,b,c", "d,e,f"]

    abc_array.clear()
    assert len(abc_array) == 0


def test_slice_access_and_assignment(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    assert [row.to_list() for row in abc_array[1:]] == [["d", "e", "f"], ["g", "h", "i"]]

    abc_array[0:2] = [["one"], ["two"], ["three"]]

    assert abc_store.lines == ["one", "two", "three", "g,h,i"]
    with pytest.raises(ValueError):
        abc_array[::2] = [["x"], ["y"]]

    del abc_array[::2]
    assert abc_store.lines == ["two", "g,h,i"]


def test_reverse_swaps_contents(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    abc_array.reverse()

    assert abc_store.lines == ["g,h,i", "d,e,f", "a,b,c"]


def test_records_reads_without_handles(abc_array: CsvArray) -> None:
    assert list(abc_array.records(1)) == [["d", "e", "f"], ["g", "h", "i"]]
    assert list(abc_array.records(0, 1)) == [["a", "b", "c"]]


def test_membership_compares_fields(abc_array: CsvArray) -> None:
    assert ["d", "e", "f"] in abc_array
    assert ["x"] not in abc_array
    assert abc_array.index(["g", "h", "i"]) == 2


def test_flush_writes_all_held_rows(abc_array: CsvArray, abc_store: MemoryLineStore) -> None:
    first, last = abc_array[0], abc_array[2]
    first[0] = "1"
    last[0] = "3"

    abc_array.flush()

    assert abc_store.lines == ["1,b,c", "d,e,f", "3,h,i"]
    assert not first.dirty and not last.dirty


def test_close_flushes_and_closes_store(abc_store: MemoryLineStore) -> None:
    with CsvArray(abc_store) as array:
        row = array[1]
        row[1] = "E"

    assert abc_store.closed
    assert abc_store.lines == ["a,b,c", "d,E,f", "g,h,i"]


def test_custom_codec_is_shared_by_rows() -> None:
    store = MemoryLineStore(["a;b", "c;d"])
    codec = RecordCodec(CodecOptions(separator=";"))
    array = CsvArray(store, codec)

    row = array[0]
    row.append("x,y")
    row.flush()

    assert store.lines == ["a;b;x,y", "c;d"]
    assert array.codec is codec


def test_held_rows_follow_random_splices() -> None:
    rng = random.Random(20111)
    store = MemoryLineStore([f"r{idx},{idx}" for idx in range(20)])
    array = CsvArray(store)
    codec = array.codec
    held = [array[idx] for idx in range(len(array))]
    counter = 1000

    for _ in range(300):
        size = len(array)
        offset = rng.randint(0, size)
        count = rng.randint(0, min(3, size - offset))
        records = []
        for _ in range(rng.randint(0, 3)):
            records.append([f"r{counter}", str(counter)])
            counter += 1

        array.splice(offset, count, *records)
        if len(array) and rng.random() < 0.5:
            held.append(array[rng.randrange(len(array))])

        stored = [codec.decode(line) for line in store.lines]
        for row in held:
            if row.severed:
                assert row.to_list() not in stored
                continue
            assert stored[row.index] == row.to_list()
            assert array[row.index] is row
