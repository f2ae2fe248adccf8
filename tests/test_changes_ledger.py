import struct

import pytest

from changes_ledger import (ChangeLedger, FieldKind, FieldSpec, FieldValue,
                            encode_string, encode_utf16_string)
from errors import DuplicateEdit, EditOverlapError, UnknownField


@pytest.fixture
def ledger(field_map):
    return ChangeLedger(field_map.fields, buffer_length=100)


def test_set_encodes_per_field_kind(ledger):
    ledger.set("money", 5000)
    ledger.set("myPlayerName", "Alice")
    ledger.set("ratio", 1.5)
    ledger.set("title", b"\xaa\xbb")

    assert ledger.get("money") == struct.pack('<i', 5000)
    assert ledger.get("myPlayerName") == struct.pack('<i', 5) + "Alice".encode('utf-16-le')
    assert ledger.get("ratio") == struct.pack('<f', 1.5)
    assert ledger.get("title") == b"\xaa\xbb"


def test_string_encoding_is_length_prefixed():
    assert encode_string("abc") == b"\x03\x00\x00\x00abc"
    assert encode_utf16_string("ab") == b"\x02\x00\x00\x00a\x00b\x00"


def test_get_unset_field_returns_none(ledger):
    assert ledger.get("money") is None


def test_duplicate_edit_without_overwrite(ledger):
    ledger.set("money", 1)
    with pytest.raises(DuplicateEdit):
        ledger.set("money", 2)
    assert ledger.get("money") == struct.pack('<i', 1)


def test_overwrite_keeps_first_original_length(ledger):
    ledger.set("myPlayerName", "A", overwrite=True)
    ledger.set("myPlayerName", "A much longer name", overwrite=True)
    ledger.set("myPlayerName", "Bo", overwrite=True)

    entry = ledger.entry("myPlayerName")
    assert entry.original_length == 12
    assert ledger.original_length(8) == 12
    assert entry.new_bytes == encode_utf16_string("Bo")


def test_unknown_field(ledger):
    with pytest.raises(UnknownField):
        ledger.set("nope", 1)


def test_offset_outside_buffer_rejected():
    ledger = ChangeLedger([FieldSpec("tail", 100, 1, FieldKind.RAW)], buffer_length=100)
    with pytest.raises(ValueError):
        ledger.set("tail", b"x")


def test_two_fields_on_same_offset_rejected():
    ledger = ChangeLedger([FieldSpec("a", 10, 4, FieldKind.INT), FieldSpec("b", 10, 2, FieldKind.RAW)])
    ledger.set("a", 1)
    with pytest.raises(EditOverlapError):
        ledger.set("b", b"zz")


def test_value_kind_must_match_field(ledger):
    with pytest.raises(ValueError):
        ledger.set_value("money", FieldValue.from_float(1.0))


def test_entries_sorted_by_offset(ledger):
    ledger.set("ratio", 0.5)
    ledger.set("myPlayerName", "Zed")
    ledger.set("money", 7)

    assert [offset for offset, _ in ledger.entries()] == [8, 40, 80]


def test_deep_clone_isolation(ledger):
    ledger.set("money", 10)
    clone = ledger.deep_clone()

    clone.set("money", 99, overwrite=True)
    assert ledger.get("money") == struct.pack('<i', 10)

    ledger.set("money", 55, overwrite=True)
    assert clone.get("money") == struct.pack('<i', 99)

    clone.set("title", b"new")
    assert "title" not in ledger
    assert ledger.original_length(60) is None


def test_deep_clone_does_not_share_byte_objects(ledger):
    ledger.set("title", b"0123456789")
    clone = ledger.deep_clone()
    assert clone.get("title") == ledger.get("title")
    assert clone.get("title") is not ledger.get("title")


def test_clear(ledger):
    ledger.set("money", 1)
    ledger.clear()
    assert ledger.is_empty()
    assert len(ledger) == 0


def test_out_of_range_number_rejected(ledger):
    with pytest.raises(ValueError, match="int"):
        ledger.set("money", 0xFFFFFFFF)
    with pytest.raises(ValueError):
        ledger.set("ratio", 1e300)
    assert ledger.is_empty()
