import pytest

from changes_ledger import ChangeLedger, FieldKind, FieldSpec
from errors import EditOverlapError, IOFailure
from patch_writer import expected_output_length, splice_bytes, write_buffer
from save_buffer import RawSaveBuffer

SOURCE = bytes(range(100))


def make_ledger(*specs):
    return ChangeLedger(specs, buffer_length=len(SOURCE))


def test_empty_ledger_reproduces_source(tmp_path):
    target = tmp_path / "out.chr"
    written = write_buffer(target, RawSaveBuffer(SOURCE), make_ledger())
    assert target.read_bytes() == SOURCE
    assert written == len(SOURCE)


def test_shorter_replacement_example(tmp_path):
    ledger = make_ledger(FieldSpec("f", 40, 10, FieldKind.RAW))
    new_bytes = b"ABCDEF"
    ledger.set("f", new_bytes)

    target = tmp_path / "out.chr"
    write_buffer(target, RawSaveBuffer(SOURCE), ledger)
    output = target.read_bytes()

    assert len(output) == 96
    assert output[0:40] == SOURCE[0:40]
    assert output[40:46] == new_bytes
    assert output[46:96] == SOURCE[50:100]


def test_longer_replacement_shifts_tail():
    ledger = make_ledger(FieldSpec("f", 10, 2, FieldKind.RAW))
    ledger.set("f", b"x" * 7)
    output = splice_bytes(RawSaveBuffer(SOURCE), ledger)

    assert len(output) == 105
    assert output[:10] == SOURCE[:10]
    assert output[10:17] == b"x" * 7
    assert output[17:] == SOURCE[12:]


def test_untouched_bytes_outside_edits_preserved():
    ledger = make_ledger(FieldSpec("a", 20, 4, FieldKind.INT), FieldSpec("b", 70, 5, FieldKind.RAW))
    ledger.set("a", -1)
    ledger.set("b", b"")
    buffer = RawSaveBuffer(SOURCE)
    output = splice_bytes(buffer, ledger)

    assert output[:20] == SOURCE[:20]
    assert output[-25:] == SOURCE[75:]
    assert len(output) == expected_output_length(buffer, ledger) == 95


def test_overwrite_skips_original_span_only():
    ledger = make_ledger(FieldSpec("name", 30, 6, FieldKind.STRING))
    ledger.set("name", "a", overwrite=True)
    ledger.set("name", "much longer", overwrite=True)
    output = splice_bytes(RawSaveBuffer(SOURCE), ledger)

    new_bytes = ledger.get("name")
    assert output[:30] == SOURCE[:30]
    assert output[30:30 + len(new_bytes)] == new_bytes
    assert output[30 + len(new_bytes):] == SOURCE[36:]


def test_entry_reaching_end_of_buffer_is_valid():
    ledger = make_ledger(FieldSpec("tail", 90, 10, FieldKind.RAW))
    ledger.set("tail", b"END")
    output = splice_bytes(RawSaveBuffer(SOURCE), ledger)
    assert output == SOURCE[:90] + b"END"


def test_overlapping_entries_fail_fast(tmp_path):
    ledger = make_ledger(FieldSpec("a", 10, 20, FieldKind.RAW), FieldSpec("b", 25, 2, FieldKind.RAW))
    ledger.set("a", b"A")
    ledger.set("b", b"B")

    target = tmp_path / "out.chr"
    with pytest.raises(EditOverlapError):
        write_buffer(target, RawSaveBuffer(SOURCE), ledger)
    # nothing past the first replacement made it to disk
    assert target.read_bytes() == SOURCE[:10] + b"A"


def test_span_past_end_of_buffer_rejected():
    ledger = make_ledger(FieldSpec("tail", 95, 10, FieldKind.RAW))
    ledger.set("tail", b"x")
    with pytest.raises(EditOverlapError):
        splice_bytes(RawSaveBuffer(SOURCE), ledger)


def test_buffer_cursor_rewound_after_write(tmp_path):
    buffer = RawSaveBuffer(SOURCE)
    ledger = make_ledger(FieldSpec("a", 5, 1, FieldKind.RAW))
    ledger.set("a", b"z")
    write_buffer(tmp_path / "out.chr", buffer, ledger)
    assert buffer.position == 0


def test_write_failure_wrapped(tmp_path):
    missing_dir_target = tmp_path / "missing" / "out.chr"
    with pytest.raises(IOFailure):
        write_buffer(missing_dir_target, RawSaveBuffer(SOURCE), make_ledger())


def test_ledger_not_modified_by_write(tmp_path):
    ledger = make_ledger(FieldSpec("a", 5, 1, FieldKind.RAW))
    ledger.set("a", b"zz")
    before = ledger.entries()
    write_buffer(tmp_path / "out.chr", RawSaveBuffer(SOURCE), ledger)
    assert ledger.entries() == before
