import os

import pytest

import copy_identity
from changes_ledger import encode_int, encode_utf16_string
from character_session import CharacterSession
from conftest import MONEY_OFFSET, NAME_OFFSET, build_save_bytes
from copy_identity import copy_current_save
from errors import AlreadyExists, IOFailure


@pytest.fixture
def session(save_root, field_map):
    return CharacterSession.load(str(save_root), "Hero", field_map)


def snapshot(folder):
    return {p.relative_to(folder): p.read_bytes() for p in folder.rglob("*") if p.is_file()}


def test_copy_rewrites_only_identity_field(session, save_root):
    source_before = snapshot(save_root / "_Hero")

    target_file = copy_current_save(session, "Hero2")

    copied = open(target_file, 'rb').read()
    source = build_save_bytes()
    new_name = encode_utf16_string("Hero2")
    old_name_length = len(encode_utf16_string("Hero"))
    assert copied[:NAME_OFFSET] == source[:NAME_OFFSET]
    assert copied[NAME_OFFSET:NAME_OFFSET + len(new_name)] == new_name
    assert copied[NAME_OFFSET + len(new_name):] == source[NAME_OFFSET + old_name_length:]

    # side files copied verbatim, source untouched
    assert (save_root / "_Hero2" / "winsys.dxb").read_bytes() == b"\x01\x02\x03"
    assert (save_root / "_Hero2" / "levels" / "world01.map").read_bytes() == b"map-data"
    assert snapshot(save_root / "_Hero") == source_before


def test_copy_does_not_mutate_source_ledger(session):
    session.set("money", 42)
    copy_current_save(session, "Hero2")

    assert "myPlayerName" not in session.ledger
    assert session.ledger.get("money") == encode_int(42)


def test_copy_carries_pending_changes(session, save_root):
    session.set("money", 42)
    target_file = copy_current_save(session, "Hero2")
    copied = open(target_file, 'rb').read()
    shift = len(encode_utf16_string("Hero2")) - len(encode_utf16_string("Hero"))
    assert copied[MONEY_OFFSET + shift:MONEY_OFFSET + shift + 4] == encode_int(42)
    # pending changes are not written to the source
    assert (save_root / "_Hero" / "Player.chr").read_bytes() == build_save_bytes()


def test_copy_target_exists(session, save_root):
    target = save_root / "_Hero2"
    target.mkdir()
    (target / "keep.txt").write_text("existing")
    source_before = snapshot(save_root / "_Hero")

    with pytest.raises(AlreadyExists):
        copy_current_save(session, "Hero2")

    assert snapshot(target) == {target.joinpath("keep.txt").relative_to(target): b"existing"}
    assert snapshot(save_root / "_Hero") == source_before


def test_failed_write_removes_partial_copy(session, save_root, monkeypatch):
    def broken_write(*args, **kwargs):
        raise IOFailure("disk full")

    monkeypatch.setattr(copy_identity, "write_buffer", broken_write)
    with pytest.raises(IOFailure):
        copy_current_save(session, "Hero2")
    assert not (save_root / "_Hero2").exists()

    monkeypatch.undo()
    assert os.path.isfile(copy_current_save(session, "Hero2"))
