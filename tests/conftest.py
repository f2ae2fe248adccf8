import sys
from pathlib import Path

import pytest

# Ensure the repository root is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from changes_ledger import FieldKind, FieldSpec, encode_int, encode_utf16_string  # noqa: E402
from field_map import FieldMap  # noqa: E402

NAME_OFFSET = 8
MONEY_OFFSET = 40
TITLE_OFFSET = 60
RATIO_OFFSET = 80
SAVE_LENGTH = 100


def build_save_bytes(name="Hero", money=1000):
    data = bytearray(range(SAVE_LENGTH))
    encoded_name = encode_utf16_string(name)
    data[NAME_OFFSET:NAME_OFFSET + len(encoded_name)] = encoded_name
    data[MONEY_OFFSET:MONEY_OFFSET + 4] = encode_int(money)
    return bytes(data)


@pytest.fixture
def field_map():
    name_length = len(encode_utf16_string("Hero"))
    return FieldMap(
        fields={
            "myPlayerName": FieldSpec("myPlayerName", NAME_OFFSET, name_length, FieldKind.UTF16_STRING),
            "money": FieldSpec("money", MONEY_OFFSET, 4, FieldKind.INT),
            "title": FieldSpec("title", TITLE_OFFSET, 10, FieldKind.RAW),
            "ratio": FieldSpec("ratio", RATIO_OFFSET, 4, FieldKind.FLOAT),
        },
        identity_field="myPlayerName",
    )


@pytest.fixture
def save_root(tmp_path):
    """save_root/_Hero/Player.chr plus a couple of side files."""
    root = tmp_path / "SaveData" / "Main"
    hero = root / "_Hero"
    (hero / "levels").mkdir(parents=True)
    (hero / "Player.chr").write_bytes(build_save_bytes())
    (hero / "winsys.dxb").write_bytes(b"\x01\x02\x03")
    (hero / "levels" / "world01.map").write_bytes(b"map-data")
    return root


@pytest.fixture
def backup_dir(tmp_path):
    return tmp_path / "Backups"
