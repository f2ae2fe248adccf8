# field_map.py
# -*- coding: utf-8 -*-
"""
Field map produced by the decode pass: symbolic field name -> offset, length, kind.

JSON layout:
    {
        "identity_field": "myPlayerName",
        "fields": {
            "myPlayerName": {"offset": 120, "length": 14, "kind": "utf16_string"},
            "money": {"offset": 4096, "length": 4, "kind": "int"}
        }
    }
"""
import json
import logging
from dataclasses import dataclass, field

from changes_ledger import FieldKind, FieldSpec
from errors import IOFailure


@dataclass
class FieldMap:
    fields: dict = field(default_factory=dict)
    identity_field: str = None

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict) or not isinstance(data.get("fields"), dict):
            raise ValueError("Field map must be an object with a 'fields' object")

        specs = {}
        for name, raw in data["fields"].items():
            if not isinstance(raw, dict):
                raise ValueError(f"Field '{name}' is not an object")
            try:
                offset = raw["offset"]
                length = raw["length"]
                kind = FieldKind(raw.get("kind", FieldKind.RAW.value))
            except KeyError as e:
                raise ValueError(f"Field '{name}' is missing {e}") from None
            except ValueError:
                raise ValueError(f"Field '{name}' has an unknown kind '{raw.get('kind')}'") from None
            if not isinstance(offset, int) or not isinstance(length, int):
                raise ValueError(f"Field '{name}' offset/length must be integers")
            specs[name] = FieldSpec(name, offset, length, kind)

        identity_field = data.get("identity_field")
        if identity_field is not None and identity_field not in specs:
            raise ValueError(f"identity_field '{identity_field}' is not a declared field")
        return cls(specs, identity_field)

    def to_dict(self):
        return {
            "identity_field": self.identity_field,
            "fields": {
                name: {"offset": s.offset, "length": s.length, "kind": s.kind.value}
                for name, s in self.fields.items()
            },
        }


def load_field_map(path):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise IOFailure(f"Unable to read field map '{path}': {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Field map '{path}' is not valid JSON: {e}") from e
    field_map = FieldMap.from_dict(data)
    logging.info(f"Loaded field map with {len(field_map.fields)} field(s) from '{path}'")
    return field_map
