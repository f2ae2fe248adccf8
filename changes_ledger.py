# changes_ledger.py
# -*- coding: utf-8 -*-
"""
Pending field edits for one loaded save.

Each edit is keyed by the symbolic field name found by the decode pass and
resolved to an absolute offset, the byte length the field occupied in the
source file and the replacement bytes. The length a field occupied is
captured on its first edit and never touched again, so the patch writer
always skips exactly the span the field had on disk.
"""
import logging
import struct
from dataclasses import dataclass
from enum import Enum

from errors import DuplicateEdit, EditOverlapError, UnknownField


class FieldKind(Enum):
    STRING = "string"              # int32 length + latin-1 text
    UTF16_STRING = "utf16_string"  # int32 char count + UTF-16LE text
    INT = "int"                    # int32 little endian
    FLOAT = "float"                # float32 little endian
    RAW = "raw"                    # bytes as given


# --- Encoders, one per kind ---

def encode_string(value: str) -> bytes:
    data = value.encode('latin-1')
    return struct.pack('<i', len(data)) + data


def encode_utf16_string(value: str) -> bytes:
    data = value.encode('utf-16-le')
    return struct.pack('<i', len(data) // 2) + data


def encode_int(value: int) -> bytes:
    return struct.pack('<i', value)


def encode_float(value: float) -> bytes:
    return struct.pack('<f', value)


def encode_raw(value) -> bytes:
    return bytes(value)


_ENCODERS = {
    FieldKind.STRING: encode_string,
    FieldKind.UTF16_STRING: encode_utf16_string,
    FieldKind.INT: encode_int,
    FieldKind.FLOAT: encode_float,
    FieldKind.RAW: encode_raw,
}


@dataclass(frozen=True)
class FieldSpec:
    """Location of a decoded field: absolute offset, byte length on disk and kind."""
    name: str
    offset: int
    length: int
    kind: FieldKind = FieldKind.RAW

    def __post_init__(self):
        if self.offset < 0:
            raise ValueError(f"Field '{self.name}' has a negative offset ({self.offset})")
        if self.length < 0:
            raise ValueError(f"Field '{self.name}' has a negative length ({self.length})")


@dataclass(frozen=True)
class FieldValue:
    """A value already encoded for a given field kind."""
    kind: FieldKind
    raw_bytes: bytes

    @classmethod
    def encode(cls, kind, value):
        try:
            return cls(kind, _ENCODERS[kind](value))
        except (struct.error, OverflowError) as e:
            raise ValueError(f"Cannot encode {value!r} as {kind.value}: {e}") from e

    @classmethod
    def from_string(cls, value):
        return cls.encode(FieldKind.STRING, value)

    @classmethod
    def from_utf16(cls, value):
        return cls.encode(FieldKind.UTF16_STRING, value)

    @classmethod
    def from_int(cls, value):
        return cls.encode(FieldKind.INT, value)

    @classmethod
    def from_float(cls, value):
        return cls.encode(FieldKind.FLOAT, value)

    @classmethod
    def from_raw(cls, value):
        return cls.encode(FieldKind.RAW, value)


@dataclass(frozen=True)
class ChangeEntry:
    offset: int
    new_bytes: bytes
    original_length: int

    @property
    def delta(self):
        return len(self.new_bytes) - self.original_length

    def copy(self):
        # bytearray round trip gives the clone its own storage
        return ChangeEntry(self.offset, bytes(bytearray(self.new_bytes)), self.original_length)


class ChangeLedger:
    """Pending edits of one character session, keyed by field name."""

    def __init__(self, fields, buffer_length=None):
        if isinstance(fields, dict):
            fields = fields.values()
        self._fields = {spec.name: spec for spec in fields}
        self.buffer_length = buffer_length
        self._entries = {}
        # offset -> original length, written on the first edit of that offset only
        self._original_lengths = {}
        self._offset_owner = {}

    # --- Field lookup ---

    def field(self, name) -> FieldSpec:
        try:
            return self._fields[name]
        except KeyError:
            raise UnknownField(name) from None

    @property
    def fields(self):
        return dict(self._fields)

    # --- Mutation ---

    def set(self, field, value, overwrite=False):
        """Encodes value per the field's declared kind and records it."""
        spec = self.field(field)
        self.set_value(field, FieldValue.encode(spec.kind, value), overwrite=overwrite)

    def set_value(self, field, value: FieldValue, overwrite=False):
        spec = self.field(field)
        if value.kind is not spec.kind:
            raise ValueError(f"Field '{field}' is {spec.kind.value}, got a {value.kind.value} value")
        if field in self._entries and not overwrite:
            raise DuplicateEdit(field)
        if self.buffer_length is not None and not 0 <= spec.offset < self.buffer_length:
            raise ValueError(f"Field '{field}' offset {spec.offset} is outside the buffer ({self.buffer_length} bytes)")

        owner = self._offset_owner.get(spec.offset)
        if owner is not None and owner != field:
            raise EditOverlapError(spec.offset, spec.offset)

        if spec.offset not in self._original_lengths:
            self._original_lengths[spec.offset] = spec.length
            self._offset_owner[spec.offset] = field

        self._entries[field] = ChangeEntry(spec.offset, bytes(value.raw_bytes), self._original_lengths[spec.offset])
        logging.debug(f"Pending change '{field}' @ {spec.offset}: {len(value.raw_bytes)} bytes "
                      f"(replaces {self._original_lengths[spec.offset]})")

    def set_string(self, field, value, overwrite=False):
        self.set_value(field, FieldValue.from_string(value), overwrite)

    def set_utf16(self, field, value, overwrite=False):
        self.set_value(field, FieldValue.from_utf16(value), overwrite)

    def set_int(self, field, value, overwrite=False):
        self.set_value(field, FieldValue.from_int(value), overwrite)

    def set_float(self, field, value, overwrite=False):
        self.set_value(field, FieldValue.from_float(value), overwrite)

    def set_raw(self, field, value, overwrite=False):
        self.set_value(field, FieldValue.from_raw(value), overwrite)

    def clear(self):
        self._entries.clear()
        self._original_lengths.clear()
        self._offset_owner.clear()

    # --- Queries ---

    def get(self, field):
        entry = self._entries.get(field)
        return entry.new_bytes if entry is not None else None

    def entry(self, field):
        return self._entries.get(field)

    def original_length(self, offset):
        return self._original_lengths.get(offset)

    def entries(self):
        """All (offset, ChangeEntry) pairs, ascending by offset."""
        return sorted(((e.offset, e) for e in self._entries.values()), key=lambda pair: pair[0])

    def is_empty(self):
        return not self._entries

    def __len__(self):
        return len(self._entries)

    def __contains__(self, field):
        return field in self._entries

    # --- Copy ---

    def deep_clone(self):
        """Independent copy: no byte storage or index is shared with self."""
        clone = ChangeLedger(self._fields.values(), buffer_length=self.buffer_length)
        clone._entries = {name: entry.copy() for name, entry in self._entries.items()}
        clone._original_lengths = dict(self._original_lengths)
        clone._offset_owner = dict(self._offset_owner)
        return clone
