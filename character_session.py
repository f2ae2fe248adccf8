# character_session.py
# -*- coding: utf-8 -*-
import logging
import os

import config
import save_paths
from changes_ledger import ChangeLedger
from save_buffer import RawSaveBuffer


class CharacterSession:
    """
    One loaded character: its raw save bytes and the pending changes on them.

    Buffer and ledger are created together and thrown away together (character
    switch or reset). Nothing outside the session should mutate them.
    """

    def __init__(self, identity, save_root, buffer, field_map,
                 prefix=config.IDENTITY_DIR_PREFIX, file_name=config.SAVE_FILE_NAME):
        self.identity = identity
        self.save_root = save_root
        self.prefix = prefix
        self.file_name = file_name
        self.buffer = buffer
        self.field_map = field_map
        self.ledger = ChangeLedger(field_map.fields.values(), buffer_length=len(buffer))

    @classmethod
    def load(cls, save_root, identity, field_map,
             prefix=config.IDENTITY_DIR_PREFIX, file_name=config.SAVE_FILE_NAME):
        identity = save_paths.validate_identity(identity)
        path = save_paths.primary_save_file(save_root, identity, prefix, file_name)
        buffer = RawSaveBuffer.load(path)
        logging.info(f"Character '{identity}' loaded from '{path}'")
        return cls(identity, save_root, buffer, field_map, prefix, file_name)

    @property
    def save_file(self):
        return save_paths.primary_save_file(self.save_root, self.identity, self.prefix, self.file_name)

    @property
    def identity_dir(self):
        return os.path.dirname(self.save_file)

    @property
    def identity_field(self):
        return self.field_map.identity_field

    def set(self, field, value, overwrite=True):
        """Edit entry point for UI handlers; later edits replace earlier ones."""
        self.ledger.set(field, value, overwrite=overwrite)

    def has_changes(self):
        return not self.ledger.is_empty()

    def reset(self):
        """Drops pending changes and reloads the bytes from disk."""
        self.buffer = RawSaveBuffer.load(self.save_file)
        self.ledger = ChangeLedger(self.field_map.fields.values(), buffer_length=len(self.buffer))
        logging.info(f"Character '{self.identity}' reset, pending changes discarded")
