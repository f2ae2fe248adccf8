# save_buffer.py
# -*- coding: utf-8 -*-
import logging
import os

from errors import IOFailure


class RawSaveBuffer:
    """
    Full byte content of one loaded save file plus a read cursor.

    The content never changes after loading; only the cursor moves while a
    patch is being written.
    """

    def __init__(self, data, source_path=None):
        self._data = bytes(data)
        self._position = 0
        self.source_path = source_path

    @classmethod
    def load(cls, path):
        """Reads the whole file into memory."""
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            logging.error(f"Unable to read save file '{path}': {e}")
            raise IOFailure(f"Unable to read save file '{path}': {e}") from e
        logging.debug(f"Loaded {len(data)} bytes from '{path}'")
        return cls(data, source_path=os.path.abspath(path))

    @property
    def data(self):
        return self._data

    @property
    def position(self):
        return self._position

    def __len__(self):
        return len(self._data)

    def rewind(self):
        self._position = 0

    def seek(self, position):
        if position < 0 or position > len(self._data):
            raise ValueError(f"Position {position} outside buffer of {len(self._data)} bytes")
        self._position = position

    def read(self, size):
        """Returns up to size bytes from the cursor and advances it."""
        if size < 0:
            raise ValueError("Negative read size")
        chunk = self._data[self._position:self._position + size]
        self._position += len(chunk)
        return chunk

    def read_remaining(self):
        return self.read(self.remaining())

    def skip(self, size):
        self.seek(self._position + size)

    def remaining(self):
        return len(self._data) - self._position
