# patch_writer.py
# -*- coding: utf-8 -*-
"""
Splice writer: rebuilds a save file from its loaded bytes and the pending
changes, copying untouched spans verbatim and substituting edited ones.

The cursor always refers to the source buffer, never to the output, so
replacements longer or shorter than the original field shift the rest of
the file without re-encoding it.
"""
import logging
import os

from errors import EditOverlapError, IOFailure


def _iter_splice(buffer, ledger):
    """Yields output chunks in order. Raises EditOverlapError before yielding a bad entry."""
    buffer.rewind()
    for offset, entry in ledger.entries():
        cursor = buffer.position
        if offset < cursor:
            raise EditOverlapError(offset, cursor)
        if offset + entry.original_length > len(buffer):
            # a span may end exactly at the end of the buffer, never past it
            raise EditOverlapError(offset, len(buffer))
        yield buffer.read(offset - cursor)
        yield entry.new_bytes
        buffer.skip(entry.original_length)
    yield buffer.read_remaining()


def expected_output_length(buffer, ledger):
    return len(buffer) + sum(entry.delta for _, entry in ledger.entries())


def splice_bytes(buffer, ledger) -> bytes:
    """Same output as write_buffer, kept in memory."""
    try:
        return b"".join(_iter_splice(buffer, ledger))
    finally:
        buffer.rewind()


def write_buffer(target_path, buffer, ledger) -> int:
    """
    Writes buffer with the ledger's changes applied to target_path.

    Args:
        target_path: File to (over)write
        buffer: RawSaveBuffer with the source bytes
        ledger: ChangeLedger, only read

    Returns:
        Number of bytes written

    Raises:
        EditOverlapError: two changes overlap (the target must be considered invalid)
        IOFailure: the target could not be written
    """
    changes = len(ledger)
    logging.info(f"Writing '{target_path}' ({len(buffer)} source bytes, {changes} change(s))")
    written = 0
    try:
        with open(target_path, 'wb') as out:
            for chunk in _iter_splice(buffer, ledger):
                if chunk:
                    out.write(chunk)
                    written += len(chunk)
            out.flush()
            os.fsync(out.fileno())
    except EditOverlapError:
        logging.error(f"Overlapping changes while writing '{target_path}', output is invalid "
                      f"({written} bytes written)")
        raise
    except OSError as e:
        logging.error(f"ERROR writing save file '{target_path}': {e}", exc_info=True)
        raise IOFailure(f"Unable to write '{target_path}': {e}") from e
    finally:
        buffer.rewind()

    logging.info(f"Save file written: '{target_path}' ({written} bytes)")
    return written
