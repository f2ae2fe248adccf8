# copy_identity.py
# -*- coding: utf-8 -*-
import logging
import os
import shutil

import save_paths
from errors import AlreadyExists, IOFailure
from patch_writer import write_buffer
from save_buffer import RawSaveBuffer


def copy_current_save(session, target_identity):
    """
    Clone the session's identity directory under a new name.

    The whole source tree is copied verbatim, then only the identity field of
    the copied primary save is rewritten, using a deep clone of the session's
    pending changes. The source folder and the session ledger are not touched.

    Args:
        session: CharacterSession of the source character
        target_identity: New identity name

    Returns:
        Path of the copied primary save file

    Raises:
        InvalidIdentity: target name rejected
        AlreadyExists: a folder for target_identity is already there (nothing touched)
        IOFailure: copying or writing failed (a partial copy is removed)
    """
    target_identity = save_paths.validate_identity(target_identity)
    source_dir = session.identity_dir
    target_dir = save_paths.identity_dir(session.save_root, target_identity, session.prefix)

    if os.path.exists(target_dir):
        logging.error(f"Copy aborted: target directory already exists: '{target_dir}'")
        raise AlreadyExists(f"Target directory already exists: '{target_dir}'")

    logging.info(f"Copying character '{session.identity}' -> '{target_identity}'")
    try:
        shutil.copytree(source_dir, target_dir)
    except (OSError, shutil.Error) as e:
        logging.error(f"Error copying '{source_dir}' to '{target_dir}': {e}", exc_info=True)
        raise IOFailure(f"Unable to copy '{source_dir}' to '{target_dir}': {e}") from e

    target_file = os.path.join(target_dir, session.file_name)
    try:
        changes = session.ledger.deep_clone()
        if session.identity_field:
            changes.set(session.identity_field, target_identity, overwrite=True)
        else:
            logging.warning("No identity field declared in the field map, copied save keeps the old name")
        copied_buffer = RawSaveBuffer.load(target_file)
        write_buffer(target_file, copied_buffer, changes)
    except Exception:
        logging.warning(f"Removing incomplete copy '{target_dir}'")
        shutil.rmtree(target_dir, ignore_errors=True)
        raise
    logging.info(f"Character copied to '{target_dir}'")
    return target_file
