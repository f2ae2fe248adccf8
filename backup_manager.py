# backup_manager.py
# -*- coding: utf-8 -*-
import logging
import os
import re
import zipfile
from datetime import datetime
from enum import Enum

import config
from errors import BackupDirectoryError, IOFailure


class BackupMode(Enum):
    FULL = "full"                # whole identity directory tree
    INCREMENTAL = "incremental"  # primary save file only


def backup_archive_name(identity, mode, now=None):
    """'{identity}[-fullbackup]_{YYYYMMDD_HH}.zip'"""
    now = now or datetime.now()
    suffix = config.FULL_BACKUP_SUFFIX if mode is BackupMode.FULL else ""
    return f"{identity}{suffix}_{now.strftime(config.BACKUP_TIMESTAMP_FORMAT)}.zip"


def _get_compression_settings(compression_mode: str) -> tuple:
    """
    Get ZIP compression settings based on mode.

    Args:
        compression_mode: One of 'standard', 'best', 'fast', 'none'

    Returns:
        Tuple (compression_type, compression_level)
    """
    if compression_mode == "best":
        return zipfile.ZIP_DEFLATED, 9
    elif compression_mode == "fast":
        return zipfile.ZIP_DEFLATED, 1
    elif compression_mode == "none":
        return zipfile.ZIP_STORED, None
    return zipfile.ZIP_DEFLATED, 6


def _add_directory_to_zip(zipf: zipfile.ZipFile, source_path: str) -> None:
    """
    Add a directory tree to the archive, arcnames rooted at the directory's own name.
    """
    len_source_path_parent = len(os.path.dirname(source_path)) + len(os.sep)

    for foldername, subfolders, filenames in os.walk(source_path):
        if foldername != source_path and not filenames and not subfolders:
            # keep empty folders
            zipf.write(foldername, arcname=foldername[len_source_path_parent:])
        for filename in sorted(filenames):
            file_path_absolute = os.path.join(foldername, filename)
            arcname = file_path_absolute[len_source_path_parent:]
            logging.debug(f"  Adding file: '{file_path_absolute}' as '{arcname}'")
            zipf.write(file_path_absolute, arcname=arcname)


def _add_single_file_to_zip(zipf: zipfile.ZipFile, source_path: str) -> None:
    """
    Add a single file as parent_folder/file_name.
    """
    source_dir = os.path.dirname(source_path)
    arcname = f"{os.path.basename(source_dir)}/{os.path.basename(source_path)}"
    logging.debug(f"Adding file: '{source_path}' as '{arcname}'")
    zipf.write(source_path, arcname=arcname)


def _ensure_backup_dir(backup_dir):
    if not os.path.isdir(backup_dir):
        try:
            os.makedirs(backup_dir, exist_ok=True)
            logging.info(f"Created backup directory: {backup_dir}")
        except OSError as e:
            msg = f"Unable to create backup directory '{backup_dir}': {e}"
            logging.error(msg)
            raise BackupDirectoryError(msg) from e
    if not os.access(backup_dir, os.W_OK):
        msg = f"Backup directory '{backup_dir}' is not writable"
        logging.error(msg)
        raise BackupDirectoryError(msg)


def backup_save_game(save_file, identity, backup_dir, mode=BackupMode.INCREMENTAL,
                     now=None, compression_mode="standard"):
    """
    Archive the save of one identity before it gets overwritten.

    At most one archive per identity and mode is made per hour: when a
    non-empty archive with the same name already exists nothing is written.

    Args:
        save_file: Primary save file of the identity
        identity: Identity (character) name, used in the archive name
        backup_dir: Folder holding the archives
        mode: BackupMode.FULL or BackupMode.INCREMENTAL
        now: Timestamp used for the hour window (defaults to now)
        compression_mode: 'standard', 'best', 'fast' or 'none'

    Returns:
        Path of the archive covering this hour

    Raises:
        BackupDirectoryError: backup folder missing and not creatable, or not writable
        IOFailure: archive creation failed (no partial archive is left behind)
    """
    save_file = os.path.normpath(os.path.abspath(save_file))
    identity_dir = os.path.dirname(save_file)
    archive_name = backup_archive_name(identity, mode, now)
    archive_path = os.path.join(backup_dir, archive_name)

    # never overwrite a previous backup of the same hour
    if os.path.isfile(archive_path) and os.path.getsize(archive_path) > 1:
        logging.info(f"Backup '{archive_name}' already exists for this hour, skipping.")
        return archive_path

    _ensure_backup_dir(backup_dir)

    if mode is BackupMode.FULL and not os.path.isdir(identity_dir):
        raise IOFailure(f"Identity directory not found: '{identity_dir}'")
    if mode is BackupMode.INCREMENTAL and not os.path.isfile(save_file):
        raise IOFailure(f"Save file not found: '{save_file}'")

    zip_compression, zip_compresslevel = _get_compression_settings(compression_mode)
    temp_path = archive_path + ".part"
    logging.info(f"Creating {mode.value} backup for '{identity}' -> '{archive_path}'")

    try:
        with zipfile.ZipFile(temp_path, 'w', compression=zip_compression, compresslevel=zip_compresslevel) as zipf:
            if mode is BackupMode.FULL:
                _add_directory_to_zip(zipf, identity_dir)
            else:
                _add_single_file_to_zip(zipf, save_file)
        os.replace(temp_path, archive_path)
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        msg = f"ERROR during ZIP archive creation '{archive_path}': {e}"
        logging.error(msg, exc_info=True)
        try:
            if os.path.exists(temp_path):
                os.remove(temp_path)
                logging.warning(f"Incomplete archive deleted: {temp_path}")
        except OSError as del_e:
            logging.error(f"Unable to delete incomplete archive '{temp_path}': {del_e}")
        raise IOFailure(msg) from e

    logging.info(f"Backup archive created successfully: '{archive_path}'")
    return archive_path


def list_backups(backup_dir, identity):
    """(file_name, full_path, modified datetime) for the identity's archives, newest first."""
    backups = []
    if not os.path.isdir(backup_dir):
        return backups

    pattern = re.compile(rf"^{re.escape(identity)}({re.escape(config.FULL_BACKUP_SUFFIX)})?_\d{{8}}_\d{{2}}\.zip$")
    try:
        backup_files = [f for f in os.listdir(backup_dir) if pattern.match(f)]
    except OSError as e:
        logging.error(f"Error listing backups for '{identity}': {e}")
        return backups

    for fname in backup_files:
        fpath = os.path.join(backup_dir, fname)
        backups.append((fname, fpath, datetime.fromtimestamp(os.path.getmtime(fpath))))
    backups.sort(key=lambda b: (b[2], b[0]), reverse=True)
    return backups
