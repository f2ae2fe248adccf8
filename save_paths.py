# save_paths.py
# -*- coding: utf-8 -*-
import logging
import os
import re

import config
from errors import InvalidIdentity


def validate_identity(name):
    """Returns the trimmed identity name or raises InvalidIdentity."""
    if not isinstance(name, str):
        raise InvalidIdentity(f"Identity must be a string, got {type(name).__name__}")
    cleaned = name.strip()
    if not cleaned:
        raise InvalidIdentity("Identity name is empty")
    if len(cleaned) > config.MAX_IDENTITY_LENGTH:
        raise InvalidIdentity(f"Identity name longer than {config.MAX_IDENTITY_LENGTH} characters")
    if not re.match(config.IDENTITY_ALLOWED_PATTERN, cleaned):
        raise InvalidIdentity(f"Identity name '{cleaned}' contains invalid characters")
    return cleaned


def identity_dir(save_root, identity, prefix=config.IDENTITY_DIR_PREFIX):
    """Folder holding every file of one character: {save_root}/{prefix}{identity}"""
    return os.path.join(save_root, f"{prefix}{identity}")


def primary_save_file(save_root, identity, prefix=config.IDENTITY_DIR_PREFIX,
                      file_name=config.SAVE_FILE_NAME):
    return os.path.join(identity_dir(save_root, identity, prefix), file_name)


def list_identities(save_root, prefix=config.IDENTITY_DIR_PREFIX, file_name=config.SAVE_FILE_NAME):
    """Identity names under save_root that contain a primary save file, sorted."""
    identities = []
    if not os.path.isdir(save_root):
        logging.warning(f"Save root not found: '{save_root}'")
        return identities
    for entry in os.listdir(save_root):
        if not entry.startswith(prefix) or len(entry) == len(prefix):
            continue
        if os.path.isfile(os.path.join(save_root, entry, file_name)):
            identities.append(entry[len(prefix):])
    return sorted(identities)
