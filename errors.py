# errors.py
# -*- coding: utf-8 -*-
"""
Error taxonomy for the save patch engine.

Ledger and writer errors propagate unchanged up to the save orchestrator,
which turns each of them into exactly one terminal outcome.
"""


class SaveSpliceError(Exception):
    """Base class for every error raised by the patch engine."""
    user_message = "Unexpected error while handling the save file."


class DuplicateEdit(SaveSpliceError):
    user_message = "A pending change already exists for this field."

    def __init__(self, field):
        super().__init__(f"Field '{field}' already has a pending change (overwrite not requested)")
        self.field = field


class UnknownField(SaveSpliceError, KeyError):
    user_message = "The field is not present in the decoded save."

    def __init__(self, field):
        super().__init__(f"Unknown field '{field}'")
        self.field = field

    def __str__(self):
        return self.args[0]


class EditOverlapError(SaveSpliceError):
    user_message = "Pending changes overlap each other. The save was not written correctly."

    def __init__(self, offset, cursor):
        super().__init__(f"Change at offset {offset} overlaps the previous span ending at {cursor}")
        self.offset = offset
        self.cursor = cursor


class IOFailure(SaveSpliceError):
    user_message = "Error reading or writing the save files."


class BackupDirectoryError(SaveSpliceError):
    user_message = "Unable to create or write to the backup directory."


class AlreadyExists(SaveSpliceError):
    user_message = "A character with that name already exists."


class Busy(SaveSpliceError):
    user_message = "A save is already in progress."


class GameRunningRefusal(SaveSpliceError):
    user_message = "The game is running. Close it before saving."


class InvalidIdentity(SaveSpliceError):
    user_message = "The character name contains invalid characters."


def user_message(exc):
    """Single user facing message for an error kind."""
    if isinstance(exc, SaveSpliceError):
        return exc.user_message
    return SaveSpliceError.user_message
