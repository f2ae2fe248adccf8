# save_orchestrator.py
# -*- coding: utf-8 -*-
"""
Entry points used by UI action handlers: save (backup then write), backup
only, and copy to a new identity.

Every entry point returns a SaveResult carrying exactly one outcome; errors
from the lower layers never escape to the caller.
"""
import logging
from enum import Enum
from typing import NamedTuple, Optional

import copy_identity
from backup_manager import BackupMode, backup_save_game
from errors import (AlreadyExists, Busy, GameRunningRefusal, InvalidIdentity,
                    user_message)
from patch_writer import write_buffer


class SavePhase(Enum):
    IDLE = "idle"
    BACKING_UP = "backing_up"
    WRITING = "writing"
    COPYING = "copying"


class SaveOutcome(Enum):
    SUCCESS = "success"
    BUSY = "busy"
    GAME_RUNNING = "game_running"
    BACKUP_FAILED = "backup_failed"
    WRITE_FAILED = "write_failed"
    ALREADY_EXISTS = "already_exists"
    INVALID_IDENTITY = "invalid_identity"
    COPY_FAILED = "copy_failed"


class SaveResult(NamedTuple):
    success: bool
    outcome: SaveOutcome
    message: str
    error: Optional[BaseException] = None


class SaveOrchestrator:
    def __init__(self, session, save_state, backup_dir, full_backup=False, compression_mode="standard"):
        self.session = session
        self.save_state = save_state
        self.backup_dir = backup_dir
        self.full_backup = full_backup
        self.compression_mode = compression_mode
        self.phase = SavePhase.IDLE
        self.last_backup = None

    @property
    def backup_mode(self):
        return BackupMode.FULL if self.full_backup else BackupMode.INCREMENTAL

    # --- Guards ---

    def _begin(self):
        """Takes the single-writer flag. Returns a refusal SaveResult, or None when the sequence may start."""
        if not self.save_state.try_begin_save():
            logging.warning("Save requested while another save is in progress, refused.")
            return self._refused(SaveOutcome.BUSY, Busy("Save already in progress"))
        if self.save_state.game_running:
            self.save_state.end_save()
            logging.warning("Save requested while the game is running, refused.")
            return self._refused(SaveOutcome.GAME_RUNNING, GameRunningRefusal("Game is running"))
        return None

    def _finish(self):
        self.phase = SavePhase.IDLE
        self.save_state.end_save()

    @staticmethod
    def _refused(outcome, error):
        return SaveResult(False, outcome, user_message(error), error)

    def _failed(self, outcome, error):
        logging.error(f"{outcome.value} during {self.phase.value} for '{self.session.identity}': {error}",
                      exc_info=True)
        return SaveResult(False, outcome, user_message(error), error)

    # --- Steps ---

    def _run_backup(self):
        self.phase = SavePhase.BACKING_UP
        self.last_backup = backup_save_game(self.session.save_file, self.session.identity,
                                            self.backup_dir, self.backup_mode,
                                            compression_mode=self.compression_mode)
        return self.last_backup

    # --- Entry points ---

    def save(self) -> SaveResult:
        """Backup, then splice the pending changes into the character's save file."""
        refused = self._begin()
        if refused:
            return refused
        try:
            try:
                archive = self._run_backup()
            except Exception as e:
                return self._failed(SaveOutcome.BACKUP_FAILED, e)

            self.phase = SavePhase.WRITING
            try:
                write_buffer(self.session.save_file, self.session.buffer, self.session.ledger)
                # ledger offsets refer to the old bytes, start over from what is on disk now
                self.session.reset()
            except Exception as e:
                # backup taken above is the recovery path
                return self._failed(SaveOutcome.WRITE_FAILED, e)

            logging.info(f"Character '{self.session.identity}' saved (backup: '{archive}')")
            return SaveResult(True, SaveOutcome.SUCCESS, f"Character '{self.session.identity}' saved.")
        finally:
            self._finish()

    def backup(self) -> SaveResult:
        refused = self._begin()
        if refused:
            return refused
        try:
            try:
                archive = self._run_backup()
            except Exception as e:
                return self._failed(SaveOutcome.BACKUP_FAILED, e)
            return SaveResult(True, SaveOutcome.SUCCESS, f"Backup available: '{archive}'")
        finally:
            self._finish()

    def copy(self, target_identity) -> SaveResult:
        refused = self._begin()
        if refused:
            return refused
        try:
            self.phase = SavePhase.COPYING
            try:
                target_file = copy_identity.copy_current_save(self.session, target_identity)
            except InvalidIdentity as e:
                return self._failed(SaveOutcome.INVALID_IDENTITY, e)
            except AlreadyExists as e:
                return self._failed(SaveOutcome.ALREADY_EXISTS, e)
            except Exception as e:
                return self._failed(SaveOutcome.COPY_FAILED, e)
            return SaveResult(True, SaveOutcome.SUCCESS, f"Character copied to '{target_file}'.")
        finally:
            self._finish()
