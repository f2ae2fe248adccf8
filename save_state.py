# save_state.py
# -*- coding: utf-8 -*-
import logging
import threading


class SaveState:
    """
    Process wide flags shared by every save/copy entry point.

    save_in_progress is owned by the patch engine (test-and-set under the lock);
    game_running is written by an external process monitor and only read here.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._save_in_progress = False
        self._game_running = False

    @property
    def save_in_progress(self):
        with self._lock:
            return self._save_in_progress

    @property
    def game_running(self):
        with self._lock:
            return self._game_running

    def set_game_running(self, running):
        with self._lock:
            changed = self._game_running != bool(running)
            self._game_running = bool(running)
        if changed:
            logging.info(f"Game running state changed: {bool(running)}")

    def try_begin_save(self):
        """Sets save_in_progress if it was clear. Returns False when another save holds it."""
        with self._lock:
            if self._save_in_progress:
                return False
            self._save_in_progress = True
            return True

    def end_save(self):
        with self._lock:
            self._save_in_progress = False
