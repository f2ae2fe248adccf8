# -*- coding: utf-8 -*-
from PySide6.QtCore import QThread, Signal, QObject

import logging


# --- Worker thread for save/copy/backup entry points ---

class WorkerThread(QThread):
    """
    Runs an orchestrator entry point off the UI thread.

    The function must return a SaveResult; finished carries (success, message)
    and outcome carries the SaveOutcome value for handlers that branch on it.
    """
    finished = Signal(bool, str)
    outcome = Signal(str)
    progress = Signal(str)

    def __init__(self, function, *args, **kwargs):
        super().__init__()
        self.function = function
        self.args = args
        self.kwargs = kwargs
        self.setObjectName("WorkerThread")

    def run(self):
        try:
            self.progress.emit("Operation in progress...")
            result = self.function(*self.args, **self.kwargs)
            self.progress.emit("Operation completed.")
            self.outcome.emit(result.outcome.value)
            self.finished.emit(result.success, result.message)
        except Exception as e:
            error_msg = f"Critical error in worker thread: {e}"
            logging.critical(error_msg, exc_info=True)
            self.progress.emit("Error.")
            self.finished.emit(False, error_msg)


# --- Log handler forwarding records to Qt ---
class QtLogHandler(logging.Handler, QObject):
    log_signal = Signal(str)

    def __init__(self, parent=None):
        logging.Handler.__init__(self)
        QObject.__init__(self, parent)
        self.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s', datefmt='%H:%M:%S'))

    def emit(self, record):
        """Formats the record and emits it, wrapped in an HTML color for WARNING/ERROR."""
        try:
            msg = self.format(record)

            color = None
            if record.levelno >= logging.ERROR:
                color = "#FF0000"
            elif record.levelno == logging.WARNING:
                color = "orange"

            if color:
                colored_msg = f'<font color="{color}">{msg}</font>'
            else:
                colored_msg = msg

            self.log_signal.emit(colored_msg)

        except Exception:
            self.handleError(record)
