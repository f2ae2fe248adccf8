# config.py
import os
import logging
import platform


# --- Application name (used for the app data folder) ---
APP_NAME = "SaveSplice"

# --- Function to find/create the app data folder ---
def get_app_data_folder():
    """Returns the app data folder (%LOCALAPPDATA% on Windows, XDG on Linux)
       and creates it if missing. Falls back to the current directory."""
    system = platform.system()
    base_path = None
    app_folder = None

    try:
        if system == "Windows":
            base_path = os.getenv('LOCALAPPDATA')
        elif system == "Darwin": # macOS
            base_path = os.path.expanduser('~/Library/Application Support')
        elif system == "Linux":
            base_path = os.getenv('XDG_DATA_HOME', os.path.expanduser('~/.local/share'))

        if not base_path:
            logging.error("Unable to determine the standard user data folder. Using the current folder as fallback.")
            app_folder = os.path.abspath(APP_NAME)
        else:
            app_folder = os.path.join(base_path, APP_NAME)

        if not os.path.exists(app_folder):
            try:
                os.makedirs(app_folder, exist_ok=True)
                logging.info(f"Created application data folder: {app_folder}")
            except OSError as e:
                # load/save will report the failure
                logging.error(f"Unable to create data folder {app_folder}: {e}.")

    except Exception as e:
        logging.error(f"Unexpected error in get_app_data_folder: {e}. Falling back to CWD.", exc_info=True)
        app_folder = os.path.abspath(APP_NAME)

    return app_folder

# --- Save layout defaults ---
SAVE_ROOT = os.path.join(os.path.expanduser("~"), "Documents", "My Games", "SaveData", "Main")
SAVE_FILE_NAME = "Player.chr"
IDENTITY_DIR_PREFIX = "_"

# --- Backup settings ---
BACKUP_DIRECTORY = "SaveSpliceBackups"
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H"  # hour window
FULL_BACKUP_SUFFIX = "-fullbackup"
ALWAYS_FULL_BACKUP = False

# --- Identity names ---
MAX_IDENTITY_LENGTH = 64
# Characters accepted in a character/identity name (letters, digits, space, _ and -)
IDENTITY_ALLOWED_PATTERN = r"^[A-Za-z0-9 _\-]+$"

# --- Logging ---
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'
DEFAULT_LOG_LEVEL = "INFO"
