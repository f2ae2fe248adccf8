# settings_manager.py
import json
import logging
import os

import config # Import for default values


SETTINGS_FILENAME = "settings.json"
VALID_COMPRESSION_MODES = ["standard", "best", "fast", "none"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def get_settings_path() -> str:
    return os.path.join(config.get_app_data_folder(), SETTINGS_FILENAME)


def get_defaults() -> dict:
    return {
        "save_root": config.SAVE_ROOT,
        "backup_dir": None, # None -> <save_root parent>/SaveSpliceBackups
        "always_full_backup": config.ALWAYS_FULL_BACKUP,
        "identity_dir_prefix": config.IDENTITY_DIR_PREFIX,
        "save_file_name": config.SAVE_FILE_NAME,
        "compression_mode": "standard",
        "log_level": config.DEFAULT_LOG_LEVEL,
    }


def resolve_backup_dir(settings: dict) -> str:
    """Configured backup folder, or the default one next to the save root."""
    backup_dir = settings.get("backup_dir")
    if backup_dir:
        return backup_dir
    save_root = os.path.normpath(settings.get("save_root") or config.SAVE_ROOT)
    return os.path.join(os.path.dirname(save_root), config.BACKUP_DIRECTORY)


def _validate(settings: dict, defaults: dict) -> dict:
    for key in ("save_root", "identity_dir_prefix", "save_file_name"):
        if not isinstance(settings.get(key), str) or not settings[key]:
            logging.warning(f"Invalid {key} value ('{settings.get(key)}'), using default '{defaults[key]}'.")
            settings[key] = defaults[key]

    if settings.get("backup_dir") is not None and not isinstance(settings.get("backup_dir"), str):
        logging.warning(f"Invalid backup_dir value ('{settings.get('backup_dir')}'), using default.")
        settings["backup_dir"] = defaults["backup_dir"]

    if not isinstance(settings.get("always_full_backup"), bool):
        logging.warning(f"Invalid value for always_full_backup ('{settings.get('always_full_backup')}'), "
                        f"using default {defaults['always_full_backup']}.")
        settings["always_full_backup"] = defaults["always_full_backup"]

    if settings.get("compression_mode") not in VALID_COMPRESSION_MODES:
        logging.warning(f"Invalid compression_mode value ('{settings.get('compression_mode')}'), "
                        f"using default '{defaults['compression_mode']}'.")
        settings["compression_mode"] = defaults["compression_mode"]

    level = settings.get("log_level")
    if not isinstance(level, str) or level.upper() not in VALID_LOG_LEVELS:
        logging.warning(f"Invalid log_level value ('{level}'), using default '{defaults['log_level']}'.")
        settings["log_level"] = defaults["log_level"]
    else:
        settings["log_level"] = level.upper()
    return settings


def load_settings(settings_file_path=None):
    """Load settings merged over defaults. Returns (settings, first_launch)."""
    settings_file_path = settings_file_path or get_settings_path()
    defaults = get_defaults()

    if not os.path.exists(settings_file_path):
        logging.info(f"Settings file '{settings_file_path}' not found, using defaults.")
        return defaults.copy(), True

    try:
        with open(settings_file_path, 'r', encoding='utf-8') as f:
            user_settings = json.load(f)
        if not isinstance(user_settings, dict):
            raise TypeError("settings root is not an object")
        logging.info(f"Settings loaded successfully from '{settings_file_path}'.")
        settings = defaults.copy()
        settings.update(user_settings)
        return _validate(settings, defaults), False
    except (json.JSONDecodeError, TypeError):
        logging.error(f"Failed to read or validate '{settings_file_path}'...", exc_info=True)
        return defaults.copy(), True # corrupted file is treated as first launch
    except OSError:
        logging.error(f"Unexpected error reading settings from '{settings_file_path}'.", exc_info=True)
        return defaults.copy(), True


def save_settings(settings_dict, settings_file_path=None):
    """Save the settings dictionary. Returns bool (success)."""
    settings_file_path = settings_file_path or get_settings_path()
    try:
        os.makedirs(os.path.dirname(os.path.abspath(settings_file_path)), exist_ok=True)
        with open(settings_file_path, 'w', encoding='utf-8') as f:
            json.dump(settings_dict, f, indent=4, ensure_ascii=False)
        logging.info(f"Settings saved to '{settings_file_path}'.")
        return True
    except (OSError, TypeError) as e:
        logging.error(f"Error saving settings in '{settings_file_path}': {e}")
        return False
