# save_splice_cli.py
# -*- coding: utf-8 -*-
"""
Command line front end for the save patch engine.

    python save_splice_cli.py list
    python save_splice_cli.py backup Hero --full
    python save_splice_cli.py save Hero --field-map hero.json --set money=5000 --set myPlayerName=Hero
    python save_splice_cli.py copy Hero Hero2 --field-map hero.json
    python save_splice_cli.py list-backups Hero
"""
import argparse
import logging
import sys

from colorama import Fore, Style, just_fix_windows_console

import backup_manager
import config
import save_paths
import settings_manager
from changes_ledger import FieldKind
from character_session import CharacterSession
from errors import SaveSpliceError, user_message
from field_map import FieldMap, load_field_map
from save_orchestrator import SaveOrchestrator
from save_state import SaveState


# --- Colored output helpers ---

def print_header(text):
    print(f"\n{Style.BRIGHT}{Fore.MAGENTA}--- {text} ---{Style.RESET_ALL}")

def print_info(text):
    print(text)

def print_success(text):
    print(f"{Fore.GREEN}{text}{Style.RESET_ALL}")

def print_warning(text):
    print(f"{Fore.YELLOW}WARNING: {text}{Style.RESET_ALL}")

def print_error(text):
    print(f"{Style.BRIGHT}{Fore.RED}ERROR: {text}{Style.RESET_ALL}")


# --- Logging ---

def configure_logging(level_name="INFO", log_file=None):
    log_formatter = logging.Formatter(config.LOG_FORMAT, config.LOG_DATEFMT)
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(log_formatter)
        root_logger.addHandler(file_handler)


# --- Value parsing, one parser per field kind ---

_VALUE_PARSERS = {
    FieldKind.STRING: str,
    FieldKind.UTF16_STRING: str,
    FieldKind.INT: lambda text: int(text, 0),
    FieldKind.FLOAT: float,
    FieldKind.RAW: bytes.fromhex,
}


def parse_assignment(field_map, assignment):
    """'name=value' -> (name, value converted for the field's kind)."""
    name, sep, text = assignment.partition("=")
    if not sep or not name:
        raise ValueError(f"Expected name=value, got '{assignment}'")
    spec = field_map.fields.get(name)
    if spec is None:
        raise ValueError(f"Unknown field '{name}'")
    try:
        return name, _VALUE_PARSERS[spec.kind](text)
    except ValueError as e:
        raise ValueError(f"Invalid {spec.kind.value} value for '{name}': {text}") from e


# --- Commands ---

def _open_session(settings, identity, field_map):
    return CharacterSession.load(settings["save_root"], identity, field_map,
                                 prefix=settings["identity_dir_prefix"],
                                 file_name=settings["save_file_name"])


def _orchestrator(settings, session, full_backup=None):
    if full_backup is None:
        full_backup = settings["always_full_backup"]
    return SaveOrchestrator(session, SaveState(), settings_manager.resolve_backup_dir(settings),
                            full_backup=full_backup, compression_mode=settings["compression_mode"])


def _report(result):
    if result.success:
        print_success(result.message)
        return 0
    print_error(result.message)
    return 1


def cmd_list(args, settings):
    print_header("Characters")
    identities = save_paths.list_identities(settings["save_root"], settings["identity_dir_prefix"],
                                            settings["save_file_name"])
    if not identities:
        print_warning(f"No characters found in '{settings['save_root']}'")
    for identity in identities:
        print_info(f"  {identity}")
    return 0


def cmd_list_backups(args, settings):
    print_header(f"Backups of '{args.identity}'")
    backups = backup_manager.list_backups(settings_manager.resolve_backup_dir(settings), args.identity)
    if not backups:
        print_warning("No backups found.")
    for fname, _, modified in backups:
        print_info(f"  {fname}  ({modified.strftime('%Y-%m-%d %H:%M:%S')})")
    return 0


def cmd_backup(args, settings):
    session = _open_session(settings, args.identity, FieldMap())
    full = True if args.full else None
    return _report(_orchestrator(settings, session, full).backup())


def cmd_save(args, settings):
    field_map = load_field_map(args.field_map)
    session = _open_session(settings, args.identity, field_map)
    for assignment in args.set or []:
        name, value = parse_assignment(field_map, assignment)
        session.set(name, value)
    if not session.has_changes():
        print_warning("No changes requested, the save will be rewritten unchanged.")
    full = True if args.full else None
    return _report(_orchestrator(settings, session, full).save())


def cmd_copy(args, settings):
    field_map = load_field_map(args.field_map)
    session = _open_session(settings, args.identity, field_map)
    return _report(_orchestrator(settings, session).copy(args.target))


def build_parser():
    parser = argparse.ArgumentParser(description="Edit binary game saves in place, with backups.")
    parser.add_argument("--settings", help="Path of an alternative settings.json")
    parser.add_argument("--save-root", help="Folder containing the character folders")
    parser.add_argument("--backup-dir", help="Folder for backup archives")
    parser.add_argument("--log-level", choices=settings_manager.VALID_LOG_LEVELS, help="Logging level")
    parser.add_argument("--log-file", help="Also write the log to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List characters").set_defaults(func=cmd_list)

    p = sub.add_parser("list-backups", help="List backup archives of a character")
    p.add_argument("identity")
    p.set_defaults(func=cmd_list_backups)

    p = sub.add_parser("backup", help="Back up a character")
    p.add_argument("identity")
    p.add_argument("--full", action="store_true", help="Archive the whole character folder")
    p.set_defaults(func=cmd_backup)

    p = sub.add_parser("save", help="Apply field edits to a character (backup first)")
    p.add_argument("identity")
    p.add_argument("--field-map", required=True, help="JSON field map from the decoder")
    p.add_argument("--set", action="append", metavar="FIELD=VALUE", help="Field edit (repeatable)")
    p.add_argument("--full", action="store_true", help="Use a full backup")
    p.set_defaults(func=cmd_save)

    p = sub.add_parser("copy", help="Copy a character under a new name")
    p.add_argument("identity")
    p.add_argument("target")
    p.add_argument("--field-map", required=True, help="JSON field map from the decoder")
    p.set_defaults(func=cmd_copy)
    return parser


def main(argv=None):
    just_fix_windows_console()
    args = build_parser().parse_args(argv)

    settings, _ = settings_manager.load_settings(args.settings)
    if args.save_root:
        settings["save_root"] = args.save_root
    if args.backup_dir:
        settings["backup_dir"] = args.backup_dir
    configure_logging(args.log_level or settings["log_level"], args.log_file)
    logging.debug(f"Received arguments: {argv if argv is not None else sys.argv[1:]}")

    try:
        return args.func(args, settings)
    except SaveSpliceError as e:
        logging.error(f"{type(e).__name__}: {e}")
        print_error(user_message(e))
        return 1
    except ValueError as e:
        logging.error(str(e))
        print_error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
