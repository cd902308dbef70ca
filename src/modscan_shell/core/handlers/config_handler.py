# src/modscan_shell/core/handlers/config_handler.py
import argparse
import json
import logging
from typing import Any, Dict, List, Optional

from modscan_shell.core.context.shell_context import ShellContext
from modscan_shell.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)

config_help_text = """
  config list [<section>]    Show the configuration (or one section) as JSON.
  config get <key>           Show a single value, e.g. 'config get scan.workers'.
  config set <key> <value>   Set a value for this session. Lists take JSON: '["GroupOwner","type"]'.
  config reset               Reload the configuration from settings.json.
""".strip()

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "list": None,
    "get": None,
    "set": None,
    "reset": None,
}

_MISSING = object()


def _handle_list(parsed: argparse.Namespace) -> int:
    data = config_manager.get_all()
    if parsed.section:
        if parsed.section not in data:
            print(f"❌ Error: Unknown config section '{parsed.section}'.")
            return 1
        data = data[parsed.section]
    print(json.dumps(data, indent=2))
    return 0


def _handle_get(parsed: argparse.Namespace) -> int:
    value = config_manager.get_nested(parsed.key, _MISSING)
    if value is _MISSING:
        print(f"❌ Error: No config value for '{parsed.key}'.")
        return 1
    print(json.dumps(value) if isinstance(value, (dict, list)) else value)
    return 0


def _handle_set(parsed: argparse.Namespace) -> int:
    value = " ".join(parsed.value)
    if len(value) > 1 and value[0] == value[-1] == '"':
        value = value[1:-1]

    if not config_manager.set_nested(parsed.key, value):
        print(f"❌ Error: Failed to set config value for key '{parsed.key}'.")
        return 1
    new_value = config_manager.get_nested(parsed.key)
    logger.debug("Config %s set to %r", parsed.key, new_value)
    print(f"✅ Config updated: {parsed.key} = {new_value} (type: {type(new_value).__name__})")
    return 0


def _handle_reset(_parsed: argparse.Namespace) -> int:
    config_manager.reset()
    print("✅ Configuration has been reset to the values from settings.json.")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="config", add_help=False)
    subparsers = parser.add_subparsers(dest="subcommand")

    list_parser = subparsers.add_parser("list", add_help=False)
    list_parser.add_argument("section", nargs="?")
    list_parser.set_defaults(func=_handle_list)

    get_parser = subparsers.add_parser("get", add_help=False)
    get_parser.add_argument("key")
    get_parser.set_defaults(func=_handle_get)

    set_parser = subparsers.add_parser("set", add_help=False)
    set_parser.add_argument("key")
    set_parser.add_argument("value", nargs="+")
    set_parser.set_defaults(func=_handle_set)

    subparsers.add_parser("reset", add_help=False).set_defaults(func=_handle_reset)
    return parser


def handle_config(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """Handles the 'config' command for viewing and modifying session configuration."""
    if not args or args[0] in ["help", "-h", "--help"]:
        print(config_help_text)
        return 0 if args else 1

    try:
        parsed = _build_parser().parse_args(args)
    except SystemExit:
        print(config_help_text)
        return 1
    return parsed.func(parsed)
