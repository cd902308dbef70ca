# src/modscan_shell/core/discovery.py
import importlib.util
import logging
from typing import Any, Dict, Tuple

from modscan_shell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


def discover_handlers() -> Tuple[Dict[str, Any], Dict[str, Any], Dict[str, str]]:
    """
    Scans the handler directory, loads every '*_handler.py' module and returns:
    1. A map of command names to their handler function.
    2. A map of command names to their hierarchy definition.
    3. A map of command names to their help text string.
    """
    discovered_handlers: Dict[str, Any] = {}
    discovered_hierarchies: Dict[str, Any] = {}
    discovered_help_texts: Dict[str, str] = {}

    handlers_dir = PathUtils.get_handlers_dir()
    base_module_path = "modscan_shell.core.handlers"
    logger.debug("Scanning for handlers in: '%s'", handlers_dir)

    if not handlers_dir.is_dir():
        logger.warning("Handlers directory not found, skipping: %s", handlers_dir)
        return discovered_handlers, discovered_hierarchies, discovered_help_texts

    for file_path in sorted(handlers_dir.glob("**/*_handler.py")):
        relative_path = file_path.relative_to(handlers_dir)
        module_name_parts = list(relative_path.parts)
        module_name_parts[-1] = file_path.stem
        module_name = f"{base_module_path}.{'.'.join(module_name_parts)}"

        try:
            spec = importlib.util.spec_from_file_location(module_name, file_path)
            if not spec or not spec.loader:
                raise ImportError(f"Could not create spec for {file_path}")
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
        except Exception as e:
            logger.error("Failed to load handler module %s: %s", file_path.name, e, exc_info=True)
            continue

        hierarchy = getattr(module, "COMMAND_HIERARCHY", None)

        for attr_name in dir(module):
            if attr_name.startswith("handle_"):
                handler_func = getattr(module, attr_name)
                if callable(handler_func):
                    command_name = attr_name.replace("handle_", "", 1)
                    discovered_handlers[command_name] = handler_func
                    if hierarchy is not None:
                        discovered_hierarchies[command_name] = hierarchy
                    logger.debug("Discovered command '%s'", command_name)

            elif attr_name.endswith("_help_text"):
                help_text_var = getattr(module, attr_name)
                if isinstance(help_text_var, str):
                    command_name = attr_name[:-len("_help_text")]
                    discovered_help_texts[command_name] = help_text_var

    return discovered_handlers, discovered_hierarchies, discovered_help_texts
