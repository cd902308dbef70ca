# src/modscan_shell/core/utils/config_loader.py
import logging
from typing import List, Optional

from descriptor.model import ParserSettings
from descriptor.services.field_extract_service import KeySchema
from modscan_shell.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)

DEFAULT_FIELDS = ["GroupOwner", "classification", "type"]


def parser_settings(section: str) -> ParserSettings:
    """
    Builds ParserSettings from '<section>.root_tag' and the global
    'parser.forbid_dtd' flag.
    """
    return ParserSettings(
        root_tag=config_manager.get_nested(f"{section}.root_tag"),
        forbid_dtd=bool(config_manager.get_nested("parser.forbid_dtd", True)),
    )


def key_schema(section: str, fields: Optional[List[str]] = None) -> KeySchema:
    """Builds the classification KeySchema for 'classifier' or 'navigator'."""
    if fields is None:
        fields = config_manager.get_nested(f"{section}.fields", DEFAULT_FIELDS)
    name_attribute = config_manager.get_nested("classifier.name_attribute", "name")
    return KeySchema.for_fields(fields, name_attribute=name_attribute)


def split_fields(raw: Optional[str]) -> Optional[List[str]]:
    """Turns a comma separated '--fields' option into a list, or None when absent."""
    if not raw:
        return None
    fields = [f.strip() for f in raw.split(",") if f.strip()]
    return fields or None


def scan_workers(override: Optional[int] = None) -> int:
    if override is not None:
        return max(1, override)
    return max(1, int(config_manager.get_nested("scan.workers", 1)))


def show_progress(disabled: bool = False) -> bool:
    if disabled:
        return False
    return bool(config_manager.get_nested("scan.show_progress", False))
