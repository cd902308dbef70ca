# src/modscan_shell/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package and user paths.
    """

    # --- Package specific paths

    @staticmethod
    def get_shell_package_root() -> Path:
        """Returns the directory of the modscan_shell package (holds settings.json)."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_handlers_dir() -> Path:
        return PathUtils.get_shell_package_root() / "core" / "handlers"

    # --- User specific paths ---

    @staticmethod
    def get_shell_history_file() -> Path:
        """
        Returns the path to the shell history file in the user's home directory.
        (e.g., ~/.modscan_shell_history)
        """
        return Path.home() / ".modscan_shell_history"

    @staticmethod
    def resolve_output_path(output: str) -> Path:
        """Expands '~' and makes relative output paths absolute against the working directory."""
        return Path(output).expanduser().resolve()
