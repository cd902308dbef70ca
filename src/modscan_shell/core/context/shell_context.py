# src/modscan_shell/core/context/shell_context.py
import logging
from typing import Any, Optional, TYPE_CHECKING

from modscan_shell.core.managers.navigator_manager import NavigatorManager

# Retain type hints without importing the heavy analysis modules at startup
if TYPE_CHECKING:
    from aggregator.collectors import ModuleClassifier, SchemaCollector
    from descriptor.controllers.scan_controller import ScanSummary

logger = logging.getLogger(__name__)


class ShellContext:
    """
    Holds the state of one shell session: the results of the last
    'classify' and 'schema' runs and the navigator cursor.
    """

    def __init__(self):
        self.classifier: Optional['ModuleClassifier'] = None
        self.classify_root: Optional[str] = None
        self.schema_collector: Optional['SchemaCollector'] = None
        self.schema_root: Optional[str] = None
        self.last_summary: Optional['ScanSummary'] = None
        self.navigator = NavigatorManager()
        self.prompt_session: Optional[Any] = None

    def __repr__(self) -> str:
        return (
            f"<ShellContext classify_root={self.classify_root} "
            f"schema_root={self.schema_root} nav_loaded={self.navigator.is_loaded}>"
        )
