# src/modscan_shell/core/services/descriptor_scan_service.py
import logging
from pathlib import Path
from typing import List, Tuple, Union

from aggregator.collectors import ModuleClassifier, SchemaCollector
from descriptor.controllers.scan_controller import ScanController, ScanSummary
from descriptor.model import ParserSettings
from descriptor.services.field_extract_service import KeySchema
from modscan_shell.core.services.file_walker_service import ensure_root, find_files

logger = logging.getLogger(__name__)


class DescriptorScanService:
    """
    Connects the directory walker to the scan controller for one kind of run.

    `ensure_root` is called before anything else, so a bad root raises
    ScanRootError without touching a single file.
    """

    def __init__(self, settings: ParserSettings, workers: int = 1, show_progress: bool = False):
        self.controller = ScanController(settings, default_workers=workers)
        self.show_progress = show_progress

    def _discover(self, root: Union[str, Path], pattern: str) -> Tuple[Path, List[Path]]:
        base = ensure_root(root)
        paths = find_files(base, pattern)
        logger.info("Found %d '%s' file(s) under %s", len(paths), pattern, base)
        return base, paths

    def classify(
            self,
            root: Union[str, Path],
            pattern: str,
            schema: KeySchema,
            keep_documents: bool = False,
    ) -> Tuple[ModuleClassifier, ScanSummary]:
        base, paths = self._discover(root, pattern)
        classifier = ModuleClassifier(schema, keep_documents=keep_documents, root_path=base)
        summary = self.controller.scan(paths, classifier, show_progress=self.show_progress)
        return classifier, summary

    def collect_schema(self, root: Union[str, Path], pattern: str) -> Tuple[SchemaCollector, ScanSummary]:
        _, paths = self._discover(root, pattern)
        collector = SchemaCollector()
        summary = self.controller.scan(paths, collector, show_progress=self.show_progress)
        return collector, summary
