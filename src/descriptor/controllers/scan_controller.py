from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel
from tqdm.auto import tqdm

from aggregator.collectors import DocumentConsumer
from descriptor.model import FlatParseResult, ParseResult, ParserSettings
from descriptor.services.document_parse_service import DocumentParseService
from modscan_shell.core.utils.parallel_workers import parse_descriptor_worker

logger = logging.getLogger(__name__)


class ScanSummary(BaseModel):
    files_total: int = 0
    parsed: int = 0
    parse_errors: int = 0
    unreadable: int = 0
    incomplete: int = 0
    worker_failures: int = 0
    duration_s: float = 0.0

    def summary_line(self) -> str:
        line = (
            f"Processed {self.files_total} file(s): {self.parsed} parsed, "
            f"{self.parse_errors} parse error(s), {self.unreadable} unreadable, "
            f"{self.incomplete} incomplete."
        )
        if self.worker_failures:
            line += f" {self.worker_failures} file(s) lost to worker failures."
        return line


class ScanController:
    """
    Parses descriptor files and folds the results into a DocumentConsumer.

    With one worker every file is parsed and folded before the next is opened.
    With more, parsing runs in a process pool while folding stays on the
    calling thread, so the consumer only ever sees a single writer.
    """

    def __init__(self, settings: ParserSettings, *, default_workers: Optional[int] = None) -> None:
        self.settings = settings
        self.default_workers = default_workers or 1

    def _fold(self, result: ParseResult, consumer: DocumentConsumer, stats: ScanSummary) -> None:
        if result.error is not None:
            if result.error.kind == "io":
                stats.unreadable += 1
                logger.warning("Could not read %s", result.error.describe())
            else:
                stats.parse_errors += 1
                logger.warning("XML parse error in %s", result.error.describe())
            return

        stats.parsed += 1
        consumer.consume(result.document)

    def _scan_sequential(self, paths: List[Path], consumer: DocumentConsumer, stats: ScanSummary,
                         show_progress: bool) -> None:
        svc = DocumentParseService.from_settings(self.settings)
        iterator = paths if not show_progress else tqdm(paths, desc="Parsing descriptors", unit=" file")
        for path in iterator:
            logger.debug("Processing: %s", path)
            self._fold(svc.parse_file(path), consumer, stats)

    def _scan_parallel(self, paths: List[Path], consumer: DocumentConsumer, stats: ScanSummary,
                       workers: int, show_progress: bool) -> None:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(parse_descriptor_worker, str(p), self.settings.root_tag, self.settings.forbid_dtd): p
                for p in paths
            }
            iterator = as_completed(futures)
            if show_progress:
                iterator = tqdm(iterator, total=len(futures), desc="Parsing descriptors", unit=" file")

            for fut in iterator:
                path = futures[fut]
                try:
                    result = FlatParseResult.model_validate_json(fut.result()).to_result()
                except Exception as e:
                    logger.error("Worker failed for %s: %s", path, e, exc_info=True)
                    stats.worker_failures += 1
                    continue
                self._fold(result, consumer, stats)

    def scan(
            self,
            paths: Iterable[Path],
            consumer: DocumentConsumer,
            *,
            workers: Optional[int] = None,
            show_progress: bool = False,
    ) -> ScanSummary:
        """Runs one batch over `paths` and returns the run statistics."""
        path_list = [Path(p) for p in paths]
        n_workers = max(1, int(workers or self.default_workers))
        stats = ScanSummary(files_total=len(path_list))
        start = time.perf_counter()

        if n_workers == 1 or len(path_list) < 2:
            self._scan_sequential(path_list, consumer, stats, show_progress)
        else:
            n_workers = min(n_workers, os.cpu_count() or n_workers, len(path_list))
            self._scan_parallel(path_list, consumer, stats, n_workers, show_progress)

        stats.incomplete = consumer.incomplete
        stats.duration_s = round(time.perf_counter() - start, 3)
        logger.info(stats.summary_line())
        return stats
