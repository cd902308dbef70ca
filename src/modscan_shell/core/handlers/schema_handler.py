# src/modscan_shell/core/handlers/schema_handler.py
import argparse
import logging
from typing import List, Optional

from aggregator.controllers.report_controller import ReportController
from modscan_shell.core.context.shell_context import ShellContext
from modscan_shell.core.managers.config_manager import config_manager
from modscan_shell.core.services.descriptor_scan_service import DescriptorScanService
from modscan_shell.core.services.file_walker_service import ScanRootError
from modscan_shell.core.utils import config_loader

logger = logging.getLogger(__name__)

schema_help_text = """
  schema <root> [--pattern <glob>] [--element <name>] [--workers <n>] [--no-progress]
                      Collects every element and attribute used in the
                      descriptors under <root> with instance counts, and
                      which children and attributes each element carries.
                      --element limits the output to one element.
""".strip()

COMMAND_HIERARCHY = None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="schema", add_help=False)
    parser.add_argument("root")
    parser.add_argument("--pattern")
    parser.add_argument("--element")
    parser.add_argument("--workers", type=int)
    parser.add_argument("--no-progress", action="store_true")
    return parser


def handle_schema(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """Runs a schema discovery scan and prints the vocabulary report."""
    if not args or args[0] in ["help", "-h", "--help"]:
        print(schema_help_text)
        return 0

    try:
        parsed = _build_parser().parse_args(args)
    except SystemExit:
        print(schema_help_text)
        return 1

    pattern = parsed.pattern or config_manager.get_nested("schema.file_pattern", "module.tmpl")
    service = DescriptorScanService(
        config_loader.parser_settings("schema"),
        workers=config_loader.scan_workers(parsed.workers),
        show_progress=config_loader.show_progress(parsed.no_progress),
    )

    try:
        collector, summary = service.collect_schema(parsed.root, pattern)
    except ScanRootError as e:
        print(f"❌ Error: {e}")
        return 1

    ctx.schema_collector = collector
    ctx.schema_root = parsed.root
    ctx.last_summary = summary

    report = ReportController()
    if parsed.element:
        frame = report.schema_frame(collector.index, element=parsed.element)
        if frame.empty:
            print(f"No element named '{parsed.element}' was found.")
        else:
            print(frame.to_string(index=False))
    else:
        print(report.render_schema(collector.index))
    print(summary.summary_line())
    return 0
