# src/modscan_shell/core/handlers/classify_handler.py
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

classify_help_text = """
  classify <root> [--fields f1,f2,...] [--pattern <glob>] [--workers <n>] [--no-progress]
                      Classifies every module descriptor under <root> by its
                      field values (default: GroupOwner, classification, type)
                      and module name, then prints the MODULE HIERARCHY.
""".strip()

COMMAND_HIERARCHY = None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="classify", add_help=False)
    parser.add_argument("root")
    parser.add_argument("--fields")
    parser.add_argument("--pattern")
    parser.add_argument("--workers", type=int)
    parser.add_argument("--no-progress", action="store_true")
    return parser


def handle_classify(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """
    Runs a classification scan and prints the hierarchy report.

    Args:
        args: Command line arguments.
        ctx: The current shell context; receives the finished classifier.

    Returns:
        0 on success, 1 when the root is invalid or the arguments are wrong.
    """
    if not args or args[0] in ["help", "-h", "--help"]:
        print(classify_help_text)
        return 0

    try:
        parsed = _build_parser().parse_args(args)
    except SystemExit:
        print(classify_help_text)
        return 1

    pattern = parsed.pattern or config_manager.get_nested("classifier.file_pattern", "module.tmpl")
    schema = config_loader.key_schema("classifier", config_loader.split_fields(parsed.fields))
    service = DescriptorScanService(
        config_loader.parser_settings("classifier"),
        workers=config_loader.scan_workers(parsed.workers),
        show_progress=config_loader.show_progress(parsed.no_progress),
    )

    try:
        classifier, summary = service.classify(parsed.root, pattern, schema)
    except ScanRootError as e:
        print(f"❌ Error: {e}")
        return 1

    ctx.classifier = classifier
    ctx.classify_root = parsed.root
    ctx.last_summary = summary

    print(ReportController().render_hierarchy(classifier))
    print(summary.summary_line())
    return 0
