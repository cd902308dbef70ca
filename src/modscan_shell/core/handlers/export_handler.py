# src/modscan_shell/core/handlers/export_handler.py
import argparse
import logging
from typing import List, Optional

import pandas as pd

from aggregator.controllers.report_controller import ReportController
from modscan_shell.core.context.shell_context import ShellContext
from modscan_shell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

export_help_text = """
  export classify -o <file.csv>
                      Writes one row per classification key tuple (with its
                      count) from the last 'classify' run.
  export schema -o <file.csv> [--element <name>]
                      Writes element, child and attribute counts from the
                      last 'schema' run.
""".strip()

COMMAND_HIERARCHY = {
    "classify": None,
    "schema": None,
}


def _frame_for(parsed: argparse.Namespace, ctx: ShellContext) -> Optional[pd.DataFrame]:
    report = ReportController()
    if parsed.target == "classify":
        if ctx.classifier is None:
            print("❌ Error: No classification results yet. Run 'classify <root>' first.")
            return None
        return report.leaf_frame(ctx.classifier)

    if ctx.schema_collector is None:
        print("❌ Error: No schema results yet. Run 'schema <root>' first.")
        return None
    return report.schema_frame(ctx.schema_collector.index, element=parsed.element)


def handle_export(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """
    Exports the flat report of the last classify or schema run to CSV.

    Args:
        args: Command line arguments.
        ctx: The current shell context holding the last results.

    Returns:
        0 for success, 1 for errors.
    """
    if not args or args[0] in ["help", "-h", "--help"]:
        print(export_help_text)
        return 0

    parser = argparse.ArgumentParser(prog="export", add_help=False)
    parser.add_argument("target", choices=["classify", "schema"])
    parser.add_argument("--output", "-o", required=True)
    parser.add_argument("--element")

    try:
        parsed = parser.parse_args(args)
    except SystemExit:
        print(export_help_text)
        return 1

    df = _frame_for(parsed, ctx)
    if df is None:
        return 1
    if df.empty:
        print("🤷 No data available to export.")
        return 0

    output_file = PathUtils.resolve_output_path(parsed.output)
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output_file, index=False)
    except OSError as e:
        logger.error("Could not write %s: %s", output_file, e, exc_info=True)
        print(f"❌ Error: Could not write {output_file}: {e}")
        return 1

    print(f"✅ Exported {len(df)} row(s) to {output_file}")
    return 0
