# src/modscan_shell/core/handlers/nav_handler.py
import argparse
import json
import logging
from typing import List, Optional, Tuple

from aggregator.controllers.navigation_controller import NavigationController
from aggregator.model import NavigationNode
from modscan_shell.core.context.shell_context import ShellContext
from modscan_shell.core.managers.config_manager import config_manager
from modscan_shell.core.services.descriptor_scan_service import DescriptorScanService
from modscan_shell.core.services.file_walker_service import ScanRootError
from modscan_shell.core.utils import config_loader
from modscan_shell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

nav_help_text = """
  nav load <root> [--fields f1,f2] [--pattern <glob>] [--workers <n>]
                      Scans <root> and builds a browsable tree grouped by
                      GroupOwner and classification (configurable).
  nav ls              List the children of the current node.
  nav cd <n|label>    Enter a child by 1-based index or label ('..' and '/' work too).
  nav up              Go to the parent node.
  nav attrs           Show the attributes of the current node.
  nav tree [--depth <n>]
                      Print the subtree below the current node.
  nav json [-o <file>] [--open-depth <n>]
                      Dump the current subtree as jsTree-style JSON.
""".strip()

COMMAND_HIERARCHY = {
    "load": None,
    "ls": None,
    "cd": None,
    "up": None,
    "attrs": None,
    "tree": None,
    "json": None,
}


def _describe(node: NavigationNode) -> str:
    if node.node_type == "module":
        return f"{node.label}  ({node.path})" if node.path else f"{node.label} [{node.count}]"
    if node.node_type == "element":
        return f"{node.label}: {node.value}" if node.value else node.label
    return f"{node.label} [{node.count}]"


def _tree_lines(node: NavigationNode, depth: Optional[int]) -> List[str]:
    lines = []
    stack: List[Tuple[NavigationNode, int]] = [(node, 0)]
    while stack:
        current, level = stack.pop()
        lines.append(f"{'  ' * level}{_describe(current)}")
        if depth is None or level < depth:
            stack.extend((child, level + 1) for child in reversed(current.children))
    return lines


def _require_loaded(ctx: ShellContext) -> bool:
    if not ctx.navigator.is_loaded:
        print("❌ Error: Nothing loaded. Use 'nav load <root>' first.")
        return False
    return True


def _handle_load(args: argparse.Namespace, ctx: ShellContext) -> int:
    pattern = args.pattern or config_manager.get_nested("classifier.file_pattern", "module.tmpl")
    schema = config_loader.key_schema("navigator", config_loader.split_fields(args.fields))
    service = DescriptorScanService(
        config_loader.parser_settings("classifier"),
        workers=config_loader.scan_workers(args.workers),
        show_progress=config_loader.show_progress(),
    )

    try:
        classifier, summary = service.classify(args.root, pattern, schema, keep_documents=True)
    except ScanRootError as e:
        print(f"❌ Error: {e}")
        return 1

    ctx.navigator.load(NavigationController().build_tree(classifier))
    ctx.last_summary = summary
    print(f"✅ Loaded {ctx.navigator.root.count} module(s) from {args.root}.")
    print(summary.summary_line())
    return 0


def _handle_ls(_args: argparse.Namespace, ctx: ShellContext) -> int:
    if not _require_loaded(ctx):
        return 1
    node = ctx.navigator.current
    print(f"{ctx.navigator.location}  ({node.node_type})")
    for i, child in enumerate(node.children, start=1):
        marker = "+" if child.has_children else " "
        print(f"  {i:>4} {marker} {_describe(child)}")
    if not node.children:
        print("  (no children)")
    return 0


def _handle_cd(args: argparse.Namespace, ctx: ShellContext) -> int:
    if not _require_loaded(ctx):
        return 1
    node = ctx.navigator.enter(args.target)
    if node is None:
        print(f"❌ Error: No child '{args.target}' under {ctx.navigator.location}.")
        return 1
    print(ctx.navigator.location)
    return 0


def _handle_up(_args: argparse.Namespace, ctx: ShellContext) -> int:
    if not _require_loaded(ctx):
        return 1
    ctx.navigator.up()
    print(ctx.navigator.location)
    return 0


def _handle_attrs(_args: argparse.Namespace, ctx: ShellContext) -> int:
    if not _require_loaded(ctx):
        return 1
    node = ctx.navigator.current
    print(f"Element: {node.label}")
    print(f"Type:    {node.node_type}")
    if node.value is not None:
        print(f"Value:   {node.value}")
    if node.path:
        print(f"Path:    {node.path}")
    if node.attributes:
        print("Attributes:")
        for key, value in sorted(node.attributes.items()):
            print(f"  {key} = {value}")
    return 0


def _handle_tree(args: argparse.Namespace, ctx: ShellContext) -> int:
    if not _require_loaded(ctx):
        return 1
    print("\n".join(_tree_lines(ctx.navigator.current, args.depth)))
    return 0


def _handle_json(args: argparse.Namespace, ctx: ShellContext) -> int:
    if not _require_loaded(ctx):
        return 1
    open_depth = args.open_depth
    if open_depth is None:
        open_depth = int(config_manager.get_nested("navigator.open_depth", 1))
    data = NavigationController().to_jstree(ctx.navigator.current, open_depth=open_depth)
    try:
        text = json.dumps(data, indent=2, ensure_ascii=False)
    except RecursionError:
        logger.error("Subtree at %s is too deep for JSON output", ctx.navigator.location)
        print(f"❌ Error: The subtree at {ctx.navigator.location} is too deep to dump as JSON. "
              f"Use 'nav cd' to pick a smaller subtree.")
        return 1

    if not args.output:
        print(text)
        return 0

    output_file = PathUtils.resolve_output_path(args.output)
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(text, encoding="utf-8")
    except OSError as e:
        logger.error("Could not write %s: %s", output_file, e, exc_info=True)
        print(f"❌ Error: Could not write {output_file}: {e}")
        return 1
    print(f"✅ Tree written to {output_file}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nav", add_help=False)
    subparsers = parser.add_subparsers(dest="subcommand")

    load_parser = subparsers.add_parser("load", add_help=False)
    load_parser.add_argument("root")
    load_parser.add_argument("--fields")
    load_parser.add_argument("--pattern")
    load_parser.add_argument("--workers", type=int)
    load_parser.set_defaults(func=_handle_load)

    subparsers.add_parser("ls", add_help=False).set_defaults(func=_handle_ls)

    cd_parser = subparsers.add_parser("cd", add_help=False)
    cd_parser.add_argument("target")
    cd_parser.set_defaults(func=_handle_cd)

    subparsers.add_parser("up", add_help=False).set_defaults(func=_handle_up)
    subparsers.add_parser("attrs", add_help=False).set_defaults(func=_handle_attrs)

    tree_parser = subparsers.add_parser("tree", add_help=False)
    tree_parser.add_argument("--depth", type=int)
    tree_parser.set_defaults(func=_handle_tree)

    json_parser = subparsers.add_parser("json", add_help=False)
    json_parser.add_argument("--output", "-o")
    json_parser.add_argument("--open-depth", type=int)
    json_parser.set_defaults(func=_handle_json)
    return parser


def handle_nav(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """
    Main entry point for the navigator commands.
    Parses arguments and dispatches to the sub-handlers.
    """
    if not args or args[0] in ["help", "-h", "--help"]:
        print(nav_help_text)
        return 0

    try:
        parsed = _build_parser().parse_args(args)
    except SystemExit:
        print(nav_help_text)
        return 1

    if not hasattr(parsed, "func"):
        print(nav_help_text)
        return 1
    return parsed.func(parsed, ctx)
