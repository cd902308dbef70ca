# src/modscan_shell/core/handlers/build_handler.py
import argparse
import logging
from typing import List, Optional

from buildmeta.services.common_mk_service import CommonMkService
from buildmeta.services.makefile_service import MakefileService, load_module_names
from modscan_shell.core.context.shell_context import ShellContext
from modscan_shell.core.managers.config_manager import config_manager
from modscan_shell.core.services.file_walker_service import ScanRootError, ensure_root, find_files

logger = logging.getLogger(__name__)

build_help_text = """
  build commonmk <root> [--pattern <glob>]
                      Reads NAME, INSTALLDIR, LIBS, flags and description from
                      every common.mk under <root> and summarizes them.
  build makevars <root> [--pattern <glob>] [--modules <file>]
                      Lists undefined and defined make variables and the tools
                      invoked by all *.mk files. With --modules, each tool is
                      marked [module] or [unknown] against that name list.
""".strip()

COMMAND_HIERARCHY = {
    "commonmk": None,
    "makevars": None,
}


def _handle_commonmk(args: argparse.Namespace, _ctx: ShellContext) -> int:
    pattern = args.pattern or config_manager.get_nested("buildmeta.common_mk_pattern", "common.mk")
    try:
        root = ensure_root(args.root)
    except ScanRootError as e:
        print(f"❌ Error: {e}")
        return 1

    service = CommonMkService()
    infos = {}
    for path in find_files(root, pattern):
        relative = path.parent.relative_to(root).as_posix()
        infos[relative] = service.parse_file(path, relative)

    if not infos:
        print(f"No '{pattern}' files found under {args.root}.")
        return 0

    print(service.render_report(infos))
    print(f"Processed {len(infos)} file(s).")
    return 0


def _handle_makevars(args: argparse.Namespace, _ctx: ShellContext) -> int:
    pattern = args.pattern or config_manager.get_nested("buildmeta.makefile_pattern", "*.mk")
    try:
        root = ensure_root(args.root)
    except ScanRootError as e:
        print(f"❌ Error: {e}")
        return 1

    known_modules = None
    if args.modules:
        try:
            known_modules = load_module_names(args.modules)
        except OSError as e:
            print(f"❌ Error: Could not read module list {args.modules}: {e}")
            return 1

    service = MakefileService()
    for path in find_files(root, pattern):
        service.analyze_file(path)

    print(service.render_report(known_modules))
    print(f"Processed {service.facts.files_analyzed} file(s).")
    return 0


def handle_build(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """Dispatches the build metadata sub-commands."""
    parser = argparse.ArgumentParser(prog="build", add_help=False)
    subparsers = parser.add_subparsers(dest="subcommand")

    common_parser = subparsers.add_parser("commonmk", add_help=False)
    common_parser.add_argument("root")
    common_parser.add_argument("--pattern")
    common_parser.set_defaults(func=_handle_commonmk)

    vars_parser = subparsers.add_parser("makevars", add_help=False)
    vars_parser.add_argument("root")
    vars_parser.add_argument("--pattern")
    vars_parser.add_argument("--modules")
    vars_parser.set_defaults(func=_handle_makevars)

    if not args or args[0] in ["help", "-h", "--help"]:
        print(build_help_text)
        return 0

    try:
        parsed = parser.parse_args(args)
    except SystemExit:
        print(build_help_text)
        return 1

    if not hasattr(parsed, "func"):
        print(build_help_text)
        return 1
    return parsed.func(parsed, ctx)
