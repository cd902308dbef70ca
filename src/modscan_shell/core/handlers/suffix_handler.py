# src/modscan_shell/core/handlers/suffix_handler.py
from typing import List, Optional

from buildmeta.services.suffix_service import SuffixService
from modscan_shell.core.context.shell_context import ShellContext
from modscan_shell.core.services.file_walker_service import ScanRootError, ensure_root

suffix_help_text = """
  suffix <root>       Counts every file under <root> by suffix (or base
                      name when the file has none).
""".strip()

COMMAND_HIERARCHY = None


def handle_suffix(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    if not args or args[0] in ["help", "-h", "--help"]:
        print(suffix_help_text)
        return 0

    try:
        root = ensure_root(args[0])
    except ScanRootError as e:
        print(f"❌ Error: {e}")
        return 1

    service = SuffixService()
    print(service.render_report(args[0], service.count(root)))
    return 0
