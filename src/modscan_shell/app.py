# src/modscan_shell/app.py
from __future__ import annotations

import logging
import shlex
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer
from prompt_toolkit.document import Document
from prompt_toolkit.history import FileHistory

from modscan_shell.core.command_registry import COMMAND_HIERARCHY, register_all_commands
from modscan_shell.core.context.shell_context import ShellContext
from modscan_shell.core.core import execute_sequence, parse_command_line
from modscan_shell.core.managers.completion_manager import CompletionManager
from modscan_shell.core.managers.config_manager import config_manager
from modscan_shell.core.utils.configure_logging import configure_logger
from modscan_shell.core.utils.path_utils import PathUtils
from modscan_shell.core.xngine import QUIT_EXIT_CODE

logger = logging.getLogger(__name__)


def _configure_logging_from_settings() -> None:
    configure_logger(
        config_manager.get_nested("debug.level", "WARNING"),
        config_manager.get_nested("debug.module_levels"),
        config_manager.get_nested("debug.silenced_loggers"),
    )


class PromptToolkitCompleter(Completer):
    """Adapts the CompletionManager to the prompt_toolkit Completer interface."""

    def __init__(self, manager: CompletionManager):
        self.manager = manager

    def get_completions(self, document: Document, complete_event):
        yield from self.manager.generate_completions(document)


def run_line(line: str, ctx: ShellContext) -> int:
    """Parses and executes one command line; returns the exit code of the last command run."""
    commands = parse_command_line(line)
    if not commands:
        return 0
    return execute_sequence(commands, ctx)


def start_shell() -> None:
    """Starts the interactive REPL (Read-Eval-Print Loop)."""
    ctx = ShellContext()
    print("Welcome to modscan shell (type 'help' for commands)")

    history_path = PathUtils.get_shell_history_file()
    history = FileHistory(str(history_path))
    completer = PromptToolkitCompleter(CompletionManager(ctx, COMMAND_HIERARCHY))

    session = PromptSession(history=history, completer=completer, complete_while_typing=True)
    ctx.prompt_session = session
    logger.info("Shell startup; history file at: %s", history_path)

    try:
        while True:
            try:
                line = session.prompt("modscan>> ").strip()
            except KeyboardInterrupt:
                continue
            except EOFError:
                break

            if not line:
                continue
            if run_line(line, ctx) == QUIT_EXIT_CODE:
                break
    finally:
        print("Bye!")


def main(argv: list[str] | None = None) -> int:
    """
    Entrypoint for the 'modscan' command. With arguments it runs them as a
    single command line and exits; without, it starts the interactive shell.
    """
    _configure_logging_from_settings()
    register_all_commands()

    args = sys.argv[1:] if argv is None else argv
    if args:
        code = run_line(shlex.join(args), ShellContext())
        return 0 if code == QUIT_EXIT_CODE else code

    start_shell()
    return 0


if __name__ == "__main__":
    sys.exit(main())
