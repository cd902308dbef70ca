# src/modscan_shell/core/managers/completion_manager.py
import logging
import re
from typing import Any, Dict, Iterable

from prompt_toolkit.completion import Completion
from prompt_toolkit.document import Document

from modscan_shell.core.context.shell_context import ShellContext

logger = logging.getLogger(__name__)

# Finds the last operator before the cursor
OPERATOR_PATTERN = re.compile(r"(\s+(?:&&|\|\||;)\s+)")


class CompletionManager:
    """
    Generates command, subcommand and navigator completions for the segment
    after the last operator before the cursor.
    """

    def __init__(self, shell_context: ShellContext, command_hierarchy: Dict[str, Any]):
        self.ctx = shell_context
        self.command_hierarchy = command_hierarchy

    def generate_completions(self, document: Document) -> Iterable[Completion]:
        text_before_cursor = document.text_before_cursor

        last_op_match = None
        for match in OPERATOR_PATTERN.finditer(text_before_cursor):
            last_op_match = match
        segment_start = last_op_match.end() if last_op_match else 0

        relevant_text = text_before_cursor[segment_start:]
        words = relevant_text.lstrip().split()
        ends_with_space = relevant_text.endswith(" ")
        word_before_cursor = document.get_word_before_cursor(WORD=True)

        if not words or (len(words) == 1 and not ends_with_space):
            yield from self._get_main_command_completions(word_before_cursor)
            return

        typed_second = len(words) == 2 and not ends_with_space
        if (len(words) == 1 and ends_with_space) or typed_second:
            entry = self.command_hierarchy.get(words[0])
            if isinstance(entry, dict):
                yield from self._get_sub_command_completions(entry.keys(), words[1] if typed_second else "")
            return

        # 'nav cd <label>' completes against the children of the cursor
        typed_third = len(words) == 3 and not ends_with_space
        if words[:2] == ["nav", "cd"] and ((len(words) == 2 and ends_with_space) or typed_third):
            yield from self._get_navigator_completions(words[2] if typed_third else "")

    def _get_main_command_completions(self, word_before_cursor: str) -> Iterable[Completion]:
        start_pos = -len(word_before_cursor)
        for command_name in sorted(self.command_hierarchy):
            if command_name.startswith(word_before_cursor):
                yield Completion(command_name, start_position=start_pos, display_meta="Main Command")

    def _get_sub_command_completions(self, subcommands: Iterable[str], word: str) -> Iterable[Completion]:
        start_pos = -len(word)
        for sub in sorted(subcommands):
            if sub.startswith(word):
                yield Completion(sub, start_position=start_pos)

    def _get_navigator_completions(self, word: str) -> Iterable[Completion]:
        node = self.ctx.navigator.current
        if node is None:
            return
        start_pos = -len(word)
        for child in node.children:
            # Labels with spaces would be split by the command parser
            if child.label.startswith(word) and " " not in child.label:
                yield Completion(child.label, start_position=start_pos, display_meta=child.node_type)
