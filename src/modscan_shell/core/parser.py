# src/modscan_shell/core/parser.py
from __future__ import annotations

import shlex
from typing import List, Optional, Tuple

# Sequence operators, placed between command segments.
OPERATORS: set[str] = {"&&", "||", ";"}


def parse_command_line(line: str) -> List[Tuple[str, List[str], Optional[str]]]:
    """
    Parses the user input into a list of command segments.

    A command segment is (command_name, args, op_before), where op_before is
    the operator that joined it to the previous segment.

    Args:
        line (str): The raw input string from the shell.

    Returns:
        List[Tuple[str, List[str], Optional[str]]]: List of command segments.
    """
    s = (line or "").strip()
    if not s:
        return []

    try:
        tokens = shlex.split(s, posix=True)
    except ValueError:
        # Unbalanced quotes: fall back to plain whitespace splitting
        tokens = s.split()

    out: list[tuple[str, list[str], str | None]] = []
    current_name: str | None = None
    current_args: list[str] = []
    op_before: str | None = None

    def _flush(next_op: Optional[str] = None) -> None:
        nonlocal current_name, current_args, op_before
        if current_name is not None:
            out.append((current_name, current_args, op_before))
        current_name, current_args = None, []
        op_before = next_op

    for tok in tokens:
        if tok in OPERATORS:
            _flush(next_op=tok)
        elif current_name is None:
            current_name = tok
        else:
            current_args.append(tok)

    _flush()
    return out
