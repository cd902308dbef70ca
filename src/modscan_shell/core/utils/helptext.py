# src/modscan_shell/core/utils/helptext.py
from modscan_shell.core.command_registry import COMMAND_HELP_TEXTS

HEADER_HELP_TEXT = """
🔎 modscan shell - Help

Scans a source tree for module descriptors and build files and reports
how they are classified and structured.

---
OPERATORS
---
  A ; B               Execute B after A, regardless of the outcome.
  A && B              Execute B only if A was successful (exit code 0).
  A || B              Execute B only if A failed (exit code != 0).

---
COMMANDS
---
GENERAL:
  help                Show this help text.
  quit                Exit the shell.
""".strip()


def get_help_text() -> str:
    """
    Assembles the full help text from the header and all discovered help
    text fragments from the command handlers.
    """
    parts = [HEADER_HELP_TEXT]
    for command_name in sorted(COMMAND_HELP_TEXTS):
        parts.append(COMMAND_HELP_TEXTS[command_name])
    return "\n\n".join(parts)
