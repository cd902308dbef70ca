# src/buildmeta/services/makefile_service.py
import logging
import re
from pathlib import Path
from typing import Optional, Set, Union

from buildmeta.model import MakefileFacts

logger = logging.getLogger(__name__)

_VAR_USE_PATTERN = re.compile(r"\$\(([A-Za-z0-9_]+)\)|\$\{([A-Za-z0-9_]+)\}")
_VAR_DEF_PATTERN = re.compile(r"^([A-Za-z0-9_]+)\s*[:?]?=")
_SHELL_PATTERN = re.compile(r"\$\(shell\s+([^)]+)\)")
_PAREN_REF = re.compile(r"\$\([^)]+\)")
_BRACE_REF = re.compile(r"\$\{[^}]+\}")
_CMD_SEPARATOR = re.compile(r"[|;&]")

MAKE_BUILTINS = frozenset({
    "MAKE", "MAKEFILE_LIST", "MAKEFLAGS", "SHELL",
    "CC", "CXX", "LD", "AR", "AS", "CPP",
    "CFLAGS", "CXXFLAGS", "LDFLAGS", "ARFLAGS",
    "TARGET", "CURDIR", ".DEFAULT_GOAL",
})
_COMMAND_PREFIXES = frozenset({"@", "-", "+", "@-", "-@"})
_SHELL_BUILTINS = frozenset({"cd", "echo", "test", "if", "for", "while", "case", "export", "set"})


def extract_command(line: str) -> Optional[str]:
    """
    Returns the program name invoked by a recipe or $(shell ...) fragment.

    Variable references are removed first, then the fragment is cut at the
    first pipe, semicolon or ampersand. Shell builtins yield None.
    """
    cleaned = _BRACE_REF.sub("", _PAREN_REF.sub("", line)).strip()
    if not cleaned:
        return None

    sep = _CMD_SEPARATOR.search(cleaned)
    if sep:
        cleaned = cleaned[:sep.start()].strip()

    words = cleaned.split()
    if not words:
        return None

    cmd = words[0]
    if cmd in _COMMAND_PREFIXES and len(words) > 1:
        cmd = words[1]
    else:
        # Recipe prefixes written directly against the command, e.g. "@echo"
        cmd = cmd.lstrip("@-+") or cmd
    if cmd in _SHELL_BUILTINS:
        return None
    return cmd


def load_module_names(path: Union[str, Path]) -> Set[str]:
    """Reads one module name per line, skipping blanks and '#' comments."""
    names: Set[str] = set()
    with open(path, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if line and not line.startswith("#"):
                names.add(line)
    return names


class MakefileService:
    """Accumulates variable and tool usage over any number of makefiles."""

    def __init__(self):
        self.facts = MakefileFacts()

    def analyze_text(self, content: str) -> None:
        facts = self.facts
        for m in _VAR_USE_PATTERN.finditer(content):
            facts.variables_used.add(m.group(1) or m.group(2))

        for raw in content.split("\n"):
            line = raw.strip()
            if line.startswith("#"):
                continue

            definition = _VAR_DEF_PATTERN.match(line)
            if definition:
                facts.variables_defined.add(definition.group(1))

            # Recipe lines are tab indented
            if raw.startswith("\t"):
                self._add_command(line)

            for shell in _SHELL_PATTERN.finditer(line):
                self._add_command(shell.group(1).strip())

        facts.files_analyzed += 1

    def analyze_file(self, path: Union[str, Path]) -> bool:
        try:
            content = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Could not open file %s: %s", path, e)
            return False
        logger.debug("Processing: %s", path)
        self.analyze_text(content)
        return True

    def _add_command(self, fragment: str) -> None:
        cmd = extract_command(fragment)
        if cmd:
            self.facts.commands_used.add(cmd)

    @property
    def undefined_variables(self) -> Set[str]:
        return self.facts.variables_used - self.facts.variables_defined - MAKE_BUILTINS

    def render_report(self, known_modules: Optional[Set[str]] = None) -> str:
        bar, rule = "=" * 80, "-" * 80
        lines = [bar, "MAKEFILE ANALYSIS REPORT", bar, ""]

        undefined = sorted(self.undefined_variables)
        lines += [f"UNDEFINED VARIABLES ({len(undefined)}):", rule]
        lines += [f"  {var}" for var in undefined]
        lines.append("")

        defined = sorted(self.facts.variables_defined)
        lines += [f"DEFINED VARIABLES ({len(defined)}):", rule]
        lines += [f"  {var}" for var in defined]
        lines.append("")

        commands = sorted(self.facts.commands_used)
        lines += [f"COMMANDS/TOOLS INVOKED ({len(commands)}):", rule]
        for cmd in commands:
            entry = f"  {cmd:<30}"
            if known_modules:
                entry += " [module]" if cmd in known_modules else " [unknown]"
            lines.append(entry.rstrip())
        lines += ["", bar]
        return "\n".join(lines)
