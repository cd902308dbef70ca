# src/buildmeta/services/common_mk_service.py
import logging
import re
from collections import Counter, defaultdict
from pathlib import Path
from typing import Dict, List, Union

from buildmeta.model import BuildInfo

logger = logging.getLogger(__name__)

_ASSIGN_PATTERN = re.compile(r"^([A-Za-z0-9_]+)\s*([:+]?=)\s*(.*)$")
_DESCRIPTION_PATTERN = re.compile(r"DESCRIPTION\s*=\s*(.+)")

# Variable name -> BuildInfo field for whitespace separated list values.
_LIST_FIELDS = {
    "LIBS": "libs",
    "EXTRA_LIBS": "extra_libs",
    "CCFLAGS": "cc_flags",
    "LDFLAGS": "ld_flags",
}
_TEXT_FIELDS = {
    "NAME": "name",
    "USEMSG": "usage_msg",
    "INSTALLDIR": "install_dir",
}


def _logical_lines(content: str) -> List[str]:
    """Strips '#' comments and blank lines, then joins backslash continuations."""
    clean = []
    for raw in content.split("\n"):
        line = raw.split("#", 1)[0].strip()
        if line:
            clean.append(line)

    joined = []
    i = 0
    while i < len(clean):
        line = clean[i]
        while line.endswith("\\") and i + 1 < len(clean):
            i += 1
            line = line[:-1].strip() + " " + clean[i].strip()
        joined.append(line)
        i += 1
    return joined


class CommonMkService:
    """Extracts build metadata from common.mk files and summarizes it."""

    def parse_text(self, content: str, path: str = "") -> BuildInfo:
        info = BuildInfo(path=path)
        for line in _logical_lines(content):
            self._apply_assignment(line, info)
        return info

    def parse_file(self, path: Union[str, Path], relative_path: str = "") -> BuildInfo:
        try:
            content = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Could not open file %s: %s", path, e)
            return BuildInfo(path=relative_path or str(path))
        return self.parse_text(content, relative_path or str(path))

    @staticmethod
    def _apply_assignment(line: str, info: BuildInfo) -> None:
        m = _ASSIGN_PATTERN.match(line)
        if not m:
            return

        var_name, value = m.group(1), m.group(3).strip()

        if var_name in _TEXT_FIELDS:
            setattr(info, _TEXT_FIELDS[var_name], value)
        elif var_name in _LIST_FIELDS:
            setattr(info, _LIST_FIELDS[var_name], value.split())
        elif var_name == "PINFO":
            desc = _DESCRIPTION_PATTERN.search(value)
            if desc:
                info.description = desc.group(1).strip()
        elif value:
            info.other_vars[var_name] = value

    def render_report(self, infos: Dict[str, BuildInfo]) -> str:
        """Per-project sections followed by install directory and library usage summaries."""
        bar, rule = "=" * 100, "-" * 100
        lines = [bar, "COMMON.MK BUILD METADATA ANALYSIS", bar, "", f"Total projects: {len(infos)}", ""]

        for key in sorted(infos):
            info = infos[key]
            lines += [rule, f"Project: {info.path}", rule]
            for label, value in (
                    ("NAME", info.name),
                    ("USEMSG", info.usage_msg),
                    ("INSTALLDIR", info.install_dir),
                    ("DESCRIPTION", info.description),
                    ("LIBS", " ".join(info.libs)),
                    ("EXTRA_LIBS", " ".join(info.extra_libs)),
                    ("CCFLAGS", " ".join(info.cc_flags)),
                    ("LDFLAGS", " ".join(info.ld_flags)),
            ):
                if value:
                    lines.append(f"  {label + ':':<13}{value}")
            for var, value in sorted(info.other_vars.items()):
                lines.append(f"  {var:<12}: {value}")
            lines.append("")

        lines.append(bar)
        lines += self._summary_lines(infos)
        return "\n".join(lines)

    @staticmethod
    def _summary_lines(infos: Dict[str, BuildInfo], top_n: int = 20) -> List[str]:
        install_dirs: Counter = Counter()
        lib_users: Dict[str, set] = defaultdict(set)

        for info in infos.values():
            if info.install_dir:
                install_dirs[info.install_dir] += 1
            for lib in info.libs:
                lib_users[lib].add(info.name or "")

        lines = ["SUMMARY", "-" * 100, "", "Install Directories:"]
        for directory in sorted(install_dirs):
            lines.append(f"  {directory:<40}: {install_dirs[directory]} projects")

        lines += ["", "Most Used Libraries:"]
        ranked = sorted(((len(users), lib) for lib, users in lib_users.items()), reverse=True)
        for count, lib in ranked[:top_n]:
            lines.append(f"  {lib:<30}: used by {count} projects")
        lines.append("=" * 100)
        return lines
