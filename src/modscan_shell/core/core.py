# src/modscan_shell/core/core.py
from __future__ import annotations

import logging

from modscan_shell.core.command_registry import CommandRegistry
from modscan_shell.core.parser import parse_command_line
from modscan_shell.core.xngine import ExecuteEngine

logger = logging.getLogger(__name__)

# Registration happens in app.py; the engine reads the shared registry lazily.
XNGINE = ExecuteEngine(command_registry=CommandRegistry, logger=logger)

execute_sequence = XNGINE.execute_sequence

__all__ = ["execute_sequence", "parse_command_line"]
