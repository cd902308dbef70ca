# src/modscan_shell/core/xngine.py
from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

CommandSegment = Tuple[str, List[str], Optional[str]]

QUIT_EXIT_CODE = 130
NOT_FOUND_EXIT_CODE = 127


class ExecuteEngine:
    """
    Runs parsed command segments against the command registry, honoring
    the ';', '&&' and '||' operators.
    """

    def __init__(
            self,
            *,
            command_registry: Dict[str, Callable[..., int]],
            logger: Optional[logging.Logger] = None,
    ) -> None:
        self._commands = command_registry
        self._log = logger or logging.getLogger(__name__)

    def execute_sequence(self, commands: List[CommandSegment], ctx: Any) -> int:
        """
        Executes the segments in order and returns the exit code of the last
        one that ran. 'A && B' runs B only after success, 'A || B' only after
        failure. A quit (exit code 130) stops the sequence immediately.
        """
        last_exit = 0
        for name, args, op in commands:
            if op == "&&" and last_exit != 0:
                continue
            if op == "||" and last_exit == 0:
                continue

            handler = self._commands.get(name)
            if handler is None:
                print(f"command not found: {name}")
                last_exit = NOT_FOUND_EXIT_CODE
                continue

            last_exit = self._call_handler(name, handler, args, ctx)
            if last_exit == QUIT_EXIT_CODE:
                return QUIT_EXIT_CODE

        return last_exit

    def _call_handler(self, name: str, handler: Callable[..., int], args: List[str], ctx: Any) -> int:
        try:
            if len(inspect.signature(handler).parameters) >= 3:
                return int(handler(args, ctx, None))
            return int(handler(args, ctx))
        except KeyboardInterrupt:
            print("\n🛑 Interrupted by user.")
            return 1
        except Exception as e:
            self._log.error("Command '%s' failed: %s", name, e, exc_info=True)
            print(f"❌ Error: {e}")
            return 1
