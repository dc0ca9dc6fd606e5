"""Command templating and execution for detected changes."""
from __future__ import annotations

import logging
import shlex
import signal
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

logger = logging.getLogger(__name__)

PLACEHOLDER = "%"
ESCAPE = "\\"


def build_command(template: Sequence[str], path: Union[str, Path]) -> List[str]:
    """Substitute ``path`` for every unescaped ``%`` in each template argument.

    ``\\%`` produces a literal percent sign. Arguments are scanned one at a
    time, so a path containing spaces is never split.
    """

    if not template:
        raise ValueError("command template must not be empty")
    replacement = str(path)
    return [_substitute(arg, replacement) for arg in template]


def _substitute(arg: str, replacement: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(arg):
        char = arg[i]
        if char == ESCAPE and arg.startswith(PLACEHOLDER, i + 1):
            out.append(PLACEHOLDER)
            i += 2
            continue
        out.append(replacement if char == PLACEHOLDER else char)
        i += 1
    return "".join(out)


class CommandExecutor:
    """Runs one command at a time with the parent's standard streams."""

    def __init__(self) -> None:
        self.invocations = 0
        self.failures = 0

    def execute(self, argv: Sequence[str]) -> Optional[int]:
        """Run ``argv`` to completion.

        Returns the exit status, or ``None`` if the process could not be
        started. Failures are logged, never raised.
        """

        self.invocations += 1
        logger.info("Running %s", shlex.join(argv))
        try:
            completed = subprocess.run(list(argv), check=False)
        except OSError as exc:
            self.failures += 1
            logger.error("Could not start %s: %s", argv[0], exc)
            return None

        returncode = completed.returncode
        if returncode < 0:
            self.failures += 1
            logger.error("Command %s killed by signal %s", argv[0], _signal_name(-returncode))
        elif returncode != 0:
            self.failures += 1
            logger.error("Command %s exited with status %s", argv[0], returncode)
        return returncode


def _signal_name(number: int) -> str:
    try:
        return signal.Signals(number).name
    except ValueError:
        return str(number)
