"""Running external tools (transpiler, compiler, linker).

Each tool is run synchronously: call, wait, capture exit status and output.
On Windows the child gets CREATE_NO_WINDOW so no console window flashes, and
stdin is always redirected to DEVNULL so a tool never reads the terminal.
"""

import logging
import shlex
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


def get_subprocess_creation_flags() -> int:
    """CREATE_NO_WINDOW on Windows, 0 elsewhere."""
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


@dataclass(frozen=True)
class ToolResult:
    """Exit status and captured output of one tool invocation."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stderr followed by stdout, as the tool printed them."""
        return "".join(part for part in (self.stderr, self.stdout) if part)

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)


def run_tool(cmd: Sequence[str], cwd: Optional[Path] = None, timeout: Optional[float] = None) -> ToolResult:
    """Run ``cmd`` to completion and capture its output.

    Raises:
        OSError: If the tool cannot be started (e.g. not installed)
        subprocess.TimeoutExpired: If ``timeout`` elapses
    """
    command = tuple(str(part) for part in cmd)
    kwargs = {}
    flags = get_subprocess_creation_flags()
    if flags:
        kwargs["creationflags"] = flags

    logger.debug(f"Running: {shlex.join(command)}")
    result = subprocess.run(
        command,
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        capture_output=True,
        text=True,
        errors="replace",
        timeout=timeout,
        **kwargs,
    )
    return ToolResult(command=command, returncode=result.returncode, stdout=result.stdout, stderr=result.stderr)
