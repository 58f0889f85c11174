"""C compile stage.

Compiles each finalized ``.cz.c`` file to its object file:

    <cc> <cflags> [-DNDEBUG] -c unit.cz.c -o unit.o

``-DNDEBUG`` is added for units that switched debug off with
``#pragma czar debug false``. Output from a successful compile is returned
as warnings; a non-zero exit raises CompileError with the compiler output
verbatim.
"""

import logging
import subprocess
from typing import TYPE_CHECKING, List

from ..errors import CompileError
from ..models import TranslationUnit
from ..subprocess_utils import ToolResult, run_tool

if TYPE_CHECKING:
    from ..config import Toolchain

logger = logging.getLogger(__name__)

COMPILE_TIMEOUT = 300


class Compiler:
    """Compiles translation units with the configured toolchain."""

    def __init__(self, toolchain: "Toolchain"):
        self.toolchain = toolchain

    def compile_command(self, unit: TranslationUnit) -> List[str]:
        cmd = [*self.toolchain.cc, *self.toolchain.cflags]
        if not unit.debug:
            cmd.append("-DNDEBUG")
        cmd.extend(["-c", str(unit.c_path), "-o", str(unit.object_path)])
        return cmd

    def compile_unit(self, unit: TranslationUnit) -> ToolResult:
        """Compile one unit.

        Returns:
            The tool result; its output, if any, is compiler warnings

        Raises:
            CompileError: If the compiler cannot run or exits non-zero
        """
        cmd = self.compile_command(unit)
        try:
            result = run_tool(cmd, timeout=COMPILE_TIMEOUT)
        except subprocess.TimeoutExpired as e:
            raise CompileError(f"Compiler timed out after {COMPILE_TIMEOUT}s", unit=unit.source, stage="compile") from e
        except OSError as e:
            raise CompileError(f"Cannot run compiler {cmd[0]}: {e}", unit=unit.source, stage="compile") from e

        if not result.ok:
            raise CompileError(
                f"Compilation failed (exit {result.returncode}): {result.command_line}",
                unit=unit.source,
                stage="compile",
                output=result.output,
            )
        logger.debug(f"Compiled {unit.c_path} -> {unit.object_path}")
        return result
