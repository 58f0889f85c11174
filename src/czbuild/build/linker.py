"""Link stage.

Links every object file of the build into one binary:

    <cc> unit1.o unit2.o ... <ldflags> -o <output>

Objects are passed in build-graph order. Any failure (multiple definition,
undefined reference, missing compiler) raises LinkError with the linker
output verbatim.
"""

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, List, Sequence

from ..errors import LinkError
from ..subprocess_utils import ToolResult, run_tool

if TYPE_CHECKING:
    from ..config import Toolchain

logger = logging.getLogger(__name__)

LINK_TIMEOUT = 300


class Linker:
    """Links object files with the configured toolchain."""

    def __init__(self, toolchain: "Toolchain"):
        self.toolchain = toolchain

    def link_command(self, objects: Sequence[Path], output: Path) -> List[str]:
        return [*self.toolchain.cc, *(str(obj) for obj in objects), *self.toolchain.ldflags, "-o", str(output)]

    def link(self, objects: Sequence[Path], output: Path) -> ToolResult:
        """Link ``objects`` into ``output``.

        Raises:
            LinkError: If linking fails
        """
        if not objects:
            raise LinkError("No object files to link", stage="link")

        try:
            output.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LinkError(f"Cannot create output directory {output.parent}: {e}", stage="link") from e

        cmd = self.link_command(objects, output)
        try:
            result = run_tool(cmd, timeout=LINK_TIMEOUT)
        except subprocess.TimeoutExpired as e:
            raise LinkError(f"Linker timed out after {LINK_TIMEOUT}s", stage="link") from e
        except OSError as e:
            raise LinkError(f"Cannot run linker {cmd[0]}: {e}", stage="link") from e

        if not result.ok:
            raise LinkError(
                f"Linking failed (exit {result.returncode}): {result.command_line}",
                stage="link",
                output=result.output,
            )
        logger.debug(f"Linked {len(objects)} object(s) -> {output}")
        return result
