"""Transpile stage.

Turns a unit's raw ``.cz`` text into its staged ``.cz.c`` text. By default
the built-in directive stripper does the work. When an external transpiler
is configured (``CZ_BIN``) it is run as ``<bin> <source> <output>`` and its
output is stripped afterwards, so directives never reach the compiler either
way.
"""

import logging
from typing import TYPE_CHECKING

from ..errors import TranspileError
from ..file_utils import read_text, write_text_atomic
from ..models import TranslationUnit
from ..pipeline.directives import read_settings, split_directives
from ..subprocess_utils import run_tool

if TYPE_CHECKING:
    from ..config import Toolchain

logger = logging.getLogger(__name__)


class Transpiler:
    """Runs the transpile stage for one unit at a time."""

    def __init__(self, toolchain: "Toolchain"):
        self.toolchain = toolchain

    @property
    def external(self) -> bool:
        return self.toolchain.transpiler is not None

    def transpile(self, unit: TranslationUnit) -> str:
        """Read, transpile and strip ``unit``; write its ``.cz.c`` file.

        Returns:
            The staged text, also stored on ``unit.text``

        Raises:
            TranspileError: On any read, tool or write failure
        """
        try:
            unit.raw_text = read_text(unit.source)
        except OSError as e:
            raise TranspileError(f"Cannot read source: {e}", unit=unit.source, stage="read") from e

        _, directives = split_directives(unit.raw_text)
        unit.settings = read_settings(directives)

        staged = self._run_external(unit) if self.external else unit.raw_text
        unit.text, _ = split_directives(staged)

        try:
            write_text_atomic(unit.c_path, unit.text)
        except OSError as e:
            raise TranspileError(f"Cannot write {unit.c_path.name}: {e}", unit=unit.source, stage="write") from e

        logger.debug(f"{unit.source}: removed {len(directives)} directive(s), settings={unit.settings}")
        return unit.text

    def _run_external(self, unit: TranslationUnit) -> str:
        assert self.toolchain.transpiler is not None
        cmd = [*self.toolchain.transpiler, str(unit.source), str(unit.c_path)]
        try:
            result = run_tool(cmd)
        except OSError as e:
            raise TranspileError(f"Cannot run transpiler {cmd[0]}: {e}", unit=unit.source, stage="transpile") from e

        if not result.ok:
            unit.c_path.unlink(missing_ok=True)
            raise TranspileError(
                f"Transpiler exited with status {result.returncode}",
                unit=unit.source,
                stage="transpile",
                output=result.output,
            )

        try:
            return read_text(unit.c_path)
        except OSError as e:
            raise TranspileError(f"Transpiler produced no output: {e}", unit=unit.source, stage="transpile") from e
