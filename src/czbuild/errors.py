"""
Error types for czbuild.

Every fatal failure in the pipeline is raised as a CzBuildError subclass.
Each class carries the process exit code the CLI reports for it, so a calling
script can tell "no sources" from "transpile", "compile" and "link" failures.

Failures that are tolerated (malformed directives, imports that resolve to
nothing) are never raised; they surface later as compiler or linker errors.
"""

from enum import IntEnum
from pathlib import Path
from typing import Optional


class ExitCode(IntEnum):
    """Process exit codes reported by the czbuild CLI."""

    SUCCESS = 0
    UNEXPECTED = 1
    USAGE = 2
    NO_SOURCES = 3
    TRANSPILE_FAILURE = 4
    COMPILE_FAILURE = 5
    LINK_FAILURE = 6
    INTERRUPTED = 130


class CzBuildError(Exception):
    """Base class for fatal build errors.

    Attributes:
        unit: Source path of the failing translation unit, if any
        stage: Pipeline stage that failed (e.g. "strip", "compile")
        output: Verbatim tool output (stdout and stderr), if any
    """

    exit_code: ExitCode = ExitCode.UNEXPECTED

    def __init__(
        self,
        message: str,
        unit: Optional[Path] = None,
        stage: Optional[str] = None,
        output: str = "",
    ):
        super().__init__(message)
        self.message = message
        self.unit = unit
        self.stage = stage
        self.output = output

    def format(self) -> str:
        """Format the error as a human-readable, multi-line string."""
        lines = []
        if self.stage and self.unit:
            lines.append(f"[{self.stage}] {self.unit}: {self.message}")
        elif self.stage:
            lines.append(f"[{self.stage}] {self.message}")
        else:
            lines.append(self.message)
        if self.output:
            lines.append(self.output.rstrip("\n"))
        return "\n".join(lines)


class NoSourcesError(CzBuildError):
    """Raised when discovery finds no source units under the root."""

    exit_code = ExitCode.NO_SOURCES


class TranspileError(CzBuildError):
    """Raised when reading, transpiling or writing a unit fails."""

    exit_code = ExitCode.TRANSPILE_FAILURE


class CompileError(CzBuildError):
    """Raised when the C compiler exits non-zero for a unit."""

    exit_code = ExitCode.COMPILE_FAILURE


class LinkError(CzBuildError):
    """Raised when linking the object files fails."""

    exit_code = ExitCode.LINK_FAILURE
