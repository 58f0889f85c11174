"""
Build orchestration for czbuild projects.

A build always runs every stage for every unit; nothing is cached between
invocations.

Phases:
    1. Transpile: for each unit, strip directives, extract declarations,
       synthesize the header
    2. Link modules: for each unit, resolve imports and inject the
       self/sibling includes (only once every header exists)
    3. Compile every unit to an object file
    4. Link all objects into one binary

Units are processed one at a time in discovery order. The first fatal error
stops the build; artifacts of units that already finished are kept for
inspection.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from .. import output
from ..errors import CzBuildError, ExitCode, TranspileError
from ..file_utils import write_text_atomic
from ..models import BuildGraph, TranslationUnit
from ..pipeline.declarations import extract_declarations
from ..pipeline.headers import write_header
from ..pipeline.imports import resolve_imports
from ..pipeline.siblings import inject_includes
from .build_profiles import format_profile_banner
from .compiler import Compiler
from .linker import Linker
from .scanner import SourceScanner
from .transpiler import Transpiler

if TYPE_CHECKING:
    from ..config import BuildParams

logger = logging.getLogger(__name__)

TOTAL_PHASES = 4


@dataclass
class BuildResult:
    """Result of a build operation."""

    success: bool
    exit_code: ExitCode
    message: str
    binary_path: Optional[Path] = None
    graph: Optional[BuildGraph] = None
    warnings: List[str] = field(default_factory=list)
    build_time: float = 0.0


class BuildOrchestrator:
    """Drives discovery, the transpile pipeline, compilation and linking."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def _display(self, graph: BuildGraph, path: Path) -> str:
        try:
            return path.relative_to(graph.root).as_posix()
        except ValueError:
            return str(path)

    def discover(self, root: Path, output_path: Path) -> BuildGraph:
        """Scan ``root`` for units and build the (unprocessed) build graph.

        Raises:
            NoSourcesError: If no units are found
        """
        units = SourceScanner(root).scan()
        return BuildGraph(root=root, units=units, output=output_path)

    def transpile_unit(self, unit: TranslationUnit, graph: BuildGraph, transpiler: Transpiler) -> None:
        """Phase 1 for one unit: staged text, declarations, header.

        On failure every artifact of this unit is removed before the error
        propagates.
        """
        try:
            transpiler.transpile(unit)
            unit.declarations = extract_declarations(unit.text)
            write_header(unit.header_path, unit.declarations, header_key=self._display(graph, unit.header_path))
        except TranspileError as e:
            self._remove_artifacts(unit)
            if e.unit is None:
                e.unit = unit.source
            raise

    def finalize_unit(self, unit: TranslationUnit, graph: BuildGraph) -> None:
        """Phase 2 for one unit: imports and same-directory includes."""
        try:
            resolve_imports(unit)
            inject_includes(unit, graph.units)
            try:
                write_text_atomic(unit.c_path, unit.text)
            except OSError as e:
                raise TranspileError(f"Cannot write {unit.c_path.name}: {e}", unit=unit.source, stage="includes") from e
        except TranspileError:
            self._remove_artifacts(unit)
            raise

    def transpile_all(self, graph: BuildGraph, transpiler: Transpiler) -> None:
        """Run phase 1 for every unit, then phase 2 for every unit."""
        with output.TimedLogger(f"Transpiling {len(graph.units)} unit(s)", phase=(1, TOTAL_PHASES)):
            for unit in graph.units:
                self.transpile_unit(unit, graph, transpiler)
                output.log_unit("cz", self._display(graph, unit.source), f"-> {len(unit.declarations)} declaration(s)")

        with output.TimedLogger("Resolving imports and same-directory includes", phase=(2, TOTAL_PHASES)):
            for unit in graph.units:
                self.finalize_unit(unit, graph)
                for directive in unit.imports.values():
                    if not directive.resolved:
                        output.log_warning(f'{self._display(graph, unit.source)}: import "{directive.module_path}" resolved to no headers')

    def compile_all(self, graph: BuildGraph, compiler: Compiler) -> List[str]:
        """Compile every unit in order; stop at the first failure.

        Returns:
            Compiler warnings, one entry per unit that produced output
        """
        warnings: List[str] = []
        with output.TimedLogger(f"Compiling {len(graph.units)} unit(s)", phase=(3, TOTAL_PHASES)):
            for unit in graph.units:
                result = compiler.compile_unit(unit)
                output.log_unit("cc", self._display(graph, unit.c_path))
                if result.output:
                    message = f"{self._display(graph, unit.c_path)}:\n{result.output.rstrip()}"
                    output.log_warning(message)
                    warnings.append(message)
        return warnings

    def link(self, graph: BuildGraph, linker: Linker) -> Path:
        with output.TimedLogger(f"Linking {len(graph.objects)} object(s)", phase=(4, TOTAL_PHASES)):
            result = linker.link(graph.objects, graph.output)
            if result.output:
                output.log_warning(result.output.rstrip())
        return graph.output

    def build(self, params: "BuildParams") -> BuildResult:
        """Execute a complete build.

        Args:
            params: Build parameters resolved by the CLI

        Returns:
            BuildResult; on failure ``exit_code`` says which stage failed
        """
        start_time = time.time()
        output.set_verbose(params.verbose or self.verbose)
        output.log(format_profile_banner(params.profile, params.toolchain.compiler_name))

        graph: Optional[BuildGraph] = None
        try:
            graph = self.discover(params.root, params.output)
            output.log_detail(f"Root: {params.root} ({len(graph.units)} unit(s))")

            self.transpile_all(graph, Transpiler(params.toolchain))
            warnings = self.compile_all(graph, Compiler(params.toolchain))
            binary = self.link(graph, Linker(params.toolchain))
        except CzBuildError as e:
            message = e.format()
            output.log_error(message)
            return BuildResult(
                success=False,
                exit_code=e.exit_code,
                message=message,
                graph=graph,
                build_time=time.time() - start_time,
            )

        build_time = time.time() - start_time
        output.log_binary_path(binary)
        output.log_build_complete(build_time)
        return BuildResult(
            success=True,
            exit_code=ExitCode.SUCCESS,
            message=f"Built {binary}",
            binary_path=binary,
            graph=graph,
            warnings=warnings,
            build_time=build_time,
        )

    def _remove_artifacts(self, unit: TranslationUnit) -> None:
        for path in unit.artifacts():
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove {path}: {e}")

    def clean(self, root: Path, output_path: Optional[Path] = None) -> List[Path]:
        """Remove every generated artifact under ``root`` and the linked binary.

        Returns:
            Paths that were removed, in unit order then the binary
        """
        removed: List[Path] = []
        for source in SourceScanner(root).find_sources():
            unit = TranslationUnit.from_source(source)
            for path in unit.artifacts():
                if path.exists():
                    path.unlink()
                    removed.append(path)
        if output_path is not None and output_path.is_file():
            output_path.unlink()
            removed.append(output_path)
        logger.debug(f"Removed {len(removed)} artifact(s) under {root}")
        return removed
