"""
Command-line interface for czbuild.

Commands:
    czbuild build ROOT [-o OUTPUT] [--profile release|debug] [-v]
    czbuild clean ROOT [-o OUTPUT]
    czbuild strip INPUT [OUTPUT]

Exit codes: 0 success, 1 unexpected error, 2 usage error, 3 no source
units, 4 transpile failure, 5 compile failure, 6 link failure,
130 interrupted.
"""

import argparse
import io
import logging
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from . import __version__, output
from .build import BuildOrchestrator, BuildResult
from .build.build_profiles import BuildProfile
from .config import DEFAULT_OUTPUT, BuildParams
from .errors import CzBuildError, ExitCode
from .file_utils import ENCODING, ENCODING_ERRORS
from .pipeline.directives import strip_file, strip_stream

console = Console()


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    root: Path
    output: Optional[Path] = None
    profile: BuildProfile = BuildProfile.RELEASE
    verbose: bool = False


@dataclass
class CleanArgs:
    """Arguments for the clean command."""

    root: Path
    output: Optional[Path] = None


@dataclass
class StripArgs:
    """Arguments for the strip command."""

    input: Path
    output: Optional[Path] = None


def _unit_table(result: BuildResult) -> Table:
    table = Table(title="Translation units", show_lines=False)
    table.add_column("Unit")
    table.add_column("Declarations", justify="right")
    table.add_column("Imports")
    table.add_column("Siblings", justify="right")
    graph = result.graph
    assert graph is not None
    for unit in graph.units:
        imports = ", ".join(f"{path}{'' if d.resolved else ' (unresolved)'}" for path, d in unit.imports.items())
        table.add_row(
            unit.source.relative_to(graph.root).as_posix(),
            str(len(unit.declarations)),
            imports or "-",
            str(len(unit.sibling_headers)),
        )
    return table


def build_command(args: BuildArgs) -> int:
    """Transpile, compile and link every unit under ROOT.

    Examples:
        czbuild build src                 # Build src/ into src/a.out
        czbuild build src -o bin/app      # Custom output (relative to src/)
        CC=clang czbuild build src        # Different compiler
    """
    output.log_header("czbuild", __version__)
    params = BuildParams.create(root=args.root, output=args.output, profile=args.profile, verbose=args.verbose)
    result = BuildOrchestrator(verbose=args.verbose).build(params)

    if args.verbose and result.graph is not None and result.graph.units:
        console.print(_unit_table(result))

    if result.success:
        console.print()
        console.print("[bold green]✓ Build successful![/bold green]")
        console.print(f"Binary: {result.binary_path}")
        if result.warnings:
            console.print(f"[yellow]{len(result.warnings)} unit(s) compiled with warnings[/yellow]")
        console.print(f"Build time: {result.build_time:.2f}s")
    else:
        console.print()
        console.print("[bold red]✗ Build failed![/bold red]")
        console.print(result.message, markup=False, highlight=False)
    return int(result.exit_code)


def clean_command(args: CleanArgs) -> int:
    """Remove generated .cz.c, .cz.h and .o files and the linked binary."""
    out = args.output if args.output is not None else Path(DEFAULT_OUTPUT)
    if not out.is_absolute():
        out = args.root / out
    removed = BuildOrchestrator().clean(args.root, out)
    for path in removed:
        output.log_detail(f"removed {path}", indent=2)
    console.print(f"[green]Removed {len(removed)} file(s)[/green]")
    return int(ExitCode.SUCCESS)


def strip_command(args: StripArgs) -> int:
    """Strip #pragma czar directives from one file (stdout if no OUTPUT)."""
    if args.output is not None:
        strip_file(args.input, args.output)
        return int(ExitCode.SUCCESS)
    try:
        with open(args.input, "r", encoding=ENCODING, errors=ENCODING_ERRORS, newline="") as src:
            sys.stdout.flush()
            # Bytes go out exactly as they were read.
            stdout = io.TextIOWrapper(sys.stdout.buffer, encoding=ENCODING, errors=ENCODING_ERRORS, newline="")
            try:
                strip_stream(src, stdout)
            finally:
                stdout.flush()
                stdout.detach()
    except OSError as e:
        console.print(f"[bold red]✗ Error:[/bold red] Cannot read {args.input}: {e}")
        return int(ExitCode.TRANSPILE_FAILURE)
    return int(ExitCode.SUCCESS)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="czbuild",
        description="Transpile .cz sources to C and build them into one binary",
    )
    parser.add_argument("--version", action="version", version=f"czbuild {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    build_parser = subparsers.add_parser("build", help="Transpile, compile and link a project")
    build_parser.add_argument("root", type=Path, help="Project root directory scanned for .cz units")
    build_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help=f"Output binary (default: {DEFAULT_OUTPUT}, relative to ROOT)",
    )
    build_parser.add_argument(
        "--profile",
        choices=[p.value for p in BuildProfile],
        default=BuildProfile.RELEASE.value,
        help="Build profile (default: release); ignored when CFLAGS is set",
    )
    build_parser.add_argument("-v", "--verbose", action="store_true", help="Show per-unit output")

    clean_parser = subparsers.add_parser("clean", help="Remove generated artifacts")
    clean_parser.add_argument("root", type=Path, help="Project root directory")
    clean_parser.add_argument("-o", "--output", type=Path, default=None, help="Output binary to remove")

    strip_parser = subparsers.add_parser("strip", help="Strip #pragma czar directives from a file")
    strip_parser.add_argument("input", type=Path, help="Source file")
    strip_parser.add_argument("output", type=Path, nargs="?", default=None, help="Output file (default: stdout)")

    return parser


def run(argv: Optional[List[str]] = None) -> int:
    """Parse ``argv`` and run the command; return the exit code."""
    parser = _build_parser()
    parsed_args = parser.parse_args(argv)

    if not parsed_args.command:
        parser.print_help()
        return int(ExitCode.USAGE)

    if parsed_args.command in ("build", "clean") and not parsed_args.root.is_dir():
        console.print(f"[bold red]✗ Error:[/bold red] Not a directory: {parsed_args.root}")
        return int(ExitCode.USAGE)

    verbose = getattr(parsed_args, "verbose", False)
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        if parsed_args.command == "build":
            return build_command(
                BuildArgs(
                    root=parsed_args.root,
                    output=parsed_args.output,
                    profile=BuildProfile(parsed_args.profile),
                    verbose=verbose,
                )
            )
        if parsed_args.command == "clean":
            return clean_command(CleanArgs(root=parsed_args.root, output=parsed_args.output))
        return strip_command(StripArgs(input=parsed_args.input, output=parsed_args.output))

    except CzBuildError as e:
        console.print()
        console.print("[bold red]✗ Error[/bold red]")
        console.print(e.format(), markup=False, highlight=False)
        return int(e.exit_code)

    except KeyboardInterrupt:
        console.print()
        console.print("[bold yellow]✗ Interrupted[/bold yellow]")
        return int(ExitCode.INTERRUPTED)

    except Exception as e:
        console.print()
        console.print("[bold red]✗ Unexpected error[/bold red]")
        console.print(f"{type(e).__name__}: {e}", markup=False)
        if verbose:
            console.print(traceback.format_exc(), markup=False)
        return int(ExitCode.UNEXPECTED)


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
