"""
Timestamped console output for czbuild.

Every line is prefixed with the time elapsed since the program started, in
MM:SS.cc format, so a build log shows where the time went.

Example output:
    00:00.01 czbuild v0.1.0
    00:00.02 [1/4] Transpiling 3 unit(s)...
    00:00.02       [cz] src/main.cz -> 2 declaration(s)
    00:00.05 [3/4] Compiling 3 unit(s)...

Usage:
    from czbuild.output import log, log_phase, log_detail

    log_phase(1, 4, "Transpiling 3 unit(s)...")
    log_detail("src/main.cz")
"""

import sys
import time
from pathlib import Path
from types import TracebackType
from typing import Optional, TextIO

_start_time: Optional[float] = None
_output_stream: Optional[TextIO] = None
_verbose: bool = True


def init_timer(output_stream: Optional[TextIO] = None) -> None:
    """
    Initialize the program timer.

    Called automatically on first log if not called explicitly.

    Args:
        output_stream: Optional output stream (defaults to sys.stdout)
    """
    global _start_time, _output_stream
    _start_time = time.time()
    if output_stream is not None:
        _output_stream = output_stream


def set_output_stream(output_stream: Optional[TextIO]) -> None:
    """Redirect log output; None restores sys.stdout."""
    global _output_stream
    _output_stream = output_stream


def set_verbose(verbose: bool) -> None:
    """
    Set verbose mode for logging.

    Args:
        verbose: If True, all messages are printed. If False, verbose-only messages are dropped.
    """
    global _verbose
    _verbose = verbose


def get_elapsed() -> float:
    """Seconds elapsed since timer initialization."""
    if _start_time is None:
        init_timer()
    return time.time() - _start_time  # type: ignore


def format_timestamp() -> str:
    """Format the current elapsed time as MM:SS.cc."""
    elapsed = get_elapsed()
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    return f"{minutes:02d}:{seconds:05.2f}"


def _print(message: str) -> None:
    stream = _output_stream if _output_stream is not None else sys.stdout
    stream.write(f"{format_timestamp()} {message}\n")
    stream.flush()


def log(message: str, verbose_only: bool = False) -> None:
    """
    Log a message with timestamp.

    Args:
        message: Message to log
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(message)


def log_phase(phase: int, total: int, message: str, verbose_only: bool = False) -> None:
    """
    Log a build phase message.

    Format: [N/M] message
    """
    if verbose_only and not _verbose:
        return
    _print(f"[{phase}/{total}] {message}")


def log_detail(message: str, indent: int = 6, verbose_only: bool = False) -> None:
    """Log an indented detail message."""
    if verbose_only and not _verbose:
        return
    _print(f"{' ' * indent}{message}")


def log_unit(stage: str, unit: str, note: str = "", verbose_only: bool = True) -> None:
    """
    Log one unit passing through a stage.

    Format: [stage] unit note

    Args:
        stage: Stage tag (e.g. 'cz', 'cc')
        unit: Unit path as displayed
        note: Optional trailing note
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    suffix = f" {note}" if note else ""
    _print(f"      [{stage}] {unit}{suffix}")


def log_header(title: str, version: str) -> None:
    """Log the program banner."""
    _print(f"{title} v{version}")


def log_error(message: str) -> None:
    _print(f"ERROR: {message}")


def log_warning(message: str) -> None:
    _print(f"WARNING: {message}")


def log_binary_path(path: Path, verbose_only: bool = False) -> None:
    """Log the path of the linked binary."""
    log_detail(f"Binary: {path}", verbose_only=verbose_only)


def log_build_complete(build_time: float, verbose_only: bool = False) -> None:
    """Log build completion time."""
    if verbose_only and not _verbose:
        return
    _print(f"Build time: {build_time:.2f}s")


class TimedLogger:
    """
    Context manager that logs an operation and how long it took.

    Usage:
        with TimedLogger("Compiling", phase=(3, 4)):
            compile_everything()
    """

    def __init__(self, operation: str, phase: Optional[tuple[int, int]] = None, verbose_only: bool = False):
        self.operation = operation
        self.phase = phase
        self.verbose_only = verbose_only
        self.start_time = 0.0

    def __enter__(self) -> "TimedLogger":
        self.start_time = time.time()
        if self.phase:
            log_phase(self.phase[0], self.phase[1], f"{self.operation}...", self.verbose_only)
        else:
            log(f"{self.operation}...", self.verbose_only)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        del exc_val, exc_tb  # Unused
        elapsed = time.time() - self.start_time
        if exc_type is None:
            log_detail(f"Done ({elapsed:.2f}s)", verbose_only=True)
        return None
