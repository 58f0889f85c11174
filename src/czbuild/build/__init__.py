"""
Build system components for czbuild.

This package provides:
- Source unit discovery
- The transpile stage (built-in or external transpiler)
- Compilation and linking with the configured C toolchain
- Build orchestration
"""

from .compiler import Compiler
from .linker import Linker
from .orchestrator import BuildOrchestrator, BuildResult
from .scanner import SourceScanner
from .transpiler import Transpiler

__all__ = [
    "BuildOrchestrator",
    "BuildResult",
    "Compiler",
    "Linker",
    "SourceScanner",
    "Transpiler",
]
