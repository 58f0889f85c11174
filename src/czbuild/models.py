"""Data model for czbuild.

This module defines:
- Declaration: one exported top-level function prototype
- ImportDirective: one cross-directory import request and its resolution
- TranslationUnit: a .cz source file plus everything generated from it
- BuildGraph: the ordered unit list, object files and link target

A TranslationUnit is created at discovery and mutated in place by each
pipeline stage. Expansion state (imports resolved, siblings injected) is kept
on the unit itself so independent builds never share state.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set

SOURCE_SUFFIX = ".cz"
TRANSPILED_SUFFIX = ".cz.c"
HEADER_SUFFIX = ".cz.h"
OBJECT_SUFFIX = ".o"


@dataclass(frozen=True)
class Declaration:
    """A top-level function definition exported through the unit's header.

    Attributes:
        name: Function name
        return_type: Return type token (e.g. "int", "char *")
        params: Parameter list token without parentheses (e.g. "int a, int b")
        line: 1-based line of the definition in the transpiled text
    """

    name: str
    return_type: str
    params: str
    line: int

    @property
    def prototype(self) -> str:
        """Prototype statement, e.g. ``int add(int a, int b);``."""
        sep = "" if self.return_type.endswith("*") else " "
        return f"{self.return_type}{sep}{self.name}({self.params});"


@dataclass
class ImportDirective:
    """An import marker and the headers it expanded to.

    An empty header list is the soft-failure state: the marker was replaced
    by a diagnostic comment and any missing symbol fails at compile/link time.
    """

    module_path: str
    line: int
    headers: List[Path] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return bool(self.headers)


@dataclass
class TranslationUnit:
    """One .cz source file and its generated artifacts."""

    source: Path
    raw_text: str = ""
    text: str = ""
    declarations: List[Declaration] = field(default_factory=list)
    imports: Dict[str, ImportDirective] = field(default_factory=dict)
    sibling_headers: Set[Path] = field(default_factory=set)
    settings: Dict[str, bool] = field(default_factory=dict)
    imports_resolved: bool = False
    siblings_injected: bool = False

    @classmethod
    def from_source(cls, source: Path) -> "TranslationUnit":
        return cls(source=source)

    @property
    def stem(self) -> str:
        """Source file name without the .cz suffix."""
        return self.source.name[: -len(SOURCE_SUFFIX)]

    @property
    def directory(self) -> Path:
        return self.source.parent

    @property
    def c_path(self) -> Path:
        return self.source.with_name(self.source.name + ".c")

    @property
    def header_path(self) -> Path:
        return self.source.with_name(self.source.name + ".h")

    @property
    def object_path(self) -> Path:
        return self.source.with_name(self.stem + OBJECT_SUFFIX)

    @property
    def debug(self) -> bool:
        """Debug mode from ``#pragma czar debug``; on unless switched off."""
        return self.settings.get("debug", True)

    def artifacts(self) -> List[Path]:
        """Every file the pipeline generates for this unit."""
        return [self.c_path, self.header_path, self.object_path]


@dataclass
class BuildGraph:
    """Sorted units, their object files in the same order, and the link target."""

    root: Path
    units: List[TranslationUnit]
    output: Path

    @property
    def objects(self) -> List[Path]:
        return [unit.object_path for unit in self.units]
