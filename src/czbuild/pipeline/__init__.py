"""
Transpile pipeline stages for czbuild.

Stages, in the order the orchestrator runs them:
- Directive stripping (#pragma czar)
- Declaration extraction
- Header synthesis
- Import resolution (cross-directory)
- Same-directory includes
"""

from .declarations import extract_declarations
from .directives import read_settings, split_directives, strip_directives, strip_file
from .headers import synthesize_header, write_header
from .imports import expand_imports, resolve_imports
from .siblings import inject_includes

__all__ = [
    "extract_declarations",
    "read_settings",
    "split_directives",
    "strip_directives",
    "strip_file",
    "synthesize_header",
    "write_header",
    "expand_imports",
    "resolve_imports",
    "inject_includes",
]
