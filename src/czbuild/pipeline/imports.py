"""Import Resolver.

Expands import markers into concrete ``#include`` lines. A marker names a
module directory relative to the importing unit:

    // #import "lib/math"
    /* #import "lib/math" */
    #import "lib/math"

Each marker is replaced by one include per generated header (``*.cz.h``)
found directly in that directory, sorted by file name. A marker that finds
no headers becomes a diagnostic comment instead of an error; if a missing
symbol is actually used, the compiler or linker reports it.

Expansion removes the marker, so running the resolver again over expanded
text finds nothing to do. The unit's ``imports_resolved`` flag also makes
repeated calls within one build no-ops.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from ..errors import TranspileError
from ..file_utils import split_lines
from ..models import HEADER_SUFFIX, ImportDirective, TranslationUnit

logger = logging.getLogger(__name__)

IMPORT_MARKER_RE = re.compile(
    r"^(?P<indent>[ \t]*)"
    r'(?:/\*[ \t]*#[ \t]*import[ \t]+"(?P<block>[^"\r\n]*)"[ \t]*\*/'
    r'|//[ \t]*#[ \t]*import[ \t]+"(?P<line>[^"\r\n]*)"'
    r'|#[ \t]*import[ \t]+"(?P<bare>[^"\r\n]*)")'
    r"[ \t]*$"
)


def match_marker(line: str) -> Optional[Tuple[str, str]]:
    """Return ``(indent, module_path)`` if ``line`` is an import marker."""
    match = IMPORT_MARKER_RE.match(line)
    if match is None:
        return None
    for group in ("block", "line", "bare"):
        path = match.group(group)
        if path is not None:
            return match.group("indent"), path
    return None


def list_module_headers(directory: Path) -> List[Path]:
    """Generated headers directly inside ``directory``, sorted by file name."""
    headers = [entry for entry in directory.iterdir() if entry.is_file() and entry.name.endswith(HEADER_SUFFIX)]
    return sorted(headers, key=lambda p: p.name)


def _split_line_ending(line: str) -> Tuple[str, str]:
    body = line.rstrip("\r\n")
    return body, line[len(body):]


def _expand_marker(indent: str, module_path: str, base_dir: Path, line_no: int) -> Tuple[List[str], ImportDirective]:
    directive = ImportDirective(module_path=module_path, line=line_no)
    if not module_path.strip():
        return [f'{indent}/* czbuild: #import "" - empty module path */'], directive

    target = base_dir / module_path
    if not target.is_dir():
        logger.warning(f'Import "{module_path}" (line {line_no}): directory not found: {target}')
        return [f'{indent}/* czbuild: #import "{module_path}" - directory not found */'], directive

    directive.headers = list_module_headers(target)
    if not directive.headers:
        logger.warning(f'Import "{module_path}" (line {line_no}): no headers found in {target}')
        return [f'{indent}/* czbuild: #import "{module_path}" - no headers found */'], directive

    prefix = module_path.rstrip("/")
    return [f'{indent}#include "{prefix}/{header.name}"' for header in directive.headers], directive


def expand_imports(text: str, base_dir: Path) -> Tuple[str, List[ImportDirective]]:
    """Replace every import marker in ``text``.

    A module imported a second time in the same text expands to a comment
    instead of a second copy of its includes.

    Args:
        text: Transpiled C text
        base_dir: Directory the module paths are relative to (the unit's)

    Returns:
        The expanded text and one ImportDirective per distinct module, in order
    """
    out: List[str] = []
    directives: List[ImportDirective] = []
    expanded: Set[Path] = set()
    for line_no, line in enumerate(split_lines(text), start=1):
        body, ending = _split_line_ending(line)
        marker = match_marker(body)
        if marker is None:
            out.append(line)
            continue

        indent, module_path = marker
        key = (base_dir / module_path).resolve() if module_path.strip() else None
        if key is not None:
            if key in expanded:
                out.append(f'{indent}/* czbuild: #import "{module_path}" - already imported */{ending}')
                continue
            expanded.add(key)

        replacement, directive = _expand_marker(indent, module_path, base_dir, line_no)
        directives.append(directive)
        # The last replacement line keeps whatever ending the marker had.
        out.extend(part + (ending or "\n") for part in replacement[:-1])
        out.append(replacement[-1] + ending)
    return "".join(out), directives


def resolve_imports(unit: TranslationUnit) -> Dict[str, ImportDirective]:
    """Expand the import markers of ``unit`` in place, at most once per build.

    Returns:
        The unit's import directives keyed by module path

    Raises:
        TranspileError: If an import directory cannot be listed
    """
    if unit.imports_resolved:
        return unit.imports

    try:
        unit.text, directives = expand_imports(unit.text, unit.directory)
    except OSError as e:
        raise TranspileError(f"Cannot read import directory: {e}", unit=unit.source, stage="imports") from e
    for directive in directives:
        unit.imports.setdefault(directive.module_path, directive)
        logger.debug(f'{unit.source}: import "{directive.module_path}" -> {len(directive.headers)} header(s)')
    unit.imports_resolved = True
    return unit.imports
