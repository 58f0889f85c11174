"""Same-Directory Includer.

A directory is an implicit module: every unit sees the declarations of every
other unit in the same directory without an import. After import resolution
each unit gets:

    - an include of its own generated header, so it may call its functions
      before their definitions
    - one include per sibling header, sorted, never its own

The includes go right after the existing self-include. Without one, they go
right before the first exported function definition, after any types the
unit declares above it, and never ahead of the end of the leading block of
blank, comment and preprocessor lines.

Headers already included, under any spelling that resolves to the same file,
are not included again, so running the stage twice changes nothing.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence, Set

from ..file_utils import split_lines
from .declarations import extract_declarations
from ..models import TranslationUnit

logger = logging.getLogger(__name__)

_INCLUDE_RE = re.compile(r'^[ \t]*#[ \t]*include[ \t]+"(?P<path>[^"\r\n]+)"')
_PREPROCESSOR_RE = re.compile(r"^[ \t]*#")


def _include_target(line: str, base_dir: Path) -> Optional[Path]:
    match = _INCLUDE_RE.match(line)
    if match is None:
        return None
    return (base_dir / match.group("path")).resolve()


def find_insertion_point(lines: Sequence[str]) -> int:
    """Index just past the leading block of blank, comment and preprocessor lines,
    or of the first line of code when the block holds no preprocessor line."""
    in_comment = False
    continued = False
    after_preprocessor = 0
    for index, line in enumerate(lines):
        stripped = line.strip()
        if continued:
            continued = stripped.endswith("\\")
            after_preprocessor = index + 1
            continue
        if in_comment:
            in_comment = "*/" not in stripped
            continue
        if not stripped or stripped.startswith("//"):
            continue
        if stripped.startswith("/*"):
            in_comment = "*/" not in stripped[2:]
            if in_comment or stripped.endswith("*/"):
                continue
            # Code after a closing comment on the same line.
            return after_preprocessor if after_preprocessor else index
        if _PREPROCESSOR_RE.match(line):
            continued = stripped.endswith("\\")
            after_preprocessor = index + 1
            continue
        return after_preprocessor if after_preprocessor else index
    return after_preprocessor if after_preprocessor else len(lines)


def include_position(lines: Sequence[str], text: str) -> int:
    """Index at which new includes go when the unit has no self-include.

    Right before the first exported definition, so types the unit declares
    above it are complete when the header's prototypes are read, but never
    inside the leading preprocessor block. Blank lines just above the
    definition stay below the includes.
    """
    floor = find_insertion_point(lines)
    declarations = extract_declarations(text)
    if not declarations:
        return floor
    position = max(floor, declarations[0].line - 1)
    while position > floor and not lines[position - 1].strip():
        position -= 1
    return position


def sibling_headers(unit: TranslationUnit, units: Sequence[TranslationUnit]) -> List[Path]:
    """Generated headers of the other units in ``unit``'s directory, sorted."""
    headers = {other.header_path for other in units if other.directory == unit.directory and other.source != unit.source}
    return sorted(headers)


def _line_ending(lines: Sequence[str]) -> str:
    for line in lines:
        if line.endswith("\r\n"):
            return "\r\n"
        if line.endswith("\n"):
            return "\n"
    return "\n"


def inject_includes(unit: TranslationUnit, units: Sequence[TranslationUnit]) -> List[Path]:
    """Add the self-include and sibling includes to ``unit.text``.

    Must run only after every unit's header has been synthesized. Runs at
    most once per unit per build.

    Args:
        unit: Unit to rewrite in place
        units: All units of the build

    Returns:
        Headers whose includes were added, in insertion order
    """
    if unit.siblings_injected:
        return []

    siblings = sibling_headers(unit, units)
    unit.sibling_headers = set(siblings)

    lines = split_lines(unit.text)
    ending = _line_ending(lines)
    base_dir = unit.directory
    own_header = unit.header_path.resolve()

    anchor = None
    present: Set[Path] = set()
    for index, line in enumerate(lines):
        target = _include_target(line, base_dir)
        if target is None:
            continue
        present.add(target)
        if target == own_header and anchor is None:
            anchor = index

    added: List[Path] = []
    new_lines: List[str] = []
    if anchor is None:
        insert_at = include_position(lines, unit.text)
        new_lines.append(f'#include "{unit.header_path.name}"{ending}')
        added.append(unit.header_path)
    else:
        insert_at = anchor + 1

    for header in siblings:
        if header.resolve() in present:
            continue
        new_lines.append(f'#include "{header.name}"{ending}')
        added.append(header)

    if new_lines:
        if insert_at > 0 and not lines[insert_at - 1].endswith("\n"):
            lines[insert_at - 1] += ending
        lines[insert_at:insert_at] = new_lines
        unit.text = "".join(lines)

    unit.siblings_injected = True
    logger.debug(f"{unit.source}: injected {len(added)} include(s)")
    return added
