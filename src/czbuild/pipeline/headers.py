"""Header Synthesizer.

Generates the ``.cz.h`` header of a unit from its extracted declarations.
Synthesis is a pure function of the declaration list and the header path:
the same inputs always produce byte-identical output, which keeps later
include rewriting idempotent and builds reproducible.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import TranspileError
from ..file_utils import write_text_atomic
from ..models import Declaration

logger = logging.getLogger(__name__)

PREAMBLE = (
    "#include <stdint.h>",
    "#include <stddef.h>",
    "#include <stdbool.h>",
)


def include_guard(header_key: str) -> str:
    """Guard macro for a header, keyed by its path relative to the project root.

    Path separators become ``__`` so same-named headers in different
    directories never share a guard::

        math.cz.h      -> CZ_MATH_CZ_H
        lib/util.cz.h  -> CZ_LIB__UTIL_CZ_H
    """
    return "CZ_" + re.sub(r"\W", "_", header_key.replace("/", "__")).upper()


def synthesize_header(declarations: Sequence[Declaration], header_name: str, header_key: Optional[str] = None) -> str:
    """Render a header exporting ``declarations`` in the given order.

    Args:
        declarations: Declarations in extractor (source) order
        header_name: File name of the header, used for the banner
        header_key: POSIX path of the header relative to the project root,
            used for the guard (defaults to ``header_name``)

    Returns:
        Complete header text
    """
    guard = include_guard(header_key if header_key is not None else header_name)
    lines: List[str] = [
        f"/* Generated header {header_name} - do not edit */",
        f"#ifndef {guard}",
        f"#define {guard}",
        "",
    ]
    lines.extend(PREAMBLE)
    lines.append("")
    if declarations:
        lines.extend(decl.prototype for decl in declarations)
        lines.append("")
    lines.append(f"#endif /* {guard} */")
    return "\n".join(lines) + "\n"


def write_header(path: Path, declarations: Sequence[Declaration], header_key: Optional[str] = None) -> str:
    """Synthesize the header for ``path`` and write it atomically.

    ``header_key`` is passed through to synthesize_header for the guard.

    Raises:
        TranspileError: If the header cannot be written
    """
    content = synthesize_header(declarations, path.name, header_key)
    try:
        write_text_atomic(path, content)
    except OSError as e:
        raise TranspileError(f"Failed to write header {path}: {e}", stage="header") from e
    logger.debug(f"Wrote {path} ({len(declarations)} prototype(s))")
    return content
