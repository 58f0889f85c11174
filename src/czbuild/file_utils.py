"""Text and file helpers shared by the pipeline stages."""

import re
from pathlib import Path
from typing import List

# Source is handled as text but must round-trip any byte sequence unchanged.
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"

_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")


def temp_path_for(path: Path) -> Path:
    """Sibling temporary path used while ``path`` is being written."""
    return path.with_name(path.name + ".tmp")


def write_text_atomic(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` via a temporary file.

    The temporary file is removed if writing fails, so ``path`` is either the
    complete new content or untouched.

    Raises:
        OSError: If the file cannot be written
    """
    temp_file = temp_path_for(path)
    try:
        with open(temp_file, "w", encoding=ENCODING, errors=ENCODING_ERRORS, newline="") as f:
            f.write(text)
        temp_file.replace(path)
    except OSError:
        temp_file.unlink(missing_ok=True)
        raise


def read_text(path: Path) -> str:
    """Read a source file without translating line endings or failing on bad bytes."""
    with open(path, "r", encoding=ENCODING, errors=ENCODING_ERRORS, newline="") as f:
        return f.read()


def split_lines(text: str) -> List[str]:
    """Split ``text`` after each LF, keeping line endings (``"".join`` restores it)."""
    return _LINE_RE.findall(text)
