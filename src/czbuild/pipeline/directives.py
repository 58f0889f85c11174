"""Directive Stripper.

Removes pipeline-only ``#pragma czar`` directives from raw source so they
never reach the C compiler.

Input is read in bounded chunks, the way a fixed ``fgets`` buffer reads it.
A chunk that fills the buffer without a line terminator is truncated, and the
chunks after it up to the end of the line are its continuations. The
directive test runs on the whole logical line, so a long directive is
removed together with every continuation and a long ordinary line is passed
through whole.

Matching rules:
    - optional leading spaces/tabs
    - the literal ``#pragma``
    - one or more spaces/tabs
    - the literal ``czar`` followed by a space, tab, CR, LF or end of input

``#pragma czarist`` and every other pragma or ``#line`` directive pass
through byte for byte.
"""

import io
import logging
import re
from pathlib import Path
from typing import Dict, Iterator, List, Optional, TextIO, Tuple

from ..errors import TranspileError
from ..file_utils import ENCODING, ENCODING_ERRORS, temp_path_for

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4096

_DIRECTIVE_RE = re.compile(r"[ \t]*#pragma[ \t]+czar(?=[ \t\r\n]|$)")
_SETTING_RE = re.compile(r"[ \t]*#pragma[ \t]+czar[ \t]+(\w+)(?:[ \t]+(\w+))?")

_BOOLEANS = {"true": True, "false": False}


def is_directive(line: str) -> bool:
    """Return True if ``line`` is a ``#pragma czar`` directive."""
    return _DIRECTIVE_RE.match(line) is not None


def _is_truncated(chunk: str, chunk_size: int) -> bool:
    return len(chunk) >= chunk_size and not chunk.endswith(("\n", "\r"))


def iter_logical_lines(stream: TextIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[List[str]]:
    """Yield each logical line of ``stream`` as the list of chunks it was read in.

    Args:
        stream: Text stream opened with ``newline=""`` so line endings survive
        chunk_size: Read buffer size in characters

    Yields:
        Chunks of one logical line; all but the last are truncated chunks,
        except that the LF of a CRLF split right after its CR is its own chunk
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    pending: Optional[str] = None
    while True:
        chunk = pending if pending is not None else stream.readline(chunk_size)
        pending = None
        if not chunk:
            return
        chunks = [chunk]
        while _is_truncated(chunk, chunk_size):
            chunk = stream.readline(chunk_size)
            if not chunk:
                break
            chunks.append(chunk)
        if len(chunk) >= chunk_size and chunk.endswith("\r"):
            # A full buffer ending at the CR of a CRLF: the LF is still unread.
            following = stream.readline(chunk_size)
            if following == "\n":
                chunks.append(following)
            else:
                pending = following
        yield chunks



def strip_stream(src: TextIO, dst: TextIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[str]:
    """Copy ``src`` to ``dst`` without its ``#pragma czar`` directives.

    Returns:
        The removed directive lines, in source order
    """
    removed = []
    for chunks in iter_logical_lines(src, chunk_size):
        line = "".join(chunks)
        if is_directive(line):
            removed.append(line)
            continue
        for chunk in chunks:
            dst.write(chunk)
    return removed


def split_directives(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Tuple[str, List[str]]:
    """Strip ``text`` and also return the directive lines that were removed."""
    src = io.StringIO(text, newline="")
    dst = io.StringIO(newline="")
    removed = strip_stream(src, dst, chunk_size)
    return dst.getvalue(), removed


def strip_directives(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Return ``text`` without its ``#pragma czar`` directives."""
    stripped, _ = split_directives(text, chunk_size)
    return stripped


def parse_directive(line: str) -> Dict[str, bool]:
    """Read the setting carried by one directive line.

    Only ``#pragma czar debug true|false`` is understood. Unknown settings
    and invalid values are ignored.
    """
    match = _SETTING_RE.match(line)
    if match is None:
        return {}
    name, value = match.group(1), match.group(2)
    if name == "debug" and value in _BOOLEANS:
        return {"debug": _BOOLEANS[value]}
    return {}


def read_settings(directives: List[str]) -> Dict[str, bool]:
    """Fold directive settings in source order; later directives win."""
    settings: Dict[str, bool] = {}
    for line in directives:
        settings.update(parse_directive(line))
    return settings


def strip_file(source: Path, output: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[str]:
    """Strip directives from ``source`` into ``output``.

    The output is written to a temporary file next to ``output`` and moved
    into place only once complete, so a failure leaves no partial artifact.

    Raises:
        TranspileError: If the source cannot be read or the output written
    """
    tmp_path = temp_path_for(output)
    try:
        with open(source, "r", encoding=ENCODING, errors=ENCODING_ERRORS, newline="") as src:
            with open(tmp_path, "w", encoding=ENCODING, errors=ENCODING_ERRORS, newline="") as dst:
                removed = strip_stream(src, dst, chunk_size)
        tmp_path.replace(output)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise TranspileError(f"Failed to strip directives: {e}", unit=source, stage="strip") from e

    logger.debug(f"Stripped {len(removed)} directive(s) from {source}")
    return removed
