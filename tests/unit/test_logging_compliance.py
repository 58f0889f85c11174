"""Static checks on how czbuild source files log."""

import re
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parents[2] / "src" / "czbuild"

# The CLI is the only module allowed to talk to the terminal directly.
EXEMPT = {"cli.py"}

PRINT_RE = re.compile(r"^\s*print\(")
LOGGER_RE = re.compile(r"^logger = logging\.getLogger\(__name__\)$", re.MULTILINE)


def source_files():
    return sorted(p for p in SRC_DIR.rglob("*.py") if p.name not in EXEMPT)


@pytest.mark.parametrize("path", source_files(), ids=lambda p: p.relative_to(SRC_DIR).as_posix())
def test_no_print_calls(path):
    offenders = [n for n, line in enumerate(path.read_text().splitlines(), 1) if PRINT_RE.match(line)]
    assert not offenders, f"{path.name} uses print() on line(s) {offenders}; use czbuild.output or logging"


@pytest.mark.parametrize("path", source_files(), ids=lambda p: p.relative_to(SRC_DIR).as_posix())
def test_module_logger_naming(path):
    text = path.read_text()
    if "logging.getLogger" in text:
        assert LOGGER_RE.search(text), f"{path.name} must create its logger with logging.getLogger(__name__)"


def test_source_tree_found():
    assert source_files(), f"no sources under {SRC_DIR}"
