"""Pytest configuration and fixtures for czbuild tests."""

from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from czbuild import output
from czbuild.subprocess_utils import ToolResult


@pytest.fixture(autouse=True)
def _reset_output():
    """Each test starts with default, verbose console output on stdout."""
    output.set_output_stream(None)
    output.set_verbose(True)
    yield
    output.set_output_stream(None)
    output.set_verbose(True)


@pytest.fixture
def make_project(tmp_path) -> Callable[[Dict[str, str]], Path]:
    """Write a tree of files under tmp_path/project and return its root.

    Keys are POSIX paths relative to the root, values are file contents.
    """

    def _make(files: Dict[str, str]) -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, newline="")
        return root

    return _make


class FakeToolchain:
    """Stands in for the C compiler and linker.

    Compiling writes a placeholder object file; linking writes a placeholder
    binary. Failures and warnings are switched on per test.
    """

    def __init__(self):
        self.compile_commands: List[List[str]] = []
        self.link_commands: List[List[str]] = []
        self.fail_compile_on: Optional[str] = None
        self.fail_link: bool = False
        self.compile_warning: str = ""

    def compile(self, cmd, cwd=None, timeout=None) -> ToolResult:
        cmd = [str(part) for part in cmd]
        self.compile_commands.append(cmd)
        source = Path(cmd[cmd.index("-c") + 1])
        obj = Path(cmd[cmd.index("-o") + 1])
        if self.fail_compile_on is not None and source.name == self.fail_compile_on:
            return ToolResult(tuple(cmd), 1, "", f"{source}: error: expected ';' before '}}' token\n")
        obj.write_text("object")
        return ToolResult(tuple(cmd), 0, "", self.compile_warning)

    def link(self, cmd, cwd=None, timeout=None) -> ToolResult:
        cmd = [str(part) for part in cmd]
        self.link_commands.append(cmd)
        if self.fail_link:
            return ToolResult(tuple(cmd), 1, "", "undefined reference to `mul'\ncollect2: error: ld returned 1 exit status\n")
        Path(cmd[cmd.index("-o") + 1]).write_text("binary")
        return ToolResult(tuple(cmd), 0, "", "")


@pytest.fixture
def fake_toolchain(monkeypatch) -> FakeToolchain:
    """Patch the compiler and linker stages to use a FakeToolchain."""
    fake = FakeToolchain()
    monkeypatch.setattr("czbuild.build.compiler.run_tool", fake.compile)
    monkeypatch.setattr("czbuild.build.linker.run_tool", fake.link)
    return fake
