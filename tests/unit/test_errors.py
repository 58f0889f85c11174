"""Tests for error types and exit codes."""

from pathlib import Path

import pytest

from czbuild.errors import CompileError, CzBuildError, ExitCode, LinkError, NoSourcesError, TranspileError


class TestExitCodes:
    @pytest.mark.parametrize(
        "error_class, code",
        [
            (CzBuildError, ExitCode.UNEXPECTED),
            (NoSourcesError, ExitCode.NO_SOURCES),
            (TranspileError, ExitCode.TRANSPILE_FAILURE),
            (CompileError, ExitCode.COMPILE_FAILURE),
            (LinkError, ExitCode.LINK_FAILURE),
        ],
    )
    def test_each_failure_has_its_own_code(self, error_class, code):
        assert error_class("boom").exit_code == code

    def test_codes_are_distinct(self):
        values = [code.value for code in ExitCode]
        assert len(values) == len(set(values))


class TestFormat:
    def test_message_only(self):
        assert CzBuildError("boom").format() == "boom"

    def test_stage_and_unit(self):
        error = CompileError("failed", unit=Path("src/main.cz"), stage="compile")
        assert error.format() == f"[compile] {Path('src/main.cz')}: failed"

    def test_tool_output_appended_verbatim(self):
        error = LinkError("failed", stage="link", output="undefined reference to `mul'\n")
        assert error.format() == "[link] failed\nundefined reference to `mul'"
