"""Tests for #pragma czar directive stripping."""

import io

import pytest

from czbuild.errors import TranspileError
from czbuild.pipeline.directives import (
    is_directive,
    iter_logical_lines,
    parse_directive,
    read_settings,
    split_directives,
    strip_directives,
    strip_file,
)


class TestIsDirective:
    @pytest.mark.parametrize(
        "line",
        [
            "#pragma czar\n",
            "#pragma czar debug false\n",
            "   #pragma czar\n",
            "\t#pragma\tczar\tdebug true\r\n",
            "#pragma    czar",
        ],
    )
    def test_matches_directives(self, line):
        assert is_directive(line)

    @pytest.mark.parametrize(
        "line",
        [
            "#pragma czarist\n",
            "#pragma once\n",
            "#pragmaczar\n",
            '#line 12 "main.cz"\n',
            "int czar = 1;\n",
            "// #pragma czar\n",
        ],
    )
    def test_rejects_other_lines(self, line):
        assert not is_directive(line)


class TestStripDirectives:
    def test_removes_directive_lines_only(self):
        text = "int a;\n#pragma czar debug false\nint b;\n"
        assert strip_directives(text) == "int a;\nint b;\n"

    def test_keeps_lookalike_pragmas_byte_for_byte(self):
        text = "#pragma czarist\n#pragma once\n#line 3 \"x.cz\"\n"
        assert strip_directives(text) == text

    def test_directive_at_end_of_input_without_newline(self):
        assert strip_directives("int a;\n#pragma czar") == "int a;\n"

    def test_preserves_crlf_line_endings(self):
        assert strip_directives("a\r\n#pragma czar\r\nb\r\n") == "a\r\nb\r\n"

    def test_empty_input(self):
        assert strip_directives("") == ""

    def test_idempotent(self):
        text = "#pragma czar debug true\nint main(void) { return 0; }\n  #pragma czar\n"
        once = strip_directives(text)
        assert strip_directives(once) == once

    def test_long_directive_is_removed_with_its_continuations(self):
        text = "#pragma czar " + "x" * 50 + "\nafter\n"
        assert strip_directives(text, chunk_size=16) == "after\n"

    def test_long_ordinary_line_passes_through_whole(self):
        text = "a" * 30 + "\n#pragma czar\nb\n"
        assert strip_directives(text, chunk_size=8) == "a" * 30 + "\nb\n"

    def test_crlf_split_at_buffer_edge_is_removed_whole(self):
        # "#pragma czar x\r" fills the 15-character buffer; its LF is read next.
        assert strip_directives("#pragma czar x\r\nb\r\n", chunk_size=15) == "b\r\n"

    def test_crlf_split_at_buffer_edge_on_ordinary_line(self):
        text = "abcdefghijklmn\r\nb\r\n"
        assert strip_directives(text, chunk_size=15) == text

    def test_full_buffer_ending_in_lone_cr(self):
        text = "#pragma czar x\rb\n"
        assert strip_directives(text, chunk_size=15) == "b\n"

    def test_keyword_split_across_chunk_boundary(self):
        # "#pragma czar" fills the 12-character buffer; "ist" arrives as a continuation.
        text = "#pragma czarist\nint x;\n"
        assert strip_directives(text, chunk_size=12) == text

    def test_split_directives_returns_removed_lines(self):
        text = "#pragma czar debug false\nint a;\n#pragma czar\n"
        stripped, removed = split_directives(text)
        assert stripped == "int a;\n"
        assert removed == ["#pragma czar debug false\n", "#pragma czar\n"]


class TestIterLogicalLines:
    def test_groups_truncated_chunks(self):
        stream = io.StringIO("abcdefgh\nxy\n", newline="")
        assert list(iter_logical_lines(stream, chunk_size=4)) == [["abcd", "efgh", "\n"], ["xy\n"]]

    def test_lf_of_split_crlf_joins_its_line(self):
        stream = io.StringIO("abc\r\nxy\n", newline="")
        assert list(iter_logical_lines(stream, chunk_size=4)) == [["abc\r", "\n"], ["xy\n"]]

    def test_rejects_non_positive_chunk_size(self):
        with pytest.raises(ValueError):
            list(iter_logical_lines(io.StringIO("x"), chunk_size=0))


class TestSettings:
    def test_debug_false(self):
        assert parse_directive("#pragma czar debug false\n") == {"debug": False}

    def test_debug_true(self):
        assert parse_directive("  #pragma czar debug true") == {"debug": True}

    @pytest.mark.parametrize("line", ["#pragma czar debug maybe\n", "#pragma czar optimize fast\n", "#pragma czar\n"])
    def test_unknown_or_invalid_settings_are_ignored(self, line):
        assert parse_directive(line) == {}

    def test_later_directive_wins(self):
        settings = read_settings(["#pragma czar debug false\n", "#pragma czar debug true\n"])
        assert settings == {"debug": True}


class TestStripFile:
    def test_writes_stripped_output(self, tmp_path):
        source = tmp_path / "main.cz"
        source.write_text("#pragma czar debug false\nint main(void) { return 0; }\n")
        target = tmp_path / "main.cz.c"

        removed = strip_file(source, target)

        assert target.read_text() == "int main(void) { return 0; }\n"
        assert removed == ["#pragma czar debug false\n"]
        assert not (tmp_path / "main.cz.c.tmp").exists()

    def test_missing_source_leaves_no_output(self, tmp_path):
        target = tmp_path / "missing.cz.c"

        with pytest.raises(TranspileError) as exc_info:
            strip_file(tmp_path / "missing.cz", target)

        assert exc_info.value.stage == "strip"
        assert not target.exists()
        assert not (tmp_path / "missing.cz.c.tmp").exists()

    def test_round_trips_invalid_utf8(self, tmp_path):
        source = tmp_path / "bytes.cz"
        source.write_bytes(b'const char *s = "\xff\xfe";\n#pragma czar\n')
        target = tmp_path / "bytes.cz.c"

        strip_file(source, target)

        assert target.read_bytes() == b'const char *s = "\xff\xfe";\n'
