"""Tests for cross-directory import resolution."""

from unittest.mock import patch

import pytest

from czbuild.errors import TranspileError
from czbuild.models import TranslationUnit
from czbuild.pipeline.imports import expand_imports, list_module_headers, match_marker, resolve_imports


@pytest.fixture
def layout(tmp_path):
    """app/ imports ../lib, which holds two generated headers and noise."""
    app = tmp_path / "app"
    lib = tmp_path / "lib"
    (lib / "sub").mkdir(parents=True)
    app.mkdir()
    (tmp_path / "empty").mkdir()
    for name in ("b.cz.h", "a.cz.h", "notes.h", "a.cz.c"):
        (lib / name).write_text("")
    (lib / "sub" / "c.cz.h").write_text("")
    return tmp_path


class TestMatchMarker:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ('// #import "lib/math"', ("", "lib/math")),
            ('/* #import "lib/math" */', ("", "lib/math")),
            ('#import "lib/math"', ("", "lib/math")),
            ('    //#import "../x"  ', ("    ", "../x")),
        ],
    )
    def test_marker_forms(self, line, expected):
        assert match_marker(line) == expected

    @pytest.mark.parametrize("line", ['#include "lib/math.h"', 'int x; // #import "lib"', '#import <lib>'])
    def test_non_markers(self, line):
        assert match_marker(line) is None


class TestListModuleHeaders:
    def test_only_direct_generated_headers_sorted(self, layout):
        assert [p.name for p in list_module_headers(layout / "lib")] == ["a.cz.h", "b.cz.h"]


class TestExpandImports:
    def test_expands_to_sorted_includes(self, layout):
        text = '// #import "../lib"\nint main(void) { return 0; }\n'
        expanded, directives = expand_imports(text, layout / "app")

        assert expanded == ('#include "../lib/a.cz.h"\n#include "../lib/b.cz.h"\nint main(void) { return 0; }\n')
        assert len(directives) == 1
        assert directives[0].module_path == "../lib"
        assert directives[0].resolved
        assert [p.name for p in directives[0].headers] == ["a.cz.h", "b.cz.h"]

    def test_block_and_bare_forms_keep_indentation(self, layout):
        expanded, _ = expand_imports('  /* #import "lib" */\n', layout)
        assert expanded == '  #include "lib/a.cz.h"\n  #include "lib/b.cz.h"\n'

    def test_missing_directory_becomes_comment(self, layout):
        expanded, directives = expand_imports('#import "nope"\nint x;\n', layout)
        assert expanded == '/* czbuild: #import "nope" - directory not found */\nint x;\n'
        assert not directives[0].resolved

    def test_directory_without_headers_becomes_comment(self, layout):
        expanded, directives = expand_imports('// #import "empty"\n', layout)
        assert expanded == '/* czbuild: #import "empty" - no headers found */\n'
        assert directives[0].headers == []

    def test_empty_module_path(self, layout):
        expanded, _ = expand_imports('#import ""\n', layout)
        assert expanded == '/* czbuild: #import "" - empty module path */\n'

    def test_repeated_import_expands_once(self, layout):
        text = '// #import "lib"\n// #import "lib/"\n'
        expanded, directives = expand_imports(text, layout)
        assert expanded.count('#include "lib/a.cz.h"') == 1
        assert '/* czbuild: #import "lib/" - already imported */\n' in expanded
        assert len(directives) == 1

    def test_preserves_crlf_and_missing_final_newline(self, layout):
        expanded, _ = expand_imports('int a;\r\n// #import "lib"', layout)
        assert expanded == 'int a;\r\n#include "lib/a.cz.h"\n#include "lib/b.cz.h"'

    def test_idempotent(self, layout):
        once, _ = expand_imports('// #import "lib"\n#import "empty"\nint x;\n', layout)
        twice, directives = expand_imports(once, layout)
        assert twice == once
        assert directives == []

    def test_no_markers_unchanged(self, layout):
        text = '#include <stdio.h>\nint main(void) { return 0; }\n'
        assert expand_imports(text, layout) == (text, [])


class TestResolveImports:
    def test_updates_unit_once(self, layout):
        unit = TranslationUnit.from_source(layout / "app" / "main.cz")
        unit.text = '// #import "../lib"\n'

        imports = resolve_imports(unit)

        assert unit.imports_resolved
        assert list(imports) == ["../lib"]
        assert unit.text.count("#include") == 2

        unit.text += '// #import "../empty"\n'
        resolve_imports(unit)
        assert unit.text.endswith('// #import "../empty"\n')
        assert list(unit.imports) == ["../lib"]

    def test_unreadable_import_directory_names_the_unit(self, layout):
        unit = TranslationUnit.from_source(layout / "app" / "main.cz")
        unit.text = '// #import "../lib"\n'

        with patch("czbuild.pipeline.imports.list_module_headers", side_effect=PermissionError("denied")):
            with pytest.raises(TranspileError) as exc_info:
                resolve_imports(unit)

        assert exc_info.value.stage == "imports"
        assert exc_info.value.unit == unit.source
        assert not unit.imports_resolved
