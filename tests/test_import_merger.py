from __future__ import annotations

import pytest

from autoimport.config.resolution import DefaultImport, NamedImport, ResolutionEntry, SideEffectImport
from autoimport.core.import_merger import ImportMerger
from autoimport.core.interfaces import TreeBuilder
from autoimport.core.program import ImportDeclaration, SourceStatement
from autoimport.core.scope_analyzer import ScopeAnalyzer
from conftest import js, parse_program


def merge(source, entries, ordering="batched"):
    program = parse_program(source)
    merger = ImportMerger(program, ScopeAnalyzer(program.root), ordering)
    return program, merger.merge(entries)


def rendered_imports(program):
    return [statement.render() for statement in program.body if isinstance(statement, ImportDeclaration)]


def test_new_origin_creates_implicit_import():
    program, result = merge("x;", [ResolutionEntry("x", DefaultImport("mod"))])
    assert rendered_imports(program) == ['import x from "mod";']
    assert result.changes == ['Added import x from "mod"']
    assert program.modified


def test_default_is_placed_before_named_bindings():
    entries = [
        ResolutionEntry("y", NamedImport("origin")),
        ResolutionEntry("x", DefaultImport("origin")),
    ]
    program, _ = merge("x; y;", entries)
    assert rendered_imports(program) == ['import x, { y } from "origin";']


def test_named_import_uses_export_name():
    program, _ = merge("local;", [ResolutionEntry("local", NamedImport("mod", "remote"))])
    assert rendered_imports(program) == ['import { remote as local } from "mod";']


def test_side_effect_imports_are_deduplicated():
    entries = [
        ResolutionEntry("a", SideEffectImport("polyfill")),
        ResolutionEntry("b", SideEffectImport("polyfill")),
    ]
    program, result = merge("a; b;", entries)
    assert rendered_imports(program) == ['import "polyfill";']
    assert len(result.implicit) == 1


def test_side_effect_import_is_upgraded_by_later_binding():
    entries = [
        ResolutionEntry("a", SideEffectImport("mod")),
        ResolutionEntry("b", NamedImport("mod")),
    ]
    program, _ = merge("a; b;", entries)
    assert rendered_imports(program) == ['import { b } from "mod";']


def test_explicit_import_is_extended_and_keeps_its_literal():
    source = js("""
        import { q } from 'some-path';
        x; y;
    """)
    entries = [
        ResolutionEntry("x", DefaultImport("some-path")),
        ResolutionEntry("y", NamedImport("some-path")),
    ]
    program, result = merge(source, entries)
    assert rendered_imports(program) == ["import x, { q, y } from 'some-path';"]
    assert result.implicit == []
    assert result.changes == ['Extended import x, q, y from "some-path"']


def test_implicit_imports_precede_explicit_ones():
    source = js("""
        import z from "b";
        x;
    """)
    program, _ = merge(source, [ResolutionEntry("x", DefaultImport("a"))])
    assert rendered_imports(program) == ['import x from "a";', 'import z from "b";']
    assert isinstance(program.body[2], SourceStatement)


def test_duplicate_explicit_imports_are_merged():
    source = js("""
        import { a } from "m";
        import { b } from "m";
        a; b;
    """)
    program, result = merge(source, [])
    assert rendered_imports(program) == ['import { a, b } from "m";']
    assert result.skipped == ['Merged duplicate import of "m"']


def test_same_local_is_never_bound_twice():
    entries = [
        ResolutionEntry("x", DefaultImport("first")),
        ResolutionEntry("x", NamedImport("second")),
        ResolutionEntry("x", NamedImport("first")),
    ]
    program, result = merge("x;", entries)
    assert rendered_imports(program) == ['import x from "first";']
    assert len(result.skipped) == 2


def test_second_default_for_an_origin_becomes_named_default():
    entries = [
        ResolutionEntry("x", DefaultImport("mod")),
        ResolutionEntry("y", DefaultImport("mod")),
    ]
    program, _ = merge("x; y;", entries)
    assert rendered_imports(program) == ['import x, { default as y } from "mod";']


def test_interleaved_places_side_effect_imports_before_first_use():
    source = js("""
        const a = 1;
        setup();
        widget();
    """)
    entries = [
        ResolutionEntry("widget", NamedImport("widgets")),
        ResolutionEntry("setup", SideEffectImport("./polyfills")),
    ]
    program, _ = merge(source, entries, ordering="interleaved")

    kinds = [
        statement.render() if isinstance(statement, ImportDeclaration) else statement.node.text.decode()
        for statement in program.body
    ]
    assert kinds == [
        'import { widget } from "widgets";',
        "const a = 1;",
        'import "./polyfills";',
        "setup();",
        "widget();",
    ]


def test_batched_ordering_keeps_side_effect_imports_on_top():
    source = "const a = 1;\nsetup();\n"
    program, _ = merge(source, [ResolutionEntry("setup", SideEffectImport("./polyfills"))])
    assert isinstance(program.body[0], ImportDeclaration)


def test_unknown_ordering_is_rejected():
    program = parse_program("x;")
    with pytest.raises(ValueError):
        ImportMerger(program, ordering="sorted")


def test_tree_builder_must_place_statements_before_an_anchor():
    class TopOnlyBuilder(TreeBuilder):
        def build_import(self, specifiers, origin):
            return None

        def remove_statement(self, statement):
            pass

        def prepend_statements(self, statements):
            pass

    with pytest.raises(TypeError):
        TopOnlyBuilder()


def test_escaped_origin_matches_its_plain_spelling():
    program, result = merge(r"import a from 'a\x2fb'; a; x;", [ResolutionEntry("x", NamedImport("a/b"))])
    assert rendered_imports(program) == [r"import a, { x } from 'a\x2fb';"]
    assert result.implicit == []


def test_duplicate_explicit_imports_match_across_escape_spellings():
    source = js(r"""
        import a from "\u{61}/b";
        import { c } from 'a\/b';
        a; c;
    """)
    program, result = merge(source, [])
    assert rendered_imports(program) == [r'import a, { c } from "\u{61}/b";']
    assert len(result.explicit) == 1
