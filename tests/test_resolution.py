from __future__ import annotations

import pytest

from autoimport.config.resolution import (
    ChainedResolution,
    DeclarationResolution,
    DefaultImport,
    FactoryResolution,
    MappingResolution,
    NamedImport,
    ResolutionConfigError,
    ResolutionContext,
    ResolutionEntry,
    SideEffectImport,
    build_resolution,
    coerce_import_spec,
    file_name_for,
    resolve_declaration_path,
)


def context(filename="src/component.js"):
    return ResolutionContext(filename=filename, cwd="/project")


def resolve(resolution, filename="src/component.js"):
    return list(resolution.entries(context(filename)))


class TestCoerceImportSpec:

    def test_dict_shapes(self):
        assert coerce_import_spec({"from": "m", "default": True}, "x") == DefaultImport("m")
        assert coerce_import_spec({"from": "m"}, "x") == NamedImport("m")
        assert coerce_import_spec({"from": "m", "export": "y"}, "x") == NamedImport("m", "y")
        assert coerce_import_spec({"from": "m", "sideEffect": True}, "x") == SideEffectImport("m")

    def test_spec_instances_pass_through(self):
        spec = NamedImport("m", "other")
        assert coerce_import_spec(spec, "x") is spec

    def test_false_flags_fall_back_to_named(self):
        assert coerce_import_spec({"from": "m", "default": False}, "x") == NamedImport("m")

    @pytest.mark.parametrize(
        "value",
        [
            "m",
            42,
            {"default": True},
            {"from": ""},
            {"from": "m", "unknown": 1},
            {"from": "m", "default": True, "sideEffect": True},
        ],
    )
    def test_invalid_values_are_rejected(self, value):
        with pytest.raises(ResolutionConfigError):
            coerce_import_spec(value, "x")

    def test_export_name_defaults_to_identifier(self):
        assert NamedImport("m").exported_name("x") == "x"
        assert NamedImport("m", "y").exported_name("x") == "y"


class TestMappingResolution:

    def test_single_specs_and_lists(self):
        resolution = MappingResolution({
            "a": {"from": "one"},
            "b": [{"from": "two", "default": True}, {"from": "three", "sideEffect": True}],
        })
        assert resolve(resolution) == [
            ResolutionEntry("a", NamedImport("one")),
            ResolutionEntry("b", DefaultImport("two")),
            ResolutionEntry("b", SideEffectImport("three")),
        ]

    def test_callbacks_are_called_per_program(self):
        calls = []

        def callback(ctx):
            calls.append(ctx.filename)
            return [{"from": f"./{ctx.filename}.css", "sideEffect": True}]

        resolution = MappingResolution({"styles": callback})
        resolve(resolution, "a.js")
        entries = resolve(resolution, "b.js")

        assert calls == ["a.js", "b.js"]
        assert entries == [ResolutionEntry("styles", SideEffectImport("./b.js.css"))]

    def test_callback_returning_garbage_is_an_error(self):
        resolution = MappingResolution({"x": lambda ctx: None})
        with pytest.raises(ResolutionConfigError):
            resolve(resolution)


class TestFactoryResolution:

    def test_factory_builds_the_mapping(self):
        resolution = FactoryResolution(lambda ctx: {"x": {"from": ctx.cwd}})
        assert resolve(resolution) == [ResolutionEntry("x", NamedImport("/project"))]

    def test_factory_must_return_a_mapping(self):
        with pytest.raises(ResolutionConfigError):
            resolve(FactoryResolution(lambda ctx: [{"from": "m"}]))

    def test_callbacks_inside_factory_mapping_are_rejected(self):
        resolution = FactoryResolution(lambda ctx: {"x": lambda inner: {"from": "m"}})
        with pytest.raises(ResolutionConfigError):
            resolve(resolution)


class TestDeclarationResolution:

    def test_declaration_fields_expand_to_entries(self):
        resolution = DeclarationResolution([
            {"path": "some-path", "default": "x", "members": ["y", "z"]},
            {"path": "polyfill", "sideEffect": ["fetch"], "anonymous": ["Promise"]},
        ])
        assert resolve(resolution) == [
            ResolutionEntry("x", DefaultImport("some-path")),
            ResolutionEntry("y", NamedImport("some-path")),
            ResolutionEntry("z", NamedImport("some-path")),
            ResolutionEntry("fetch", SideEffectImport("polyfill")),
            ResolutionEntry("Promise", SideEffectImport("polyfill")),
        ]

    def test_entries_for_one_identifier_are_grouped_in_declaration_order(self):
        resolution = DeclarationResolution([
            {"path": "a", "members": ["x"]},
            {"path": "b", "members": ["y"]},
            {"path": "c", "sideEffect": ["x"]},
        ])
        assert [entry.identifier for entry in resolve(resolution)] == ["x", "x", "y"]

    def test_placeholder_uses_file_stem(self):
        resolution = DeclarationResolution([{"path": "./[name].css", "default": "styles"}])
        assert resolve(resolution, "./componentName.js") == [
            ResolutionEntry("styles", DefaultImport("./componentName.css"))
        ]

    def test_placeholder_without_file_name_is_an_error(self):
        resolution = DeclarationResolution([{"path": "./[name].css", "default": "styles"}])
        with pytest.raises(ResolutionConfigError):
            resolve(resolution, None)

    @pytest.mark.parametrize(
        "declaration",
        [
            {"default": "x"},
            {"path": "m", "members": "x"},
            {"path": "m", "extra": True},
            {"path": "m", "nameReplacePattern": "("},
        ],
    )
    def test_malformed_declarations_are_rejected(self, declaration):
        with pytest.raises(ResolutionConfigError):
            DeclarationResolution([declaration])


class TestFileNames:

    def test_stem_without_pattern(self):
        assert file_name_for("/src/name.component.js") == "name.component"

    def test_pattern_replacement(self):
        assert file_name_for("./name.component.js", ".component.js$", ".styles") == "name.styles"

    def test_group_references(self):
        assert file_name_for("button.view.js", r"^(\w+)\.view\.js$", "$1-theme") == "button-theme"

    def test_only_first_match_is_replaced(self):
        assert file_name_for("a-b-c.js", "-", "_") == "a_b-c.js"

    def test_resolve_declaration_path(self):
        declaration = {
            "path": "./[name].css",
            "nameReplacePattern": ".component.js$",
            "nameReplaceString": ".styles",
        }
        assert resolve_declaration_path(declaration, "./name.component.js") == "./name.styles.css"
        assert resolve_declaration_path({"path": "plain"}, None) == "plain"


class TestBuildResolution:

    def test_mapping(self):
        assert isinstance(build_resolution({"x": {"from": "m"}}), MappingResolution)

    def test_factory_shapes(self):
        assert isinstance(build_resolution(lambda ctx: {}), FactoryResolution)
        assert isinstance(build_resolution({"factory": lambda ctx: {}}), FactoryResolution)

    def test_declaration_list(self):
        assert isinstance(build_resolution([{"path": "m", "members": ["x"]}]), DeclarationResolution)

    def test_declarations_key_alone(self):
        resolution = build_resolution({"declarations": [{"path": "m", "members": ["x"]}]})
        assert isinstance(resolution, DeclarationResolution)

    def test_declarations_with_static_imports_are_chained(self):
        resolution = build_resolution({
            "declarations": [{"path": "decl", "members": ["b"]}],
            "a": {"from": "static"},
        })
        assert isinstance(resolution, ChainedResolution)
        assert resolve(resolution) == [
            ResolutionEntry("a", NamedImport("static")),
            ResolutionEntry("b", NamedImport("decl")),
        ]

    def test_resolution_objects_pass_through(self):
        resolution = MappingResolution({})
        assert build_resolution(resolution) is resolution

    def test_unsupported_shape(self):
        with pytest.raises(ResolutionConfigError):
            build_resolution(42)
