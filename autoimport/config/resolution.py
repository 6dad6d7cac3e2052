"""
Import resolution configuration for JavaScript Auto Import.
Maps configured identifiers to the import specifications that satisfy them.
"""

import os
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterator, List, Optional, Union
from dataclasses import dataclass, field

from jsonschema import validate, ValidationError

from .config_manager import ConfigValidationError


PLACEHOLDER = '[name]'

IMPORT_SPEC_SCHEMA = {
    "type": "object",
    "properties": {
        "from": {"type": "string", "minLength": 1},
        "default": {"type": "boolean"},
        "export": {"type": "string", "minLength": 1},
        "sideEffect": {"type": "boolean"}
    },
    "required": ["from"],
    "additionalProperties": False
}

DECLARATION_SCHEMA = {
    "type": "object",
    "properties": {
        "path": {"type": "string", "minLength": 1},
        "default": {"type": "string", "minLength": 1},
        "members": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "sideEffect": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "anonymous": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "nameReplacePattern": {"type": "string"},
        "nameReplaceString": {"type": "string"}
    },
    "required": ["path"],
    "additionalProperties": False
}


class ResolutionConfigError(ConfigValidationError):
    """Raised when an import resolution entry is malformed."""
    pass


@dataclass(frozen=True)
class DefaultImport:
    """Bind the identifier to the module's default export."""
    origin: str


@dataclass(frozen=True)
class NamedImport:
    """Bind the identifier to a named export (the identifier itself by default)."""
    origin: str
    export: Optional[str] = None

    def exported_name(self, identifier: str) -> str:
        return self.export or identifier


@dataclass(frozen=True)
class SideEffectImport:
    """Import the module for its side effects only."""
    origin: str


ImportSpec = Union[DefaultImport, NamedImport, SideEffectImport]
IMPORT_SPEC_TYPES = (DefaultImport, NamedImport, SideEffectImport)


@dataclass
class ResolutionContext:
    """Information about the program being transformed, passed to callbacks."""
    filename: Optional[str]
    cwd: str
    program: Any = None
    state: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolutionEntry:
    """An identifier paired with one import specification for it."""
    identifier: str
    spec: ImportSpec


def coerce_import_spec(value: Any, identifier: str) -> ImportSpec:
    """
    Convert a configured value into an ImportSpec.

    Args:
        value: ImportSpec instance or dict such as {"from": "m", "default": true}
        identifier: Identifier the value is configured for (for error messages)

    Returns:
        The corresponding ImportSpec

    Raises:
        ResolutionConfigError: If the value is not a valid import specification
    """
    if isinstance(value, IMPORT_SPEC_TYPES):
        return value

    if not isinstance(value, dict):
        raise ResolutionConfigError(
            f"Import for '{identifier}' must be an import spec or a list of them, got {type(value).__name__}"
        )

    try:
        validate(instance=value, schema=IMPORT_SPEC_SCHEMA)
    except ValidationError as e:
        raise ResolutionConfigError(f"Invalid import for '{identifier}': {e.message}")

    if value.get('default') and value.get('sideEffect'):
        raise ResolutionConfigError(f"Import for '{identifier}' cannot be both default and side-effect")

    if value.get('default'):
        return DefaultImport(value['from'])
    if value.get('sideEffect'):
        return SideEffectImport(value['from'])
    return NamedImport(value['from'], value.get('export'))


def iter_import_specs(value: Any, identifier: str) -> Iterator[ImportSpec]:
    """
    Expand a single spec or a list of specs.

    Args:
        value: Spec, dict or list/tuple of them
        identifier: Identifier the value is configured for

    Yields:
        ImportSpec objects, in list order
    """
    if isinstance(value, (list, tuple)):
        for item in value:
            yield coerce_import_spec(item, identifier)
    else:
        yield coerce_import_spec(value, identifier)


class Resolution(ABC):
    """Source of (identifier, ImportSpec) pairs for one transformation pass."""

    @abstractmethod
    def entries(self, context: ResolutionContext) -> Iterator[ResolutionEntry]:
        """
        Resolve the configured imports for one program.

        Args:
            context: Information about the program being transformed

        Yields:
            ResolutionEntry objects in configuration-declaration order
        """
        pass


class MappingResolution(Resolution):
    """Identifier -> spec, list of specs, or callback(context) returning either."""

    def __init__(self, mapping: Dict[str, Any]):
        self.mapping = dict(mapping)

    def entries(self, context: ResolutionContext) -> Iterator[ResolutionEntry]:
        for identifier, value in self.mapping.items():
            if callable(value):
                value = value(context)
            for spec in iter_import_specs(value, identifier):
                yield ResolutionEntry(identifier, spec)


class FactoryResolution(Resolution):
    """A callback(context) that builds the whole identifier mapping per program."""

    def __init__(self, factory: Callable[[ResolutionContext], Dict[str, Any]]):
        self.factory = factory

    def entries(self, context: ResolutionContext) -> Iterator[ResolutionEntry]:
        mapping = self.factory(context)
        if not isinstance(mapping, dict):
            raise ResolutionConfigError(
                f"Import factory must return a mapping of identifiers, got {type(mapping).__name__}"
            )

        for identifier, value in mapping.items():
            for spec in iter_import_specs(value, identifier):
                yield ResolutionEntry(identifier, spec)


class DeclarationResolution(Resolution):
    """Declarative list of {path, default, members, sideEffect, ...} entries."""

    def __init__(self, declarations: List[Dict[str, Any]]):
        """
        Initialize from a list of declarations.

        Args:
            declarations: Declaration dictionaries

        Raises:
            ResolutionConfigError: If a declaration is malformed
        """
        for declaration in declarations:
            try:
                validate(instance=declaration, schema=DECLARATION_SCHEMA)
            except ValidationError as e:
                raise ResolutionConfigError(f"Invalid import declaration: {e.message}")

            pattern = declaration.get('nameReplacePattern')
            if pattern is not None:
                try:
                    re.compile(pattern)
                except re.error as e:
                    raise ResolutionConfigError(f"Invalid nameReplacePattern '{pattern}': {e}")

        self.declarations = list(declarations)

    def entries(self, context: ResolutionContext) -> Iterator[ResolutionEntry]:
        grouped: Dict[str, List[ImportSpec]] = {}

        for declaration in self.declarations:
            origin = resolve_declaration_path(declaration, context.filename)

            if declaration.get('default'):
                grouped.setdefault(declaration['default'], []).append(DefaultImport(origin))

            for member in declaration.get('members', []):
                grouped.setdefault(member, []).append(NamedImport(origin))

            side_effects = declaration.get('sideEffect', []) + declaration.get('anonymous', [])
            for identifier in side_effects:
                grouped.setdefault(identifier, []).append(SideEffectImport(origin))

        for identifier, specs in grouped.items():
            for spec in specs:
                yield ResolutionEntry(identifier, spec)


class ChainedResolution(Resolution):
    """Concatenation of several resolutions, in order."""

    def __init__(self, resolutions: List[Resolution]):
        self.resolutions = list(resolutions)

    def entries(self, context: ResolutionContext) -> Iterator[ResolutionEntry]:
        for resolution in self.resolutions:
            yield from resolution.entries(context)


def file_name_for(filename: str, pattern: Optional[str] = None, replacement: Optional[str] = None) -> str:
    """
    Compute the value substituted for the `[name]` placeholder.

    Args:
        filename: Path of the file being transformed
        pattern: Optional regular expression applied to the file's base name
        replacement: Replacement for the first match; `$1` refers to a group

    Returns:
        The base name without its extension, or the pattern-replaced base name
    """
    base = os.path.basename(filename)

    if not pattern:
        return os.path.splitext(base)[0]

    template = re.sub(r'\$(\d+)', r'\\g<\1>', (replacement or '').replace('\\', '\\\\'))
    return re.sub(pattern, template, base, count=1)


def resolve_declaration_path(declaration: Dict[str, Any], filename: Optional[str]) -> str:
    """
    Substitute the current file's name into a declaration's path.

    Args:
        declaration: Declaration dictionary with a `path`
        filename: Path of the file being transformed, if known

    Returns:
        The origin string for this file

    Raises:
        ResolutionConfigError: If the path needs a file name and none is known
    """
    path = declaration['path']
    if PLACEHOLDER not in path:
        return path

    if not filename:
        raise ResolutionConfigError(f"Import path '{path}' uses {PLACEHOLDER} but no file name is known")

    name = file_name_for(
        filename,
        declaration.get('nameReplacePattern'),
        declaration.get('nameReplaceString')
    )
    return path.replace(PLACEHOLDER, name)


def build_resolution(option: Any) -> Resolution:
    """
    Build a Resolution from any supported configuration shape.

    Args:
        option: Resolution, callable factory, {"factory": callable}, declaration
            list, or identifier mapping

    Returns:
        Resolution ready to be evaluated per program

    Raises:
        ResolutionConfigError: If the shape is not recognized
    """
    if isinstance(option, Resolution):
        return option

    if callable(option):
        return FactoryResolution(option)

    if isinstance(option, dict):
        if set(option) == {'factory'} and callable(option['factory']):
            return FactoryResolution(option['factory'])
        if _is_declaration_list(option.get('declarations')):
            rest = {k: v for k, v in option.items() if k != 'declarations'}
            resolutions: List[Resolution] = [DeclarationResolution(option['declarations'])]
            if rest:
                resolutions.insert(0, MappingResolution(rest))
            return resolutions[0] if len(resolutions) == 1 else ChainedResolution(resolutions)
        return MappingResolution(option)

    if isinstance(option, (list, tuple)):
        return DeclarationResolution(list(option))

    raise ResolutionConfigError(f"Unsupported import resolution configuration: {type(option).__name__}")


def _is_declaration_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, dict) and 'path' in item for item in value)
