"""
Scope Analyzer for JavaScript Auto Import.
Builds lexical scopes over a tree-sitter tree and answers binding queries.
"""

from typing import Dict, Iterator, List, Optional, Tuple
from dataclasses import dataclass

from tree_sitter import Node

from autoimport.utils.ts_utils import TreeSitterHelper
from .interfaces import ScopeQuery


# Node types that read a variable when they appear outside a declaration
REFERENCE_TYPES = {
    'identifier',
    'shorthand_property_identifier',
    'shorthand_property_identifier_pattern',
}


class Scope:
    """A lexical scope and the names declared directly in it."""

    def __init__(self, kind: str, node: Node, parent: Optional['Scope'] = None):
        """
        Initialize a scope.

        Args:
            kind: 'program', 'function', 'class', 'block', 'loop' or 'catch'
            node: Node that owns the scope
            parent: Enclosing scope, None for the program scope
        """
        self.kind = kind
        self.node = node
        self.parent = parent
        self.bindings: Dict[str, Node] = {}

    def declare(self, name: str, node: Node) -> None:
        """Declare a name in this scope, keeping its first declaration."""
        self.bindings.setdefault(name, node)

    def lookup(self, name: str) -> Optional['Scope']:
        """
        Find the scope that binds a name, searching outwards.

        Args:
            name: Identifier name

        Returns:
            The binding scope, or None if the name is global
        """
        scope = self
        while scope is not None:
            if name in scope.bindings:
                return scope
            scope = scope.parent
        return None

    def has_binding(self, name: str) -> bool:
        return self.lookup(name) is not None

    @property
    def function_scope(self) -> 'Scope':
        """Get the nearest scope that receives `var` declarations."""
        scope = self
        while scope.kind not in ('function', 'program'):
            scope = scope.parent
        return scope


@dataclass
class Reference:
    """A variable read found in the program."""
    name: str
    node: Node
    scope: Scope


class ScopeAnalyzer(ScopeQuery):
    """Collects scopes, declarations, references and assignments of a program."""

    def __init__(self, root: Node):
        """
        Analyze a program.

        Args:
            root: tree-sitter `program` node
        """
        self.root = root
        self.program_scope = Scope('program', root)
        self.references: List[Reference] = []
        self.assignments: List[Tuple[Node, Scope]] = []
        self._scopes: Dict[Tuple[int, int, str], Scope] = {
            TreeSitterHelper.node_key(root): self.program_scope
        }
        self._globals: Dict[str, List[Reference]] = {}

        for child in root.named_children:
            self._visit(child, self.program_scope)

        # Declarations are visible throughout their scope, so references are
        # resolved only once every scope is complete.
        for reference in self.references:
            if not reference.scope.has_binding(reference.name):
                self._globals.setdefault(reference.name, []).append(reference)

    # ScopeQuery

    def has_binding(self, name: str, node: Node) -> bool:
        return self.scope_for(node).has_binding(name)

    def has_global(self, name: str) -> bool:
        return name in self._globals

    def iter_assignments(self) -> Iterator[Node]:
        for node, _ in self.assignments:
            yield node

    def first_global_reference(self, name: str) -> Optional[Node]:
        references = self._globals.get(name)
        if not references:
            return None
        return min(references, key=lambda r: r.node.start_byte).node

    # Queries

    @property
    def global_names(self) -> List[str]:
        """Get every name read as a free global, in order of first reference."""
        return list(self._globals)

    def scope_for(self, node: Node) -> Scope:
        """
        Get the innermost scope enclosing a node.

        Args:
            node: Any node of the analyzed tree

        Returns:
            The scope owned by the nearest scope-creating ancestor
        """
        current = node
        while current is not None:
            scope = self._scopes.get(TreeSitterHelper.node_key(current))
            if scope is not None:
                return scope
            current = current.parent
        return self.program_scope

    # Traversal

    def _push(self, kind: str, node: Node, parent: Scope) -> Scope:
        scope = Scope(kind, node, parent)
        self._scopes[TreeSitterHelper.node_key(node)] = scope
        return scope

    def _visit(self, node: Node, scope: Scope) -> None:
        handler = getattr(self, f'_visit_{node.type}', None)
        if handler is not None:
            handler(node, scope)
            return

        if node.type in REFERENCE_TYPES:
            self.references.append(Reference(TreeSitterHelper.node_text(node), node, scope))
            return

        for child in node.named_children:
            self._visit(child, scope)

    def _visit_children(self, node: Node, scope: Scope, skip: Optional[Node] = None) -> None:
        for child in node.named_children:
            if not TreeSitterHelper.same_node(child, skip):
                self._visit(child, scope)

    def _declare_pattern(self, node: Node, scope: Scope) -> None:
        """Declare every name bound by a declaration pattern in a scope."""
        kind = node.type

        if kind in ('identifier', 'shorthand_property_identifier_pattern'):
            scope.declare(TreeSitterHelper.node_text(node), node)
        elif kind in ('assignment_pattern', 'object_assignment_pattern'):
            left = node.child_by_field_name('left')
            right = node.child_by_field_name('right')
            if left is not None:
                self._declare_pattern(left, scope)
            if right is not None:
                self._visit(right, scope)
        elif kind == 'pair_pattern':
            key = node.child_by_field_name('key')
            value = node.child_by_field_name('value')
            if key is not None and key.type == 'computed_property_name':
                self._visit(key, scope)
            if value is not None:
                self._declare_pattern(value, scope)
        elif kind in ('array_pattern', 'object_pattern', 'rest_pattern'):
            for child in node.named_children:
                self._declare_pattern(child, scope)
        else:
            self._visit(node, scope)

    # Imports and exports

    def _visit_import_statement(self, node: Node, scope: Scope) -> None:
        for clause in node.named_children:
            if clause.type != 'import_clause':
                continue
            for child in clause.named_children:
                if child.type == 'identifier':
                    self.program_scope.declare(TreeSitterHelper.node_text(child), child)
                elif child.type == 'namespace_import':
                    for name in child.named_children:
                        if name.type == 'identifier':
                            self.program_scope.declare(TreeSitterHelper.node_text(name), name)
                elif child.type == 'named_imports':
                    for spec in child.named_children:
                        if spec.type != 'import_specifier':
                            continue
                        local = spec.child_by_field_name('alias')
                        if local is None:
                            local = spec.child_by_field_name('name')
                        self.program_scope.declare(TreeSitterHelper.node_text(local), local)

    def _visit_export_statement(self, node: Node, scope: Scope) -> None:
        if node.child_by_field_name('source') is not None:
            return

        for child in node.named_children:
            if child.type == 'export_clause':
                for spec in child.named_children:
                    if spec.type != 'export_specifier':
                        continue
                    name = spec.child_by_field_name('name')
                    if name is not None and name.type == 'identifier':
                        self._visit(name, scope)
            else:
                self._visit(child, scope)

    # Declarations

    def _visit_lexical_declaration(self, node: Node, scope: Scope) -> None:
        self._visit_declarators(node, scope)

    def _visit_variable_declaration(self, node: Node, scope: Scope) -> None:
        self._visit_declarators(node, scope.function_scope, value_scope=scope)

    def _visit_declarators(self, node: Node, target: Scope, value_scope: Optional[Scope] = None) -> None:
        value_scope = value_scope or target
        for declarator in node.named_children:
            if declarator.type != 'variable_declarator':
                continue
            name = declarator.child_by_field_name('name')
            value = declarator.child_by_field_name('value')
            if name is not None:
                self._declare_pattern(name, target)
            if value is not None:
                self._visit(value, value_scope)

    def _visit_function_declaration(self, node: Node, scope: Scope) -> None:
        name = node.child_by_field_name('name')
        if name is not None:
            scope.declare(TreeSitterHelper.node_text(name), name)
        self._enter_function(node, scope, bind_own_name=False)

    _visit_generator_function_declaration = _visit_function_declaration

    def _visit_function_expression(self, node: Node, scope: Scope) -> None:
        self._enter_function(node, scope, bind_own_name=True)

    _visit_function = _visit_function_expression
    _visit_generator_function = _visit_function_expression

    def _visit_arrow_function(self, node: Node, scope: Scope) -> None:
        self._enter_function(node, scope, bind_own_name=False, arrow=True)

    def _visit_method_definition(self, node: Node, scope: Scope) -> None:
        self._enter_function(node, scope, bind_own_name=False)

    def _enter_function(self, node: Node, scope: Scope, bind_own_name: bool, arrow: bool = False) -> None:
        """Open a function scope, declare its parameters and walk its body."""
        function_scope = self._push('function', node, scope)
        if not arrow:
            function_scope.declare('arguments', node)

        name = node.child_by_field_name('name')
        parameters = node.child_by_field_name('parameters')
        parameter = node.child_by_field_name('parameter')
        body = node.child_by_field_name('body')

        for child in node.named_children:
            if TreeSitterHelper.same_node(child, name):
                if bind_own_name:
                    function_scope.declare(TreeSitterHelper.node_text(child), child)
                elif child.type == 'computed_property_name':
                    self._visit(child, scope)
            elif TreeSitterHelper.same_node(child, parameters):
                for param in child.named_children:
                    self._declare_pattern(param, function_scope)
            elif TreeSitterHelper.same_node(child, parameter):
                self._declare_pattern(child, function_scope)
            elif TreeSitterHelper.same_node(child, body):
                if child.type == 'statement_block':
                    self._visit_children(child, function_scope)
                else:
                    self._visit(child, function_scope)
            else:
                # decorators
                self._visit(child, scope)

    def _visit_class_declaration(self, node: Node, scope: Scope) -> None:
        name = node.child_by_field_name('name')
        if name is not None:
            scope.declare(TreeSitterHelper.node_text(name), name)
        self._enter_class(node, scope)

    def _visit_class(self, node: Node, scope: Scope) -> None:
        self._enter_class(node, scope)

    def _enter_class(self, node: Node, scope: Scope) -> None:
        class_scope = self._push('class', node, scope)
        name = node.child_by_field_name('name')
        if name is not None:
            class_scope.declare(TreeSitterHelper.node_text(name), name)
        self._visit_children(node, class_scope, skip=name)

    # Blocks

    def _visit_statement_block(self, node: Node, scope: Scope) -> None:
        self._visit_children(node, self._push('block', node, scope))

    def _visit_switch_body(self, node: Node, scope: Scope) -> None:
        self._visit_children(node, self._push('block', node, scope))

    def _visit_class_static_block(self, node: Node, scope: Scope) -> None:
        self._visit_children(node, self._push('function', node, scope))

    def _visit_for_statement(self, node: Node, scope: Scope) -> None:
        self._visit_children(node, self._push('loop', node, scope))

    def _visit_for_in_statement(self, node: Node, scope: Scope) -> None:
        loop_scope = self._push('loop', node, scope)
        left = node.child_by_field_name('left')

        kind = None
        for child in node.children:
            if child.type in ('var', 'let', 'const'):
                kind = child.type
                break

        if left is not None and kind is not None:
            target = loop_scope.function_scope if kind == 'var' else loop_scope
            self._declare_pattern(left, target)
            self._visit_children(node, loop_scope, skip=left)
        else:
            self._visit_children(node, loop_scope)

    def _visit_catch_clause(self, node: Node, scope: Scope) -> None:
        catch_scope = self._push('catch', node, scope)
        parameter = node.child_by_field_name('parameter')
        if parameter is not None:
            self._declare_pattern(parameter, catch_scope)
        self._visit_children(node, catch_scope, skip=parameter)

    # Expressions

    def _visit_assignment_expression(self, node: Node, scope: Scope) -> None:
        self.assignments.append((node, scope))
        self._visit_children(node, scope)

    _visit_augmented_assignment_expression = _visit_assignment_expression

    def _visit_jsx_opening_element(self, node: Node, scope: Scope) -> None:
        self._visit_children(node, scope, skip=node.child_by_field_name('name'))

    _visit_jsx_closing_element = _visit_jsx_opening_element
    _visit_jsx_self_closing_element = _visit_jsx_opening_element
