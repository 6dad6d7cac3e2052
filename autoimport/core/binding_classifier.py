"""
Binding Classifier for JavaScript Auto Import.
Lists the simple names written to by an assignment target.
"""

from typing import Iterator

from tree_sitter import Node

from autoimport.utils.ts_utils import TreeSitterHelper


NAME_TYPES = {
    'identifier',
    'shorthand_property_identifier',
    'shorthand_property_identifier_pattern',
}

# Destructuring targets may reach us as patterns or, depending on how the
# parser resolved the ambiguity, as the equivalent literal expressions.
ARRAY_TARGET_TYPES = {'array_pattern', 'array'}
OBJECT_TARGET_TYPES = {'object_pattern', 'object'}
REST_TYPES = {'rest_pattern', 'spread_element'}


def iter_bound_names(target: Node) -> Iterator[str]:
    """
    Yield every simple name an assignment target writes to.

    Member expressions, literals and unknown shapes bind nothing.

    Args:
        target: Left-hand side of an assignment

    Yields:
        Identifier names, in source order
    """
    kind = target.type

    if kind in NAME_TYPES:
        yield TreeSitterHelper.node_text(target)

    elif kind == 'parenthesized_expression':
        for child in target.named_children:
            if child.type != 'comment':
                yield from iter_bound_names(child)

    elif kind in REST_TYPES:
        for child in target.named_children:
            yield from iter_bound_names(child)

    elif kind in ('assignment_pattern', 'object_assignment_pattern', 'assignment_expression'):
        left = target.child_by_field_name('left')
        if left is not None:
            yield from iter_bound_names(left)

    elif kind in ARRAY_TARGET_TYPES:
        # elided slots are bare commas and never show up as named children
        for element in target.named_children:
            yield from iter_bound_names(element)

    elif kind in OBJECT_TARGET_TYPES:
        for prop in target.named_children:
            if prop.type in ('pair_pattern', 'pair'):
                value = prop.child_by_field_name('value')
                if value is not None:
                    yield from iter_bound_names(value)
            else:
                yield from iter_bound_names(prop)


class BoundNames:
    """Restartable view of the names bound by an assignment target."""

    def __init__(self, target: Node):
        self.target = target

    def __iter__(self) -> Iterator[str]:
        return iter_bound_names(self.target)
