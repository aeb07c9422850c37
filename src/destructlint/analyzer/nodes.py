"""Shared tree-sitter node helpers for JavaScript/TypeScript syntax trees.

Node type names follow tree-sitter-javascript and tree-sitter-typescript.
Older grammar releases named function expressions 'function'; both spellings
are accepted.
"""
from typing import Iterator, Optional
from tree_sitter import Node


FUNCTION_TYPES = frozenset({
    'function_declaration',
    'generator_function_declaration',
    'function_expression',
    'function',
    'generator_function',
    'arrow_function',
    'method_definition',
})

CLASS_TYPES = frozenset({'class_declaration', 'class', 'abstract_class_declaration'})

# JS grammar: field_definition. TS grammar: public_field_definition.
CLASS_FIELD_TYPES = frozenset({'field_definition', 'public_field_definition'})

MEMBER_TYPES = frozenset({'member_expression', 'subscript_expression'})

JSX_TYPES = frozenset({'jsx_element', 'jsx_self_closing_element', 'jsx_fragment'})

DECLARATION_STATEMENT_TYPES = frozenset({'lexical_declaration', 'variable_declaration'})

# TypeScript wraps each parameter in one of these
TS_PARAMETER_TYPES = frozenset({'required_parameter', 'optional_parameter'})


def node_text(node: Optional[Node]) -> str:
    """Decode a node's source text, or '' for a missing node."""
    if node is None or node.text is None:
        return ''
    return node.text.decode('utf-8')


def unwrap_parens(node: Optional[Node]) -> Optional[Node]:
    """Strip any parenthesized_expression wrappers around an expression."""
    while node is not None and node.type == 'parenthesized_expression':
        inner = [child for child in node.named_children if child.type != 'comment']
        if not inner:
            return node
        node = inner[0]
    return node


def skip_parens_upward(node: Node) -> Optional[Node]:
    """Return the first ancestor of node that is not a parenthesized_expression."""
    parent = node.parent
    while parent is not None and parent.type == 'parenthesized_expression':
        parent = parent.parent
    return parent


def ancestors(node: Node) -> Iterator[Node]:
    """Yield node's ancestors from the parent up to the root."""
    current = node.parent
    while current is not None:
        yield current
        current = current.parent


def function_parameters(node: Node) -> list[Node]:
    """Return the formal parameter nodes of a function-like node, in order.

    Arrow functions with a single bare parameter expose it through the
    'parameter' field instead of a formal_parameters list.
    """
    single = node.child_by_field_name('parameter')
    if single is not None:
        return [single]
    params = node.child_by_field_name('parameters')
    if params is None:
        return []
    return [child for child in params.named_children if child.type != 'comment']


def parameter_pattern(param: Node) -> Node:
    """Return the binding pattern of a parameter, looking through TS wrappers.

    A TypeScript parameter with a default value is treated as an assignment
    pattern: the wrapper itself is returned so it is neither a plain
    identifier nor an object pattern.
    """
    if param.type in TS_PARAMETER_TYPES:
        if param.child_by_field_name('value') is not None:
            return param
        pattern = param.child_by_field_name('pattern')
        if pattern is not None:
            return pattern
    return param


def function_body(node: Node) -> Optional[Node]:
    return node.child_by_field_name('body')


def function_name(node: Node) -> Optional[str]:
    name = node.child_by_field_name('name')
    if name is None:
        return None
    return node_text(name)


def is_capitalized(name: Optional[str]) -> bool:
    """True when the first letter of name (after leading underscores) is uppercase."""
    if not name:
        return False
    stripped = name.lstrip('_$')
    return bool(stripped) and stripped[0].isupper()


def member_object(node: Node) -> Optional[Node]:
    return node.child_by_field_name('object')


def member_property_name(node: Node) -> Optional[str]:
    """Name of a non-computed member access property, e.g. 'x' in a.x."""
    if node.type != 'member_expression':
        return None
    prop = node.child_by_field_name('property')
    if prop is None or prop.type not in ('property_identifier', 'identifier'):
        return None
    return node_text(prop)


def identifier_name(node: Optional[Node]) -> Optional[str]:
    """Name of a plain identifier node, else None."""
    node = unwrap_parens(node)
    if node is None or node.type != 'identifier':
        return None
    return node_text(node)


def is_this_member(node: Optional[Node], names: frozenset) -> Optional[str]:
    """If node is this.<name> with name in names, return that name."""
    if node is None or node.type != 'member_expression':
        return None
    obj = member_object(node)
    if obj is None or obj.type != 'this':
        return None
    prop = member_property_name(node)
    if prop in names:
        return prop
    return None


def is_assignment_lhs(node: Node) -> bool:
    """True when node is written to rather than read.

    Covers the left side of plain and compound assignments and the operand of
    ++/--.
    """
    parent = node.parent
    if parent is None:
        return False
    if parent.type in ('assignment_expression', 'augmented_assignment_expression'):
        left = parent.child_by_field_name('left')
        return left is not None and left.id == node.id
    if parent.type == 'update_expression':
        argument = parent.child_by_field_name('argument')
        return argument is not None and argument.id == node.id
    return False


def in_class_field(node: Node) -> bool:
    """True when any ancestor of node is a class field definition."""
    return any(parent.type in CLASS_FIELD_TYPES for parent in ancestors(node))


def call_callee_name(node: Optional[Node]) -> Optional[str]:
    """Dotted callee text of a call_expression (e.g. 'React.memo'), else None."""
    node = unwrap_parens(node)
    if node is None or node.type != 'call_expression':
        return None
    callee = node.child_by_field_name('function')
    if callee is None or callee.type not in ('identifier', 'member_expression'):
        return None
    return node_text(callee)


def enclosing_statement(node: Node) -> Optional[Node]:
    """Return the declaration statement that owns a variable_declarator."""
    parent = node.parent
    if parent is not None and parent.type in DECLARATION_STATEMENT_TYPES:
        return parent
    return None
