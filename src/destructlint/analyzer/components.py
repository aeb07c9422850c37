"""React component detection for JavaScript/TypeScript syntax trees.

Walks a tree once and registers every node that defines a component:

- class-style: ES6 classes extending Component/PureComponent, and object
  literals passed to createReactClass
- function-style: functions returning JSX or null that sit in a component position
  (capitalized declaration or binding, default export, module.exports,
  memo/forwardRef argument)
"""
from dataclasses import dataclass
from typing import Dict, List, Optional
from tree_sitter import Node, Tree

from .nodes import (
    CLASS_TYPES,
    FUNCTION_TYPES,
    JSX_TYPES,
    ancestors,
    call_callee_name,
    function_body,
    function_name,
    is_capitalized,
    node_text,
    skip_parens_upward,
    unwrap_parens,
)


CLASS_STYLE = 'class'
FUNCTION_STYLE = 'function'

COMPONENT_WRAPPERS = ('memo', 'forwardRef')
CLASS_FACTORIES = ('createReactClass',)


@dataclass(eq=False)
class Component:
    """A detected component definition."""
    node: Node
    style: str
    name: Optional[str] = None

    @property
    def is_class(self) -> bool:
        return self.style == CLASS_STYLE

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1


class ComponentRegistry:
    """Lookup of detected components keyed by their defining node.

    The rule only consumes get() and parent_component(); detection itself is
    done once in the constructor.
    """

    def __init__(self, tree: Tree | Node, pragma: str = 'React'):
        """Detect components in tree.

        Args:
            tree: Parsed tree-sitter Tree, or its root node
            pragma: Name of the React namespace object (e.g. 'React', 'Preact')
        """
        root = tree.root_node if isinstance(tree, Tree) else tree
        self.pragma = pragma
        self._components: Dict[int, Component] = {}
        self._detect(root)

    def __len__(self) -> int:
        return len(self._components)

    def all(self) -> List[Component]:
        return sorted(self._components.values(), key=lambda c: c.node.start_byte)

    def get(self, node: Optional[Node]) -> Optional[Component]:
        """Return the component defined by node, if node defines one."""
        if node is None:
            return None
        return self._components.get(node.id)

    def parent_component(self, node: Node) -> Optional[Component]:
        """Nearest enclosing class-style component, else nearest function-style one."""
        function_component = None
        for parent in ancestors(node):
            component = self._components.get(parent.id)
            if component is None:
                continue
            if component.is_class:
                return component
            if function_component is None:
                function_component = component
        return function_component

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def _register(self, node: Node, style: str, name: Optional[str] = None):
        self._components[node.id] = Component(node=node, style=style, name=name)

    def _detect(self, root: Node):
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type in CLASS_TYPES and self._is_class_component(node):
                self._register(node, CLASS_STYLE, function_name(node))
            elif node.type == 'call_expression':
                component_object = self._create_class_argument(node)
                if component_object is not None:
                    self._register(component_object, CLASS_STYLE, self._binding_name(node))
            elif node.type in FUNCTION_TYPES and self._is_function_component(node):
                self._register(node, FUNCTION_STYLE, function_name(node) or self._binding_name(node))
            stack.extend(reversed(node.children))

    def _qualified(self, names) -> set:
        qualified = set(names)
        qualified.update(f"{self.pragma}.{name}" for name in names)
        return qualified

    def _is_class_component(self, node: Node) -> bool:
        heritage = next((child for child in node.children if child.type == 'class_heritage'), None)
        if heritage is None:
            return False

        # TS wraps the superclass in an extends_clause
        extends = next((child for child in heritage.named_children if child.type == 'extends_clause'), None)
        if extends is not None:
            superclass = extends.child_by_field_name('value')
        else:
            superclass = next(iter(heritage.named_children), None)

        return node_text(superclass) in self._qualified(('Component', 'PureComponent'))

    def _create_class_argument(self, node: Node) -> Optional[Node]:
        """Object literal passed to createReactClass(...), if node is such a call."""
        callee = call_callee_name(node)
        if callee not in self._qualified(CLASS_FACTORIES) | {f"{self.pragma}.createClass"}:
            return None
        arguments = node.child_by_field_name('arguments')
        if arguments is None:
            return None
        first = next((child for child in arguments.named_children if child.type != 'comment'), None)
        if first is None or first.type != 'object':
            return None
        return first

    def _binding_name(self, node: Node) -> Optional[str]:
        """Name of the variable or assignment target that receives node, through wrappers."""
        current = node
        parent = skip_parens_upward(current)
        while parent is not None and parent.type == 'arguments':
            call = parent.parent
            if call is None or call.type != 'call_expression':
                return None
            current = call
            parent = skip_parens_upward(current)
        if parent is None:
            return None
        if parent.type == 'variable_declarator':
            name = parent.child_by_field_name('name')
            if name is not None and name.type == 'identifier':
                return node_text(name)
        if parent.type == 'assignment_expression':
            return node_text(parent.child_by_field_name('left')).split('.')[-1]
        return None

    def _is_function_component(self, node: Node) -> bool:
        if node.type == 'method_definition':
            return False
        if not returns_jsx(node):
            return False

        if node.type in ('function_declaration', 'generator_function_declaration'):
            return is_capitalized(function_name(node))

        parent = skip_parens_upward(node)
        if parent is None:
            return False

        if parent.type == 'variable_declarator':
            return is_capitalized(self._binding_name(node))
        if parent.type == 'arguments':
            return call_callee_name(parent.parent) in self._qualified(COMPONENT_WRAPPERS)
        if parent.type == 'export_statement':
            return True
        if parent.type == 'assignment_expression':
            target = node_text(parent.child_by_field_name('left'))
            return target == 'module.exports' or is_capitalized(target.split('.')[-1])

        # Named function expressions anywhere else, e.g. returned from a HOC
        return is_capitalized(function_name(node))


def returns_jsx(node: Node) -> bool:
    """True when the function returns JSX or null from its own body.

    Nested functions and classes are not searched.
    """
    body = function_body(node)
    if body is None:
        return False
    if body.type != 'statement_block':
        # Arrow function with an expression body
        return is_jsx(body)

    stack = list(body.named_children)
    while stack:
        current = stack.pop()
        if current.type == 'return_statement':
            value = next((child for child in current.named_children if child.type != 'comment'), None)
            if is_jsx(value):
                return True
            continue
        if current.type in FUNCTION_TYPES or current.type in CLASS_TYPES:
            continue
        stack.extend(current.named_children)
    return False


def is_jsx(node: Optional[Node]) -> bool:
    """True when an expression evaluates to JSX or null on some branch."""
    node = unwrap_parens(node)
    if node is None:
        return False
    if node.type in JSX_TYPES or node.type == 'null':
        return True
    if node.type == 'call_expression':
        # React.createElement(...) and bare createElement(...)
        callee = call_callee_name(node)
        return callee is not None and callee.split('.')[-1] == 'createElement'
    if node.type == 'sequence_expression':
        return is_jsx(node.named_children[-1] if node.named_children else None)
    if node.type == 'ternary_expression':
        return (is_jsx(node.child_by_field_name('consequence'))
                or is_jsx(node.child_by_field_name('alternative')))
    if node.type == 'binary_expression':
        operator = node_text(node.child_by_field_name('operator'))
        if operator == '&&':
            return is_jsx(node.child_by_field_name('right'))
        if operator in ('||', '??'):
            return (is_jsx(node.child_by_field_name('left'))
                    or is_jsx(node.child_by_field_name('right')))
    return False
