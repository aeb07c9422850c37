"""Lexical scope analysis over tree-sitter JavaScript/TypeScript trees.

Builds the scope tree, variables and resolved references for one syntax tree,
modelled on ESLint scope analysis:

- module, function, class, class-field-initializer, block, for, switch and
  catch scopes; a function body does not open its own block scope
- `var` is hoisted to the nearest function/module scope, `let`/`const`/class/
  function declarations bind in the innermost scope
- every identifier in read or write position is resolved to the nearest scope
  that declares it; a declarator with an initializer and a parameter with a
  default value count as write references of their bindings
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from tree_sitter import Node, Tree

from .nodes import (
    CLASS_FIELD_TYPES,
    CLASS_TYPES,
    FUNCTION_TYPES,
    TS_PARAMETER_TYPES,
    ancestors,
    function_parameters,
    node_text,
)


REFERENCE_TYPES = frozenset({
    'identifier',
    'shorthand_property_identifier',
    'shorthand_property_identifier_pattern',
})

JSX_NAME_PARENTS = frozenset({
    'jsx_opening_element',
    'jsx_closing_element',
    'jsx_self_closing_element',
})


@dataclass(eq=False)
class Reference:
    """One read or write of a name."""
    identifier: Node
    scope: 'Scope'
    is_write: bool = False


@dataclass(eq=False)
class Variable:
    """A name bound in a scope, with every reference that resolves to it."""
    name: str
    scope: 'Scope'
    identifiers: List[Node] = field(default_factory=list)
    references: List[Reference] = field(default_factory=list)


class Scope:
    """A lexical scope. `block` is the node that opened it."""

    def __init__(self, scope_type: str, block: Node, upper: Optional['Scope']):
        self.type = scope_type
        self.block = block
        self.upper = upper
        self.variables: Dict[str, Variable] = {}

    @property
    def set(self) -> Dict[str, Variable]:
        return self.variables

    @property
    def is_variable_scope(self) -> bool:
        """True for scopes that receive hoisted `var` bindings."""
        return self.type in ('function', 'module')

    def declare(self, name: str, identifier: Node) -> Variable:
        variable = self.variables.get(name)
        if variable is None:
            variable = Variable(name=name, scope=self)
            self.variables[name] = variable
        variable.identifiers.append(identifier)
        return variable

    def resolve(self, name: str) -> Optional[Variable]:
        scope = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.upper
        return None

    def variable_scope(self) -> 'Scope':
        scope = self
        while scope.upper is not None and not scope.is_variable_scope:
            scope = scope.upper
        return scope

    def __repr__(self) -> str:
        return f"Scope({self.type}, {self.block.type}@{self.block.start_point[0] + 1})"


def binding_identifiers(pattern: Optional[Node]) -> List[Node]:
    """Collect the identifier nodes a binding pattern introduces.

    Handles plain identifiers, object/array patterns, defaults, rest elements
    and TypeScript parameter wrappers. Default-value expressions are not
    bindings and are left to reference collection.
    """
    if pattern is None:
        return []

    kind = pattern.type
    if kind in ('identifier', 'shorthand_property_identifier_pattern'):
        return [pattern]
    if kind in TS_PARAMETER_TYPES:
        return binding_identifiers(pattern.child_by_field_name('pattern'))
    if kind in ('assignment_pattern', 'object_assignment_pattern'):
        return binding_identifiers(pattern.child_by_field_name('left'))
    if kind == 'pair_pattern':
        return binding_identifiers(pattern.child_by_field_name('value'))
    if kind in ('object_pattern', 'array_pattern', 'rest_pattern'):
        found = []
        for child in pattern.named_children:
            found.extend(binding_identifiers(child))
        return found
    return []


def _has_default(param: Node) -> bool:
    if param.type == 'assignment_pattern':
        return True
    return param.type in TS_PARAMETER_TYPES and param.child_by_field_name('value') is not None


def in_jsx_name(node: Node) -> bool:
    """True when node is (part of) a JSX tag name such as <Foo.Bar>."""
    current = node
    for parent in ancestors(node):
        if parent.type in JSX_NAME_PARENTS:
            name = parent.child_by_field_name('name')
            return name is not None and name.id == current.id
        if parent.type not in ('member_expression', 'nested_identifier'):
            return False
        current = parent
    return False


class ScopeManager:
    """Scope tree, variables and references for one syntax tree."""

    def __init__(self, tree: Tree | Node):
        """Analyze the tree eagerly.

        Args:
            tree: Parsed tree-sitter Tree, or its root node
        """
        root = tree.root_node if isinstance(tree, Tree) else tree
        self._scopes: Dict[int, Scope] = {}
        self._declared_ids: set[int] = set()
        self._candidates: List[Tuple[Node, Scope]] = []
        self.global_scope = self._open(root, 'module', None)
        self._analyze(root)
        self._resolve_references()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def scopes(self) -> List[Scope]:
        return list(self._scopes.values())

    def acquire(self, node: Node) -> Optional[Scope]:
        """Return the scope opened by node, if any."""
        return self._scopes.get(node.id)

    def scope_of(self, node: Node) -> Scope:
        """Innermost scope whose block is node or one of its ancestors."""
        scope = self.acquire(node)
        if scope is not None:
            return scope
        for parent in ancestors(node):
            scope = self.acquire(parent)
            if scope is not None:
                return scope
        return self.global_scope

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _open(self, block: Node, scope_type: str, upper: Optional[Scope]) -> Scope:
        scope = Scope(scope_type, block, upper)
        self._scopes[block.id] = scope
        return scope

    def _scope_type_for(self, node: Node) -> Optional[str]:
        """Scope kind opened by node, or None."""
        kind = node.type
        parent = node.parent
        if kind in FUNCTION_TYPES:
            return 'function'
        if kind in CLASS_TYPES:
            return 'class'
        if parent is not None and parent.type in CLASS_FIELD_TYPES:
            value = parent.child_by_field_name('value')
            if value is not None and value.id == node.id:
                return 'class-field-initializer'
        if kind == 'statement_block':
            # Function bodies share the function scope
            if parent is not None and parent.type in FUNCTION_TYPES:
                return None
            return 'block'
        if kind == 'class_static_block':
            return 'block'
        if kind == 'switch_statement':
            return 'switch'
        if kind == 'catch_clause':
            return 'catch'
        if kind == 'for_statement':
            initializer = node.child_by_field_name('initializer')
            if initializer is not None and initializer.type == 'lexical_declaration':
                return 'for'
            return None
        if kind == 'for_in_statement':
            if node_text(node.child_by_field_name('kind')) in ('let', 'const'):
                return 'for'
            return None
        return None

    def _analyze(self, root: Node):
        """Single iterative pre-order pass: open scopes and record bindings."""
        stack: List[Tuple[Node, Scope]] = [(child, self.global_scope) for child in reversed(root.children)]

        while stack:
            node, scope = stack.pop()
            outer = scope

            scope_type = self._scope_type_for(node)
            if scope_type is not None:
                scope = self._open(node, scope_type, outer)

            self._record_declarations(node, outer, scope)

            if node.type in REFERENCE_TYPES:
                self._candidates.append((node, scope))

            if node.type == 'import_statement':
                # Imported names are bindings only
                continue

            stack.extend((child, scope) for child in reversed(node.children))

    def _declare_all(self, scope: Scope, identifiers: List[Node], write: bool = False):
        for identifier in identifiers:
            self._declared_ids.add(identifier.id)
            variable = scope.declare(node_text(identifier), identifier)
            if write:
                variable.references.append(Reference(identifier, scope, is_write=True))

    def _record_declarations(self, node: Node, outer: Scope, scope: Scope):
        """Bind the names node introduces.

        Args:
            node: Node being visited
            outer: Scope enclosing node
            scope: Scope opened by node, or outer if it opens none
        """
        kind = node.type

        if kind == 'variable_declarator':
            statement = node.parent
            target = outer
            if statement is not None and statement.type == 'variable_declaration':
                target = outer.variable_scope()
            has_init = node.child_by_field_name('value') is not None
            self._declare_all(target, binding_identifiers(node.child_by_field_name('name')), write=has_init)

        elif kind in FUNCTION_TYPES:
            name = node.child_by_field_name('name')
            if name is not None and name.type == 'identifier':
                if kind in ('function_declaration', 'generator_function_declaration'):
                    self._declare_all(outer, [name])
                elif kind != 'method_definition':
                    # Named function expressions see their own name
                    self._declare_all(scope, [name])
            for param in function_parameters(node):
                self._declare_all(scope, binding_identifiers(param), write=_has_default(param))

        elif kind in CLASS_TYPES:
            name = node.child_by_field_name('name')
            if name is not None and name.type in ('identifier', 'type_identifier'):
                if kind != 'class':
                    self._declare_all(outer, [name])
                self._declare_all(scope, [name])

        elif kind == 'catch_clause':
            self._declare_all(scope, binding_identifiers(node.child_by_field_name('parameter')))

        elif kind == 'for_in_statement':
            declared_kind = node_text(node.child_by_field_name('kind'))
            left = node.child_by_field_name('left')
            if declared_kind == 'var':
                self._declare_all(outer.variable_scope(), binding_identifiers(left), write=True)
            elif declared_kind in ('let', 'const'):
                self._declare_all(scope, binding_identifiers(left), write=True)

        elif kind == 'import_statement':
            self._declare_imports(node)

    def _declare_imports(self, node: Node):
        clause = next((child for child in node.named_children if child.type == 'import_clause'), None)
        if clause is None:
            return
        for child in clause.named_children:
            if child.type == 'identifier':
                self._declare_all(self.global_scope, [child])
            elif child.type == 'namespace_import':
                self._declare_all(self.global_scope,
                                  [c for c in child.named_children if c.type == 'identifier'])
            elif child.type == 'named_imports':
                for specifier in child.named_children:
                    if specifier.type != 'import_specifier':
                        continue
                    local = specifier.child_by_field_name('alias') or specifier.child_by_field_name('name')
                    if local is not None:
                        self._declare_all(self.global_scope, [local])

    def _resolve_references(self):
        """Attach every non-declaring identifier to the variable it names."""
        for identifier, scope in self._candidates:
            if identifier.id in self._declared_ids:
                continue
            parent = identifier.parent
            if parent is not None and parent.type == 'export_specifier':
                alias = parent.child_by_field_name('alias')
                if alias is not None and alias.id == identifier.id:
                    continue
            if in_jsx_name(identifier):
                continue
            variable = scope.resolve(node_text(identifier))
            if variable is None:
                continue
            variable.references.append(Reference(identifier, scope, is_write=_is_write(identifier)))


def _is_write(identifier: Node) -> bool:
    parent = identifier.parent
    if parent is None:
        return False
    if parent.type in ('assignment_expression', 'augmented_assignment_expression'):
        left = parent.child_by_field_name('left')
        return left is not None and left.id == identifier.id
    if parent.type == 'update_expression':
        return True
    return identifier.type == 'shorthand_property_identifier_pattern'
