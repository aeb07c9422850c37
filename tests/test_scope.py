"""Tests for lexical scope analysis over tree-sitter trees."""
import pytest

from destructlint.analyzer.parser import LanguageParser
from destructlint.analyzer.scope import ScopeManager


def find_all(node, node_type):
    """Collect every descendant of node with the given type, in document order."""
    found = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == node_type:
            found.append(current)
        stack.extend(reversed(current.children))
    return found


@pytest.fixture
def analyze():
    """Parse JavaScript and return (root_node, ScopeManager)."""
    parser = LanguageParser('javascript')

    def _analyze(code):
        tree = parser.parse_source(code)
        return tree.root_node, ScopeManager(tree)

    return _analyze


class TestScopeTree:
    """Which nodes open scopes and what scope_of returns."""

    def test_function_opens_scope(self, analyze):
        """A declarator in a function body belongs to the function's scope."""
        root, scopes = analyze("function Foo(props) { const { a } = props; return a; }")
        function = find_all(root, 'function_declaration')[0]
        declarator = find_all(root, 'variable_declarator')[0]

        scope = scopes.scope_of(declarator)
        assert scope.type == 'function'
        assert scope.block.id == function.id
        assert scope.upper is scopes.global_scope

    def test_function_scope_of_itself(self, analyze):
        """scope_of a function node is the scope it opens."""
        root, scopes = analyze("const f = () => 1;")
        arrow = find_all(root, 'arrow_function')[0]
        assert scopes.scope_of(arrow).block.id == arrow.id

    def test_nested_block_scope(self, analyze):
        """Blocks other than function bodies open block scopes."""
        root, scopes = analyze("function f(x) { if (x) { const y = x; } }")
        declarator = find_all(root, 'variable_declarator')[0]

        scope = scopes.scope_of(declarator)
        assert scope.type == 'block'
        assert scope.upper.type == 'function'

    def test_class_field_initializer_scope(self, analyze):
        """Class field values get their own scope inside the class scope."""
        root, scopes = analyze("class A { x = this.props.y; }")
        member = find_all(root, 'member_expression')[0]

        scope = scopes.scope_of(member)
        assert scope.type == 'class-field-initializer'
        assert scope.upper.type == 'class'


class TestVariables:
    """Bindings and the references resolved to them."""

    def test_parameter_references(self, analyze):
        """A parameter read once has exactly one reference."""
        root, scopes = analyze("function Foo(props) { const { a } = props; return a; }")
        function = find_all(root, 'function_declaration')[0]
        scope = scopes.acquire(function)

        props = scope.set['props']
        assert len(props.references) == 1
        assert props.references[0].is_write is False
        assert 'a' in scope.set

    def test_var_is_hoisted(self, analyze):
        """var inside a block binds in the function scope."""
        root, scopes = analyze("function f() { if (x) { var a = 1; } let b = 2; }")
        function = find_all(root, 'function_declaration')[0]
        scope = scopes.acquire(function)

        assert 'a' in scope.set
        assert 'b' in scope.set

    def test_let_stays_in_block(self, analyze):
        root, scopes = analyze("function f() { { let a = 1; } }")
        function = find_all(root, 'function_declaration')[0]
        assert 'a' not in scopes.acquire(function).set

    def test_shadowed_name_not_counted(self, analyze):
        """A nested function's own props parameter shadows the outer one."""
        code = "function f(props) { function g(props) { return props.x; } return props.y; }"
        root, scopes = analyze(code)
        outer = find_all(root, 'function_declaration')[0]

        assert len(scopes.acquire(outer).set['props'].references) == 1

    def test_closure_reference_counted(self, analyze):
        """Reads from nested functions resolve to the outer binding."""
        code = "function f(props) { const g = () => props.x; return props.y; }"
        root, scopes = analyze(code)
        outer = find_all(root, 'function_declaration')[0]

        assert len(scopes.acquire(outer).set['props'].references) == 2

    def test_shorthand_property_is_reference(self, analyze):
        """{ props } in an object literal reads props."""
        root, scopes = analyze("function f(props) { return { props }; }")
        outer = find_all(root, 'function_declaration')[0]

        assert len(scopes.acquire(outer).set['props'].references) == 1

    def test_initialized_declaration_is_write(self, analyze):
        """A declarator with an initializer writes its binding."""
        root, scopes = analyze("function f(p) { const props = p; return props; }")
        outer = find_all(root, 'function_declaration')[0]

        references = scopes.acquire(outer).set['props'].references
        assert [ref.is_write for ref in references] == [True, False]

    def test_default_parameter_is_write(self, analyze):
        root, scopes = analyze("function f(props = {}) { return 1; }")
        outer = find_all(root, 'function_declaration')[0]

        references = scopes.acquire(outer).set['props'].references
        assert len(references) == 1
        assert references[0].is_write

    def test_imports_bind_in_module_scope(self, analyze):
        root, scopes = analyze("import React, { useContext as use } from 'react';\nuse(React);")

        assert 'React' in scopes.global_scope.set
        assert 'use' in scopes.global_scope.set
        assert 'useContext' not in scopes.global_scope.set
        assert len(scopes.global_scope.set['use'].references) == 1
