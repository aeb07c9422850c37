"""Document-order traversal that turns a syntax tree into rule events.

Only the node kinds rules care about are surfaced, each as its own event
type, so a rule dispatches with a plain match over a closed set.
"""
from dataclasses import dataclass, field
from typing import Iterator, List, Union
from tree_sitter import Node, Tree

from ..config import RuleOptions
from .components import ComponentRegistry
from .nodes import FUNCTION_TYPES, MEMBER_TYPES
from .scope import ScopeManager, in_jsx_name


@dataclass(frozen=True)
class FunctionEnter:
    node: Node


@dataclass(frozen=True)
class FunctionExit:
    node: Node


@dataclass(frozen=True)
class MemberAccess:
    node: Node


@dataclass(frozen=True)
class Declarator:
    node: Node


Event = Union[FunctionEnter, FunctionExit, MemberAccess, Declarator]


def iter_events(tree: Tree | Node) -> Iterator[Event]:
    """Yield events in depth-first order: enter events pre-order, exits post-order."""
    root = tree.root_node if isinstance(tree, Tree) else tree
    # (node, exiting) pairs; a function is pushed again to emit its exit
    stack = [(root, False)]

    while stack:
        node, exiting = stack.pop()
        if exiting:
            yield FunctionExit(node)
            continue

        kind = node.type
        if kind in FUNCTION_TYPES:
            yield FunctionEnter(node)
            stack.append((node, True))
        elif kind in MEMBER_TYPES:
            # <props.Foo /> is a JSX tag name, not a property read
            if not in_jsx_name(node):
                yield MemberAccess(node)
        elif kind == 'variable_declarator':
            yield Declarator(node)

        stack.extend((child, False) for child in reversed(node.children))


@dataclass
class RuleContext:
    """Everything a rule may consult while linting one file.

    Created fresh per file; nothing here outlives a single traversal.
    """
    source: bytes
    tree: Tree
    options: RuleOptions
    scope_manager: ScopeManager
    components: ComponentRegistry
    filename: str = '<input>'
    violations: List = field(default_factory=list)

    @classmethod
    def for_tree(cls, source: bytes, tree: Tree, options: RuleOptions,
                 filename: str = '<input>') -> 'RuleContext':
        return cls(
            source=source,
            tree=tree,
            options=options,
            scope_manager=ScopeManager(tree),
            components=ComponentRegistry(tree, pragma=options.pragma),
            filename=filename,
        )

    def report(self, violation):
        self.violations.append(violation)
