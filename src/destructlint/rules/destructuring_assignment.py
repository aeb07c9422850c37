"""Enforce consistent usage of destructuring assignment of props, state, and context.

With mode 'always' every read of a component's props/context/state must go
through a destructured binding; with 'never' destructuring them is reported.
The rule keeps two pieces of per-file state while the tree is walked:

- SFCParams: the first two parameters of every open function component,
  innermost first, so `props.x` can be matched against whatever name the
  nearest component gave its props/context argument
- a set of local names bound to `useContext(...)` results
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional
from tree_sitter import Node

from ..analyzer.components import Component
from ..analyzer.nodes import (
    TS_PARAMETER_TYPES,
    call_callee_name,
    enclosing_statement,
    function_parameters,
    identifier_name,
    in_class_field,
    is_assignment_lhs,
    is_this_member,
    member_object,
    node_text,
    parameter_pattern,
    unwrap_parens,
)
from ..analyzer.traversal import (
    Declarator,
    Event,
    FunctionEnter,
    FunctionExit,
    MemberAccess,
    RuleContext,
    iter_events,
)
from .report import TextEdit, Violation, make_violation


RULE_NAME = 'destructuring-assignment'

MESSAGES = {
    'noDestructPropsInSFCArg': 'Must never use destructuring props assignment in SFC argument',
    'noDestructContextInSFCArg': 'Must never use destructuring context assignment in SFC argument',
    'noDestructAssignment': 'Must never use destructuring {{type}} assignment',
    'useDestructAssignment': 'Must use destructuring {{type}} assignment',
    'destructureInSignature': 'Must destructure props in the function signature.',
}

CLASS_MEMBERS = frozenset({'props', 'context', 'state'})

# useContext only exists from React 16.9 on
HOOKS_MIN_REACT_VERSION = '16.9'
USE_CONTEXT = 'useContext'


@dataclass(frozen=True)
class ParameterDescriptor:
    """How one function parameter binds its argument."""
    destructuring: bool
    name: Optional[str] = None


def eval_params(params: Iterable[Node]) -> List[ParameterDescriptor]:
    """Describe each parameter: object pattern, plain identifier, or neither."""
    descriptors = []
    for param in params:
        pattern = parameter_pattern(param)
        descriptors.append(ParameterDescriptor(
            destructuring=pattern.type == 'object_pattern',
            name=node_text(pattern) if pattern.type == 'identifier' else None,
        ))
    return descriptors


class SFCParams:
    """Stack of (props, context) parameter descriptors, innermost component first."""

    def __init__(self):
        self._frames: List[tuple] = []

    def __len__(self) -> int:
        return len(self._frames)

    def push(self, params: List[ParameterDescriptor]):
        # Only the props and context slots are tracked
        self._frames.insert(0, tuple(params[:2]))

    def pop(self):
        if self._frames:
            self._frames.pop(0)

    def _find_name(self, slot: int) -> Optional[str]:
        for frame in self._frames:
            if len(frame) > slot and not frame[slot].destructuring and frame[slot].name:
                return frame[slot].name
        return None

    def props_name(self) -> Optional[str]:
        return self._find_name(0)

    def context_name(self) -> Optional[str]:
        return self._find_name(1)


class DestructuringAssignmentRule:
    """One-file run of the destructuring-assignment rule.

    Instantiate per file: SFCParams and the useContext name set must never
    leak between files.
    """

    name = RULE_NAME
    messages = MESSAGES
    fixable = True

    def __init__(self, context: RuleContext):
        self.context = context
        self.scopes = context.scope_manager
        self.components = context.components

        options = context.options
        self.configuration = options.mode
        self.ignore_class_fields = options.ignore_class_fields
        self.destructure_in_signature = options.destructure_in_signature
        self.has_hooks = options.react_version_at_least(HOOKS_MIN_REACT_VERSION)

        self.sfc_params = SFCParams()
        # Local names holding a useContext() result
        self.context_set: set[str] = set()

    def run(self, events: Optional[Iterable[Event]] = None) -> List[Violation]:
        """Dispatch every event of the file and return the collected violations."""
        if events is None:
            events = iter_events(self.context.tree)
        for event in events:
            self.dispatch(event)
        return self.context.violations

    def dispatch(self, event: Event):
        if isinstance(event, FunctionEnter):
            self.handle_stateless_component(event.node)
        elif isinstance(event, FunctionExit):
            self.handle_stateless_component_exit(event.node)
        elif isinstance(event, MemberAccess):
            self.handle_member_access(event.node)
        elif isinstance(event, Declarator):
            self.handle_variable_declarator(event.node)
        else:
            raise TypeError(f"Unhandled event: {event!r}")

    def report(self, message_id: str, node: Node, data: Optional[dict] = None,
               fix: Optional[List[TextEdit]] = None):
        self.context.report(make_violation(
            self.name, message_id, self.messages[message_id], node, data=data, fix=fix
        ))

    # ------------------------------------------------------------------
    # Function components: entry/exit
    # ------------------------------------------------------------------

    def _component_for_scope_of(self, node: Node) -> Optional[Component]:
        return self.components.get(self.scopes.scope_of(node).block)

    def handle_stateless_component(self, node: Node):
        """Push the parameters of an entered function component."""
        param_nodes = function_parameters(node)
        params = eval_params(param_nodes)

        if not self._component_for_scope_of(node):
            return
        self.sfc_params.push(params)

        if self.configuration != 'never' or not self.components.get(node):
            return
        if params and params[0].destructuring:
            self.report('noDestructPropsInSFCArg', param_nodes[0])
        elif len(params) > 1 and params[1].destructuring:
            self.report('noDestructContextInSFCArg', param_nodes[1])

    def handle_stateless_component_exit(self, node: Node):
        if self._component_for_scope_of(node):
            self.sfc_params.pop()

    # ------------------------------------------------------------------
    # Member access: props.x, ctx.x, this.props.x
    # ------------------------------------------------------------------

    def handle_member_access(self, node: Node):
        scope = self.scopes.scope_of(node)
        sfc_component = self.components.get(scope.block)
        while not sfc_component and scope.upper is not None:
            scope = scope.upper
            sfc_component = self.components.get(scope.block)

        if sfc_component:
            self._handle_sfc_usage(node)

        self._handle_context_usage(node)

        if self.components.parent_component(node):
            self._handle_class_usage(node)

    def _handle_sfc_usage(self, node: Node):
        props_name = self.sfc_params.props_name()
        context_name = self.sfc_params.context_name()
        object_name = identifier_name(member_object(node))

        # props.aProp
        is_prop_used = (
            object_name is not None
            and object_name in (props_name, context_name)
            and not is_assignment_lhs(node)
        )
        if is_prop_used and self.configuration == 'always':
            self.report('useDestructAssignment', node, {'type': object_name})

    def _handle_context_usage(self, node: Node):
        # const foo = useContext(aContext);
        # foo.aProp
        object_name = identifier_name(member_object(node))
        is_context_used = object_name in self.context_set and not is_assignment_lhs(node)
        if is_context_used and self.configuration == 'always':
            self.report('useDestructAssignment', node, {'type': object_name})

    def _handle_class_usage(self, node: Node):
        # this.props.aProp || this.context.aProp || this.state.aState
        member = is_this_member(unwrap_parens(member_object(node)), CLASS_MEMBERS)
        if not member or is_assignment_lhs(node):
            return
        if self.configuration != 'always':
            return
        if self.ignore_class_fields and in_class_field(node):
            return
        self.report('useDestructAssignment', node, {'type': member})

    # ------------------------------------------------------------------
    # Variable declarators
    # ------------------------------------------------------------------

    def handle_variable_declarator(self, node: Node):
        class_component = self.components.parent_component(node)
        sfc_component = self._component_for_scope_of(node)

        target = node.child_by_field_name('name')
        init = unwrap_parens(node.child_by_field_name('value'))
        if target is None or init is None:
            return

        destructuring = target.type == 'object_pattern'
        identifier = target.type == 'identifier'
        use_context_call = self.has_hooks and call_callee_name(init) == USE_CONTEXT

        # let {foo} = props;
        destructuring_sfc = destructuring and identifier_name(init) == 'props'
        # let {foo} = useContext(aContext);
        destructuring_use_context = destructuring and use_context_call
        # let foo = useContext(aContext);
        assign_use_context = identifier and use_context_call
        # let {foo} = this.props;
        destructuring_class = is_this_member(init, CLASS_MEMBERS) if destructuring else None

        if sfc_component and assign_use_context:
            self.context_set.add(node_text(target))

        if self.configuration == 'never':
            if sfc_component and destructuring_use_context:
                self.report('noDestructAssignment', node, {'type': 'context'})

            if sfc_component and destructuring_sfc:
                self.report('noDestructAssignment', node, {'type': 'props'})

            if (class_component and destructuring_class
                    and not (self.ignore_class_fields and in_class_field(node))):
                self.report('noDestructAssignment', node, {'type': destructuring_class})

        if (sfc_component and destructuring_sfc
                and self.configuration == 'always'
                and self.destructure_in_signature == 'always'):
            self._check_destructure_in_signature(node, sfc_component, target)

    def _check_destructure_in_signature(self, node: Node, sfc_component: Component, pattern: Node):
        variable = self.scopes.scope_of(node).set.get('props')
        if variable is None:
            return
        # Moving the pattern would leave other uses of props dangling
        if len(variable.references) > 1:
            return
        self.report('destructureInSignature', node,
                    fix=self._signature_fix(node, sfc_component, pattern))

    def _signature_fix(self, node: Node, sfc_component: Component, pattern: Node) -> Optional[List[TextEdit]]:
        params = function_parameters(sfc_component.node)
        if not params:
            return None
        param = params[0]

        end = param.end_byte
        if param.type in TS_PARAMETER_TYPES:
            annotation = param.child_by_field_name('type')
            if annotation is not None:
                end = annotation.start_byte

        text = node_text(pattern)
        if sfc_component.node.child_by_field_name('parameter') is not None:
            # `props => ...` needs parentheses once the parameter is a pattern
            text = f"({text})"

        statement = enclosing_statement(node) or node
        return [
            TextEdit.replace_range(param.start_byte, end, text),
            TextEdit.remove(statement),
        ]
