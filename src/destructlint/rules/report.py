"""Violation and fix records produced by lint rules."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from tree_sitter import Node


@dataclass(frozen=True)
class TextEdit:
    """Replace source bytes [start, end) with text. Empty text removes the range."""
    start: int
    end: int
    text: str = ""

    @classmethod
    def replace_range(cls, start: int, end: int, text: str) -> 'TextEdit':
        return cls(start=start, end=end, text=text)

    @classmethod
    def remove(cls, node: Node) -> 'TextEdit':
        return cls(start=node.start_byte, end=node.end_byte)


@dataclass
class Violation:
    """A single diagnostic, positioned at the offending node."""
    rule: str
    message_id: str
    message: str
    line: int
    column: int
    end_line: int
    end_column: int
    start_byte: int
    end_byte: int
    data: Dict[str, str] = field(default_factory=dict)
    fix: Optional[List[TextEdit]] = None

    @property
    def fixable(self) -> bool:
        return bool(self.fix)

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (self.line, self.column)


def format_message(template: str, data: Optional[Dict[str, str]] = None) -> str:
    """Interpolate {{placeholders}} the way ESLint message templates do.

    Unknown placeholders are left untouched.
    """
    message = template
    for key, value in (data or {}).items():
        message = message.replace('{{' + key + '}}', str(value))
    return message


def make_violation(rule: str, message_id: str, template: str, node: Node,
                   data: Optional[Dict[str, str]] = None,
                   fix: Optional[List[TextEdit]] = None) -> Violation:
    """Build a Violation positioned at node (1-based line, 0-based column)."""
    return Violation(
        rule=rule,
        message_id=message_id,
        message=format_message(template, data),
        line=node.start_point[0] + 1,
        column=node.start_point[1],
        end_line=node.end_point[0] + 1,
        end_column=node.end_point[1],
        start_byte=node.start_byte,
        end_byte=node.end_byte,
        data=dict(data or {}),
        fix=fix,
    )
