"""Apply rule fixes to source text."""
from dataclasses import dataclass, field
from typing import List, Tuple

from ..rules.report import TextEdit, Violation


@dataclass
class FixResult:
    """Outcome of one fix pass over a file."""
    output: str
    applied: List[Violation] = field(default_factory=list)
    skipped: List[Violation] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.applied)


def _fix_span(edits: List[TextEdit]) -> Tuple[int, int]:
    return min(edit.start for edit in edits), max(edit.end for edit in edits)


def apply_fixes(source: str | bytes, violations: List[Violation]) -> FixResult:
    """Apply every non-conflicting fix in one pass.

    Fixes are taken in source order; a fix whose span overlaps one already
    accepted is skipped (a re-lint of the output picks it up). Accepted edits
    are applied in DESCENDING order so earlier offsets stay valid.

    Args:
        source: Original source text (offsets are UTF-8 byte offsets)
        violations: Violations of that source, fixable or not

    Returns:
        FixResult with the rewritten text and which fixes were applied
    """
    source_bytes = source.encode('utf-8') if isinstance(source, str) else source
    result = FixResult(output=source_bytes.decode('utf-8'))

    fixable = sorted((v for v in violations if v.fix), key=lambda v: _fix_span(v.fix))
    accepted_spans: List[Tuple[int, int]] = []
    edits: List[TextEdit] = []

    for violation in fixable:
        start, end = _fix_span(violation.fix)
        if any(start < other_end and other_start < end for other_start, other_end in accepted_spans):
            result.skipped.append(violation)
            continue
        accepted_spans.append((start, end))
        edits.extend(violation.fix)
        result.applied.append(violation)

    if not edits:
        return result

    # Edits within one fix never overlap each other
    modified_bytes = bytearray(source_bytes)
    for edit in sorted(edits, key=lambda e: (e.start, e.end), reverse=True):
        modified_bytes[edit.start:edit.end] = edit.text.encode('utf-8')

    result.output = modified_bytes.decode('utf-8')
    return result

