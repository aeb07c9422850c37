"""Lint driver: parse a file, run the rule over it, collect violations."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from .analyzer.parser import LanguageParser
from .analyzer.traversal import RuleContext
from .config import RuleOptions
from .fixer.applier import apply_fixes
from .rules.destructuring_assignment import DestructuringAssignmentRule
from .rules.report import Violation


# Directories never worth linting
EXCLUDED_DIRS = {
    'node_modules', '.git', 'dist', 'build', 'coverage', 'vendor',
    '.next', '.nuxt', 'out', '.cache', '__pycache__', '.venv', 'venv',
}

# ESLint stops re-linting after this many fix passes
MAX_FIX_PASSES = 10


@dataclass
class LintResult:
    """Violations found in one file."""
    file_path: str
    source: str
    violations: List[Violation] = field(default_factory=list)
    has_syntax_errors: bool = False
    fixes_applied: int = 0

    @property
    def error_count(self) -> int:
        return len(self.violations)

    @property
    def fixable_count(self) -> int:
        return sum(1 for v in self.violations if v.fixable)


class Linter:
    """Runs the destructuring-assignment rule over sources and files."""

    def __init__(self, options: Optional[RuleOptions] = None):
        """Initialize linter.

        Args:
            options: Rule options; defaults to mode 'always'

        Raises:
            ValueError: If options are invalid
        """
        self.options = (options or RuleOptions()).validate()
        self._parsers: Dict[str, LanguageParser] = {}

    def _parser(self, language: str) -> LanguageParser:
        parser = self._parsers.get(language)
        if parser is None:
            parser = LanguageParser(language)
            self._parsers[language] = parser
        return parser

    def lint_source(self, source: str | bytes, language: str = 'javascript',
                    filename: str = '<input>') -> LintResult:
        """Lint in-memory source.

        Each call builds fresh scope, component and rule state, so nothing
        carries over between files.

        Args:
            source: Source text or UTF-8 bytes
            language: 'javascript', 'typescript' or 'tsx'
            filename: Name used in results

        Returns:
            LintResult with violations sorted by position

        Raises:
            ValueError: If language is not supported
        """
        source_bytes = source.encode('utf-8') if isinstance(source, str) else source
        tree = self._parser(language).parse_source(source_bytes)

        context = RuleContext.for_tree(source_bytes, tree, self.options, filename=filename)
        violations = DestructuringAssignmentRule(context).run()
        violations.sort(key=lambda v: v.sort_key)

        return LintResult(
            file_path=filename,
            source=source_bytes.decode('utf-8'),
            violations=violations,
            has_syntax_errors=tree.root_node.has_error,
        )

    def lint_file(self, file_path: str | Path) -> Optional[LintResult]:
        """Lint one file.

        Returns:
            LintResult, or None if the extension is unsupported or the file unreadable
        """
        file_path = Path(file_path)
        language = LanguageParser.language_for(file_path)
        if language is None:
            return None
        try:
            source = file_path.read_bytes()
            source.decode('utf-8')
        except (UnicodeDecodeError, IOError):
            return None
        return self.lint_source(source, language, filename=str(file_path))

    def fix_file(self, file_path: str | Path, write: bool = True) -> Optional[LintResult]:
        """Lint and fix one file until no more fixes apply.

        Args:
            file_path: File to fix
            write: Write the fixed text back to disk

        Returns:
            LintResult of the final pass, with fixes_applied set, or None as for lint_file
        """
        file_path = Path(file_path)
        result = self.lint_file(file_path)
        if result is None:
            return None

        language = LanguageParser.language_for(file_path)
        total_applied = 0
        for _ in range(MAX_FIX_PASSES):
            fixed = apply_fixes(result.source, result.violations)
            if not fixed.changed:
                break
            total_applied += len(fixed.applied)
            result = self.lint_source(fixed.output, language, filename=str(file_path))

        result.fixes_applied = total_applied
        if write and total_applied:
            # Bytes keep the file's own line endings
            file_path.write_bytes(result.source.encode('utf-8'))
        return result

    def iter_files(self, paths: Iterable[str | Path]) -> Iterator[Path]:
        """Expand files and directories into lintable files, skipping excluded dirs."""
        for path in paths:
            path = Path(path)
            if path.is_file():
                if LanguageParser.language_for(path):
                    yield path
                continue
            for file_path in sorted(path.rglob('*')):
                if not file_path.is_file() or not LanguageParser.language_for(file_path):
                    continue
                if any(excluded in file_path.relative_to(path).parts for excluded in EXCLUDED_DIRS):
                    continue
                yield file_path

    def lint_paths(self, paths: Iterable[str | Path], fix: bool = False) -> List[LintResult]:
        """Lint (and optionally fix) every supported file under paths."""
        results = []
        for file_path in self.iter_files(paths):
            result = self.fix_file(file_path) if fix else self.lint_file(file_path)
            if result is not None:
                results.append(result)
        return results
