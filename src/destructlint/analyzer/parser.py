"""Tree-sitter parser for JavaScript, TypeScript and TSX sources."""
from pathlib import Path
from typing import Optional
from tree_sitter import Language, Parser, Tree
import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript


class LanguageParser:
    """React-aware source parser using the tree-sitter v0.22+ API."""

    SUPPORTED_LANGUAGES = {
        '.js': 'javascript',
        '.jsx': 'javascript',
        '.mjs': 'javascript',
        '.cjs': 'javascript',
        '.ts': 'typescript',
        '.mts': 'typescript',
        '.cts': 'typescript',
        '.tsx': 'tsx',
    }

    def __init__(self, language: str):
        """Initialize parser for given language (javascript, typescript, tsx).

        Args:
            language: One of 'javascript', 'typescript', 'tsx'

        Raises:
            ValueError: If language is not supported
        """
        self.language = language
        self.parser = self._create_parser()

    def _create_parser(self) -> Parser:
        """Build a Parser around the grammar capsule for self.language.

        The grammar packages return PyCapsules which must be wrapped with
        Language() before being handed to Parser.

        Returns:
            Configured Parser instance

        Raises:
            ValueError: If language is not supported
        """
        if self.language == 'javascript':
            # tree-sitter-javascript parses JSX natively
            lang = Language(tsjavascript.language())
        elif self.language == 'typescript':
            lang = Language(tstypescript.language_typescript())
        elif self.language == 'tsx':
            lang = Language(tstypescript.language_tsx())
        else:
            raise ValueError(f"Unsupported language: {self.language}")

        return Parser(lang)

    def parse_source(self, source_code: str | bytes) -> Tree:
        """Parse in-memory source and return tree-sitter Tree.

        Args:
            source_code: Source text or UTF-8 bytes

        Returns:
            Parsed Tree object (tree-sitter always produces one, even on syntax errors)
        """
        if isinstance(source_code, str):
            source_code = source_code.encode('utf-8')
        return self.parser.parse(source_code)

    @classmethod
    def language_for(cls, file_path: str | Path) -> Optional[str]:
        """Map a file path to a grammar name by extension, or None."""
        return cls.SUPPORTED_LANGUAGES.get(Path(file_path).suffix.lower())

