"""Configuration management for destructlint.

Loads environment variables and provides centralized config access.
"""
import os
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Tuple
from dotenv import load_dotenv

# Version
__version__ = "1.0.0"

MODES = ('always', 'never')
SIGNATURE_MODES = ('always', 'ignore')

DEFAULT_MODE = 'always'
DEFAULT_SIGNATURE_MODE = 'ignore'
# An unknown React version is treated as the latest release
DEFAULT_REACT_VERSION = '999.999.999'
DEFAULT_PRAGMA = 'React'

_TRUTHY = {'1', 'true', 'yes', 'on'}


def parse_version(v_str: str) -> Tuple[int, ...]:
    """Parse a version string into a tuple of ints for comparison.

    Handles basic semver like '16.9.0' or '18.2.0-rc.1'; missing components
    compare as zero.
    """
    parts = []
    for token in re.split(r"[^\d]+", v_str):
        if token:
            parts.append(int(token))
    while len(parts) < 3:
        parts.append(0)
    return tuple(parts)


def version_satisfies(version: str, constraint: str) -> bool:
    """Check version against a single '<op> <version>' constraint.

    Args:
        version: Version under test, e.g. '16.8.6'
        constraint: Constraint such as '>= 16.9'

    Returns:
        True if the version satisfies the constraint

    Raises:
        ValueError: If the constraint cannot be parsed
    """
    match = re.fullmatch(r"\s*(>=|<=|==|>|<)?\s*([\w.\-+]+)\s*", constraint)
    if not match:
        raise ValueError(f"Invalid version constraint: {constraint!r}")
    operator = match.group(1) or '=='
    actual = parse_version(version)
    expected = parse_version(match.group(2))
    return {
        '>=': actual >= expected,
        '<=': actual <= expected,
        '==': actual == expected,
        '>': actual > expected,
        '<': actual < expected,
    }[operator]


@dataclass(frozen=True)
class RuleOptions:
    """Options of the destructuring-assignment rule plus shared React settings."""
    mode: str = DEFAULT_MODE
    ignore_class_fields: bool = False
    destructure_in_signature: str = DEFAULT_SIGNATURE_MODE
    react_version: str = DEFAULT_REACT_VERSION
    pragma: str = DEFAULT_PRAGMA

    def validate(self) -> 'RuleOptions':
        """Check option values.

        Returns:
            self, for chaining

        Raises:
            ValueError: If an option is outside its allowed values
        """
        if self.mode not in MODES:
            raise ValueError(f"Invalid mode '{self.mode}'. Use one of: {', '.join(MODES)}")
        if self.destructure_in_signature not in SIGNATURE_MODES:
            raise ValueError(
                f"Invalid destructureInSignature '{self.destructure_in_signature}'. "
                f"Use one of: {', '.join(SIGNATURE_MODES)}"
            )
        if not re.search(r"\d", self.react_version):
            raise ValueError(f"Invalid React version '{self.react_version}'")
        if not self.pragma.isidentifier():
            raise ValueError(f"Invalid pragma '{self.pragma}'")
        return self

    def react_version_at_least(self, minimum: str) -> bool:
        return version_satisfies(self.react_version, f">= {minimum}")

    @classmethod
    def from_eslint(cls, options: Optional[list] = None, **settings) -> 'RuleOptions':
        """Build options from ESLint-style rule options.

        Args:
            options: [mode, {ignoreClassFields, destructureInSignature}], both optional
            **settings: react_version / pragma overrides

        Raises:
            ValueError: If the options object carries unknown keys
        """
        options = options or []
        mode = options[0] if len(options) > 0 and options[0] else DEFAULT_MODE
        extra = options[1] if len(options) > 1 and options[1] else {}

        unknown = set(extra) - {'ignoreClassFields', 'destructureInSignature'}
        if unknown:
            raise ValueError(f"Unknown option(s): {', '.join(sorted(unknown))}")

        return cls(
            mode=mode,
            ignore_class_fields=extra.get('ignoreClassFields') is True,
            destructure_in_signature=extra.get('destructureInSignature') or DEFAULT_SIGNATURE_MODE,
            **settings,
        ).validate()


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_path: Optional[Path] = None):
        """Initialize config by loading .env file.

        Args:
            env_path: Explicit .env location; defaults to the current directory's .env
        """
        load_dotenv(env_path or Path.cwd() / ".env")

    @property
    def mode(self) -> str:
        """Get rule mode ('always' or 'never').

        Returns:
            DESTRUCTLINT_MODE or the default 'always'
        """
        return os.getenv("DESTRUCTLINT_MODE", DEFAULT_MODE)

    @property
    def ignore_class_fields(self) -> bool:
        return os.getenv("DESTRUCTLINT_IGNORE_CLASS_FIELDS", "").strip().lower() in _TRUTHY

    @property
    def destructure_in_signature(self) -> str:
        """Get signature-destructuring mode ('always' or 'ignore').

        Returns:
            DESTRUCTLINT_DESTRUCTURE_IN_SIGNATURE or the default 'ignore'
        """
        return os.getenv("DESTRUCTLINT_DESTRUCTURE_IN_SIGNATURE", DEFAULT_SIGNATURE_MODE)

    @property
    def react_version(self) -> str:
        """Get the React version the linted code targets.

        Returns:
            DESTRUCTLINT_REACT_VERSION, or a sentinel meaning 'latest'
        """
        return os.getenv("DESTRUCTLINT_REACT_VERSION", DEFAULT_REACT_VERSION)

    @property
    def pragma(self) -> str:
        return os.getenv("DESTRUCTLINT_PRAGMA", DEFAULT_PRAGMA)

    def rule_options(self, **overrides) -> RuleOptions:
        """Build validated RuleOptions from the environment.

        Args:
            **overrides: Field values that win over the environment; None values are ignored

        Raises:
            ValueError: If a resulting option is invalid
        """
        options = RuleOptions(
            mode=self.mode,
            ignore_class_fields=self.ignore_class_fields,
            destructure_in_signature=self.destructure_in_signature,
            react_version=self.react_version,
            pragma=self.pragma,
        )
        overrides = {key: value for key, value in overrides.items() if value is not None}
        return replace(options, **overrides).validate()


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config
