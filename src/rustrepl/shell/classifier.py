"""Statement classification for REPL input.

Sorts a trimmed input line into exit, builtin, import, binding or generic
statement, and rejects input the session cannot accept.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from rustrepl.lib.program import crate_root

logger = logging.getLogger(__name__)

TERMINATOR = ";"
BUILTIN_PREFIX = "."
IMPORT_KEYWORD = "use"
BINDING_KEYWORD = "let"
DISALLOWED_KEYWORDS = ("const", "static")

VERSION_PATTERN = re.compile(r"\d+(?:\.\d+){0,2}")


class InputFormatError(ValueError):
    """Raised when an input line cannot be accepted as a statement."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n{self.hint}"
        return self.message


class StatementKind(Enum):
    """Kinds of input line."""
    EXIT = "exit"
    BUILTIN = "builtin"
    IMPORT = "import"
    BINDING = "binding"
    STATEMENT = "statement"


@dataclass
class Statement:
    """A classified input line."""

    kind: StatementKind
    text: str
    import_path: Optional[str] = None
    needs_version: bool = False

    @property
    def mutates_program(self) -> bool:
        return self.kind in (StatementKind.IMPORT, StatementKind.BINDING, StatementKind.STATEMENT)


def starts_with_keyword(line: str, keyword: str) -> bool:
    """Check whether a line begins with a whole keyword token.

    Args:
        line: Trimmed input line
        keyword: Keyword to look for (e.g., "use")

    Returns:
        True for "use std::io;" but False for "user_fn();"
    """
    if not line.startswith(keyword):
        return False
    rest = line[len(keyword):]
    return not rest or rest[0].isspace() or rest[0] == TERMINATOR


def extract_version(text: str) -> Optional[str]:
    """Extract a dotted numeric version from free-form input.

    Args:
        text: User-supplied version string (e.g., "0.8.5" or "v1.2")

    Returns:
        Version such as "0.8.5", or None if no digits are present
    """
    match = VERSION_PATTERN.search(text)
    if match is None:
        return None
    return match.group(0)


class StatementClassifier:
    """Classifies REPL input lines.

    Classification never touches program state; the engine acts on the
    returned Statement.
    """

    def __init__(
        self,
        exit_keyword: str = "exit",
        builtin_namespaces: Iterable[str] = ("std", "core", "alloc")
    ):
        """Initialize classifier.

        Args:
            exit_keyword: Input that ends the session
            builtin_namespaces: Import roots that need no version
        """
        self.exit_keyword = exit_keyword
        self.builtin_namespaces = tuple(builtin_namespaces)

    def classify(self, line: str) -> Statement:
        """Classify a single input line.

        Args:
            line: Input line (leading and trailing whitespace is ignored)

        Returns:
            Classified statement

        Raises:
            InputFormatError: If the line is not an acceptable statement
        """
        line = line.strip()
        if not line:
            raise InputFormatError("Empty input")

        if line == self.exit_keyword:
            return Statement(StatementKind.EXIT, line)

        if line.startswith(BUILTIN_PREFIX):
            return Statement(StatementKind.BUILTIN, line)

        if not line.endswith(TERMINATOR):
            raise InputFormatError(
                f"Syntax error: {line}",
                "Rust command should be ended with ';'."
            )

        if starts_with_keyword(line, IMPORT_KEYWORD):
            return self._classify_import(line)

        for keyword in DISALLOWED_KEYWORDS:
            if starts_with_keyword(line, keyword):
                raise InputFormatError(
                    f"Current this Rust REPL tool can't support '{keyword}' definition.",
                    "Please use 'let' instead of 'const' and 'static'."
                )

        if starts_with_keyword(line, BINDING_KEYWORD):
            return Statement(StatementKind.BINDING, line)

        return Statement(StatementKind.STATEMENT, line)

    def _classify_import(self, line: str) -> Statement:
        """Parse a ``use`` statement into its import path."""
        tokens = line.split()
        path = line[len(IMPORT_KEYWORD):].rstrip(TERMINATOR).strip()
        if len(tokens) < 2 or not path:
            raise InputFormatError(
                "use statement for using crate should have followed 'use CRATE' format.",
                "Please try again."
            )

        needs_version = not self.is_builtin_path(path)
        logger.debug(f"Import '{path}' (needs version: {needs_version})")
        return Statement(
            StatementKind.IMPORT,
            line,
            import_path=path,
            needs_version=needs_version
        )

    def is_builtin_path(self, path: str) -> bool:
        """Check whether an import path lives in a builtin namespace.

        Args:
            path: Import path (e.g., "std::io")

        Returns:
            True if the path's root is a builtin namespace
        """
        return crate_root(path) in self.builtin_namespaces


def classify_line(line: str) -> Statement:
    """Classify a line with the default classifier settings.

    Args:
        line: Input line

    Returns:
        Classified statement
    """
    return StatementClassifier().classify(line)
