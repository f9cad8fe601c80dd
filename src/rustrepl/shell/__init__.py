"""Shell module for the interactive Rust REPL.

Provides statement classification, the session engine that commits or
rolls back each statement, built-in dot commands and the REPL loop.
"""

from __future__ import annotations

from rustrepl.shell.builtins import execute_builtin, is_builtin
from rustrepl.shell.classifier import (
    InputFormatError,
    Statement,
    StatementClassifier,
    StatementKind,
    classify_line,
)
from rustrepl.shell.engine import (
    OutcomeKind,
    SessionEngine,
    SessionSetupError,
    SessionState,
    StepResult,
)
from rustrepl.shell.repl import REPL, run_repl, run_script

__all__ = [
    "REPL",
    "SessionEngine",
    "SessionState",
    "SessionSetupError",
    "OutcomeKind",
    "StepResult",
    "StatementClassifier",
    "Statement",
    "StatementKind",
    "InputFormatError",
    "classify_line",
    "run_repl",
    "run_script",
    "is_builtin",
    "execute_builtin",
]
