"""Compiler diagnostic classification.

Decides whether compiler stderr means success, a non-blocking warning or
an error, and whether a warning is noisy enough to hide.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Tuple

from rustrepl.lib.config_parser import SuppressionMode

logger = logging.getLogger(__name__)

WARNING_MARKER = "warning"
SUPPRESSED_WARNINGS: Tuple[str, ...] = ("unused import", "unused variable")


class DiagnosticKind(Enum):
    """Outcome of a compilation as seen through stderr."""
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


def classify_diagnostics(stderr: str) -> DiagnosticKind:
    """Classify compiler stderr.

    Args:
        stderr: Compiler standard error text

    Returns:
        SUCCESS when stderr is empty, WARNING when it leads with the
        warning marker, ERROR otherwise
    """
    if not stderr:
        return DiagnosticKind.SUCCESS
    if stderr.startswith(WARNING_MARKER):
        return DiagnosticKind.WARNING
    return DiagnosticKind.ERROR


def should_suppress(stderr: str, mode: SuppressionMode = SuppressionMode.ALL) -> bool:
    """Decide whether a warning should be hidden from the user.

    Args:
        stderr: Warning text
        mode: ALL hides only when every noisy marker is present, ANY hides
            when at least one is, NONE never hides

    Returns:
        True if the warning should not be printed
    """
    mode = SuppressionMode(mode)
    hits = [marker in stderr for marker in SUPPRESSED_WARNINGS]
    if mode == SuppressionMode.ALL:
        suppressed = all(hits)
    elif mode == SuppressionMode.ANY:
        suppressed = any(hits)
    else:
        suppressed = False

    if suppressed:
        logger.debug(f"Suppressing warning ({mode.value})")
    return suppressed
