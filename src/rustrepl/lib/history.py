"""Session history log.

Keeps the accepted input lines of the session, one per line, and mirrors
them into readline so they can be recalled with the arrow keys.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

try:
    import readline
    HAS_READLINE = True
except ImportError:
    HAS_READLINE = False
    logger.debug("readline not available - history recall disabled")


class SessionHistory:
    """Append-only log of accepted input lines."""

    def __init__(self, history_file: Path, max_length: int = 1000):
        """Initialize history.

        Args:
            history_file: File the history is loaded from and saved to
            max_length: Maximum number of entries kept on save
        """
        self.history_file = Path(history_file)
        self.max_length = max_length
        self.entries: List[str] = []

    def load(self) -> int:
        """Load existing history from disk.

        Returns:
            Number of entries loaded
        """
        if not self.history_file.exists():
            return 0
        try:
            with open(self.history_file) as f:
                lines = [line.rstrip('\n') for line in f]
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to load history of commands: {e}")
            return 0

        loaded = [line for line in lines if line]
        self.entries.extend(loaded)
        if HAS_READLINE:
            for line in loaded:
                readline.add_history(line)
        logger.debug(f"Loaded {len(loaded)} history entries from {self.history_file}")
        return len(loaded)

    def add(self, line: str) -> None:
        """Record an accepted input line.

        Args:
            line: Raw input line
        """
        self.entries.append(line)

    def save(self) -> bool:
        """Write the newest entries to disk.

        Returns:
            True if the history was saved
        """
        try:
            self.history_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.history_file, 'w') as f:
                for line in self.entries[-self.max_length:]:
                    f.write(f"{line}\n")
        except OSError as e:
            logger.warning(f"Failed to save history of commands due to {e}")
            return False
        logger.debug(f"Saved history to {self.history_file}")
        return True

    def get_entries(self) -> List[str]:
        """Get a copy of the recorded entries."""
        return self.entries.copy()

    def __len__(self) -> int:
        return len(self.entries)
