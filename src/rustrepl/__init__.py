"""rust-repl - Interactive Rust shell.

Compiles one statement at a time against everything entered before it,
keeping statements that compile and discarding those that do not.

Features:
- Speculative working program with commit/rollback
- Crate imports with pinned versions
- Configurable warning suppression
- Persistent input history
"""

__version__ = "0.1.0"
__license__ = "MIT"

from rustrepl.cli import main

__all__ = ["main", "__version__"]
