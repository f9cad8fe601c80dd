"""Accumulated Rust program state.

A ProgramImage holds the source fragments entered so far: imported paths
with their version tags, and the ordered statements that make up the body
of ``main``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "default"


def crate_root(path: str) -> str:
    """Get the crate an import path belongs to (e.g., "rand::Rng" -> "rand")."""
    return path.lstrip(':').split('::', 1)[0]


class ProgramImage:
    """Snapshot of imports and statements that renders to a Rust program."""

    def __init__(self):
        """Initialize an empty image."""
        self.imports: Dict[str, str] = {}
        self.statements: List[str] = []

    def add_import(self, path: str, version: str = DEFAULT_VERSION) -> None:
        """Insert or overwrite an import entry.

        Args:
            path: Import path (e.g., "std::io" or "rand")
            version: Version tag, or DEFAULT_VERSION for builtin namespaces
        """
        self.imports[path] = version

    def add_statement(self, text: str) -> None:
        """Append a statement verbatim.

        Args:
            text: Statement text including its terminator
        """
        self.statements.append(text)

    def merge_from(self, other: ProgramImage) -> None:
        """Become an exact copy of another image.

        Args:
            other: Image whose imports and statements replace ours
        """
        if other is self:
            return
        self.imports = dict(other.imports)
        self.statements = list(other.statements)
        logger.debug(
            f"Merged image: {len(self.imports)} imports, "
            f"{len(self.statements)} statements"
        )

    def copy(self) -> ProgramImage:
        """Return an independent copy of this image."""
        image = ProgramImage()
        image.merge_from(self)
        return image

    def clear(self) -> None:
        """Drop all imports and statements."""
        self.imports = {}
        self.statements = []

    def is_empty(self) -> bool:
        return not self.imports and not self.statements

    def crate_version(self, crate: str) -> Optional[str]:
        """Get the version pinned for a crate by any of its imports.

        Args:
            crate: Crate root name (e.g., "rand")

        Returns:
            Version tag, or None if no import pins the crate
        """
        return self.external_crates().get(crate)

    def external_crates(self) -> Dict[str, str]:
        """Get crates pinned to an explicit version.

        Imports sharing a crate root (``rand`` and ``rand::Rng``) are listed
        once under the root.

        Returns:
            Mapping of crate root to version, sorted by crate
        """
        crates: Dict[str, str] = {}
        for path, version in sorted(self.imports.items()):
            if version != DEFAULT_VERSION:
                crates[crate_root(path)] = version
        return dict(sorted(crates.items()))

    def render(self) -> str:
        """Render the image as compilable Rust source.

        Returns:
            Source text with sorted ``use`` lines followed by ``fn main``
        """
        lines = [f"use {path};" for path in sorted(self.imports)]
        lines.append("fn main() {")
        lines.extend(self.statements)
        lines.append("}")
        return '\n'.join(lines) + '\n'

    def write(self, path: Path) -> None:
        """Write rendered source to a file, replacing its contents.

        Args:
            path: Destination source file

        Raises:
            OSError: If the file cannot be written
        """
        with open(path, 'w') as f:
            f.write(self.render())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProgramImage):
            return NotImplemented
        return self.imports == other.imports and self.statements == other.statements

    def __repr__(self) -> str:
        return (
            f"ProgramImage(imports={len(self.imports)}, "
            f"statements={len(self.statements)})"
        )
