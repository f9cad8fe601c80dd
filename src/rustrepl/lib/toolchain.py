"""External Rust toolchain operations.

Wraps the compiler and the compiled artifact behind a narrow interface so
the session engine never shells out directly.
"""

from __future__ import annotations

import logging
import platform
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

from rustrepl.lib.config_parser import ToolchainConfig

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"\d+\.\d+\.\d+")
DATE_PATTERN = re.compile(r"\d+-\d+-\d+")

TIMEOUT_RETURNCODE = -1


class ToolchainError(Exception):
    """Raised when a toolchain process cannot be launched."""
    pass


class ToolchainNotFoundError(ToolchainError):
    """Raised when the Rust toolchain is not installed."""
    pass


@dataclass
class CompileResult:
    """Result of a compiler invocation."""

    returncode: int
    stdout: str
    stderr: str
    artifact_path: Path
    timed_out: bool = False


@dataclass
class RunResult:
    """Result of running a compiled artifact."""

    returncode: int
    stdout: str
    stderr: str


@dataclass
class ToolchainInfo:
    """Version details reported by the toolchain probe."""

    version: str
    release_date: str
    os_name: str

    def banner(self) -> str:
        """Format the session banner line."""
        return f"Cargo {self.version} [Released at {self.release_date}] on {self.os_name}"


class Toolchain(Protocol):
    """Capability interface for compiling and running generated programs."""

    def compile(self, source_path: Path, artifact_path: Path) -> CompileResult:
        """Compile a source file into an executable.

        Args:
            source_path: Rendered Rust source
            artifact_path: Where the executable should be written

        Returns:
            Compiler status and output streams

        Raises:
            ToolchainError: If the compiler cannot be launched
        """
        ...

    def run(self, artifact_path: Path) -> RunResult:
        """Run a compiled executable with no arguments.

        Args:
            artifact_path: Executable to run

        Returns:
            Process status and output streams

        Raises:
            ToolchainError: If the executable cannot be launched
        """
        ...


class RustcToolchain:
    """Toolchain backed by a local ``rustc`` installation."""

    def __init__(self, config: Optional[ToolchainConfig] = None):
        """Initialize toolchain.

        Args:
            config: Toolchain configuration (defaults if None)
        """
        self.config = config or ToolchainConfig()

    def _compile_command(self, source_path: Path, artifact_path: Path) -> List[str]:
        return [
            self.config.compiler,
            str(source_path),
            "--crate-name", self.config.crate_name,
            "-o", str(artifact_path),
            *self.config.extra_args,
        ]

    def compile(self, source_path: Path, artifact_path: Path) -> CompileResult:
        """Compile a source file with rustc.

        Args:
            source_path: Rendered Rust source
            artifact_path: Output executable path

        Returns:
            Compile result

        Raises:
            ToolchainError: If rustc cannot be launched
        """
        cmd = self._compile_command(source_path, artifact_path)
        logger.debug(f"Running compiler: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors='replace',
                timeout=self.config.compile_timeout,
                check=False
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Compilation timed out after {self.config.compile_timeout}s")
            return CompileResult(
                returncode=TIMEOUT_RETURNCODE,
                stdout="",
                stderr=f"error: compilation timed out after {self.config.compile_timeout}s",
                artifact_path=artifact_path,
                timed_out=True
            )
        except OSError as e:
            raise ToolchainError(f"Failed to launch {self.config.compiler}: {e}") from e

        logger.debug(f"Compiler exited with code {result.returncode}")
        return CompileResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            artifact_path=artifact_path
        )

    def run(self, artifact_path: Path) -> RunResult:
        """Run a compiled executable.

        Args:
            artifact_path: Executable to run

        Returns:
            Run result

        Raises:
            ToolchainError: If the executable cannot be launched
        """
        logger.debug(f"Running artifact: {artifact_path}")
        try:
            result = subprocess.run(
                [str(artifact_path)],
                capture_output=True,
                text=True,
                errors='replace',
                timeout=self.config.run_timeout,
                check=False
            )
        except subprocess.TimeoutExpired as e:
            raise ToolchainError(
                f"Program did not finish within {self.config.run_timeout}s"
            ) from e
        except OSError as e:
            raise ToolchainError(f"Running native code error due to {e}") from e

        if result.returncode != 0:
            logger.debug(f"Artifact exited with code {result.returncode}")
        return RunResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr
        )


def probe_toolchain(config: Optional[ToolchainConfig] = None) -> ToolchainInfo:
    """Check that the Rust toolchain is installed and read its version.

    Args:
        config: Toolchain configuration (defaults if None)

    Returns:
        Toolchain version information

    Raises:
        ToolchainNotFoundError: If cargo or the compiler is missing
    """
    config = config or ToolchainConfig()
    try:
        result = subprocess.run(
            [config.probe, '--version'],
            capture_output=True,
            text=True,
            check=True
        )
    except (subprocess.CalledProcessError, OSError) as e:
        logger.error(f"Failed to check {config.probe} version: {e}")
        raise ToolchainNotFoundError(
            f"Your computer doesn't have {config.probe} which is Rust ecosystem. "
            "Please install cargo first by following "
            "https://doc.rust-lang.org/cargo/getting-started/installation.html"
        ) from e

    output = result.stdout.strip()
    if not output.startswith(config.probe):
        raise ToolchainNotFoundError(
            f"Unexpected output from '{config.probe} --version': {output!r}"
        )

    if shutil.which(config.compiler) is None:
        raise ToolchainNotFoundError(f"Compiler '{config.compiler}' not found on PATH")

    version_match = VERSION_PATTERN.search(output)
    date_match = DATE_PATTERN.search(output)
    info = ToolchainInfo(
        version=version_match.group(0) if version_match else "unknown",
        release_date=date_match.group(0) if date_match else "unknown",
        os_name=platform.system().lower()
    )
    logger.info(f"Cargo version: {info.version}")
    return info
