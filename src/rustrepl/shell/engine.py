"""Session engine for the Rust REPL.

Owns the committed and working program images and drives each input line
through classification, compilation and execution, committing the working
image on success and rolling it back on failure.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from rustrepl.lib.config_parser import SessionConfig
from rustrepl.lib.diagnostics import DiagnosticKind, classify_diagnostics, should_suppress
from rustrepl.lib.history import SessionHistory
from rustrepl.lib.program import DEFAULT_VERSION, ProgramImage, crate_root
from rustrepl.lib.toolchain import CompileResult, RustcToolchain, Toolchain, ToolchainError
from rustrepl.shell.builtins import execute_builtin, is_builtin
from rustrepl.shell.classifier import (
    InputFormatError,
    Statement,
    StatementClassifier,
    StatementKind,
    extract_version,
)

logger = logging.getLogger(__name__)

SOURCE_FILE_NAME = "main.rs"


class SessionSetupError(Exception):
    """Raised when the session cannot be set up or its scratch files written."""
    pass


class SessionState(Enum):
    """States of the read-eval cycle."""
    IDLE = "idle"
    CLASSIFYING = "classifying"
    COMPILING = "compiling"
    EXECUTING = "executing"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    TERMINATED = "terminated"


class OutcomeKind(Enum):
    """What happened to a processed line."""
    ACCEPTED = "accepted"
    FAST_TRACKED = "fast_tracked"
    WARNING = "warning"
    REJECTED = "rejected"
    COMPILE_ERROR = "compile_error"
    LAUNCH_ERROR = "launch_error"
    BUILTIN = "builtin"
    EXIT = "exit"


@dataclass
class StepResult:
    """Outcome of processing one input line.

    ``output`` is program or builtin output for stdout; ``message`` is
    diagnostic text for stderr.
    """

    state: SessionState
    kind: OutcomeKind
    message: str = ""
    output: str = ""

    @property
    def committed(self) -> bool:
        return self.state == SessionState.COMMITTED


class SessionEngine:
    """Incremental program state machine.

    The committed image is the last program known to compile. The working
    image is the committed image plus the statement being tried; after each
    line it is either promoted to committed or reset from it.
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        toolchain: Optional[Toolchain] = None,
        prompt_fn: Optional[Callable[[str], str]] = None,
        history: Optional[SessionHistory] = None,
        workdir: Optional[Path] = None
    ):
        """Initialize engine.

        Args:
            config: Session configuration (defaults if None)
            toolchain: Compiler/runner (rustc if None)
            prompt_fn: Function used to ask for crate versions
            history: History log that accepted lines are added to
            workdir: Parent directory for the scratch directory

        Raises:
            SessionSetupError: If the scratch directory cannot be created
        """
        self.config = config or SessionConfig()
        self.toolchain = toolchain or RustcToolchain(self.config.toolchain)
        self.prompt_fn = prompt_fn or input
        self.history = history
        self.classifier = StatementClassifier(
            exit_keyword=self.config.exit_keyword,
            builtin_namespaces=self.config.builtin_namespaces
        )

        self.committed = ProgramImage()
        self.working = ProgramImage()
        self.state = SessionState.IDLE
        self._history_flushed = False

        try:
            self._scratch = tempfile.TemporaryDirectory(
                prefix="rust_repl_",
                dir=str(workdir) if workdir else None
            )
        except OSError as e:
            raise SessionSetupError(f"Internal temp file creation failed due to {e}") from e

        self.scratch_dir = Path(self._scratch.name)
        self.source_path = self.scratch_dir / SOURCE_FILE_NAME
        self.artifact_path = self.scratch_dir / self.config.toolchain.artifact_name
        logger.debug(f"Session scratch directory: {self.scratch_dir}")

    def __enter__(self) -> SessionEngine:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def terminated(self) -> bool:
        return self.state == SessionState.TERMINATED

    def process_line(self, line: str) -> StepResult:
        """Process one line of input.

        Args:
            line: Raw input line

        Returns:
            Result describing the final state and anything to display

        Raises:
            SessionSetupError: If the scratch source file cannot be written
            ToolchainError: If the compiler cannot be launched
        """
        if self.terminated:
            raise RuntimeError("Session has been terminated")

        self.state = SessionState.CLASSIFYING
        try:
            statement = self.classifier.classify(line)
        except InputFormatError as e:
            return self._reject(str(e))

        if statement.kind == StatementKind.EXIT:
            return self.terminate()

        if statement.kind == StatementKind.BUILTIN:
            return self._run_builtin(statement)

        try:
            self._apply(statement)
        except InputFormatError as e:
            return self._reject(str(e))

        if statement.kind == StatementKind.BINDING and self.config.fast_track_bindings:
            logger.debug(f"Fast-track commit: {statement.text}")
            self.commit(statement.text)
            return StepResult(self.state, OutcomeKind.FAST_TRACKED)

        return self._compile_and_run(statement)

    def _apply(self, statement: Statement) -> None:
        """Apply a classified statement to the working image.

        Raises:
            InputFormatError: If an external crate version cannot be read
        """
        if statement.kind == StatementKind.IMPORT:
            version = DEFAULT_VERSION
            if statement.needs_version:
                crate = crate_root(statement.import_path)
                version = self.working.crate_version(crate) or self._ask_version()
            self.working.add_import(statement.import_path, version)
            logger.debug(f"Working import: {statement.import_path} = {version}")
        else:
            self.working.add_statement(statement.text)

    def _ask_version(self) -> str:
        try:
            answer = self.prompt_fn(self.config.version_prompt)
        except (EOFError, KeyboardInterrupt) as e:
            raise InputFormatError(
                f"Cannot read your input by {type(e).__name__}.",
                "Please try again."
            ) from e

        version = extract_version(answer)
        if version is None:
            raise InputFormatError(
                "If you want to use external crate, you need a valid version.",
                "Please try again."
            )
        return version

    def _compile_and_run(self, statement: Statement) -> StepResult:
        self.state = SessionState.COMPILING
        try:
            self.working.write(self.source_path)
        except OSError as e:
            raise SessionSetupError(f"Failed to generate rust source code due to {e}") from e

        result = self.toolchain.compile(self.source_path, self.artifact_path)
        kind = classify_diagnostics(result.stderr)
        logger.debug(f"Compilation of '{statement.text}' classified as {kind.value}")

        if kind == DiagnosticKind.ERROR:
            self.rollback()
            return StepResult(
                self.state,
                OutcomeKind.COMPILE_ERROR,
                message=f"compiler return error: {result.stderr}"
            )

        if kind == DiagnosticKind.WARNING:
            return self._accept_warning(statement, result)

        return self._execute(statement, OutcomeKind.ACCEPTED)

    def _accept_warning(self, statement: Statement, result: CompileResult) -> StepResult:
        message = ""
        if not should_suppress(result.stderr, self.config.warning_suppression):
            message = result.stderr
        if self.config.run_on_warning:
            step = self._execute(statement, OutcomeKind.WARNING)
            step.message = '\n'.join(filter(None, [message, step.message]))
            return step
        self.commit(statement.text)
        return StepResult(self.state, OutcomeKind.WARNING, message=message)

    def _execute(self, statement: Statement, kind: OutcomeKind) -> StepResult:
        self.state = SessionState.EXECUTING
        try:
            run = self.toolchain.run(self.artifact_path)
        except ToolchainError as e:
            logger.warning(f"Launch failed, rolling back '{statement.text}': {e}")
            self.rollback()
            return StepResult(self.state, OutcomeKind.LAUNCH_ERROR, message=str(e))

        if run.returncode != 0:
            logger.debug(f"Program exited with code {run.returncode}")
        self.commit(statement.text)
        return StepResult(self.state, kind, output=run.stdout)

    def _run_builtin(self, statement: Statement) -> StepResult:
        parts = statement.text[1:].split(None, 1)
        name = parts[0] if parts else ""
        args = parts[1] if len(parts) > 1 else None

        if not is_builtin(name):
            self.state = SessionState.IDLE
            return StepResult(
                self.state,
                OutcomeKind.REJECTED,
                message=f"Unknown command: .{name}\nType .help for available commands"
            )

        output = execute_builtin(name, args, context=self)
        if not self.terminated:
            self.state = SessionState.IDLE
        kind = OutcomeKind.EXIT if self.terminated else OutcomeKind.BUILTIN
        return StepResult(self.state, kind, output=output or "")

    def _reject(self, message: str) -> StepResult:
        self.rollback()
        return StepResult(self.state, OutcomeKind.REJECTED, message=message)

    def commit(self, line: Optional[str] = None) -> None:
        """Promote the working image to committed.

        Args:
            line: Accepted input line to record in the history log
        """
        self.committed.merge_from(self.working)
        self.state = SessionState.COMMITTED
        if line is not None and self.history is not None:
            self.history.add(line)

    def rollback(self) -> None:
        """Discard the working image's pending change."""
        self.working.merge_from(self.committed)
        self.state = SessionState.ROLLED_BACK

    def reset(self) -> None:
        """Drop every committed statement and import."""
        self.committed.clear()
        self.working.clear()
        self.state = SessionState.IDLE
        logger.info("Session program reset")

    def terminate(self) -> StepResult:
        """End the session and flush history."""
        self.rollback()
        self._flush_history()
        self.state = SessionState.TERMINATED
        return StepResult(self.state, OutcomeKind.EXIT, output="Bye...")

    def _flush_history(self) -> None:
        if self.history is None or self._history_flushed:
            return
        self.history.save()
        self._history_flushed = True

    def close(self) -> None:
        """Flush history and remove the scratch directory."""
        self._flush_history()
        try:
            self._scratch.cleanup()
        except OSError as e:
            logger.warning(f"Failed to remove scratch directory {self.scratch_dir}: {e}")
