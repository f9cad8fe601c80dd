"""REPL (Read-Eval-Print Loop) for interactive Rust.

Reads statements from the terminal, hands them to the session engine and
prints program output and compiler diagnostics.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from rustrepl.lib.history import HAS_READLINE, SessionHistory
from rustrepl.lib.toolchain import ToolchainError, ToolchainInfo
from rustrepl.shell.engine import SessionEngine, SessionSetupError, StepResult

logger = logging.getLogger(__name__)

if HAS_READLINE:
    import readline


class REPL:
    """Read-Eval-Print Loop for interactive Rust."""

    def __init__(
        self,
        engine: SessionEngine,
        toolchain_info: Optional[ToolchainInfo] = None,
        input_fn: Optional[Callable[[str], str]] = None
    ):
        """Initialize REPL.

        Args:
            engine: Session engine that owns program state
            toolchain_info: Toolchain details for the welcome banner
            input_fn: Function used to read input lines
        """
        self.engine = engine
        self.toolchain_info = toolchain_info
        self.input_fn = input_fn or input
        self.prompt = engine.config.prompt
        self.running = False

        if HAS_READLINE and engine.history is not None:
            self._setup_readline(engine.history)

    def _setup_readline(self, history: SessionHistory) -> None:
        """Setup readline history length."""
        readline.set_history_length(history.max_length)

    def run(self) -> None:
        """Run the REPL loop until exit or end of input."""
        self.running = True
        self._print_welcome()
        try:
            while self.running:
                try:
                    line = self.input_fn(self.prompt).strip()
                    if not line:
                        continue
                    self._execute_line(line)
                except EOFError:
                    # Ctrl+D
                    print()
                    break
                except KeyboardInterrupt:
                    # Ctrl+C
                    print()
                    continue
        finally:
            self.running = False
            self.engine.close()

    def _print_welcome(self) -> None:
        """Print welcome message."""
        if self.toolchain_info is not None:
            print(self.toolchain_info.banner())
        print(f"Please enter '{self.engine.config.exit_keyword}' when you finish interactive rust!")
        print("Type .help for available commands")
        print()

    def _execute_line(self, line: str) -> None:
        """Execute a single line of input.

        Args:
            line: Input line
        """
        try:
            result = self.engine.process_line(line)
        except KeyboardInterrupt:
            # Interrupted mid-compile; drop the pending statement
            self.engine.rollback()
            raise
        except (EOFError, SessionSetupError, ToolchainError):
            raise
        except Exception as e:
            logger.error(f"Error: {e}")
            print(f"Error: {e}", file=sys.stderr)
            self.engine.rollback()
            return

        self._print_result(result)
        if self.engine.terminated:
            self.running = False

    def _print_result(self, result: StepResult) -> None:
        """Print a step result.

        Args:
            result: Result to print
        """
        if result.message:
            print(result.message.rstrip('\n'), file=sys.stderr)
        if result.output:
            sys.stdout.write(result.output)
            if not result.output.endswith('\n'):
                sys.stdout.write('\n')
            sys.stdout.flush()


def run_repl(engine: SessionEngine, toolchain_info: Optional[ToolchainInfo] = None) -> None:
    """Run interactive REPL.

    Args:
        engine: Session engine
        toolchain_info: Optional toolchain details for the banner
    """
    repl = REPL(engine, toolchain_info=toolchain_info)
    repl.run()


def run_script(script_path: Path, engine: SessionEngine) -> int:
    """Feed statements from a file through the engine.

    Args:
        script_path: Path to a file with one statement per line
        engine: Session engine

    Returns:
        Number of lines that were rejected or failed to compile
    """
    failures = 0
    with open(script_path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()

            if not line or line.startswith('//'):
                continue

            logger.debug(f"Executing line {line_num}: {line}")
            result = engine.process_line(line)
            if result.output:
                print(result.output, end='' if result.output.endswith('\n') else '\n')
            if result.message:
                print(f"Line {line_num}: {result.message}", file=sys.stderr)
            if not result.committed and result.message:
                failures += 1
            if engine.terminated:
                break
    return failures
