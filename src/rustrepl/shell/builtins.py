"""Built-in commands for the shell.

Provides dot-prefixed meta commands like .help, .show and .history that
inspect or reset the session instead of being compiled.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)


class BuiltinCommand:
    """A named meta command."""

    def __init__(self, name: str, description: str, func: Callable):
        """Initialize builtin command.

        Args:
            name: Command name (with or without leading dot)
            description: Help text
            func: Function to execute
        """
        self.name = name.lstrip('.')
        self.description = description
        self.func = func

    def execute(self, *args: Any, **kwargs: Any) -> Any:
        return self.func(*args, **kwargs)


class BuiltinRegistry:
    """Registry of built-in shell commands."""

    def __init__(self):
        self.commands: Dict[str, BuiltinCommand] = {}

    def register(self, name: str, description: str) -> Callable:
        """Decorator to register a built-in command.

        Args:
            name: Command name
            description: Help text

        Returns:
            Decorator function
        """
        def decorator(func: Callable) -> Callable:
            cmd = BuiltinCommand(name, description, func)
            self.commands[cmd.name] = cmd
            logger.debug(f"Registered builtin: .{cmd.name}")
            return func
        return decorator

    def get(self, name: str) -> BuiltinCommand | None:
        return self.commands.get(name.lstrip('.'))

    def list_commands(self) -> list[BuiltinCommand]:
        return list(self.commands.values())


_registry = BuiltinRegistry()


def get_registry() -> BuiltinRegistry:
    """Get the global builtin registry."""
    return _registry


@_registry.register("help", "Show help for available commands")
def help_command(args: str = None, context: Any = None) -> str:
    """Show help information.

    Args:
        args: Ignored
        context: Session engine (unused, for compatibility)

    Returns:
        Help text
    """
    exit_keyword = context.config.exit_keyword if context is not None else "exit"
    lines = [
        "Interactive Rust - each statement is compiled with everything entered before it",
        "",
        "Available built-in commands (prefix with .):",
        "",
    ]
    for cmd in get_registry().list_commands():
        lines.append(f"  .{cmd.name:<15} {cmd.description}")

    lines.extend([
        "",
        "Statements must end with ';':",
        "  let x = 5;",
        "  println!(\"{}\", x);",
        "",
        "Imports outside std/core/alloc ask for a crate version:",
        "  use rand;",
        "",
        f"Use '{exit_keyword}' or Ctrl+D to quit",
    ])
    return '\n'.join(lines)


@_registry.register("show", "Show the committed program source")
def show_command(args: str = None, context: Any = None) -> str:
    """Show the program accepted so far.

    Args:
        args: Ignored
        context: Session engine

    Returns:
        Rendered source plus pinned crate versions
    """
    if context is None:
        return "No active session"

    lines = [context.committed.render().rstrip('\n')]
    crates = context.committed.external_crates()
    if crates:
        lines.extend(["", "External crates:"])
        for path, version in crates.items():
            lines.append(f"  {path} = \"{version}\"")
    return '\n'.join(lines)


@_registry.register("history", "Show accepted input history")
def history_command(args: str = None, context: Any = None) -> str:
    """Show accepted input history.

    Args:
        args: Ignored
        context: Session engine

    Returns:
        History listing
    """
    if context is None or context.history is None or not len(context.history):
        return "No command history"

    lines = ["Command history:"]
    for i, entry in enumerate(context.history.get_entries(), 1):
        lines.append(f"  {i}. {entry}")
    return '\n'.join(lines)


@_registry.register("reset", "Discard every accepted statement and import")
def reset_command(args: str = None, context: Any = None) -> str:
    if context is None:
        return "No active session"
    context.reset()
    return "Program reset"


@_registry.register("exit", "Exit the shell")
def exit_command(args: str = None, context: Any = None) -> str:
    """Exit the shell.

    Args:
        args: Ignored
        context: Session engine

    Returns:
        Farewell message
    """
    logger.info("Exiting shell...")
    if context is not None:
        return context.terminate().output
    return "Bye..."


def is_builtin(command: str) -> bool:
    """Check if a command is a built-in.

    Args:
        command: Command name

    Returns:
        True if builtin
    """
    return _registry.get(command) is not None


def execute_builtin(command: str, args: str = None, **kwargs: Any) -> Any:
    """Execute a built-in command.

    Args:
        command: Command name
        args: Text after the command name, or None
        **kwargs: Keyword arguments (context)

    Returns:
        Command result

    Raises:
        ValueError: If command not found
    """
    cmd = _registry.get(command)
    if cmd is None:
        raise ValueError(f"Unknown built-in command: {command}")
    return cmd.execute(args, **kwargs)
