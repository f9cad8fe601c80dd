"""rust-repl library modules.

Program state, configuration, toolchain access and history.
"""

__all__ = [
    "config_parser",
    "diagnostics",
    "history",
    "program",
    "toolchain",
]
