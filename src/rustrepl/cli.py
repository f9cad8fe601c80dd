from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

from rustrepl.lib.config_parser import SessionConfig, load_config
from rustrepl.lib.history import SessionHistory
from rustrepl.lib.toolchain import RustcToolchain, ToolchainError, probe_toolchain
from rustrepl.shell.engine import SessionEngine, SessionSetupError
from rustrepl.shell.repl import run_repl, run_script


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging.

    Args:
        verbose: Enable debug logging
        quiet: Only log errors
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def resolve_config(config_path: Optional[Path], cache_dir: Optional[Path]) -> SessionConfig:
    """Build the session configuration from flags and config files.

    An explicit --config wins; otherwise config.yaml inside the cache
    directory is used when present, and defaults apply when it is not.

    Args:
        config_path: Path given with --config
        cache_dir: Directory given with --cache-dir

    Returns:
        Session configuration

    Raises:
        FileNotFoundError: If an explicit config file does not exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If validation fails
    """
    if config_path is not None:
        config = load_config(config_path)
    else:
        config = SessionConfig() if cache_dir is None else SessionConfig(cache_dir=cache_dir)
        default_file = config.get_config_file()
        if default_file.exists():
            logger.debug(f"Using config file {default_file}")
            config = load_config(default_file)

    if cache_dir is not None:
        config = config.model_copy(update={"cache_dir": cache_dir})
    return config


def generate_sample_config(output_path: Path) -> None:
    """Generate a sample configuration file.

    Args:
        output_path: Path to write the sample config
    """
    sample_config = """# Directory for history and this config file
cache_dir: .rust_repl

# History log (defaults to <cache_dir>/history.log)
#history_file: .rust_repl/history.log
history_length: 1000

prompt: "rust>> "
version_prompt: "What version you want to use?: "
exit_keyword: exit

# Imports under these roots need no crate version
builtin_namespaces: [std, core, alloc]

# Commit 'let' bindings without compiling them
fast_track_bindings: true

# Hide "unused" warnings:
#   all  - only when both unused import and unused variable appear
#   any  - when either appears
#   none - never
warning_suppression: all

# Also run the program when compilation only produced warnings
run_on_warning: false

toolchain:
  compiler: rustc
  probe: cargo
  crate_name: temp_rust
  artifact_name: temp_exe
  extra_args: []
  # Seconds; unset means wait forever
  #compile_timeout: 60
  #run_timeout: 10
"""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(sample_config)
    logger.info(f"Sample configuration written to {output_path}")
    print(f"✓ Sample configuration written to {output_path}")


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = argparse.ArgumentParser(
        description="Interactive Rust: compile and run one statement at a time",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '--config', '-c',
        type=Path,
        default=None,
        help='Path to configuration file (default: <cache-dir>/config.yaml if present)'
    )
    parser.add_argument(
        '--cache-dir',
        type=Path,
        default=None,
        help='Directory for history and config (default: .rust_repl)'
    )
    parser.add_argument(
        '--generate-config',
        type=Path,
        metavar='PATH',
        help='Generate a sample configuration file and exit'
    )
    parser.add_argument(
        '--script',
        type=Path,
        metavar='FILE',
        help='Run statements from a file instead of reading the terminal'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose (debug) logging'
    )
    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Only log errors'
    )

    args = parser.parse_args()
    setup_logging(args.verbose, args.quiet)

    if args.generate_config:
        generate_sample_config(args.generate_config)
        return 0

    try:
        config = resolve_config(args.config, args.cache_dir)
    except Exception as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        config.cache_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Failed to create cache dir due to {e}", file=sys.stderr)
        return 1

    try:
        toolchain_info = probe_toolchain(config.toolchain)
    except ToolchainError as e:
        print(e, file=sys.stderr)
        return 1

    history = SessionHistory(config.get_history_file(), config.history_length)
    history.load()

    try:
        engine = SessionEngine(
            config,
            toolchain=RustcToolchain(config.toolchain),
            history=history
        )
    except SessionSetupError as e:
        print(e, file=sys.stderr)
        return 1

    try:
        if args.script:
            with engine:
                failures = run_script(args.script, engine)
            return 1 if failures else 0
        run_repl(engine, toolchain_info=toolchain_info)
    except (SessionSetupError, ToolchainError, OSError) as e:
        logger.error(f"Session aborted: {e}")
        print(e, file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
