"""Configuration parser for REPL sessions.

Parses and validates the optional config.yaml that controls the cache
location, prompts, toolchain invocation and statement policies.
"""

from __future__ import annotations

import yaml
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, field_validator


class SuppressionMode(str, Enum):
    """How compiler warnings are filtered before printing."""
    ALL = "all"
    ANY = "any"
    NONE = "none"


class ToolchainConfig(BaseModel):
    """External compiler configuration."""
    compiler: str = "rustc"
    probe: str = "cargo"
    crate_name: str = "temp_rust"
    artifact_name: str = "temp_exe"
    extra_args: List[str] = Field(default_factory=list)
    compile_timeout: Optional[float] = None
    run_timeout: Optional[float] = None

    @field_validator('extra_args', mode='before')
    @classmethod
    def split_extra_args(cls, v: Any) -> Any:
        """Allow extra_args as a single whitespace-separated string."""
        if v is None:
            return []
        if isinstance(v, str):
            return v.split()
        return v

    @field_validator('compile_timeout', 'run_timeout')
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Ensure timeouts are positive."""
        if v is not None and v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v


class SessionConfig(BaseModel):
    """Top-level session configuration."""
    cache_dir: Path = Path(".rust_repl")
    history_file: Optional[Path] = None
    history_length: int = 1000
    prompt: str = "rust>> "
    version_prompt: str = "What version you want to use?: "
    exit_keyword: str = "exit"
    builtin_namespaces: List[str] = Field(default_factory=lambda: ["std", "core", "alloc"])
    fast_track_bindings: bool = True
    warning_suppression: SuppressionMode = SuppressionMode.ALL
    run_on_warning: bool = False
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)

    @field_validator('warning_suppression', mode='before')
    @classmethod
    def normalize_suppression(cls, v: Any) -> Any:
        """Accept suppression modes in any case."""
        if isinstance(v, str):
            v = v.strip().lower()
            valid_modes = [m.value for m in SuppressionMode]
            if v not in valid_modes:
                raise ValueError(f"warning_suppression must be one of {valid_modes}, got '{v}'")
        return v

    @field_validator('builtin_namespaces')
    @classmethod
    def strip_namespace_separators(cls, v: List[str]) -> List[str]:
        """Store namespaces as bare roots (e.g., 'std::' -> 'std')."""
        return [ns.rstrip(':') for ns in v if ns.rstrip(':')]

    @field_validator('history_length')
    @classmethod
    def validate_history_length(cls, v: int) -> int:
        """Ensure history length is positive."""
        if v <= 0:
            raise ValueError(f"history_length must be positive, got {v}")
        return v

    def get_history_file(self) -> Path:
        """Get history log path, defaulting to a file inside cache_dir."""
        if self.history_file is not None:
            return self.history_file
        return self.cache_dir / "history.log"

    def get_config_file(self) -> Path:
        """Get the conventional config path inside cache_dir."""
        return self.cache_dir / "config.yaml"


class ConfigParser:
    """Parse and validate session configuration."""

    def __init__(self, config_path: Union[str, Path]):
        """Initialize parser with config file path.

        Args:
            config_path: Path to config.yaml file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        self.config: Optional[SessionConfig] = None
        self._raw_config: Optional[Dict[str, Any]] = None

    def parse(self) -> SessionConfig:
        """Parse and validate configuration.

        Returns:
            Validated configuration object

        Raises:
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If validation fails
        """
        with open(self.config_path) as f:
            self._raw_config = yaml.safe_load(f) or {}

        self.config = SessionConfig(**self._raw_config)
        return self.config


def load_config(config_path: Union[str, Path]) -> SessionConfig:
    """Load and parse configuration file.

    Args:
        config_path: Path to config.yaml

    Returns:
        Parsed configuration

    Example:
        >>> config = load_config(".rust_repl/config.yaml")
        >>> config.toolchain.compiler
        'rustc'
    """
    parser = ConfigParser(config_path)
    return parser.parse()
