"""Tests for session configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from rustrepl.cli import generate_sample_config, resolve_config
from rustrepl.lib.config_parser import (
    ConfigParser,
    SessionConfig,
    SuppressionMode,
    ToolchainConfig,
    load_config,
)


class TestSessionConfig:
    """Test configuration models."""

    def test_defaults(self):
        """Test default values match the classic session layout."""
        config = SessionConfig()
        assert config.cache_dir == Path(".rust_repl")
        assert config.get_history_file() == Path(".rust_repl") / "history.log"
        assert config.prompt == "rust>> "
        assert config.exit_keyword == "exit"
        assert config.fast_track_bindings is True
        assert config.warning_suppression == SuppressionMode.ALL
        assert config.toolchain.compiler == "rustc"
        assert config.toolchain.crate_name == "temp_rust"

    def test_explicit_history_file(self, tmp_path):
        config = SessionConfig(history_file=tmp_path / "h.log")
        assert config.get_history_file() == tmp_path / "h.log"

    def test_suppression_case_insensitive(self):
        assert SessionConfig(warning_suppression="ANY").warning_suppression == SuppressionMode.ANY

    def test_invalid_suppression(self):
        with pytest.raises(ValidationError):
            SessionConfig(warning_suppression="sometimes")

    def test_namespace_separators_stripped(self):
        """Test 'std::' style namespaces are stored as bare roots."""
        config = SessionConfig(builtin_namespaces=["std::", "core"])
        assert config.builtin_namespaces == ["std", "core"]

    def test_invalid_history_length(self):
        with pytest.raises(ValidationError):
            SessionConfig(history_length=0)

    def test_extra_args_string(self):
        """Test extra_args accepts a whitespace-separated string."""
        assert ToolchainConfig(extra_args="-C opt-level=2").extra_args == ["-C", "opt-level=2"]

    def test_negative_timeout(self):
        with pytest.raises(ValidationError):
            ToolchainConfig(compile_timeout=-1)


class TestConfigParser:
    """Test YAML loading."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigParser(tmp_path / "nope.yaml")

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == SessionConfig()

    def test_load_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "prompt: '>> '\n"
            "warning_suppression: any\n"
            "toolchain:\n"
            "  compiler: /opt/rust/bin/rustc\n"
            "  run_timeout: 5\n"
        )
        config = load_config(path)
        assert config.prompt == ">> "
        assert config.warning_suppression == SuppressionMode.ANY
        assert config.toolchain.compiler == "/opt/rust/bin/rustc"
        assert config.toolchain.run_timeout == 5

    def test_sample_config_is_valid(self, tmp_path):
        """Test the generated sample parses to the defaults."""
        path = tmp_path / "sample" / "config.yaml"
        generate_sample_config(path)
        assert load_config(path) == SessionConfig()


class TestResolveConfig:
    """Test how CLI flags and config files combine."""

    def test_defaults_without_files(self, tmp_path):
        config = resolve_config(None, tmp_path / "cache")
        assert config.cache_dir == tmp_path / "cache"
        assert config.get_history_file() == tmp_path / "cache" / "history.log"
        assert config.get_config_file() == tmp_path / "cache" / "config.yaml"

    def test_config_in_cache_dir(self, tmp_path):
        """Test config.yaml inside the cache dir is picked up."""
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir()
        (cache_dir / "config.yaml").write_text("exit_keyword: quit\n")

        config = resolve_config(None, cache_dir)

        assert config.exit_keyword == "quit"
        assert config.cache_dir == cache_dir

    def test_explicit_config_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            resolve_config(tmp_path / "missing.yaml", None)
