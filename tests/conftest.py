"""Shared fixtures for session tests."""

from pathlib import Path
from typing import List, Optional

import pytest

from rustrepl.lib.config_parser import SessionConfig
from rustrepl.lib.history import SessionHistory
from rustrepl.lib.toolchain import CompileResult, RunResult, ToolchainError
from rustrepl.shell.engine import SessionEngine


class ScriptedToolchain:
    """Toolchain double that returns queued outcomes.

    Each compile pops the next stderr from ``compile_stderr`` (empty string
    when the queue is exhausted) and records the source it was given.
    """

    def __init__(self):
        self.compile_stderr: List[str] = []
        self.run_stdout: List[str] = []
        self.launch_error: Optional[str] = None
        self.compiled_sources: List[str] = []
        self.runs: List[Path] = []

    def compile(self, source_path: Path, artifact_path: Path) -> CompileResult:
        self.compiled_sources.append(Path(source_path).read_text())
        stderr = self.compile_stderr.pop(0) if self.compile_stderr else ""
        return CompileResult(
            returncode=1 if stderr.startswith("error") else 0,
            stdout="",
            stderr=stderr,
            artifact_path=artifact_path
        )

    def run(self, artifact_path: Path) -> RunResult:
        if self.launch_error is not None:
            raise ToolchainError(self.launch_error)
        self.runs.append(artifact_path)
        stdout = self.run_stdout.pop(0) if self.run_stdout else ""
        return RunResult(returncode=0, stdout=stdout, stderr="")


class ScriptedPrompt:
    """Prompt double answering version questions from a queue."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.questions: List[str] = []

    def __call__(self, question: str) -> str:
        self.questions.append(question)
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer


@pytest.fixture
def toolchain():
    return ScriptedToolchain()


@pytest.fixture
def config(tmp_path):
    return SessionConfig(cache_dir=tmp_path / "cache")


@pytest.fixture
def history(config):
    return SessionHistory(config.get_history_file(), config.history_length)


@pytest.fixture
def make_engine(tmp_path, config, toolchain, history):
    """Factory for engines wired to the scripted toolchain."""
    engines = []

    def factory(prompt=None, **overrides):
        session_config = config.model_copy(update=overrides) if overrides else config
        engine = SessionEngine(
            session_config,
            toolchain=toolchain,
            prompt_fn=prompt or ScriptedPrompt(),
            history=history,
            workdir=tmp_path
        )
        engines.append(engine)
        return engine

    yield factory

    for engine in engines:
        engine.close()
