# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for viperctl tests.

The important one is `recording_runner`: a stand-in for run_command that
never starts a process. It records every stage it is handed and answers with
a scripted result, so pipeline ordering and short-circuiting can be asserted
by call count.
"""

import textwrap
from pathlib import Path
from typing import Callable, Optional

import pytest

from viperctl.config.schema import ViperConfig, default_config
from viperctl.logging.logger import detach_log_file
from viperctl.runtime.bootstrap import RuntimeContext, bootstrap
from viperctl.runtime.environment import HostProfile
from viperctl.toolchain.models import FailureKind, PipelineStage, StageName, StageResult


class RecordingRunner:
    """
    Test double for the stage runner.

    By default every stage succeeds with exit code 0. `fail(stage, ...)`
    scripts a failure for every stage with that name.
    """

    def __init__(self) -> None:
        self.calls: list[PipelineStage] = []
        self.cwds: list[Path] = []
        self.timeouts: list[Optional[float]] = []
        self._failures: dict[StageName, tuple[int, FailureKind, str]] = {}
        self._command_failures: dict[str, tuple[int, FailureKind, str]] = {}
        self.on_call: Optional[Callable[[PipelineStage], None]] = None

    def fail(
        self,
        stage: StageName,
        exit_code: int = 1,
        failure: FailureKind = FailureKind.STAGE_EXIT,
        stderr: str = "",
    ) -> None:
        self._failures[stage] = (exit_code, failure, stderr)

    def fail_command(
        self,
        executable: str,
        exit_code: int = 127,
        failure: FailureKind = FailureKind.STAGE_LAUNCH,
        stderr: str = "",
    ) -> None:
        """Script a failure for every stage whose argv starts with `executable`."""
        self._command_failures[executable] = (exit_code, failure, stderr)

    def __call__(
        self,
        stage: PipelineStage,
        cwd: Path,
        timeout_seconds: Optional[float] = None,
    ) -> StageResult:
        self.calls.append(stage)
        self.cwds.append(cwd)
        self.timeouts.append(timeout_seconds)
        if self.on_call is not None:
            self.on_call(stage)

        scripted = self._command_failures.get(stage.argv[0]) or self._failures.get(stage.name)
        if scripted is not None:
            exit_code, failure, stderr = scripted
            return StageResult(
                stage=stage.name,
                argv=stage.argv,
                exit_code=exit_code,
                stdout="",
                stderr=stderr,
                elapsed_seconds=0.0,
                failure=failure,
            )
        return StageResult(
            stage=stage.name,
            argv=stage.argv,
            exit_code=0,
            stdout="",
            stderr="",
            elapsed_seconds=0.0,
        )

    def count(self, stage: StageName) -> int:
        return sum(1 for call in self.calls if call.name is stage)

    @property
    def names(self) -> list[StageName]:
        return [call.name for call in self.calls]


@pytest.fixture(autouse=True)
def _close_package_log_file() -> None:
    """A global.log_file attached by one test must not collect the next test's logs."""
    yield  # type: ignore[misc]
    detach_log_file()


@pytest.fixture()
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture()
def make_context(tmp_path: Path) -> Callable[..., RuntimeContext]:
    """
    Build a RuntimeContext for a fake host without touching the real platform.

    Usage: make_context("Linux", "x86_64") or make_context("Darwin", "arm64", config=...)
    """

    def _make(
        os_name: str = "Linux",
        arch_name: str = "x86_64",
        config: Optional[ViperConfig] = None,
    ) -> RuntimeContext:
        return bootstrap(
            config or default_config(),
            tmp_path,
            host=HostProfile(os_name=os_name, arch_name=arch_name),
        )

    return _make


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """The smallest config that passes schema validation."""
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          project_name: "viper-test"
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """Valid YAML that fails schema validation (missing config_version)."""
    config_content = textwrap.dedent("""\
        global:
          project_name: "viper-test"
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
