# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the runtime bootstrap.

The host must be read exactly once per bootstrap and the result carried in
the context; nothing downstream should need the platform module.
"""

import json
from pathlib import Path

import pytest

from viperctl.config.schema import ViperConfig, default_config
from viperctl.logging.logger import get_logger
from viperctl.runtime import bootstrap as bootstrap_module
from viperctl.runtime.bootstrap import bootstrap
from viperctl.runtime.environment import ExecutionMode, HostProfile, LinkerChoice
from viperctl.toolchain.invoker import build_stages, run_context_pipeline
from viperctl.toolchain.models import StageName


class TestBootstrap:
    def test_reads_host_once(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []

        def fake_resolve() -> HostProfile:
            calls.append(1)
            return HostProfile("Darwin", "arm64")

        monkeypatch.setattr(bootstrap_module, "resolve_host_profile", fake_resolve)

        context = bootstrap(default_config(), tmp_path)

        assert len(calls) == 1
        assert context.host == HostProfile("Darwin", "arm64")
        assert context.decision.linker is LinkerChoice.CROSS_X86_64_ELF
        assert context.decision.execution_mode is ExecutionMode.EMULATED

    def test_explicit_host_skips_detection(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def explode() -> HostProfile:
            raise AssertionError("host should not be queried")

        monkeypatch.setattr(bootstrap_module, "resolve_host_profile", explode)

        context = bootstrap(default_config(), tmp_path, host=HostProfile("Linux", "x86_64"))
        assert context.decision.execution_mode is ExecutionMode.NATIVE

    def test_binary_path_is_under_project_root(self, make_context) -> None:  # type: ignore[no-untyped-def]
        context = make_context()
        assert context.binary_path == context.project_root / "output"

    def test_timeout_comes_from_pipeline_config(self, make_context) -> None:  # type: ignore[no-untyped-def]
        assert make_context().timeout_seconds is None



def _config_with_log_file(log_file: str) -> ViperConfig:
    return ViperConfig.model_validate({
        "global": {"config_version": "1.0.0", "log_file": log_file},
    })


class TestLogFile:
    def test_pipeline_failure_reaches_log_file(self, make_context, recording_runner) -> None:  # type: ignore[no-untyped-def]
        context = make_context(config=_config_with_log_file("logs/viper.log"))
        recording_runner.fail(StageName.LINK, exit_code=1)

        run_context_pipeline(context, build_stages(context), runner=recording_runner)

        lines = (context.project_root / "logs" / "viper.log").read_text(encoding="utf-8").splitlines()
        messages = [json.loads(line)["msg"] for line in lines]
        assert "viperctl bootstrap complete" in messages
        assert "Pipeline aborted" in messages

    def test_loggers_created_later_also_write_to_file(self, make_context) -> None:  # type: ignore[no-untyped-def]
        context = make_context(config=_config_with_log_file("viper.log"))

        get_logger("viperctl.late_module").warning("late record")

        text = (context.project_root / "viper.log").read_text(encoding="utf-8")
        assert "late record" in text

    def test_no_log_file_by_default(self, make_context) -> None:  # type: ignore[no-untyped-def]
        context = make_context()
        assert list(context.project_root.iterdir()) == []
