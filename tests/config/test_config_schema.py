# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for individual schema sections and their validators.
"""

import pytest
from pydantic import ValidationError

from viperctl.config.schema import (
    ArtifactConfig,
    BenchmarkConfig,
    ContainerConfig,
    GlobalConfig,
    PipelineConfig,
    ToolchainConfig,
    default_config,
)


class TestGlobalConfig:
    def test_log_level_is_normalized(self) -> None:
        config = GlobalConfig(config_version="1.0.0", log_level="debug")
        assert config.log_level == "DEBUG"

    def test_bad_log_level(self) -> None:
        with pytest.raises(ValidationError, match="log_level"):
            GlobalConfig(config_version="1.0.0", log_level="LOUD")


class TestToolchainConfig:
    def test_defaults_match_makefile(self) -> None:
        config = ToolchainConfig()
        assert config.build_command == ["cargo", "build"]
        assert config.gnu_linker == "ld"
        assert config.cross_linker == "x86_64-elf-ld"
        assert config.assembler_format == "elf64"
        assert config.linker_emulation == "elf_x86_64"

    def test_empty_command_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ToolchainConfig(compile_command=[])


class TestArtifactConfig:
    @pytest.mark.parametrize("name", ["../output", "/tmp/output", "build/../../x", "."])
    def test_names_must_stay_in_project(self, name: str) -> None:
        with pytest.raises(ValidationError, match="inside the project root"):
            ArtifactConfig(binary=name)

    def test_subdirectory_names_are_allowed(self) -> None:
        config = ArtifactConfig(binary="build/output")
        assert config.names()[-1] == "build/output"


class TestContainerConfig:
    def test_defaults(self) -> None:
        config = ContainerConfig()
        assert config.runtime == "docker"
        assert config.mount_path == "/workspace"
        assert config.platform == "linux/amd64"

    def test_relative_mount_path_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="absolute"):
            ContainerConfig(mount_path="workspace")


class TestPipelineConfig:
    @pytest.mark.parametrize("value", [0, -5])
    def test_timeout_must_be_positive(self, value: float) -> None:
        with pytest.raises(ValidationError):
            PipelineConfig(timeout_seconds=value)


class TestBenchmarkConfig:
    def test_build_time_included_by_default(self) -> None:
        assert BenchmarkConfig().include_build_time is True


def test_default_config_is_complete() -> None:
    config = default_config()
    assert config.global_config.config_version == "1.0.0"
    assert config.container.image == "ubuntu:22.04"
