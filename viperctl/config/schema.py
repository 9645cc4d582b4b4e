# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for viperctl.

Each config section is a frozen pydantic model:
  - frozen=True: immutable after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

The defaults reproduce the project's historical Makefile exactly, so a repo
without a viper.yaml behaves the way `make test` / `make benchmark` always did.
"""

from pathlib import PurePosixPath
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from viperctl.logging.logger import _VALID_LOG_LEVELS


class GlobalConfig(BaseModel):
    """Cross-cutting settings: project identity and observability."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    project_name: str = Field(
        default="viper", description="Human-readable project identifier"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output, relative to project root",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(sorted(_VALID_LOG_LEVELS))}, got '{value}'"
            )
        return upper


class ToolchainConfig(BaseModel):
    """
    External programs that make up the compile → assemble → link chain.

    Commands are argv lists, never shell strings. The compiler frontend is a
    black box: run it in the project root and it writes the assembly file.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    build_command: list[str] = Field(
        default_factory=lambda: ["cargo", "build"],
        min_length=1,
        description="Builds the compiler itself (the `build` command)",
    )
    compile_command: list[str] = Field(
        default_factory=lambda: ["cargo", "run"],
        min_length=1,
        description="Runs the compiler frontend, producing the assembly artifact",
    )
    assembler: str = Field(default="nasm", min_length=1)
    assembler_format: str = Field(default="elf64", min_length=1)
    gnu_linker: str = Field(
        default="ld", min_length=1, description="Linker used on every host but macOS"
    )
    cross_linker: str = Field(
        default="x86_64-elf-ld",
        min_length=1,
        description="Cross-target linker used on macOS hosts",
    )
    linker_emulation: str = Field(default="elf_x86_64", min_length=1)


class ArtifactConfig(BaseModel):
    """File names of everything the pipeline generates, relative to project root."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    assembly: str = Field(default="output.asm", min_length=1)
    object: str = Field(default="output.o", min_length=1)
    binary: str = Field(default="output", min_length=1)

    @field_validator("assembly", "object", "binary")
    @classmethod
    def _check_relative(cls, value: str) -> str:
        path = PurePosixPath(value)
        if path.is_absolute() or ".." in path.parts or path.name in ("", "."):
            raise ValueError(
                f"artifact names must be file paths inside the project root, got '{value}'"
            )
        return value

    def names(self) -> tuple[str, str, str]:
        """All three artifact names in pipeline order."""
        return (self.assembly, self.object, self.binary)


class ContainerConfig(BaseModel):
    """
    How to run the x86_64 binary on hosts that cannot execute it directly.

    The project root is mounted read-write at mount_path, which is also the
    container's working directory.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    runtime: str = Field(default="docker", min_length=1)
    image: str = Field(default="ubuntu:22.04", min_length=1)
    mount_path: str = Field(default="/workspace")
    platform: Optional[str] = Field(
        default="linux/amd64",
        description="Value for --platform; null omits the flag",
    )

    @field_validator("mount_path")
    @classmethod
    def _check_mount_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"mount_path must be absolute, got '{value}'")
        return value


class PipelineConfig(BaseModel):
    """Execution limits applied to every external process."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-process timeout; null waits forever",
    )


class BenchmarkConfig(BaseModel):
    """
    The two reference subjects the Viper binary is compared against.

    include_build_time controls whether the Viper sample covers the whole
    compile + assemble + link + run cycle (default) or only the run.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    python_interpreter: str = Field(default="python3", min_length=1)
    python_script: str = Field(default="benchmarks/test.py", min_length=1)
    c_compiler: str = Field(default="gcc", min_length=1)
    c_flags: list[str] = Field(default_factory=lambda: ["-O3"])
    c_source: str = Field(default="benchmarks/test.c", min_length=1)
    c_binary: str = Field(default="example_c", min_length=1)
    include_build_time: bool = Field(default=True)


class ViperConfig(BaseModel):
    """
    Top-level config container.

    Only `global.config_version` is required; every other section falls back
    to the defaults above when absent from the YAML.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    artifacts: ArtifactConfig = Field(default_factory=ArtifactConfig)
    container: ContainerConfig = Field(default_factory=ContainerConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    benchmark: BenchmarkConfig = Field(default_factory=BenchmarkConfig)


CURRENT_CONFIG_VERSION = "1.0.0"


def default_config() -> ViperConfig:
    """The configuration used when no YAML file is available."""
    return ViperConfig.model_validate({"global": {"config_version": CURRENT_CONFIG_VERSION}})
