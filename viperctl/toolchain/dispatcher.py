# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Execution dispatcher: run the linked binary natively or inside a container.

The compiler emits x86_64-only binaries. On an x86_64 host we launch the
binary directly. Anywhere else we hand it to a container runtime:

    docker run --rm --platform linux/amd64 \
        -v <project_root>:/workspace -w /workspace ubuntu:22.04 ./output

Callers see the same contract either way: a StageResult with the exit code,
and output either shown on the terminal or dropped. The one difference is how
a launch failure is tagged. If the container runtime itself is missing the
result says EMULATION_UNAVAILABLE, which is distinct from the binary inside
exiting non-zero (STAGE_EXIT).
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

from viperctl.config.schema import ContainerConfig
from viperctl.logging.logger import get_logger
from viperctl.runtime.environment import ExecutionMode
from viperctl.toolchain.models import (
    FailureKind,
    OutputMode,
    PipelineStage,
    StageName,
    StageResult,
)
from viperctl.toolchain.runner import StageRunner, run_command

if TYPE_CHECKING:
    from viperctl.runtime.bootstrap import RuntimeContext

logger = get_logger(__name__)


def _container_binary_path(binary_path: Path, project_root: Path) -> str:
    """Where the binary shows up inside the container's working directory."""
    try:
        relative = binary_path.relative_to(project_root)
    except ValueError as err:
        raise ValueError(
            f"Binary {binary_path} is outside the project root {project_root}; "
            "it would not be visible inside the container"
        ) from err
    return f"./{relative.as_posix()}"


def execution_command(
    binary_path: Path,
    mode: ExecutionMode,
    container: ContainerConfig,
    project_root: Path,
) -> tuple[str, ...]:
    """Build the argv that runs `binary_path` under `mode`."""
    if mode is ExecutionMode.NATIVE:
        return (str(binary_path),)

    argv = [container.runtime, "run", "--rm"]
    if container.platform:
        argv += ["--platform", container.platform]
    argv += [
        "-v",
        f"{project_root}:{container.mount_path}",
        "-w",
        container.mount_path,
        container.image,
        _container_binary_path(binary_path, project_root),
    ]
    return tuple(argv)


def execution_stage(
    binary_path: Path,
    mode: ExecutionMode,
    container: ContainerConfig,
    project_root: Path,
    suppress_output: bool = False,
) -> PipelineStage:
    """The EXECUTE stage descriptor, ready to sit at the end of a pipeline."""
    return PipelineStage(
        name=StageName.EXECUTE,
        argv=execution_command(binary_path, mode, container, project_root),
        output_mode=OutputMode.DISCARD if suppress_output else OutputMode.PASSTHROUGH,
        launch_failure=(
            FailureKind.EMULATION_UNAVAILABLE
            if mode is ExecutionMode.EMULATED
            else FailureKind.STAGE_LAUNCH
        ),
    )


def context_execution_stage(context: "RuntimeContext", suppress_output: bool = False) -> PipelineStage:
    """execution_stage() with everything taken from the runtime context."""
    return execution_stage(
        context.binary_path,
        context.decision.execution_mode,
        context.config.container,
        context.project_root,
        suppress_output=suppress_output,
    )


def execute(
    binary_path: Path,
    mode: ExecutionMode,
    suppress_output: bool = False,
    *,
    project_root: Path,
    container: ContainerConfig,
    timeout_seconds: Optional[float] = None,
    runner: StageRunner = run_command,
) -> StageResult:
    """
    Run the binary and wait for it.

    Args:
        binary_path: Absolute path of the linked executable.
        mode: NATIVE launches it directly, EMULATED goes through the container.
        suppress_output: Drop stdout/stderr (benchmarks) instead of passing
                         them through to the terminal (interactive runs).
        project_root: Working directory, and the directory mounted into the container.
        container: Container runtime settings, only read in EMULATED mode.
        timeout_seconds: Optional limit on the run.
        runner: Process runner; tests swap in a double.
    """
    stage = execution_stage(binary_path, mode, container, project_root, suppress_output)

    logger.info(
        "Executing binary",
        extra={"binary": str(binary_path), "mode": mode.value, "argv": list(stage.argv)},
    )

    result = runner(stage, project_root, timeout_seconds)

    if result.failure is FailureKind.EMULATION_UNAVAILABLE:
        logger.error(
            "Container runtime unavailable for emulated execution",
            extra={"runtime": container.runtime},
        )
    return result
