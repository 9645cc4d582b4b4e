# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Toolchain invoker: build the stage list and run it, stopping at the first failure.

The fixed Viper pipeline is:

    compile   cargo run                          -> output.asm
    assemble  nasm -f elf64 output.asm -o output.o
    link      ld -m elf_x86_64 output.o -o output  (x86_64-elf-ld on macOS)
    execute   ./output, or the container equivalent

Stages are data. `run_pipeline` is the only loop, so adding or reordering a
stage means editing the list in `build_toolchain_stages`, not the control flow.
Each stage's output is the next one's only input, so nothing runs in parallel
and a failed stage ends the run. Artifacts from stages that succeeded are left
on disk for inspection; `viperctl clean` is the only thing that removes them.
"""

from pathlib import Path
from typing import Optional, Sequence

from viperctl.logging.logger import get_logger
from viperctl.runtime.bootstrap import RuntimeContext
from viperctl.runtime.environment import LinkerChoice
from viperctl.toolchain.dispatcher import context_execution_stage
from viperctl.toolchain.models import (
    OutputMode,
    PipelineResult,
    PipelineStage,
    StageName,
    StageResult,
)
from viperctl.toolchain.runner import StageRunner, run_command

logger = get_logger(__name__)


def linker_executable(context: RuntimeContext) -> str:
    toolchain = context.config.toolchain
    if context.decision.linker is LinkerChoice.CROSS_X86_64_ELF:
        return toolchain.cross_linker
    return toolchain.gnu_linker


def build_stage(context: RuntimeContext) -> PipelineStage:
    """The standalone compiler-project build (`viperctl build`)."""
    return PipelineStage(
        name=StageName.BUILD,
        argv=tuple(context.config.toolchain.build_command),
        output_mode=OutputMode.PASSTHROUGH,
    )


def compile_stage(context: RuntimeContext, output_mode: OutputMode = OutputMode.CAPTURE) -> PipelineStage:
    return PipelineStage(
        name=StageName.COMPILE,
        argv=tuple(context.config.toolchain.compile_command),
        output_mode=output_mode,
    )


def build_toolchain_stages(
    context: RuntimeContext,
    output_mode: OutputMode = OutputMode.CAPTURE,
) -> list[PipelineStage]:
    """Compile, assemble and link: everything up to a runnable binary."""
    toolchain = context.config.toolchain
    artifacts = context.config.artifacts

    return [
        compile_stage(context, output_mode),
        PipelineStage(
            name=StageName.ASSEMBLE,
            argv=(
                toolchain.assembler,
                "-f",
                toolchain.assembler_format,
                artifacts.assembly,
                "-o",
                artifacts.object,
            ),
            output_mode=output_mode,
        ),
        PipelineStage(
            name=StageName.LINK,
            argv=(
                linker_executable(context),
                "-m",
                toolchain.linker_emulation,
                artifacts.object,
                "-o",
                artifacts.binary,
            ),
            output_mode=output_mode,
        ),
    ]


def build_stages(
    context: RuntimeContext,
    suppress_output: bool = False,
) -> list[PipelineStage]:
    """
    The full four-stage pipeline.

    Toolchain stages always capture their output, which keeps it off the
    terminal and lets a failure show the tool's diagnostics. The execute stage
    either passes output to the terminal or discards it, depending on
    `suppress_output`.
    """
    stages = build_toolchain_stages(context)
    stages.append(context_execution_stage(context, suppress_output=suppress_output))
    return stages


def run_pipeline(
    stages: Sequence[PipelineStage],
    cwd: Path,
    timeout_seconds: Optional[float] = None,
    runner: StageRunner = run_command,
) -> PipelineResult:
    """
    Run stages in order and stop at the first one that fails.

    Args:
        stages: Stage descriptors, in execution order.
        cwd: Working directory for every stage (the project root).
        timeout_seconds: Per-stage timeout, None for no limit.
        runner: Process runner; tests swap in a double.

    Returns:
        PipelineResult with one StageResult per attempted stage. Stages after
        a failure are never attempted and have no entry.
    """
    results: list[StageResult] = []

    for index, stage in enumerate(stages, start=1):
        logger.debug(
            "Starting stage",
            extra={
                "stage": stage.name.value,
                "position": index,
                "total": len(stages),
                "argv": list(stage.argv),
            },
        )

        result = runner(stage, cwd, timeout_seconds)
        results.append(result)

        if not result.success:
            logger.error(
                "Pipeline aborted",
                extra={
                    "stage": stage.name.value,
                    "failure": result.failure.value if result.failure else None,
                    "exit_code": result.exit_code,
                    "skipped": [s.name.value for s in stages[index:]],
                },
            )
            break

        logger.info(
            "Stage succeeded",
            extra={"stage": stage.name.value, "elapsed_seconds": round(result.elapsed_seconds, 3)},
        )

    return PipelineResult(results=tuple(results))


def run_context_pipeline(
    context: RuntimeContext,
    stages: Sequence[PipelineStage],
    runner: StageRunner = run_command,
) -> PipelineResult:
    """run_pipeline() with cwd and timeout taken from the runtime context."""
    return run_pipeline(
        stages,
        context.project_root,
        timeout_seconds=context.timeout_seconds,
        runner=runner,
    )
