# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Data models for the toolchain pipeline.

A pipeline is an ordered list of PipelineStage descriptors. Each stage names
one external command; the invoker runs them and records a StageResult per
attempt. Everything here is frozen: results describe what already happened.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class StageName(Enum):
    BUILD = "build"
    COMPILE = "compile"
    ASSEMBLE = "assemble"
    LINK = "link"
    EXECUTE = "execute"


class OutputMode(Enum):
    """What happens to a child's stdout/stderr."""

    CAPTURE = "capture"
    PASSTHROUGH = "passthrough"
    DISCARD = "discard"


class FailureKind(Enum):
    STAGE_LAUNCH = "stage_launch"
    STAGE_EXIT = "stage_exit"
    TIMEOUT = "timeout"
    EMULATION_UNAVAILABLE = "emulation_unavailable"


@dataclass(frozen=True)
class PipelineStage:
    """One external command in the pipeline."""

    name: StageName
    argv: tuple[str, ...]
    output_mode: OutputMode = OutputMode.CAPTURE
    launch_failure: FailureKind = FailureKind.STAGE_LAUNCH

    def __post_init__(self) -> None:
        if not self.argv:
            raise ValueError(f"Stage {self.name.value} has an empty command")
        if self.launch_failure not in (FailureKind.STAGE_LAUNCH, FailureKind.EMULATION_UNAVAILABLE):
            raise ValueError(
                f"launch_failure must describe a launch problem, got {self.launch_failure.value}"
            )


@dataclass(frozen=True)
class StageResult:
    """What came back from running one stage's command."""

    stage: StageName
    argv: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str
    elapsed_seconds: float
    failure: Optional[FailureKind] = None

    @property
    def success(self) -> bool:
        return self.failure is None

    @property
    def diagnostics(self) -> str:
        """Captured output, stdout first. Empty for passthrough or discarded output."""
        parts = [text for text in (self.stdout, self.stderr) if text]
        return "\n".join(part.rstrip("\n") for part in parts)


@dataclass(frozen=True)
class PipelineResult:
    """
    Outcome of a full pipeline run.

    `results` holds one entry per attempted stage, in order. When a stage
    fails it is the last entry and `failed_stage` points at it; stages after
    it were never started.
    """

    results: tuple[StageResult, ...] = field(default_factory=tuple)

    @property
    def failed_stage(self) -> Optional[StageResult]:
        for result in self.results:
            if not result.success:
                return result
        return None

    @property
    def success(self) -> bool:
        return self.failed_stage is None

    @property
    def last_result(self) -> Optional[StageResult]:
        return self.results[-1] if self.results else None

    @property
    def exit_code(self) -> int:
        """Exit code of the failing stage, or of the last stage on success."""
        failed = self.failed_stage
        if failed is not None:
            return failed.exit_code
        last = self.last_result
        return last.exit_code if last is not None else 0

    def raise_for_failure(self) -> None:
        """Raise the exception matching the first failure, if there was one."""
        failed = self.failed_stage
        if failed is None:
            return

        from viperctl.toolchain.exceptions import error_for_result

        raise error_for_result(failed)
