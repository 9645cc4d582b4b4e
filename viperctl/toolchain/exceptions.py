# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions for toolchain and benchmark failures.

The runner itself never raises for process problems; it returns results
tagged with a FailureKind. These exceptions exist for callers that want to
bail out instead, such as a benchmark subject that must abandon its timer.
"""

from viperctl.toolchain.models import FailureKind, StageResult


class PipelineError(Exception):
    """Base for all pipeline failures. Carries the failing stage's result."""

    def __init__(self, message: str, result: StageResult) -> None:
        super().__init__(message)
        self.result = result

    @property
    def stage(self) -> str:
        return self.result.stage.value


class StageLaunchError(PipelineError):
    """The stage's executable could not be started."""


class StageExitError(PipelineError):
    """The stage's executable ran and exited non-zero."""


class StageTimeoutError(PipelineError):
    """The stage's executable did not finish within the configured timeout."""


class EmulationUnavailableError(PipelineError):
    """The container runtime needed for emulated execution could not be started."""


class BenchmarkSubjectError(Exception):
    """A benchmark subject failed before its timer could close."""

    def __init__(self, label: str, reason: str) -> None:
        super().__init__(f"{label}: {reason}")
        self.label = label
        self.reason = reason


_ERRORS_BY_KIND: dict[FailureKind, type[PipelineError]] = {
    FailureKind.STAGE_LAUNCH: StageLaunchError,
    FailureKind.STAGE_EXIT: StageExitError,
    FailureKind.TIMEOUT: StageTimeoutError,
    FailureKind.EMULATION_UNAVAILABLE: EmulationUnavailableError,
}


def describe_failure(result: StageResult) -> str:
    """One-line human description of a failed stage."""
    command = result.argv[0] if result.argv else "?"
    if result.failure is FailureKind.STAGE_LAUNCH:
        return f"{result.stage.value}: could not launch '{command}'"
    if result.failure is FailureKind.EMULATION_UNAVAILABLE:
        return f"{result.stage.value}: container runtime '{command}' is unavailable"
    if result.failure is FailureKind.TIMEOUT:
        return f"{result.stage.value}: '{command}' timed out"
    return f"{result.stage.value}: '{command}' exited with status {result.exit_code}"


def error_for_result(result: StageResult) -> PipelineError:
    if result.failure is None:
        raise ValueError(f"Stage {result.stage.value} succeeded; there is no error to build")
    return _ERRORS_BY_KIND[result.failure](describe_failure(result), result)
