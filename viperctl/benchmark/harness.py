# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Benchmark harness: time Viper against a Python and a C reference.

Three subjects, always in this order, each run exactly once:

  1. python  `python3 benchmarks/test.py`, timed end to end
  2. viper   compile + assemble + link + execute, timed as one cycle
  3. c       `gcc -O3 benchmarks/test.c -o example_c` untimed, then
             `./example_c` timed

The comparison is deliberately asymmetric. The Viper sample covers the whole
edit-compile-run cycle while the C sample covers only execution. Setting
`benchmark.include_build_time: false` moves the Viper build out of the timer,
which is what the old Makefile measured.

All program output is discarded. Each sample is reported as soon as its
subject finishes. A subject that fails produces a failed sample and the
harness moves on, so a missing gcc doesn't hide the Python and Viper numbers.
"""

import time
from typing import Callable, Optional

from viperctl.benchmark.models import (
    C_LABEL,
    PYTHON_LABEL,
    VIPER_LABEL,
    BenchmarkSample,
    BenchmarkSubject,
)
from viperctl.benchmark.timing import Stopwatch
from viperctl.logging.logger import get_logger
from viperctl.runtime.bootstrap import RuntimeContext
from viperctl.toolchain.dispatcher import context_execution_stage
from viperctl.toolchain.exceptions import BenchmarkSubjectError, describe_failure
from viperctl.toolchain.invoker import build_toolchain_stages, run_context_pipeline
from viperctl.toolchain.models import OutputMode, PipelineResult, PipelineStage, StageName
from viperctl.toolchain.runner import StageRunner, run_command

logger = get_logger(__name__)

SampleReporter = Callable[[BenchmarkSample], None]


def _require_success(label: str, result: PipelineResult) -> None:
    failed = result.failed_stage
    if failed is None:
        return
    reason = describe_failure(failed)
    if failed.diagnostics:
        reason = f"{reason}: {failed.diagnostics.splitlines()[-1]}"
    raise BenchmarkSubjectError(label, reason)


def _stage_runner(
    context: RuntimeContext,
    label: str,
    stages: list[PipelineStage],
    runner: StageRunner,
) -> Callable[[], None]:
    def _run() -> None:
        _require_success(label, run_context_pipeline(context, stages, runner=runner))

    return _run


def python_subject(context: RuntimeContext, runner: StageRunner = run_command) -> BenchmarkSubject:
    bench = context.config.benchmark
    stage = PipelineStage(
        name=StageName.EXECUTE,
        argv=(bench.python_interpreter, bench.python_script),
        output_mode=OutputMode.DISCARD,
    )
    return BenchmarkSubject(
        label=PYTHON_LABEL,
        run=_stage_runner(context, PYTHON_LABEL, [stage], runner),
    )


def viper_subject(context: RuntimeContext, runner: StageRunner = run_command) -> BenchmarkSubject:
    build = build_toolchain_stages(context, OutputMode.CAPTURE)
    execute = context_execution_stage(context, suppress_output=True)

    if context.config.benchmark.include_build_time:
        return BenchmarkSubject(
            label=VIPER_LABEL,
            run=_stage_runner(context, VIPER_LABEL, [*build, execute], runner),
        )

    return BenchmarkSubject(
        label=VIPER_LABEL,
        prepare=_stage_runner(context, VIPER_LABEL, build, runner),
        run=_stage_runner(context, VIPER_LABEL, [execute], runner),
    )


def c_subject(context: RuntimeContext, runner: StageRunner = run_command) -> BenchmarkSubject:
    bench = context.config.benchmark
    compile_reference = PipelineStage(
        name=StageName.COMPILE,
        argv=(bench.c_compiler, *bench.c_flags, bench.c_source, "-o", bench.c_binary),
        output_mode=OutputMode.CAPTURE,
    )
    run_reference = PipelineStage(
        name=StageName.EXECUTE,
        argv=(str(context.artifact_path(bench.c_binary)),),
        output_mode=OutputMode.DISCARD,
    )
    return BenchmarkSubject(
        label=C_LABEL,
        prepare=_stage_runner(context, C_LABEL, [compile_reference], runner),
        run=_stage_runner(context, C_LABEL, [run_reference], runner),
    )


def build_subjects(context: RuntimeContext, runner: StageRunner = run_command) -> list[BenchmarkSubject]:
    """The three subjects in reporting order."""
    return [
        python_subject(context, runner),
        viper_subject(context, runner),
        c_subject(context, runner),
    ]


def measure_subject(
    subject: BenchmarkSubject,
    clock: Callable[[], int] = time.monotonic_ns,
) -> BenchmarkSample:
    """
    Prepare and time one subject.

    Any BenchmarkSubjectError, from either phase, becomes a failed sample.
    Other exceptions are bugs and propagate.
    """
    try:
        if subject.prepare is not None:
            subject.prepare()
        with Stopwatch(clock) as watch:
            subject.run()
    except BenchmarkSubjectError as err:
        logger.warning(
            "Benchmark subject failed",
            extra={"subject": subject.label, "reason": err.reason},
        )
        return BenchmarkSample.failure(subject.label, err.reason)

    sample = BenchmarkSample(label=subject.label, elapsed_nanoseconds=watch.elapsed.nanoseconds)
    logger.info(
        "Benchmark subject finished",
        extra={"subject": sample.label, "elapsed_ms": sample.elapsed_milliseconds},
    )
    return sample


def run_benchmarks(
    context: RuntimeContext,
    report: Optional[SampleReporter] = None,
    runner: StageRunner = run_command,
    clock: Callable[[], int] = time.monotonic_ns,
) -> list[BenchmarkSample]:
    """
    Run every subject in order and return exactly one sample per subject.

    Args:
        context: Runtime context for this invocation.
        report: Called with each sample right after its subject finishes.
        runner: Process runner; tests swap in a double.
        clock: Nanosecond monotonic clock; tests swap in a fake.
    """
    samples: list[BenchmarkSample] = []
    for subject in build_subjects(context, runner):
        sample = measure_subject(subject, clock)
        samples.append(sample)
        if report is not None:
            report(sample)
    return samples
