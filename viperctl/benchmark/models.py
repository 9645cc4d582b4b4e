# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Data models for the benchmark harness.

Samples are produced once per subject per run, printed, and thrown away.
Nothing here is persisted.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from viperctl.benchmark.timing import NANOSECONDS_PER_MILLISECOND

PYTHON_LABEL = "python"
VIPER_LABEL = "viper"
C_LABEL = "c"

SUBJECT_ORDER: tuple[str, ...] = (PYTHON_LABEL, VIPER_LABEL, C_LABEL)


@dataclass(frozen=True)
class BenchmarkSample:
    """
    One timed subject.

    A failed subject is still a sample: it keeps its place in the report,
    carries the reason in `error`, and has zero elapsed time because its
    timer never closed.
    """

    label: str
    elapsed_nanoseconds: int
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.elapsed_nanoseconds < 0:
            raise ValueError(
                f"elapsed_nanoseconds cannot be negative, got {self.elapsed_nanoseconds}"
            )

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def elapsed_milliseconds(self) -> int:
        return self.elapsed_nanoseconds // NANOSECONDS_PER_MILLISECOND

    @classmethod
    def failure(cls, label: str, reason: str) -> "BenchmarkSample":
        return cls(label=label, elapsed_nanoseconds=0, error=reason)


@dataclass(frozen=True)
class BenchmarkSubject:
    """
    A program to time.

    `prepare` runs before the timer starts and is excluded from the sample
    (compiling the C reference). `run` is what gets timed. Both signal
    failure by raising BenchmarkSubjectError.
    """

    label: str
    run: Callable[[], None]
    prepare: Optional[Callable[[], None]] = None
