# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Wall-clock timing for benchmark subjects.

Uses time.monotonic_ns(), so system clock adjustments can't produce negative
or inflated samples, and keeps the value in integer nanoseconds until the
very end. Conversion to milliseconds truncates, matching the historical
`$((elapsed / 1000000))` arithmetic.
"""

import time
from dataclasses import dataclass
from types import TracebackType
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

NANOSECONDS_PER_MILLISECOND = 1_000_000


@dataclass(frozen=True)
class Duration:
    nanoseconds: int

    def __post_init__(self) -> None:
        if self.nanoseconds < 0:
            raise ValueError(f"Duration cannot be negative, got {self.nanoseconds} ns")

    @property
    def milliseconds(self) -> int:
        return self.nanoseconds // NANOSECONDS_PER_MILLISECOND

    @property
    def seconds(self) -> float:
        return self.nanoseconds / 1_000_000_000


class Stopwatch:
    """
    Context manager that samples the clock on enter and on exit.

    Usage:
        with Stopwatch() as watch:
            run_the_thing()
        watch.elapsed.milliseconds

    `elapsed` is only available once the block has exited normally or with an
    exception; reading it earlier is a bug and raises.
    """

    def __init__(self, clock: Callable[[], int] = time.monotonic_ns) -> None:
        self._clock = clock
        self._start: Optional[int] = None
        self._elapsed: Optional[Duration] = None

    def __enter__(self) -> "Stopwatch":
        self._start = self._clock()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        end = self._clock()
        assert self._start is not None
        self._elapsed = Duration(max(0, end - self._start))

    @property
    def elapsed(self) -> Duration:
        if self._elapsed is None:
            raise RuntimeError("Stopwatch has not finished timing yet")
        return self._elapsed


def time_call(fn: Callable[[], T], clock: Callable[[], int] = time.monotonic_ns) -> tuple[T, Duration]:
    """Call `fn` once and return its result with how long it took."""
    with Stopwatch(clock) as watch:
        result = fn()
    return result, watch.elapsed
