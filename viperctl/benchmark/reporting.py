# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Human-readable benchmark lines.

The format is the one scripts have been grepping since the Makefile days:

    python exec time: 412 ms
    viper exec time: 97 ms
    c exec time: 8 ms
"""

import sys
from typing import TextIO

from viperctl.benchmark.models import BenchmarkSample


def format_sample(sample: BenchmarkSample) -> str:
    if sample.failed:
        return f"{sample.label} exec time: FAILED ({sample.error})"
    return f"{sample.label} exec time: {sample.elapsed_milliseconds} ms"


def write_sample(sample: BenchmarkSample, stream: TextIO | None = None) -> None:
    """Write one sample line and flush, so it appears before the next subject starts."""
    out = stream if stream is not None else sys.stdout
    out.write(format_sample(sample) + "\n")
    out.flush()
