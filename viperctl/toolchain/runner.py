# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The one place viperctl starts external processes.

Run the subprocess, route its output according to the stage, enforce the
optional timeout, return a StageResult. Process-level problems never raise:
a missing executable, a timeout and a non-zero exit all come back as a
result tagged with a FailureKind, so the pipeline can decide what to do.

Exit codes follow the shell conventions the old Makefile relied on:
127 command not found, 126 not executable, 124 timed out, 128+N killed by
signal N. No shell=True anywhere; argv lists only.
"""

import subprocess
import time
from pathlib import Path
from typing import Optional, Protocol

from viperctl.logging.logger import get_logger
from viperctl.toolchain.models import FailureKind, OutputMode, PipelineStage, StageResult

logger = get_logger(__name__)

EXIT_TIMEOUT = 124
EXIT_NOT_EXECUTABLE = 126
EXIT_COMMAND_NOT_FOUND = 127
_SIGNAL_EXIT_BASE = 128


class StageRunner(Protocol):
    def __call__(
        self,
        stage: PipelineStage,
        cwd: Path,
        timeout_seconds: Optional[float] = None,
    ) -> StageResult: ...


def _stream_targets(mode: OutputMode) -> dict[str, object]:
    if mode is OutputMode.CAPTURE:
        return {"stdout": subprocess.PIPE, "stderr": subprocess.PIPE}
    if mode is OutputMode.DISCARD:
        return {"stdout": subprocess.DEVNULL, "stderr": subprocess.DEVNULL}
    return {"stdout": None, "stderr": None}


def _as_text(value: object) -> str:
    # TimeoutExpired hands back bytes even when text=True was requested.
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def normalize_exit_code(returncode: int) -> int:
    """Map subprocess's negative signal codes to the shell's 128+N form."""
    if returncode < 0:
        return _SIGNAL_EXIT_BASE - returncode
    return returncode


def run_command(
    stage: PipelineStage,
    cwd: Path,
    timeout_seconds: Optional[float] = None,
) -> StageResult:
    """
    Run one stage's command in `cwd` and wait for it to exit.

    Args:
        stage: The stage to run. Its output_mode decides whether output is
               captured for diagnostics, passed to the terminal, or dropped.
        cwd: Working directory, always the project root.
        timeout_seconds: Kill the process after this long. None waits forever.
    """
    start = time.monotonic()
    argv = list(stage.argv)

    if not cwd.is_dir():
        # subprocess reports a missing cwd as FileNotFoundError, which would
        # otherwise read as the executable being missing.
        logger.error(
            "Working directory does not exist",
            extra={"stage": stage.name.value, "cwd": str(cwd)},
        )
        return StageResult(
            stage=stage.name,
            argv=stage.argv,
            exit_code=EXIT_NOT_EXECUTABLE,
            stdout="",
            stderr=f"{argv[0]}: working directory {cwd} does not exist",
            elapsed_seconds=0.0,
            failure=FailureKind.STAGE_LAUNCH,
        )

    try:
        completed = subprocess.run(
            argv,
            cwd=str(cwd),
            text=True,
            errors="replace",
            timeout=timeout_seconds,
            check=False,
            **_stream_targets(stage.output_mode),
        )
    except subprocess.TimeoutExpired as err:
        elapsed = time.monotonic() - start
        logger.warning(
            "Stage timed out",
            extra={
                "stage": stage.name.value,
                "argv": argv,
                "timeout_seconds": timeout_seconds,
            },
        )
        return StageResult(
            stage=stage.name,
            argv=stage.argv,
            exit_code=EXIT_TIMEOUT,
            stdout=_as_text(err.stdout),
            stderr=_as_text(err.stderr) or f"{argv[0]} timed out after {timeout_seconds}s",
            elapsed_seconds=elapsed,
            failure=FailureKind.TIMEOUT,
        )
    except FileNotFoundError:
        elapsed = time.monotonic() - start
        logger.error(
            "Executable not found",
            extra={"stage": stage.name.value, "executable": argv[0]},
        )
        return StageResult(
            stage=stage.name,
            argv=stage.argv,
            exit_code=EXIT_COMMAND_NOT_FOUND,
            stdout="",
            stderr=f"{argv[0]}: command not found",
            elapsed_seconds=elapsed,
            failure=stage.launch_failure,
        )
    except OSError as err:
        elapsed = time.monotonic() - start
        logger.error(
            "Executable could not be started",
            extra={"stage": stage.name.value, "executable": argv[0], "error": str(err)},
        )
        return StageResult(
            stage=stage.name,
            argv=stage.argv,
            exit_code=EXIT_NOT_EXECUTABLE,
            stdout="",
            stderr=f"{argv[0]}: {err.strerror or err}",
            elapsed_seconds=elapsed,
            failure=stage.launch_failure,
        )

    elapsed = time.monotonic() - start
    exit_code = normalize_exit_code(completed.returncode)
    failure = None if exit_code == 0 else FailureKind.STAGE_EXIT

    logger.debug(
        "Stage finished",
        extra={
            "stage": stage.name.value,
            "argv": argv,
            "exit_code": exit_code,
            "elapsed_seconds": round(elapsed, 3),
        },
    )

    return StageResult(
        stage=stage.name,
        argv=stage.argv,
        exit_code=exit_code,
        stdout=_as_text(completed.stdout),
        stderr=_as_text(completed.stderr),
        elapsed_seconds=elapsed,
        failure=failure,
    )
