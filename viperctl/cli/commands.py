# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the viperctl CLI.

Each function here corresponds to one subcommand and returns the process
exit code. Diagnostics go through the structured logger on stderr. Stdout is
reserved for what the user asked to see: program output from `test`, sample
lines from `benchmark`, and `echo`.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from viperctl.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, USER_ERROR
from viperctl.config.exceptions import ConfigError
from viperctl.config.loader import resolve_config
from viperctl.logging.logger import get_logger
from viperctl.runtime.bootstrap import RuntimeContext, bootstrap
from viperctl.toolchain.exceptions import describe_failure
from viperctl.toolchain.models import OutputMode, PipelineResult, PipelineStage
from viperctl.toolchain.runner import run_command
from viperctl.utils.paths import resolve_project_root


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, RuntimeContext | None, logging.Logger]:
    """
    The shared setup every toolchain command needs: find the project, load
    config, read the host once.

    Returns a tuple of (exit_code, context, logger). If exit_code is not
    SUCCESS, the caller should return it immediately.
    """
    logger = get_logger(f"viperctl.cli.{command_name}", log_level=args.log_level or "INFO")

    if args.project_root is not None:
        project_root = Path(args.project_root).resolve()
        if not project_root.is_dir():
            logger.error(
                "Project root is not a directory",
                extra={"command": command_name, "project_root": str(project_root)},
            )
            return USER_ERROR, None, logger
    else:
        project_root = resolve_project_root()

    config_path = Path(args.config) if args.config is not None else None
    try:
        config = resolve_config(config_path, project_root)
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(err)},
        )
        return CONFIG_ERROR, None, logger

    context = bootstrap(config, project_root, log_level=args.log_level)
    return SUCCESS, context, logger


def _log_dry_run(logger: logging.Logger, command_name: str, stages: Sequence[PipelineStage]) -> int:
    logger.info(
        "Dry run, would run stages",
        extra={
            "command": command_name,
            "stages": [{"stage": s.name.value, "argv": list(s.argv)} for s in stages],
        },
    )
    return SUCCESS


def _report_failure(result: PipelineResult) -> None:
    """Show the failing tool's captured output, the way `make` would have."""
    failed = result.failed_stage
    if failed is None:
        return
    if failed.diagnostics:
        sys.stderr.write(failed.diagnostics + "\n")
    sys.stderr.write(f"viperctl: {describe_failure(failed)}\n")
    sys.stderr.flush()


def _run_stages(
    args: argparse.Namespace,
    command_name: str,
    context: RuntimeContext,
    logger: logging.Logger,
    stages: Sequence[PipelineStage],
) -> int:
    if args.dry_run:
        return _log_dry_run(logger, command_name, stages)

    from viperctl.toolchain.invoker import run_context_pipeline

    logger.info("Command started", extra={"command": command_name})
    result = run_context_pipeline(context, stages, runner=run_command)
    _report_failure(result)
    logger.info(
        "Command finished",
        extra={"command": command_name, "success": result.success, "exit_code": result.exit_code},
    )
    return result.exit_code


def handle_build(args: argparse.Namespace) -> int:
    """Build the compiler project itself."""
    exit_code, context, logger = _load_and_bootstrap(args, "build")
    if exit_code != SUCCESS or context is None:
        return exit_code

    from viperctl.toolchain.invoker import build_stage

    try:
        return _run_stages(args, "build", context, logger, [build_stage(context)])
    except Exception as err:
        logger.error("Build failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_generate(args: argparse.Namespace) -> int:
    """Run only the compiler frontend, producing the assembly file."""
    exit_code, context, logger = _load_and_bootstrap(args, "generate")
    if exit_code != SUCCESS or context is None:
        return exit_code

    from viperctl.toolchain.invoker import compile_stage

    try:
        stage = compile_stage(context, OutputMode.PASSTHROUGH)
        return _run_stages(args, "generate", context, logger, [stage])
    except Exception as err:
        logger.error("Generate failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_test(args: argparse.Namespace) -> int:
    """Compile, assemble, link and run the program, showing its output."""
    exit_code, context, logger = _load_and_bootstrap(args, "test")
    if exit_code != SUCCESS or context is None:
        return exit_code

    from viperctl.toolchain.invoker import build_stages

    try:
        stages = build_stages(context, suppress_output=False)
        return _run_stages(args, "test", context, logger, stages)
    except Exception as err:
        logger.error("Test run failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_benchmark(args: argparse.Namespace) -> int:
    """Time Viper against the Python and C references."""
    exit_code, context, logger = _load_and_bootstrap(args, "benchmark")
    if exit_code != SUCCESS or context is None:
        return exit_code

    from viperctl.benchmark.harness import build_subjects, run_benchmarks
    from viperctl.benchmark.reporting import write_sample

    try:
        if args.dry_run:
            logger.info(
                "Dry run, would benchmark subjects",
                extra={"subjects": [s.label for s in build_subjects(context)]},
            )
            return SUCCESS

        sys.stdout.write("benchmarking....\n")
        sys.stdout.flush()
        samples = run_benchmarks(context, report=write_sample, runner=run_command)
        logger.info(
            "Benchmark finished",
            extra={
                "samples": len(samples),
                "failed": [s.label for s in samples if s.failed],
            },
        )
        return SUCCESS
    except Exception as err:
        logger.error("Benchmark failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_clean(args: argparse.Namespace) -> int:
    """Remove the generated assembly, object and binary files."""
    exit_code, context, logger = _load_and_bootstrap(args, "clean")
    if exit_code != SUCCESS or context is None:
        return exit_code

    from viperctl.cleanup.cleaner import clean_artifacts

    names = context.config.artifacts.names()
    if args.dry_run:
        logger.info("Dry run, would remove artifacts", extra={"artifacts": list(names)})
        return SUCCESS

    try:
        result = clean_artifacts(context.project_root, names)
    except ValueError as err:
        # Refused before anything was deleted. clean still reports success.
        logger.error("Clean refused", extra={"error": str(err)})
        return SUCCESS

    for error in result.errors:
        logger.warning("Artifact not removed", extra={"error": error})
    return SUCCESS


def handle_echo(args: argparse.Namespace) -> int:
    """Print the received arguments back. Useful for checking argument plumbing."""
    sys.stdout.write("-> " + " ".join(args.words) + "\n")
    return SUCCESS


def handle_info(args: argparse.Namespace) -> int:
    """Display environment, platform decision and configuration information."""
    exit_code, context, logger = _load_and_bootstrap(args, "info")
    if exit_code != SUCCESS or context is None:
        return exit_code

    from viperctl import __version__
    from viperctl.runtime.environment import get_system_info
    from viperctl.toolchain.invoker import linker_executable

    system_info = get_system_info()

    logger.info(
        "System information",
        extra={
            "viperctl_version": __version__,
            "python_version": system_info.python_version,
            "platform": context.host.os_name,
            "architecture": context.host.arch_name,
            "hostname": system_info.hostname,
            "linker": linker_executable(context),
            "execution_mode": context.decision.execution_mode.value,
            "project_root": str(context.project_root),
            "config": args.config,
        },
    )
    return SUCCESS
