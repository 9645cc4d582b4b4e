# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for viperctl.

Every operation is a subcommand of `viperctl`. The command names are the ones
the project's Makefile exposed (`make test`, `make benchmark`, ...), and
scripts depend on them, so they don't get renamed.

The global options (--config, --log-level, --project-root, --dry-run) are
inherited by every subcommand through argparse's parent parser mechanism.

Usage:
    viperctl <subcommand> [options]
    viperctl test
    viperctl benchmark --config viper.yaml
    viperctl echo hello world
"""

import argparse
import sys

from viperctl.cli.commands import (
    handle_benchmark,
    handle_build,
    handle_clean,
    handle_echo,
    handle_generate,
    handle_info,
    handle_test,
)
from viperctl.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    A separate parent parser (add_help=False) keeps help text from colliding
    between the parent and the subcommand parsers.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file (default: viper.yaml in the project root).",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides the config).",
    )
    parent.add_argument(
        "--project-root",
        type=str,
        default=None,
        dest="project_root",
        help="Directory to run the toolchain in (default: nearest directory with Cargo.toml).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Log the commands that would run without running them.",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """
    Register all subcommands with their handler functions.

    Each subcommand gets the global options from the parent parser and sets
    its handler via set_defaults(func=...).
    """
    commands = [
        ("build", "Build the compiler project.", handle_build),
        ("generate", "Run the compiler frontend to produce the assembly file.", handle_generate),
        ("test", "Compile, assemble, link and run the program.", handle_test),
        ("benchmark", "Time Viper against the Python and C references.", handle_benchmark),
        ("clean", "Remove generated artifacts.", handle_clean),
        ("echo", "Print the given arguments back.", handle_echo),
        ("info", "Display host, platform decision and config info.", handle_info),
    ]

    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler)

    subparsers.choices["echo"].add_argument(
        "words",
        nargs=argparse.REMAINDER,
        help="Arguments to print.",
    )


def build_parser() -> argparse.ArgumentParser:
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="viperctl",
        description="viperctl: build, run and benchmark the Viper compiler.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)
    return root_parser


def main() -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

      1. Build the argument parser with global options and all subcommands
      2. Parse the command line
      3. Call the handler function for the chosen subcommand
      4. Exit with the handler's return code

    If no subcommand is given, we show help and exit with USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
