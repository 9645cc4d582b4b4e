# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Host detection and platform decisions.

The compiler only ever emits x86_64 ELF, so two questions decide how a run
goes: which linker can produce that binary on this host, and can this host
execute it directly. Both answers come from a HostProfile read once per
invocation and then passed around by value; nothing downstream queries the
platform module again.

`decide` is a plain function of the profile. The matching is exact string
comparison, no capability probing: an "arm64" Mac with Rosetta still goes
through the container.
"""

import platform
import sys
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

MINIMUM_PYTHON_MAJOR = 3
MINIMUM_PYTHON_MINOR = 11

MACOS_SYSTEM_NAME = "Darwin"
TARGET_ARCHITECTURE = "x86_64"


class HostProfile(NamedTuple):
    """Operating system and CPU architecture of the invoking host."""

    os_name: str
    arch_name: str


class LinkerChoice(Enum):
    GNU = "gnu"
    CROSS_X86_64_ELF = "cross-x86_64-elf"


class ExecutionMode(Enum):
    NATIVE = "native"
    EMULATED = "emulated"


@dataclass(frozen=True)
class PlatformDecision:
    """Everything the toolchain needs to know about the host."""

    linker: LinkerChoice
    execution_mode: ExecutionMode


class SystemInfo(NamedTuple):
    """Snapshot of the current system environment, for the `info` command."""

    python_version: str
    platform: str
    architecture: str
    hostname: str


def resolve_host_profile() -> HostProfile:
    """Read the host OS and machine architecture. Called once per invocation."""
    return HostProfile(os_name=platform.system(), arch_name=platform.machine())


def choose_linker(profile: HostProfile) -> LinkerChoice:
    if profile.os_name == MACOS_SYSTEM_NAME:
        return LinkerChoice.CROSS_X86_64_ELF
    return LinkerChoice.GNU


def choose_execution_mode(profile: HostProfile) -> ExecutionMode:
    if profile.arch_name == TARGET_ARCHITECTURE:
        return ExecutionMode.NATIVE
    return ExecutionMode.EMULATED


def decide(profile: HostProfile) -> PlatformDecision:
    """
    Map a host profile to its linker and execution mode.

    Unknown operating systems get the GNU linker. Any architecture string
    other than exactly "x86_64", empty included, runs emulated.
    """
    return PlatformDecision(
        linker=choose_linker(profile),
        execution_mode=choose_execution_mode(profile),
    )


def get_python_version() -> tuple[int, int, int]:
    """Return the current Python version as a (major, minor, micro) tuple."""
    return sys.version_info[:3]


def check_minimum_python() -> None:
    """
    Verify we're running Python 3.11+.

    Raises:
        RuntimeError: If Python version is below 3.11.
    """
    major, minor, _ = get_python_version()
    if major < MINIMUM_PYTHON_MAJOR or (
        major == MINIMUM_PYTHON_MAJOR and minor < MINIMUM_PYTHON_MINOR
    ):
        raise RuntimeError(
            f"viperctl requires Python >= {MINIMUM_PYTHON_MAJOR}.{MINIMUM_PYTHON_MINOR}, "
            f"but you're running {major}.{minor}. Please upgrade."
        )


def get_system_info() -> SystemInfo:
    """Collect basic system information for logging and diagnostics."""
    return SystemInfo(
        python_version=platform.python_version(),
        platform=platform.system(),
        architecture=platform.machine(),
        hostname=platform.node(),
    )
