# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for viperctl.

The one-time setup that happens before any external tool is launched:
  1. Validate the interpreter version
  2. Initialize the loggers from the global config, including the log file
  3. Read the host profile and make the platform decision
  4. Freeze all of it into a RuntimeContext

Every command goes through this once. The context is then handed to the
toolchain, the dispatcher and the benchmark harness by parameter.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from viperctl.config.schema import ViperConfig
from viperctl.logging.logger import attach_log_file, get_logger, set_package_log_level
from viperctl.runtime.environment import (
    HostProfile,
    PlatformDecision,
    check_minimum_python,
    decide,
    resolve_host_profile,
)


@dataclass(frozen=True)
class RuntimeContext:
    """Invocation-scoped state shared by every component."""

    config: ViperConfig
    project_root: Path
    host: HostProfile
    decision: PlatformDecision

    def artifact_path(self, name: str) -> Path:
        return self.project_root / name

    @property
    def binary_path(self) -> Path:
        return self.artifact_path(self.config.artifacts.binary)

    @property
    def timeout_seconds(self) -> Optional[float]:
        return self.config.pipeline.timeout_seconds


def bootstrap(
    config: ViperConfig,
    project_root: Path,
    host: Optional[HostProfile] = None,
    log_level: Optional[str] = None,
) -> RuntimeContext:
    """
    Build the RuntimeContext for this invocation.

    Args:
        config: The validated configuration.
        project_root: Directory every external process runs in.
        host: Pre-resolved host profile. Only tests pass this; normal runs
              read the real host here.
        log_level: Overrides global.log_level (the CLI's --log-level).
    """
    check_minimum_python()

    level = log_level or config.global_config.log_level
    set_package_log_level(level)

    if config.global_config.log_file is not None:
        attach_log_file(project_root / config.global_config.log_file)

    logger = get_logger("viperctl.runtime", log_level=level)

    if host is None:
        host = resolve_host_profile()
    decision = decide(host)

    logger.info(
        "viperctl bootstrap complete",
        extra={
            "project_root": str(project_root),
            "os": host.os_name,
            "arch": host.arch_name,
            "linker": decision.linker.value,
            "execution_mode": decision.execution_mode.value,
        },
    )

    return RuntimeContext(
        config=config,
        project_root=project_root,
        host=host,
        decision=decision,
    )
