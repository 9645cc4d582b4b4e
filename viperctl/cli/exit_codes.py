# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI exit codes.

`build`, `generate` and `test` pass the external tool's own exit status
through unchanged. The codes below are what viperctl itself returns when it
has nothing to pass through, plus the shell-style codes the runner assigns
to processes that never ran to completion.
"""

from viperctl.toolchain.runner import EXIT_COMMAND_NOT_FOUND, EXIT_NOT_EXECUTABLE, EXIT_TIMEOUT

SUCCESS: int = 0
USER_ERROR: int = 1
CONFIG_ERROR: int = 2
RUNTIME_ERROR: int = 3

TIMEOUT: int = EXIT_TIMEOUT
NOT_EXECUTABLE: int = EXIT_NOT_EXECUTABLE
COMMAND_NOT_FOUND: int = EXIT_COMMAND_NOT_FOUND
