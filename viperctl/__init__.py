# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
viperctl: build, run and benchmark driver for the Viper compiler.

Subsystems:
  - runtime: host detection and the per-invocation bootstrap
  - toolchain: compile, assemble, link and execute stages
  - benchmark: timed comparison against Python and C references
  - cleanup: removal of generated artifacts
"""

__version__ = "0.1.0"
