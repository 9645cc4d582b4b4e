# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Viper toolchain orchestration.

Turns a Viper program into a running x86_64 binary:
  - models: stage descriptors and results
  - runner: the single subprocess launcher
  - invoker: the fixed compile/assemble/link/execute stage list and its executor
  - dispatcher: native or containerised execution of the binary
  - exceptions: raising counterparts of the result failure kinds
"""
