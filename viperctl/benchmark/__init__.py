# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Viper benchmark harness.

Times the Viper pipeline against a Python script and an optimised C binary:
  - timing: monotonic-clock stopwatch and Duration
  - models: samples and subjects
  - harness: the three subjects and the run loop
  - reporting: the one-line-per-sample text output
"""
