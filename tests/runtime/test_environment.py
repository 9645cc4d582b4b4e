# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for host detection and the platform decision.

The decision is a pure string match, so these tests enumerate the cases
instead of probing the machine they run on.
"""

import pytest

from viperctl.runtime.environment import (
    ExecutionMode,
    HostProfile,
    LinkerChoice,
    PlatformDecision,
    check_minimum_python,
    decide,
    get_system_info,
    resolve_host_profile,
)


class TestLinkerChoice:
    @pytest.mark.parametrize("arch", ["x86_64", "arm64", "aarch64", ""])
    def test_macos_always_uses_cross_linker(self, arch: str) -> None:
        assert decide(HostProfile("Darwin", arch)).linker is LinkerChoice.CROSS_X86_64_ELF

    @pytest.mark.parametrize(
        "os_name",
        ["Linux", "Windows", "FreeBSD", "darwin", "DARWIN", "", "SomethingNew"],
    )
    def test_everything_else_uses_gnu_linker(self, os_name: str) -> None:
        assert decide(HostProfile(os_name, "x86_64")).linker is LinkerChoice.GNU


class TestExecutionMode:
    @pytest.mark.parametrize("os_name", ["Linux", "Darwin", "Windows", ""])
    def test_x86_64_runs_natively(self, os_name: str) -> None:
        assert decide(HostProfile(os_name, "x86_64")).execution_mode is ExecutionMode.NATIVE

    @pytest.mark.parametrize(
        "arch",
        ["arm64", "aarch64", "AMD64", "X86_64", "x86-64", "i386", "", "unknown"],
    )
    def test_anything_but_exact_x86_64_is_emulated(self, arch: str) -> None:
        assert decide(HostProfile("Linux", arch)).execution_mode is ExecutionMode.EMULATED


class TestDecide:
    def test_linux_x86_64(self) -> None:
        assert decide(HostProfile("Linux", "x86_64")) == PlatformDecision(
            linker=LinkerChoice.GNU,
            execution_mode=ExecutionMode.NATIVE,
        )

    def test_apple_silicon(self) -> None:
        assert decide(HostProfile("Darwin", "arm64")) == PlatformDecision(
            linker=LinkerChoice.CROSS_X86_64_ELF,
            execution_mode=ExecutionMode.EMULATED,
        )

    def test_decision_is_frozen(self) -> None:
        decision = decide(HostProfile("Linux", "x86_64"))
        with pytest.raises(AttributeError):
            decision.linker = LinkerChoice.CROSS_X86_64_ELF  # type: ignore[misc]


class TestHostProfile:
    def test_resolve_reads_platform_module(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("platform.system", lambda: "Linux")
        monkeypatch.setattr("platform.machine", lambda: "aarch64")

        assert resolve_host_profile() == HostProfile(os_name="Linux", arch_name="aarch64")

    def test_profile_is_immutable(self) -> None:
        profile = HostProfile("Linux", "x86_64")
        with pytest.raises(AttributeError):
            profile.os_name = "Darwin"  # type: ignore[misc]


class TestSystemInfo:
    def test_current_python_passes(self) -> None:
        check_minimum_python()

    def test_old_python_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "viperctl.runtime.environment.get_python_version", lambda: (3, 9, 0)
        )
        with pytest.raises(RuntimeError, match="requires Python"):
            check_minimum_python()

    def test_system_info_fields_are_strings(self) -> None:
        info = get_system_info()
        assert isinstance(info.python_version, str)
        assert isinstance(info.platform, str)
        assert isinstance(info.architecture, str)
