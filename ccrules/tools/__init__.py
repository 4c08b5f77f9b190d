# SPDX-License-Identifier: MIT
"""Toolchain abstractions."""

from ccrules.tools.toolchain import Toolchain, ToolchainRegistry

__all__ = ["Toolchain", "ToolchainRegistry"]
