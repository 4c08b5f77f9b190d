# SPDX-License-Identifier: MIT
"""Toolchain definitions (GCC, Clang)."""

from __future__ import annotations

from ccrules.configure.config import get_toolchain_name
from ccrules.toolchains.gcc import GCC
from ccrules.toolchains.llvm import CLANG
from ccrules.tools.toolchain import ToolchainRegistry


def default_registry() -> ToolchainRegistry:
    """Create the standard registry: GCC as default, Clang registered.

    The requested toolchain comes from build configuration (see
    ccrules.configure.config.get_toolchain_name).
    """
    registry = ToolchainRegistry().register_as_default(GCC).register(CLANG)
    return registry.with_requested(get_toolchain_name())


__all__ = [
    "CLANG",
    "GCC",
    "default_registry",
]
