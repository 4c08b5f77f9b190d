# SPDX-License-Identifier: MIT
"""LLVM/Clang toolchain definition.

The clang driver assembles too, so it doubles as the assembler.
llvm-ar understands the same thin-archive modifiers as GNU ar.
"""

from __future__ import annotations

from ccrules.tools.toolchain import Toolchain

CLANG = Toolchain(
    name="Clang",
    c_compiler="clang",
    cxx_compiler="clang++",
    assembler="clang",
    archiver="llvm-ar",
    linker="clang++",
    cflags=("-Wall", "-Wextra", "-Werror", "-std=c17", "-O2", "-gdwarf-3"),
    cxxflags=("-Wall", "-Wextra", "-Werror", "-std=c++20", "-O2", "-gdwarf-3"),
)
