# SPDX-License-Identifier: MIT
"""GCC toolchain definition.

Uses the GNU compiler drivers for C, C++ and assembly, GNU ar for thin
archives and g++ as the link driver so C++ runtime libraries are
linked automatically.
"""

from __future__ import annotations

from ccrules.tools.toolchain import Toolchain

GCC = Toolchain(
    name="GCC",
    c_compiler="gcc",
    cxx_compiler="g++",
    assembler="as",
    archiver="ar",
    linker="g++",
    cflags=("-Wall", "-Wextra", "-Werror", "-std=c17", "-O2", "-gdwarf-3"),
    cxxflags=("-Wall", "-Wextra", "-Werror", "-std=c++20", "-O2", "-gdwarf-3"),
)
