# SPDX-License-Identifier: MIT
"""
ccrules: C/C++ target definitions for build-graph executors.

Object files, static libraries and binaries are declared in Python and
turned into compile, archive and link steps for a pluggable toolchain.
The steps are handed to a build executor, or written out as a Ninja
file by the bundled generators.
"""

from __future__ import annotations

from ccrules.configure.config import get_var
from ccrules.core.build_context import ActionGraph, BuildContext, BuildStep
from ccrules.core.paths import OutputPath, PathTree, SourcePath
from ccrules.core.project import Project
from ccrules.core.rules import BuildRule
from ccrules.core.target import (
    Binary,
    Library,
    LibraryResolvable,
    ObjectFile,
    SelectByToolchain,
)
from ccrules.generators.ninja import NinjaGenerator
from ccrules.toolchains import default_registry
from ccrules.tools.toolchain import Toolchain, ToolchainRegistry

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "get_var",
    # Paths
    "OutputPath",
    "PathTree",
    "SourcePath",
    # Targets
    "Binary",
    "Library",
    "LibraryResolvable",
    "ObjectFile",
    "Project",
    "SelectByToolchain",
    # Build actions
    "ActionGraph",
    "BuildContext",
    "BuildRule",
    "BuildStep",
    # Toolchains
    "Toolchain",
    "ToolchainRegistry",
    "default_registry",
    # Generators
    "NinjaGenerator",
]
