#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Example with transitive library dependencies.

This example shows:
- A library (physics) depending on another library (math)
- Include paths propagating from math to physics and to the program
- A self-registering plugin library linked with always_link
- Writing build.ninja and compile_commands.json

Run with CCRULES_BUILD_DIR to choose the output directory.
"""

import logging
from pathlib import Path

from ccrules import NinjaGenerator, Project
from ccrules.configure.config import get_build_dir
from ccrules.generators import CompileCommandsGenerator

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

source_dir = Path(__file__).parent
build_dir = get_build_dir(str(source_dir / "build"))

project = Project("transitive_deps", root_dir=source_dir, build_dir=build_dir)

libmath = project.Library(
    "libmath.a",
    ["math/vector.c"],
    includes=["math/include"],
)
libphysics = project.Library(
    "libphysics.a",
    ["physics/body.c"],
    deps=[libmath],
    includes=["physics/include"],
)
plugins = project.Library(
    "libplugins.a",
    ["plugins/gravity.c"],
    deps=[libphysics],
    always_link=True,
)
project.Binary(
    "simulator",
    ["app/main.c"],
    deps=[plugins, libphysics],
    ldflags_post=["-lm"],
)

NinjaGenerator().generate(project, build_dir)
CompileCommandsGenerator(symlink=False).generate(project, build_dir)

print(f"Generated {build_dir / 'build.ninja'}")
