# SPDX-License-Identifier: MIT
"""Ninja build file generator.

Writes build.ninja from a project's build steps. Every rule is declared
once, every step becomes a build statement, and the outputs of the
project's targets become the default targets.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from ccrules.generators.generator import BaseGenerator

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ccrules.core.build_context import ActionGraph, BuildStep
    from ccrules.core.paths import TreePath
    from ccrules.core.project import Project
    from ccrules.core.rules import BuildRule

logger = logging.getLogger(__name__)

NINJA_REQUIRED_VERSION = "1.5"


def escape_path(path: str) -> str:
    """Escape a path for use in a build or default statement."""
    return path.replace("$", "$$").replace(" ", "$ ").replace(":", "$:")


def escape_value(value: str) -> str:
    """Escape a literal variable value."""
    return value.replace("$", "$$").replace("\n", " ")


class NinjaGenerator(BaseGenerator):
    """Generator for Ninja build files.

    Example:
        generator = NinjaGenerator()
        generator.generate(project, Path("build"))
        # Creates build/build.ninja
    """

    def __init__(self, output_filename: str = "build.ninja") -> None:
        super().__init__("ninja")
        self._output_filename = output_filename

    def generate(self, project: Project, output_dir: Path) -> Path:
        """Generate the Ninja file.

        The build is fully emitted before the file is opened, so a
        declaration error leaves no partial build.ninja behind.
        """
        graph = project.build()
        defaults = [target.out for target in project.targets]

        output_file = self._output_file(output_dir, self._output_filename)
        with open(output_file, "w") as f:
            self.write(f, graph, defaults, title=project.name)

        logger.info("Wrote %s", output_file)
        return output_file

    def write(
        self,
        f: TextIO,
        graph: ActionGraph,
        defaults: Iterable[TreePath] = (),
        *,
        title: str | None = None,
    ) -> None:
        """Write a graph in Ninja syntax."""
        self._write_header(f, title)
        for rule in graph.rules.values():
            self._write_rule(f, rule)
        for step in graph.steps:
            self._write_build(f, step)
        defaults = list(defaults)
        if defaults:
            paths = " ".join(escape_path(path.absolute()) for path in defaults)
            f.write(f"default {paths}\n")

    def _write_header(self, f: TextIO, title: str | None) -> None:
        if title:
            f.write(f"# Ninja build file for {title}\n")
        f.write("# Generated by ccrules, do not edit.\n\n")
        f.write(f"ninja_required_version = {NINJA_REQUIRED_VERSION}\n\n")
        f.write("builddir = .\n\n")

    def _write_rule(self, f: TextIO, rule: BuildRule) -> None:
        f.write(f"rule {rule.name}\n")
        f.write(f"  command = {rule.command}\n")
        f.write(f"  description = {rule.description}\n")
        self._write_variables(f, rule.variables, escape=False)
        if "depfile" in rule.variables:
            # Compilers write make-style depfiles; let ninja store them
            f.write("  deps = gcc\n")
        f.write("\n")

    def _write_build(self, f: TextIO, step: BuildStep) -> None:
        outputs = " ".join(escape_path(path.absolute()) for path in step.outputs)
        inputs = " ".join(escape_path(path.absolute()) for path in step.inputs)
        f.write(f"build {outputs}: {step.rule_name}")
        if inputs:
            f.write(f" {inputs}")
        f.write("\n")
        self._write_variables(f, step.variables, escape=True)
        f.write("\n")

    def _write_variables(
        self, f: TextIO, variables: Mapping[str, str], *, escape: bool
    ) -> None:
        for name, value in variables.items():
            if escape:
                value = escape_value(value)
            f.write(f"  {name} = {value}\n")
