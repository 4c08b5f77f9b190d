# SPDX-License-Identifier: MIT
"""compile_commands.json generator for IDE integration.

Generates a compile_commands.json file that IDEs and tools like
clang-tidy can use for code intelligence. Only steps whose rule is
marked as part of the compilation database are included.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ccrules.core.build_context import expand_command
from ccrules.generators.generator import BaseGenerator

if TYPE_CHECKING:
    from ccrules.core.build_context import ActionGraph
    from ccrules.core.project import Project

logger = logging.getLogger(__name__)


class CompileCommandsGenerator(BaseGenerator):
    """Generator for compile_commands.json.

    Format:
        [
            {
                "directory": "/path/to/project",
                "file": "/path/to/project/src/main.cpp",
                "command": "g++ -c ... -o /path/to/build/src/main.o ...",
                "output": "/path/to/build/src/main.o"
            },
            ...
        ]

    Example:
        generator = CompileCommandsGenerator()
        generator.generate(project, Path("build"))
        # Creates build/compile_commands.json
    """

    def __init__(self, *, symlink: bool = True) -> None:
        """Initialize the generator.

        Args:
            symlink: Also link compile_commands.json from the project root.
        """
        super().__init__("compile_commands")
        self._symlink = symlink

    def generate(self, project: Project, output_dir: Path) -> Path:
        """Generate compile_commands.json.

        Args:
            project: Project to generate for.
            output_dir: Directory to write compile_commands.json to.
        """
        commands = self.collect(project.build(), project.root_dir)

        output_file = self._output_file(output_dir, "compile_commands.json")
        with open(output_file, "w") as f:
            json.dump(commands, f, indent=2)
            f.write("\n")
        logger.info("Wrote %s (%d entries)", output_file, len(commands))

        if self._symlink:
            self._create_root_symlink(output_file, project.root_dir)
        return output_file

    def collect(self, graph: ActionGraph, directory: Path) -> list[dict[str, Any]]:
        """Build the database entries for a graph."""
        commands: list[dict[str, Any]] = []
        for step in graph.steps:
            rule = graph.rules[step.rule_name]
            if not rule.compdb:
                continue
            command = expand_command(rule, step)
            for source in step.inputs:
                commands.append(
                    {
                        "directory": str(directory),
                        "file": source.absolute(),
                        "command": command,
                        "output": step.outputs[0].absolute(),
                    }
                )
        return commands

    def _create_root_symlink(self, output_file: Path, root_dir: Path) -> None:
        """Create a symlink to compile_commands.json in the project root.

        This allows IDEs and tools like clangd to find the file at the
        project root without configuration. If the symlink cannot be
        created a warning is logged.
        """
        link_path = root_dir / "compile_commands.json"

        # If build_dir is the project root, the file is already there
        if output_file.resolve() == link_path.resolve():
            return

        try:
            target_path = os.path.relpath(output_file, root_dir)
        except ValueError:
            # On Windows, relpath fails across drive letters
            return

        if link_path.is_symlink():
            if Path(os.readlink(link_path)) == Path(target_path):
                return
            link_path.unlink()
        elif link_path.exists():
            logger.warning(
                "compile_commands.json exists at project root as a "
                "regular file; not replacing with symlink"
            )
            return

        try:
            link_path.symlink_to(target_path)
        except OSError as e:
            logger.warning(
                "Could not create compile_commands.json symlink at project root: %s",
                e,
            )
