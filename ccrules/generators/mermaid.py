# SPDX-License-Identifier: MIT
"""Mermaid diagram generator for dependency visualization.

Generates Mermaid flowchart syntax showing the library dependency graph.
Output can be rendered in GitHub markdown, documentation tools,
or the Mermaid live editor (https://mermaid.live).
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from ccrules.core.target import Binary, Library
from ccrules.generators.generator import BaseGenerator

if TYPE_CHECKING:
    from ccrules.core.project import Project
    from ccrules.core.target import CompiledTarget

logger = logging.getLogger(__name__)


class MermaidGenerator(BaseGenerator):
    """Generator that produces Mermaid flowchart diagrams.

    Example output:
        ```mermaid
        flowchart LR
          build_libmath_a[libmath.a]
          build_app[[app]]
          build_libmath_a --> build_app
        ```

    Dependencies resolve through the selected toolchain, so the diagram
    shows the graph exactly as it would be linked.
    """

    def __init__(
        self,
        *,
        direction: str = "LR",
        output_filename: str = "deps.mmd",
    ) -> None:
        """Initialize the Mermaid generator.

        Args:
            direction: Graph direction - "LR" (left-right), "TB" (top-bottom),
                      "RL" (right-left), or "BT" (bottom-top).
            output_filename: Name of the output file.
        """
        super().__init__("mermaid")
        self._direction = direction
        self._output_filename = output_filename

    def generate(self, project: Project, output_dir: Path) -> Path:
        """Generate Mermaid diagram file."""
        buffer = io.StringIO()
        self._write_header(buffer, project)
        self._write_target_graph(buffer, project)

        output_file = self._output_file(output_dir, self._output_filename)
        with open(output_file, "w") as f:
            f.write(buffer.getvalue())

        logger.info("Wrote %s", output_file)
        return output_file

    def _write_header(self, f: TextIO, project: Project) -> None:
        f.write("---\n")
        f.write(f"title: {project.name} Dependencies\n")
        f.write("---\n")
        f.write(f"flowchart {self._direction}\n")

    def _write_target_graph(self, f: TextIO, project: Project) -> None:
        targets = project.targets
        if not targets:
            f.write("  empty[No targets]\n")
            return

        toolchain = project.registry.selected()
        nodes: dict[str, CompiledTarget] = {}
        edges: list[tuple[str, str]] = []

        for target in targets:
            target_id = self._node_id(target, project)
            nodes.setdefault(target_id, target)
            for dep in target.deps:
                library = dep.as_library(toolchain)
                dep_id = self._node_id(library, project)
                nodes.setdefault(dep_id, library)
                edges.append((dep_id, target_id))

        for node_id, target in nodes.items():
            opening, closing = self._get_target_shape(target)
            f.write(f"  {node_id}{opening}{target.out.relative.name}{closing}\n")

        f.write("\n")
        for dep_id, target_id in edges:
            f.write(f"  {dep_id} --> {target_id}\n")

    def _node_id(self, target: CompiledTarget, project: Project) -> str:
        try:
            name = str(Path(target.out.absolute()).relative_to(project.root_dir))
        except ValueError:
            name = target.out.absolute()
        return self._sanitize_id(name)

    def _get_target_shape(self, target: CompiledTarget) -> tuple[str, str]:
        """Get Mermaid shape brackets for a target.

        Returns:
            Tuple of (opening, closing) brackets.
        """
        if isinstance(target, Binary):
            return ("[[", "]]")  # Subroutine shape for executables
        if isinstance(target, Library) and target.always_link:
            return ("[/", "/]")  # Parallelogram for whole-archive libraries
        return ("[", "]")

    def _sanitize_id(self, name: str) -> str:
        """Sanitize a name for use as a Mermaid node ID."""
        result = name.replace("/", "_").replace("\\", "_")
        result = result.replace(".", "_").replace("-", "_")
        result = result.replace(" ", "_").replace(":", "_")
        result = result.replace("+", "_")
        # Ensure it starts with a letter
        if result and not result[0].isalpha():
            result = "n" + result
        return result
