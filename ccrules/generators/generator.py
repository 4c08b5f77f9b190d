# SPDX-License-Identifier: MIT
"""Common interface of the ccrules output writers.

A generator turns a Project into one file: it emits the project's build
steps into an ActionGraph (or walks its targets) and writes the result
in some format. ccrules ships three: build.ninja for the executor,
compile_commands.json for editors and deps.mmd for diagrams.

Generators never write a partial file for a project that fails to
build, so errors from Project.build must surface before the output
file is opened.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ccrules.core.project import Project

logger = logging.getLogger(__name__)


@runtime_checkable
class Generator(Protocol):
    """Anything that writes a file for a Project."""

    @property
    def name(self) -> str: ...

    def generate(self, project: Project, output_dir: Path) -> Path:
        """Write the file for project into output_dir and return its path."""
        ...


class BaseGenerator:
    """Shared naming and output-file handling.

    Attributes:
        name: Short generator name ('ninja', 'compile_commands', 'mermaid').
    """

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def generate(self, project: Project, output_dir: Path) -> Path:
        raise NotImplementedError

    def _output_file(self, output_dir: Path, filename: str) -> Path:
        """Create output_dir if needed and return the file path inside it."""
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / filename
        logger.debug("%s generator writing %s", self._name, output_file)
        return output_file

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"
