# SPDX-License-Identifier: MIT
"""Project container for ccrules builds.

The Project holds the path tree, the toolchain registry and every
declared library and binary, and emits the whole build in declaration
order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ccrules.configure.config import get_build_dir, get_source_dir
from ccrules.core.build_context import ActionGraph
from ccrules.core.errors import ConfigurationError
from ccrules.core.paths import PathTree, TreePath
from ccrules.core.target import Binary, CompiledTarget, Library
from ccrules.toolchains import default_registry
from ccrules.util.source_location import get_caller_location

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ccrules.core.build_context import BuildContext
    from ccrules.core.paths import OutputPath, SourcePath
    from ccrules.core.target import ResolvedTarget
    from ccrules.tools.toolchain import ToolchainRegistry

logger = logging.getLogger(__name__)


class Project:
    """Top-level container for a ccrules build.

    Example:
        project = Project("myproject", root_dir=".", build_dir="build")

        util = project.Library("libutil.a", ["util/strings.c"])
        project.Binary("app", ["app/main.cpp"], deps=[util])

        graph = project.build()

    Attributes:
        name: Project name.
        tree: Source and output directories.
        registry: Toolchains available to targets.
    """

    def __init__(
        self,
        name: str,
        *,
        root_dir: Path | str | None = None,
        build_dir: Path | str | None = None,
        registry: ToolchainRegistry | None = None,
    ) -> None:
        if registry is None:
            registry = default_registry()
        self.name = name
        self.tree = PathTree(
            root_dir if root_dir is not None else get_source_dir(),
            build_dir if build_dir is not None else get_build_dir(),
        )
        self.registry = registry
        self._targets: list[CompiledTarget] = []
        self._outputs: dict[OutputPath, CompiledTarget] = {}
        self.defined_at = get_caller_location()

    @property
    def root_dir(self) -> Path:
        return self.tree.source_dir

    @property
    def build_dir(self) -> Path:
        return self.tree.build_dir

    def src(self, path: Path | str) -> SourcePath:
        """Create a source-tree path."""
        return self.tree.src(path)

    def out(self, path: Path | str) -> OutputPath:
        """Create an output-tree path."""
        return self.tree.out(path)

    def _source(self, value: Any) -> Any:
        if isinstance(value, (str, Path)):
            return self.src(value)
        return value

    def _output(self, value: Any) -> Any:
        if isinstance(value, (str, Path)):
            return self.out(value)
        return value

    def _normalize(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        """Turn string paths in keyword arguments into tree paths."""
        if isinstance(kwargs.get("includes"), (list, tuple)):
            kwargs["includes"] = [self._source(inc) for inc in kwargs["includes"]]
        if isinstance(kwargs.get("module"), (str, Path)):
            kwargs["module"] = self.src(kwargs["module"])
        kwargs.setdefault("defined_at", get_caller_location())
        return kwargs

    def _sources(self, srcs: Any) -> Any:
        if isinstance(srcs, (list, tuple)):
            return [self._source(src) for src in srcs]
        return srcs

    def Library(
        self,
        out: OutputPath | str,
        srcs: Sequence[TreePath | str],
        **kwargs: Any,
    ) -> Library:
        """Declare a static library and add it to the project.

        Args:
            out: Archive path (strings are relative to the build directory).
            srcs: Source files (strings are relative to the source directory).
            **kwargs: Other Library fields (deps, includes, always_link, ...).
        """
        library = Library(
            self._output(out), self._sources(srcs), **self._normalize(kwargs)
        )
        self.add_target(library)
        return library

    def Binary(
        self,
        out: OutputPath | str,
        srcs: Sequence[TreePath | str],
        **kwargs: Any,
    ) -> Binary:
        """Declare an executable and add it to the project.

        Args:
            out: Executable path (strings are relative to the build directory).
            srcs: Source files (strings are relative to the source directory).
            **kwargs: Other Binary fields (deps, ldflags, ldflags_post, ...).
        """
        binary = Binary(
            self._output(out), self._sources(srcs), **self._normalize(kwargs)
        )
        self.add_target(binary)
        return binary

    def add_target(self, target: CompiledTarget) -> None:
        """Add a target declared outside the project.

        Raises:
            ConfigurationError: If another target already produces the
                same output.
        """
        existing = self._outputs.get(target.out)
        if existing is target:
            return
        if existing is not None:
            raise ConfigurationError(
                f"output {target.out.absolute()} is already produced by {existing!r}",
                target=target.kind,
                field="out",
                location=target.defined_at,
            )
        self._outputs[target.out] = target
        self._targets.append(target)

    @property
    def targets(self) -> list[CompiledTarget]:
        return list(self._targets)

    def get_target(self, out: OutputPath | str) -> CompiledTarget | None:
        """Get the target producing an output path, if any."""
        return self._outputs.get(self._output(out))

    def resolve(self) -> dict[CompiledTarget, ResolvedTarget]:
        """Resolve every target.

        Dependency cycles and toolchain selection errors surface here,
        before any build step exists.
        """
        resolved = {target: target.resolve(self.registry) for target in self._targets}
        logger.debug("Resolved %d targets in project %s", len(resolved), self.name)
        return resolved

    def build(self, ctx: BuildContext | None = None) -> ActionGraph:
        """Emit the build steps of every target, in declaration order.

        Steps are collected into a fresh ActionGraph first; ctx (if given)
        only receives them once every target has built successfully.

        Returns:
            The graph of all build steps.
        """
        graph = ActionGraph()
        for target in self._targets:
            target.build(graph, self.registry)
        logger.info(
            "Project %s: %d rules, %d build steps",
            self.name,
            len(graph.rules),
            len(graph),
        )
        if ctx is not None:
            graph.replay(ctx)
        return graph

    def __repr__(self) -> str:
        return f"Project({self.name!r}, targets={len(self._targets)})"
