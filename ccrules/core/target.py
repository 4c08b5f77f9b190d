# SPDX-License-Identifier: MIT
"""C/C++ target declarations: object files, static libraries, binaries.

Targets are declared once and never modified afterwards. Building a
target happens in two phases:

1. ``resolve(registry)`` is a pure function of the declaration that
   picks the toolchain, collects the transitive library dependencies
   and computes the effective include set, returning a ResolvedTarget.
2. ``build(ctx, registry)`` emits the target's build steps (compile
   every source, then archive or link) into a BuildContext.

Example:
    tree = PathTree("src", "build")
    util = Library(
        out=tree.out("libutil.a"),
        srcs=[tree.src("util/strings.c")],
        includes=[tree.src("util/include")],
    )
    app = Binary(
        out=tree.out("app"),
        srcs=[tree.src("app/main.cpp")],
        deps=[util],
    )
    graph = ActionGraph()
    util.build(graph, registry)
    app.build(graph, registry)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ccrules.core.build_context import BuildStep
from ccrules.core.deps import collect_dependencies
from ccrules.core.errors import ConfigurationError
from ccrules.core.language import Language, language_for_path
from ccrules.core.rules import archive_rule, compile_rule, link_rule
from ccrules.core.validation import Validator, is_dependency
from ccrules.util.source_location import SourceLocation, get_caller_location

if TYPE_CHECKING:
    from ccrules.core.build_context import BuildContext
    from ccrules.core.paths import OutputPath, SourcePath, TreePath
    from ccrules.tools.toolchain import Toolchain, ToolchainRegistry

logger = logging.getLogger(__name__)

WHOLE_ARCHIVE = "-Wl,--whole-archive"
NO_WHOLE_ARCHIVE = "-Wl,--no-whole-archive"


@runtime_checkable
class LibraryResolvable(Protocol):
    """Anything that can stand in for a library dependency."""

    def as_library(self, toolchain: Toolchain) -> Library:
        """Return the library to link when building with toolchain."""
        ...


@dataclass(frozen=True)
class ResolvedTarget:
    """The outcome of resolving a library or binary declaration.

    Attributes:
        toolchain: Toolchain the target is built with.
        dependencies: Transitive library dependencies, each once, in
            collection order.
        includes: Effective include paths, de-duplicated in first-seen order.
    """

    toolchain: Toolchain
    dependencies: tuple[Library, ...]
    includes: tuple[TreePath, ...]


def merge_includes(*groups: Iterable[TreePath]) -> tuple[TreePath, ...]:
    """Concatenate include groups, keeping the first occurrence of each path."""
    result: list[TreePath] = []
    seen: set[TreePath] = set()
    for group in groups:
        for include in group:
            if include not in seen:
                seen.add(include)
                result.append(include)
    return tuple(result)


class ObjectFile:
    """A single compiled translation unit.

    Created by libraries and binaries while they build; not shared
    between targets.

    Attributes:
        out: Object file to produce.
        src: Source file to compile.
        includes: Include paths, in command-line order.
        cflags: Extra flags for C sources.
        cxxflags: Extra flags for C++ sources.
        asflags: Extra flags for assembly sources.
        toolchain: Toolchain override, or None for the selected one.
    """

    __slots__ = (
        "out",
        "src",
        "includes",
        "cflags",
        "cxxflags",
        "asflags",
        "toolchain",
        "defined_at",
    )

    def __init__(
        self,
        out: OutputPath,
        src: TreePath,
        *,
        includes: Sequence[TreePath] | None = None,
        cflags: Sequence[str] | None = None,
        cxxflags: Sequence[str] | None = None,
        asflags: Sequence[str] | None = None,
        toolchain: Toolchain | None = None,
        defined_at: SourceLocation | None = None,
    ) -> None:
        self.defined_at = defined_at or get_caller_location()
        check = Validator("ObjectFile", self.defined_at)
        self.out = check.output_path("out", out)
        self.src = check.path("src", src)
        self.includes = check.paths("includes", includes)
        self.cflags = check.strings("cflags", cflags)
        self.cxxflags = check.strings("cxxflags", cxxflags)
        self.asflags = check.strings("asflags", asflags)
        self.toolchain = check.optional_toolchain("toolchain", toolchain)

    @property
    def language(self) -> Language:
        return language_for_path(self.src)

    def flags(self) -> list[str]:
        """Per-file flags: the language's flags, then one -I per include."""
        flags: list[str] = list(getattr(self, self.language.flag_attr))
        flags.extend(f"-I{include.absolute()}" for include in self.includes)
        return flags

    def build(self, ctx: BuildContext, registry: ToolchainRegistry) -> OutputPath:
        """Emit the compile step.

        Returns:
            The object file path.
        """
        toolchain = self.toolchain or registry.selected()
        rule = compile_rule(self.language, toolchain)
        step = BuildStep(
            outputs=(self.out,),
            inputs=(self.src,),
            rule_name=rule.name,
            variables={"flags": " ".join(self.flags())},
        )
        ctx.add_build_step_with_rule(step, rule)
        return self.out

    def __repr__(self) -> str:
        return f"ObjectFile({self.out!r}, src={self.src!r})"


class CompiledTarget:
    """Common part of libraries and binaries.

    Both compile a list of sources with the same include paths and flags
    and depend on libraries. The module include path (``<module>/include``,
    where module defaults to the directory of the declaring file) is
    always part of the target's includes.
    """

    __slots__ = (
        "out",
        "srcs",
        "deps",
        "includes",
        "cflags",
        "cxxflags",
        "asflags",
        "toolchain",
        "module",
        "defined_at",
    )

    kind = "Target"

    def __init__(
        self,
        out: OutputPath,
        srcs: Sequence[TreePath],
        *,
        deps: Sequence[LibraryResolvable] | None = None,
        includes: Sequence[TreePath] | None = None,
        cflags: Sequence[str] | None = None,
        cxxflags: Sequence[str] | None = None,
        asflags: Sequence[str] | None = None,
        toolchain: Toolchain | None = None,
        module: SourcePath | None = None,
        defined_at: SourceLocation | None = None,
    ) -> None:
        self.defined_at = defined_at or get_caller_location()
        check = self._validator()
        self.out = check.output_path("out", out)
        self.srcs = check.paths("srcs", srcs, allow_none=False, non_empty=True)
        self.deps = check.dependencies("deps", deps)
        self.includes = check.paths("includes", includes)
        self.cflags = check.strings("cflags", cflags)
        self.cxxflags = check.strings("cxxflags", cxxflags)
        self.asflags = check.strings("asflags", asflags)
        self.toolchain = check.optional_toolchain("toolchain", toolchain)
        if module is None:
            if self.defined_at is not None:
                module = self.out.tree.src(self.defined_at.directory)
            else:
                module = self.out.tree.src(".")
        self.module = check.path("module", module)

    def _validator(self) -> Validator:
        return Validator(self.kind, self.defined_at)

    @property
    def module_include(self) -> TreePath:
        return self.module.joinpath("include")

    def declared_includes(self) -> tuple[TreePath, ...]:
        """Own includes plus the module include path."""
        return merge_includes(self.includes, [self.module_include])

    def resolve(self, registry: ToolchainRegistry) -> ResolvedTarget:
        """Resolve toolchain, dependencies and includes.

        The effective includes are the target's own includes followed by
        the effective includes of every collected library. A library
        built with its own toolchain brings that toolchain's stddeps
        along.

        Raises:
            DependencyCycleError: If the dependency graph has a cycle.
            ToolchainSelectionError: If a non-default toolchain was requested.
        """
        return self._resolve(registry, {})

    def _resolve(
        self,
        registry: ToolchainRegistry,
        resolved: dict[str, ResolvedTarget | None],
    ) -> ResolvedTarget:
        key = self.out.absolute()
        # None marks a library whose resolution is in progress
        resolved[key] = None
        toolchain = self.toolchain or registry.selected()
        dependencies = collect_dependencies(toolchain, self.deps, toolchain.stddeps)
        includes = merge_includes(
            self.declared_includes(),
            *(lib._effective_includes(registry, resolved) for lib in dependencies),
        )
        logger.debug(
            "Resolved %s %s: includes %s",
            self.kind,
            self.out.absolute(),
            " ".join(include.absolute() for include in includes),
        )
        result = ResolvedTarget(
            toolchain=toolchain,
            dependencies=tuple(dependencies),
            includes=includes,
        )
        resolved[key] = result
        return result

    def _effective_includes(
        self,
        registry: ToolchainRegistry,
        resolved: dict[str, ResolvedTarget | None],
    ) -> tuple[TreePath, ...]:
        key = self.out.absolute()
        if key in resolved:
            result = resolved[key]
            # A stddep reached again while its own toolchain is resolving
            if result is None:
                return self.declared_includes()
            return result.includes
        return self._resolve(registry, resolved).includes

    def _build_objects(
        self, ctx: BuildContext, registry: ToolchainRegistry, resolved: ResolvedTarget
    ) -> list[OutputPath]:
        objects: list[OutputPath] = []
        for src in self.srcs:
            obj = ObjectFile(
                src.with_extension("o"),
                src,
                includes=resolved.includes,
                cflags=self.cflags,
                cxxflags=self.cxxflags,
                asflags=self.asflags,
                toolchain=resolved.toolchain,
                defined_at=self.defined_at,
            )
            objects.append(obj.build(ctx, registry))
        return objects

    def build(self, ctx: BuildContext, registry: ToolchainRegistry) -> OutputPath:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.kind}({self.out!r})"


class Library(CompiledTarget):
    """A static archive.

    Attributes:
        always_link: Link every member of the archive even if nothing
            references it (for libraries that register themselves from
            static initializers).
    """

    __slots__ = ("always_link",)

    kind = "Library"

    def __init__(
        self,
        out: OutputPath,
        srcs: Sequence[TreePath],
        *,
        always_link: bool = False,
        **kwargs,
    ) -> None:
        super().__init__(out, srcs, **kwargs)
        self.always_link = self._validator().boolean("always_link", always_link)

    def as_library(self, toolchain: Toolchain) -> Library:
        return self

    def build(self, ctx: BuildContext, registry: ToolchainRegistry) -> OutputPath:
        """Emit compile steps for every source and one archive step.

        Returns:
            The archive path.
        """
        resolved = self.resolve(registry)
        objects = self._build_objects(ctx, registry, resolved)
        rule = archive_rule(resolved.toolchain)
        step = BuildStep(
            outputs=(self.out,),
            inputs=tuple(objects),
            rule_name=rule.name,
        )
        ctx.add_build_step_with_rule(step, rule)
        return self.out


def link_libraries(dependencies: Iterable[Library]) -> str:
    """Synthesize the library part of a link line.

    Always-link archives are bracketed by --whole-archive and come first;
    the remaining archives follow the bracket. Both groups keep the order
    they have in dependencies.
    """
    dependencies = list(dependencies)
    whole = [lib.out.absolute() for lib in dependencies if lib.always_link]
    normal = [lib.out.absolute() for lib in dependencies if not lib.always_link]
    return " ".join([WHOLE_ARCHIVE, *whole, NO_WHOLE_ARCHIVE, *normal])


class Binary(CompiledTarget):
    """An executable.

    A binary is always a root of the dependency graph and cannot be used
    as a dependency.

    Attributes:
        ldflags: Linker flags placed before objects and libraries.
        ldflags_post: Linker flags placed after objects and libraries.
    """

    __slots__ = ("ldflags", "ldflags_post")

    kind = "Binary"

    def __init__(
        self,
        out: OutputPath,
        srcs: Sequence[TreePath],
        *,
        ldflags: Sequence[str] | None = None,
        ldflags_post: Sequence[str] | None = None,
        **kwargs,
    ) -> None:
        super().__init__(out, srcs, **kwargs)
        check = self._validator()
        self.ldflags = check.strings("ldflags", ldflags)
        self.ldflags_post = check.strings("ldflags_post", ldflags_post)

    def build(self, ctx: BuildContext, registry: ToolchainRegistry) -> OutputPath:
        """Emit compile steps for every source and one link step.

        Every dependency archive is an input of the link step, so the
        executor relinks when any of them changes.

        Returns:
            The executable path.
        """
        resolved = self.resolve(registry)
        objects = self._build_objects(ctx, registry, resolved)
        rule = link_rule(resolved.toolchain)
        step = BuildStep(
            outputs=(self.out,),
            inputs=(*objects, *(lib.out for lib in resolved.dependencies)),
            rule_name=rule.name,
            variables={
                "ldflags": " ".join(self.ldflags),
                "ldflags_post": " ".join(self.ldflags_post),
                "libs": link_libraries(resolved.dependencies),
                "objs": " ".join(obj.absolute() for obj in objects),
            },
        )
        ctx.add_build_step_with_rule(step, rule)
        return self.out


class SelectByToolchain:
    """A dependency that picks a library by toolchain name.

    Example:
        atomics = SelectByToolchain({"GCC": gcc_atomics, "Clang": clang_atomics})
        app = Binary(out=..., srcs=..., deps=[atomics])
    """

    def __init__(
        self,
        libraries: Mapping[str, LibraryResolvable],
        default: LibraryResolvable | None = None,
    ) -> None:
        check = Validator("SelectByToolchain", get_caller_location())
        for name, library in libraries.items():
            check.require(f"libraries[{name!r}]", library, is_dependency, "dependency")
        if default is not None:
            check.require("default", default, is_dependency, "dependency")
        self.libraries = dict(libraries)
        self.default = default

    def as_library(self, toolchain: Toolchain) -> Library:
        choice = self.libraries.get(toolchain.name, self.default)
        if choice is None:
            raise ConfigurationError(
                f"no library for toolchain '{toolchain.name}'",
                target="SelectByToolchain",
            )
        return choice.as_library(toolchain)

    def __repr__(self) -> str:
        return f"SelectByToolchain({sorted(self.libraries)})"
