# SPDX-License-Identifier: MIT
"""Toolchain definition and registry.

A Toolchain is a named, immutable bundle of the executables used to
compile, assemble, archive and link, together with their baseline flags
and the dependencies every target built with it receives implicitly.

The ToolchainRegistry is an explicit value passed to target resolution
instead of process-wide state. Registering returns a new registry:

    registry = ToolchainRegistry().register_as_default(GCC).register(CLANG)
    registry.selected()  # -> GCC
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ccrules.core.errors import ToolchainError, ToolchainSelectionError
from ccrules.util.source_location import get_caller_location

if TYPE_CHECKING:
    from ccrules.core.target import LibraryResolvable

logger = logging.getLogger(__name__)


def _freeze(values: Iterable[Any] | None) -> tuple[Any, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(values)


@dataclass(frozen=True)
class Toolchain:
    """A named set of build tools and their baseline flags.

    Attributes:
        name: Toolchain name, also the prefix of its rule names.
        c_compiler: C compiler executable.
        cxx_compiler: C++ compiler executable.
        assembler: Assembler executable.
        archiver: Static archiver executable.
        linker: Linker (usually the C++ compiler driver).
        cflags: Flags for every C compile.
        cxxflags: Flags for every C++ compile.
        asflags: Flags for every assembly.
        ldflags: Flags for every link.
        stddeps: Dependencies implicitly added to every target.
        ldscripts: Default linker scripts.
    """

    name: str
    c_compiler: str = ""
    cxx_compiler: str = ""
    assembler: str = ""
    archiver: str = ""
    linker: str = ""
    cflags: tuple[str, ...] = ()
    cxxflags: tuple[str, ...] = ()
    asflags: tuple[str, ...] = ()
    ldflags: tuple[str, ...] = ()
    stddeps: tuple[LibraryResolvable, ...] = ()
    ldscripts: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists at construction but never keep a mutable container
        for name in ("cflags", "cxxflags", "asflags", "ldflags", "stddeps", "ldscripts"):
            object.__setattr__(self, name, _freeze(getattr(self, name)))
        # Imported here: validation imports this module
        from ccrules.core.validation import Validator

        check = Validator("Toolchain", get_caller_location())
        for name in ("cflags", "cxxflags", "asflags", "ldflags", "ldscripts"):
            check.strings(name, getattr(self, name))
        check.dependencies("stddeps", self.stddeps)

    def tool(self, attr: str) -> str:
        """Return a tool path, failing if it is empty.

        Args:
            attr: Attribute name (e.g. 'c_compiler').

        Raises:
            ToolchainError: If the tool is not set.
        """
        value: str = getattr(self, attr)
        if not value:
            raise ToolchainError(f"toolchain '{self.name}' has no {attr} configured")
        return value

    def __hash__(self) -> int:
        return hash(self.name)


@dataclass(frozen=True)
class ToolchainRegistry:
    """Named toolchains with exactly one default.

    Attributes:
        toolchains: Read-only mapping of name to toolchain.
        default_name: Name of the default toolchain, or None.
        requested: Toolchain name requested by build configuration.
    """

    toolchains: Mapping[str, Toolchain] = field(
        default_factory=lambda: MappingProxyType({})
    )
    default_name: str | None = None
    requested: str | None = None

    def register(self, toolchain: Toolchain) -> ToolchainRegistry:
        """Return a registry with the toolchain added (or replaced)."""
        toolchains = dict(self.toolchains)
        if toolchain.name in toolchains:
            logger.debug("Replacing toolchain %s", toolchain.name)
        toolchains[toolchain.name] = toolchain
        return replace(self, toolchains=MappingProxyType(toolchains))

    def register_as_default(self, toolchain: Toolchain) -> ToolchainRegistry:
        """Return a registry with the toolchain added and marked default."""
        return replace(self.register(toolchain), default_name=toolchain.name)

    def with_requested(self, name: str | None) -> ToolchainRegistry:
        """Return a registry recording a requested toolchain name."""
        return replace(self, requested=name)

    def lookup(self, name: str) -> Toolchain:
        """Get a toolchain by name.

        Raises:
            ToolchainError: If no toolchain has that name.
        """
        try:
            return self.toolchains[name]
        except KeyError:
            known = ", ".join(sorted(self.toolchains)) or "none"
            raise ToolchainError(
                f"unknown toolchain '{name}' (registered: {known})"
            ) from None

    def default(self) -> Toolchain:
        """Get the default toolchain.

        Raises:
            ToolchainError: If no default toolchain was registered.
        """
        if self.default_name is None:
            raise ToolchainError("no default toolchain registered")
        return self.toolchains[self.default_name]

    def selected(self) -> Toolchain:
        """Get the toolchain targets are built with.

        This is always the default toolchain. Requesting a different one
        is rejected rather than silently ignored.

        Raises:
            ToolchainSelectionError: If a non-default toolchain was requested.
        """
        default = self.default()
        if self.requested and self.requested != default.name:
            raise ToolchainSelectionError(self.requested, default.name)
        return default

    def __contains__(self, name: object) -> bool:
        return name in self.toolchains

    def __repr__(self) -> str:
        names = ", ".join(self.toolchains)
        return f"ToolchainRegistry([{names}], default={self.default_name!r})"
