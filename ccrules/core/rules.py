# SPDX-License-Identifier: MIT
"""Build rule templates for compiling, archiving and linking.

A BuildRule is a named command template shared by every build step that
uses it. Rules are generated from a toolchain by pure functions, one
rule per (toolchain, language) for compiles and one per toolchain for
archiving and linking. Rule names are prefixed with the toolchain name
so rules from different toolchains never collide:

    GCC-c, GCC-cxx, GCC-as, GCC-ar, GCC-ld

Placeholders use the executor's syntax ($in, $out, $flags, ...). Toolchain
flags are written before the per-target placeholders, so per-target flags
win for tools where the last occurrence of a flag takes effect.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from ccrules.core.errors import InternalError
from ccrules.core.language import Language, language_for_path

if TYPE_CHECKING:
    from ccrules.core.paths import TreePath
    from ccrules.tools.toolchain import Toolchain

# Every compile writes a make-style dependency file next to its output
DEPFILE = "$out.d"
DEPFLAGS = f"-MD -MF {DEPFILE}"


@dataclass(frozen=True)
class BuildRule:
    """A reusable command template.

    Attributes:
        name: Unique rule name (``<toolchain>-<action>``).
        command: Command line with placeholders.
        description: Short text shown while the rule runs.
        variables: Extra rule-level variables (e.g. depfile).
        compdb: True if steps using this rule belong in a
            compilation database.
    """

    name: str
    command: str
    description: str
    variables: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    compdb: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))

    def __hash__(self) -> int:
        return hash((self.name, self.command))


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


def _compile_rule(
    toolchain: Toolchain, action: str, label: str, tool: str, flags: tuple[str, ...]
) -> BuildRule:
    command = _join(
        toolchain.tool(tool),
        "-c",
        " ".join(flags),
        "$flags",
        "-o $out",
        DEPFLAGS,
        "-pipe $in",
    )
    return BuildRule(
        name=f"{toolchain.name}-{action}",
        command=command,
        description=f"{label} (toolchain: {toolchain.name}) $out",
        variables={"depfile": DEPFILE},
        compdb=True,
    )


def cxx_rule(toolchain: Toolchain) -> BuildRule:
    """Compile rule for C++ sources."""
    return _compile_rule(toolchain, "cxx", "CXX", "cxx_compiler", toolchain.cxxflags)


def c_rule(toolchain: Toolchain) -> BuildRule:
    """Compile rule for C sources."""
    return _compile_rule(toolchain, "c", "C", "c_compiler", toolchain.cflags)


def asm_rule(toolchain: Toolchain) -> BuildRule:
    """Compile rule for assembly sources."""
    return _compile_rule(toolchain, "as", "ASM", "assembler", toolchain.asflags)


def archive_rule(toolchain: Toolchain) -> BuildRule:
    """Rule producing a thin static archive.

    Any previous archive is removed first: ``ar r`` would otherwise keep
    members of objects that are no longer part of the library.
    """
    archiver = toolchain.tool("archiver")
    return BuildRule(
        name=f"{toolchain.name}-ar",
        command=f"rm -f $out 2> /dev/null; {archiver} rcsT $out $in",
        description=f"AR (toolchain: {toolchain.name}) $out",
    )


def link_rule(toolchain: Toolchain) -> BuildRule:
    """Rule linking objects and archives into an executable.

    $libs is synthesized by the binary target (whole-archive grouping),
    not taken verbatim from user input.
    """
    scripts = " ".join(f"-T {script}" for script in toolchain.ldscripts)
    command = _join(
        toolchain.tool("linker"),
        " ".join(toolchain.ldflags),
        scripts,
        "$ldflags -o $out $objs $libs $ldflags_post",
    )
    return BuildRule(
        name=f"{toolchain.name}-ld",
        command=command,
        description=f"LD (toolchain: {toolchain.name}) $out",
    )


_COMPILE_RULES: dict[Language, Callable[[Toolchain], BuildRule]] = {
    Language.CXX: cxx_rule,
    Language.C: c_rule,
    Language.ASM: asm_rule,
}


def compile_rule(language: Language, toolchain: Toolchain) -> BuildRule:
    """Get the compile rule for a language.

    Raises:
        InternalError: If no rule generator exists for the language.
    """
    generator = _COMPILE_RULES.get(language)
    if generator is None:
        raise InternalError(f"no compile rule for language {language!r}")
    return generator(toolchain)


def rule_for_source(path: TreePath, toolchain: Toolchain) -> BuildRule:
    """Get the compile rule for a source file, based on its extension."""
    return compile_rule(language_for_path(path), toolchain)
