# SPDX-License-Identifier: MIT
"""Source languages and extension lookup."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from ccrules.core.errors import UnknownLanguageError

if TYPE_CHECKING:
    from ccrules.core.paths import TreePath


class Language(Enum):
    """Languages a source file can be written in."""

    C = "C"
    CXX = "C++"
    ASM = "Asm"

    @property
    def flag_attr(self) -> str:
        """Name of the per-language flag attribute (e.g. 'cxxflags')."""
        return _FLAG_ATTRS[self]


# Case matters: .S (preprocessed) and .s are both assembly
EXTENSION_MAP: dict[str, Language] = {
    "c": Language.C,
    "h": Language.C,
    "cc": Language.CXX,
    "cpp": Language.CXX,
    "hh": Language.CXX,
    "hpp": Language.CXX,
    "s": Language.ASM,
    "S": Language.ASM,
}

_FLAG_ATTRS: dict[Language, str] = {
    Language.C: "cflags",
    Language.CXX: "cxxflags",
    Language.ASM: "asflags",
}


def language_for_path(path: TreePath) -> Language:
    """Determine the language of a source file from its extension.

    Raises:
        UnknownLanguageError: If the path has no extension or an unknown one.
    """
    ext = path.extension()
    if ext is None:
        raise UnknownLanguageError(path.absolute(), None)
    language = EXTENSION_MAP.get(ext)
    if language is None:
        raise UnknownLanguageError(path.absolute(), ext)
    return language
