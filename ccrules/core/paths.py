# SPDX-License-Identifier: MIT
"""Source-tree and output-tree path values.

A PathTree pairs a source directory with a build directory. Paths are
created through the tree so that the kind of a path (source or output)
is part of its type:

    tree = PathTree("/src/project", "/src/project/build")
    src = tree.src("lib/foo.c")        # SourcePath
    obj = src.with_extension("o")      # OutputPath build/lib/foo.o

Paths compare equal when they have the same kind and the same absolute
form, regardless of which PathTree instance created them.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePath


class PathTree:
    """A source directory and its matching output directory.

    Attributes:
        source_dir: Absolute root of the source tree.
        build_dir: Absolute root of the output tree.
    """

    def __init__(self, source_dir: Path | str = ".", build_dir: Path | str = "build"):
        self.source_dir = Path(os.path.normpath(Path(source_dir).absolute()))
        build = Path(build_dir)
        if not build.is_absolute():
            build = self.source_dir / build
        self.build_dir = Path(os.path.normpath(build))

    def src(self, path: Path | str) -> SourcePath:
        """Create a path in the source tree."""
        return SourcePath(self, path)

    def out(self, path: Path | str) -> OutputPath:
        """Create a path in the output tree."""
        return OutputPath(self, path)

    def __repr__(self) -> str:
        return f"PathTree({str(self.source_dir)!r}, {str(self.build_dir)!r})"


class TreePath:
    """Base class for paths rooted in a PathTree.

    Subclasses define which root of the tree they live under.

    Attributes:
        tree: The tree this path belongs to.
        relative: Path relative to the root (absolute if it lies outside).
    """

    __slots__ = ("tree", "relative")

    kind = "path"

    def __init__(self, tree: PathTree, path: Path | str) -> None:
        self.tree = tree
        pure = PurePath(path)
        if pure.is_absolute():
            try:
                pure = PurePath(os.path.normpath(pure)).relative_to(self.root)
            except ValueError:
                pure = PurePath(os.path.normpath(pure))
        self.relative = pure

    @property
    def root(self) -> Path:
        raise NotImplementedError

    def absolute(self) -> str:
        """Normalized absolute form of this path."""
        return os.path.normpath(self.root / self.relative)

    def extension(self) -> str | None:
        """Extension without the leading dot, or None."""
        suffix = self.relative.suffix
        return suffix[1:] if suffix else None

    def with_extension(self, ext: str) -> OutputPath:
        """Derive an output-tree path with a different extension.

        The relative location is mirrored into the output tree, so
        ``src/foo.c`` becomes ``<build_dir>/src/foo.o``.
        """
        relative = self.relative
        if relative.is_absolute():
            relative = PurePath(*relative.parts[1:])
        return OutputPath(self.tree, relative.with_suffix(f".{ext}"))

    def joinpath(self, *parts: str) -> TreePath:
        return type(self)(self.tree, self.relative.joinpath(*parts))

    def __fspath__(self) -> str:
        return self.absolute()

    def __str__(self) -> str:
        return self.absolute()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.relative)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TreePath):
            return NotImplemented
        return self.kind == other.kind and self.absolute() == other.absolute()

    def __hash__(self) -> int:
        return hash((self.kind, self.absolute()))


class SourcePath(TreePath):
    """A path in the source tree."""

    __slots__ = ()

    kind = "source"

    @property
    def root(self) -> Path:
        return self.tree.source_dir


class OutputPath(TreePath):
    """A path in the output tree."""

    __slots__ = ()

    kind = "output"

    @property
    def root(self) -> Path:
        return self.tree.build_dir
