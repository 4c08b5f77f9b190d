# SPDX-License-Identifier: MIT
"""Source location tracking for user build scripts.

Targets record where they were declared so errors can point back at the
line of the build script, and so a target's module directory can be
derived from the file that declared it.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from pathlib import Path

# Frames from inside this package are skipped when looking for the caller
_PACKAGE_DIR = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class SourceLocation:
    """A location in a user's build script.

    Attributes:
        filename: Path of the file.
        lineno: Line number (1-based).
        function: Name of the enclosing function, if known.
    """

    filename: str
    lineno: int
    function: str | None = None

    @property
    def directory(self) -> Path:
        """Directory containing the file."""
        return Path(self.filename).resolve().parent

    def __str__(self) -> str:
        return f"{self.filename}:{self.lineno}"


def _is_internal(filename: str) -> bool:
    try:
        Path(filename).resolve().relative_to(_PACKAGE_DIR)
    except ValueError:
        return False
    return True


def get_caller_location() -> SourceLocation | None:
    """Return the location of the first caller outside of ccrules.

    Frames without a real file (importlib, dataclass-generated methods)
    are skipped too.

    Returns:
        The SourceLocation, or None if every frame belongs to ccrules
        (or frames are unavailable).
    """
    frame = inspect.currentframe()
    try:
        while frame is not None:
            filename = frame.f_code.co_filename
            if not filename.startswith("<") and not _is_internal(filename):
                return SourceLocation(
                    filename=filename,
                    lineno=frame.f_lineno,
                    function=frame.f_code.co_name,
                )
            frame = frame.f_back
        return None
    finally:
        del frame
