# SPDX-License-Identifier: MIT
"""pkg-config lookups for external libraries.

The results are plain lists of flag tokens, meant to be passed as
cflags/cxxflags of a library or ldflags of a binary:

    app = project.Binary(
        "app",
        ["main.c"],
        cflags=get_compile_flags("zlib"),
        ldflags_post=get_link_flags("zlib"),
    )
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess

from ccrules.configure.config import get_var
from ccrules.core.errors import PackageError

logger = logging.getLogger(__name__)


def _pkg_config() -> str:
    program = get_var("PKG_CONFIG", "pkg-config") or "pkg-config"
    found = shutil.which(program)
    if found is None:
        raise PackageError(program, "program not found in PATH")
    return found


def _query(package: str, option: str) -> list[str]:
    cmd = [_pkg_config(), option, package]
    logger.debug("Running: %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as e:
        raise PackageError(package, f"failed to run pkg-config: {e}") from e
    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit status {result.returncode}"
        raise PackageError(package, detail)
    return shlex.split(result.stdout)


def get_compile_flags(package: str) -> list[str]:
    """Compiler flags for a package (``pkg-config --cflags``)."""
    return _query(package, "--cflags")


def get_link_flags(package: str) -> list[str]:
    """Linker flags for a package (``pkg-config --libs``)."""
    return _query(package, "--libs")
