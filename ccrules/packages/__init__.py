# SPDX-License-Identifier: MIT
"""External package lookup."""

from ccrules.packages.pkg_config import get_compile_flags, get_link_flags

__all__ = ["get_compile_flags", "get_link_flags"]
