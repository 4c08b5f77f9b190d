# SPDX-License-Identifier: MIT
"""Build variables for ccrules.

Variables come from a JSON object in the CCRULES_VARS environment
variable (set by whatever drives the build script), falling back to
plain environment variables:

    CCRULES_VARS='{"MODE": "debug"}' python build.py
    MODE=debug python build.py

The requested toolchain is only read from ccrules-specific places
(TOOLCHAIN in CCRULES_VARS, or CCRULES_TOOLCHAIN), never from a bare
TOOLCHAIN environment variable.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

VARS_ENV = "CCRULES_VARS"
BUILD_DIR_ENV = "CCRULES_BUILD_DIR"
SOURCE_DIR_ENV = "CCRULES_SOURCE_DIR"
TOOLCHAIN_ENV = "CCRULES_TOOLCHAIN"

# Parsed CCRULES_VARS, loaded on first access
_build_vars: dict[str, str] | None = None


def _load_build_vars() -> dict[str, str]:
    raw = os.environ.get(VARS_ENV)
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring %s: not valid JSON", VARS_ENV)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", VARS_ENV)
        return {}
    return {str(key): str(value) for key, value in data.items()}


def reset_vars() -> None:
    """Forget cached build variables so they are re-read from the environment."""
    global _build_vars
    _build_vars = None


def get_var(name: str, default: str | None = None) -> str | None:
    """Get a build variable.

    Precedence (highest to lowest):
        1. CCRULES_VARS JSON object
        2. Environment variable of the same name

    Args:
        name: Variable name.
        default: Value returned when the variable is not set.

    Returns:
        The variable value, or default if not set.
    """
    build_vars = _get_build_vars()
    if name in build_vars:
        return build_vars[name]

    return os.environ.get(name, default)


def _get_build_vars() -> dict[str, str]:
    global _build_vars

    if _build_vars is None:
        _build_vars = _load_build_vars()
    return _build_vars


def get_toolchain_name() -> str | None:
    """Requested toolchain name, or None for the default toolchain.

    Precedence (highest to lowest):
        1. TOOLCHAIN in the CCRULES_VARS JSON object
        2. CCRULES_TOOLCHAIN environment variable
    """
    build_vars = _get_build_vars()
    if "TOOLCHAIN" in build_vars:
        return build_vars["TOOLCHAIN"] or None
    return os.environ.get(TOOLCHAIN_ENV) or None


def get_build_dir(default: str = "build") -> Path:
    """Output tree root from CCRULES_BUILD_DIR, or default."""
    return Path(os.environ.get(BUILD_DIR_ENV) or default)


def get_source_dir(default: str = ".") -> Path:
    """Source tree root from CCRULES_SOURCE_DIR, or default."""
    return Path(os.environ.get(SOURCE_DIR_ENV) or default)
