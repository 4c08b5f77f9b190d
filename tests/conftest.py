# SPDX-License-Identifier: MIT
"""Shared fixtures for ccrules tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from ccrules.configure import config
from ccrules.core.build_context import ActionGraph
from ccrules.core.paths import PathTree
from ccrules.toolchains import GCC
from ccrules.tools.toolchain import ToolchainRegistry


@pytest.fixture(autouse=True)
def clean_build_vars(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from build variables set in the environment."""
    for name in (
        config.VARS_ENV,
        config.BUILD_DIR_ENV,
        config.SOURCE_DIR_ENV,
        config.TOOLCHAIN_ENV,
        "TOOLCHAIN",
        "PKG_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)
    config.reset_vars()
    yield
    config.reset_vars()


@pytest.fixture
def tree(tmp_path: Path) -> PathTree:
    return PathTree(tmp_path / "src", tmp_path / "build")


@pytest.fixture
def registry() -> ToolchainRegistry:
    return ToolchainRegistry().register_as_default(GCC)


@pytest.fixture
def graph() -> ActionGraph:
    return ActionGraph()
