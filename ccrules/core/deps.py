# SPDX-License-Identifier: MIT
"""Transitive dependency collection with cycle detection.

The walk is a depth-first traversal with a three-state visited map:
absent (unvisited), IN_PROGRESS (on the current traversal stack) and
DONE (fully expanded). Meeting an IN_PROGRESS node means the graph has
a cycle; meeting a DONE node means it was reached through another path
(a diamond) and is skipped.

Nodes are appended in pre-order, so a library comes before the
libraries it depends on. The order only affects link-line order and is
stable for a given declaration order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from ccrules.core.errors import DependencyCycleError

if TYPE_CHECKING:
    from ccrules.core.target import Library, LibraryResolvable
    from ccrules.tools.toolchain import Toolchain

logger = logging.getLogger(__name__)

D = TypeVar("D")
N = TypeVar("N")


class VisitState(Enum):
    IN_PROGRESS = "in-progress"
    DONE = "done"


def walk(
    roots: Iterable[D],
    resolve: Callable[[D], N],
    children: Callable[[N], Iterable[D]],
    key: Callable[[N], Hashable],
) -> list[N]:
    """Collect every node reachable from roots, each exactly once.

    Args:
        roots: Starting dependency declarations, visited in order.
        resolve: Turns a declaration into a node.
        children: Declarations a node depends on.
        key: Identity of a node; nodes with equal keys are the same node.

    Returns:
        Reachable nodes in pre-order.

    Raises:
        DependencyCycleError: If a node is reached while still being expanded.
    """
    result: list[N] = []
    states: dict[Hashable, VisitState] = {}
    stack: list[Hashable] = []

    def visit(dep: D) -> None:
        node = resolve(dep)
        node_key = key(node)
        state = states.get(node_key)
        if state is VisitState.IN_PROGRESS:
            cycle = stack[stack.index(node_key) :] + [node_key]
            raise DependencyCycleError([str(k) for k in cycle])
        if state is VisitState.DONE:
            return

        result.append(node)
        states[node_key] = VisitState.IN_PROGRESS
        stack.append(node_key)
        for child in children(node):
            visit(child)
        stack.pop()
        states[node_key] = VisitState.DONE

    for root in roots:
        visit(root)
    return result


def collect_dependencies(
    toolchain: Toolchain,
    deps: Iterable[LibraryResolvable],
    stddeps: Iterable[LibraryResolvable] = (),
) -> list[Library]:
    """Flatten the transitive library dependencies of a target.

    Declared deps are visited first, in order, then the toolchain's
    standard dependencies. Libraries are identified by the absolute path
    of their output.

    Args:
        toolchain: Toolchain the dependencies are resolved for.
        deps: The target's declared dependencies.
        stddeps: Dependencies implied by the toolchain.

    Returns:
        Each reachable library once, in pre-order.
    """
    libraries = walk(
        [*deps, *stddeps],
        resolve=lambda dep: dep.as_library(toolchain),
        children=lambda lib: lib.deps,
        key=lambda lib: lib.out.absolute(),
    )
    logger.debug(
        "Collected %d dependencies for toolchain %s: %s",
        len(libraries),
        toolchain.name,
        ", ".join(lib.out.absolute() for lib in libraries),
    )
    return libraries
