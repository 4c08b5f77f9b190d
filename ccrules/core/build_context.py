# SPDX-License-Identifier: MIT
"""Build steps and the executor interface.

Targets emit BuildSteps through a BuildContext, together with the rule
each step uses. The executor on the other side owns rule
de-duplication, scheduling and incremental rebuilds. ActionGraph is a
BuildContext that only records what it is given; generators turn it
into build files.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ccrules.core.errors import GenerateError

if TYPE_CHECKING:
    from ccrules.core.paths import TreePath
    from ccrules.core.rules import BuildRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildStep:
    """One concrete action.

    Attributes:
        outputs: Files the step produces.
        inputs: Files the step reads, in command-line order.
        rule_name: Name of the BuildRule to run.
        variables: Values substituted into the rule's placeholders.
    """

    outputs: tuple[TreePath, ...]
    inputs: tuple[TreePath, ...]
    rule_name: str
    variables: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "outputs", tuple(self.outputs))
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))


@runtime_checkable
class BuildContext(Protocol):
    """Receiver of build steps (the executor side)."""

    def add_build_step_with_rule(self, step: BuildStep, rule: BuildRule) -> None:
        """Add a step and the rule it references."""
        ...


class ActionGraph:
    """A BuildContext that records rules and steps.

    Rules are kept once per name; steps are kept in the order they were
    added.

    Example:
        graph = ActionGraph()
        library.build(graph, registry)
        for step in graph.steps:
            print(expand_command(graph.rules[step.rule_name], step))
    """

    def __init__(self) -> None:
        self._rules: dict[str, BuildRule] = {}
        self._steps: list[BuildStep] = []
        self._producers: dict[TreePath, BuildStep] = {}

    @property
    def rules(self) -> Mapping[str, BuildRule]:
        return MappingProxyType(self._rules)

    @property
    def steps(self) -> list[BuildStep]:
        return list(self._steps)

    def add_build_step_with_rule(self, step: BuildStep, rule: BuildRule) -> None:
        """Record a step and its rule.

        Raises:
            GenerateError: If the step's rule name does not match the rule,
                a different rule was already registered under that name, or
                another step already produces one of the step's outputs.
        """
        if step.rule_name != rule.name:
            raise GenerateError(
                f"build step references rule '{step.rule_name}' "
                f"but was given rule '{rule.name}'"
            )
        existing = self._rules.get(rule.name)
        if existing is None:
            self._rules[rule.name] = rule
        elif existing != rule:
            raise GenerateError(f"conflicting definitions for rule '{rule.name}'")

        for output in step.outputs:
            if output in self._producers:
                raise GenerateError(
                    f"multiple build steps produce {output.absolute()}"
                )
        for output in step.outputs:
            self._producers[output] = step

        self._steps.append(step)
        logger.debug(
            "Step %s: %s",
            rule.name,
            " ".join(output.absolute() for output in step.outputs),
        )

    def extend(self, other: ActionGraph) -> None:
        """Add every step of another graph, in order."""
        for step in other.steps:
            self.add_build_step_with_rule(step, other.rules[step.rule_name])

    def replay(self, ctx: BuildContext) -> None:
        """Forward every recorded step to another context."""
        for step in self._steps:
            ctx.add_build_step_with_rule(step, self._rules[step.rule_name])

    def producer(self, path: TreePath) -> BuildStep | None:
        """Get the step producing a path, if any."""
        return self._producers.get(path)

    def steps_for_rule(self, rule_name: str) -> list[BuildStep]:
        return [step for step in self._steps if step.rule_name == rule_name]

    def __iter__(self) -> Iterator[BuildStep]:
        return iter(list(self._steps))

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"ActionGraph(rules={len(self._rules)}, steps={len(self._steps)})"


# $$ | ${name} | $name
_VAR_PATTERN = re.compile(r"\$(\$|\{([A-Za-z0-9_]+)\}|([A-Za-z0-9_]+))")


def _paths(paths: Sequence[TreePath]) -> str:
    return " ".join(path.absolute() for path in paths)


def expand_command(rule: BuildRule, step: BuildStep) -> str:
    """Substitute a step's values into its rule's command.

    $in and $out expand to the step's absolute input and output paths.
    Step variables shadow rule variables. Unknown variables expand to an
    empty string, matching Ninja.
    """
    scope: dict[str, str] = {
        "in": _paths(step.inputs),
        "out": _paths(step.outputs),
    }

    def lookup(name: str, seen: frozenset[str]) -> str:
        if name in step.variables:
            return step.variables[name]
        if name in scope:
            return scope[name]
        if name in rule.variables and name not in seen:
            # Rule variables may refer to $out and friends
            return substitute(rule.variables[name], seen | {name})
        return ""

    def substitute(text: str, seen: frozenset[str]) -> str:
        def replace(match: re.Match[str]) -> str:
            if match.group(1) == "$":
                return "$"
            return lookup(match.group(2) or match.group(3), seen)

        return _VAR_PATTERN.sub(replace, text)

    return substitute(rule.command, frozenset())
