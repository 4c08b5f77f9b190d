# SPDX-License-Identifier: MIT
"""Construction-time checks for target declarations.

Every check raises ConfigurationError naming the target kind, the field
and the kind of value that was expected, so a bad declaration fails
where it is written rather than when the build is emitted.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from ccrules.core.errors import ConfigurationError
from ccrules.core.paths import OutputPath, SourcePath, TreePath
from ccrules.tools.toolchain import Toolchain
from ccrules.util.source_location import SourceLocation

Check = Callable[[Any], bool]


class Validator:
    """Validates the fields of one target declaration.

    Attributes:
        target: Kind of target, used in error messages (e.g. 'Library').
        location: Where the target was declared.
    """

    def __init__(self, target: str, location: SourceLocation | None = None) -> None:
        self.target = target
        self.location = location

    def fail(self, field: str, expected: str, value: Any) -> ConfigurationError:
        return ConfigurationError(
            f"expected {expected}, got {type(value).__name__}",
            target=self.target,
            field=field,
            location=self.location,
        )

    def require(self, field: str, value: Any, check: Check, expected: str) -> Any:
        if not check(value):
            raise self.fail(field, expected, value)
        return value

    def output_path(self, field: str, value: Any) -> OutputPath:
        return self.require(field, value, _is_output_path, "output path")

    def path(self, field: str, value: Any) -> TreePath:
        return self.require(field, value, _is_path, "path")

    def optional_toolchain(self, field: str, value: Any) -> Toolchain | None:
        if value is None:
            return None
        return self.require(field, value, _is_toolchain, "toolchain")

    def boolean(self, field: str, value: Any) -> bool:
        if value is None:
            return False
        return self.require(field, value, _is_bool, "boolean")

    def sequence(
        self,
        field: str,
        values: Any,
        check: Check,
        expected: str,
        *,
        allow_none: bool = True,
        non_empty: bool = False,
    ) -> tuple[Any, ...]:
        """Validate a sequence field entry by entry.

        Strings are rejected even though they are sequences.
        """
        if values is None:
            if allow_none:
                return ()
            raise ConfigurationError(
                f"is required (expected list of {expected})",
                target=self.target,
                field=field,
                location=self.location,
            )
        if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
            raise self.fail(field, f"list of {expected}", values)
        if non_empty and not values:
            raise ConfigurationError(
                f"must not be empty (expected list of {expected})",
                target=self.target,
                field=field,
                location=self.location,
            )
        for index, value in enumerate(values):
            self.require(f"{field}[{index}]", value, check, expected)
        return tuple(values)

    def paths(self, field: str, values: Any, **kwargs: Any) -> tuple[TreePath, ...]:
        return self.sequence(field, values, _is_path, "path", **kwargs)

    def strings(self, field: str, values: Any) -> tuple[str, ...]:
        return self.sequence(field, values, _is_string, "string")

    def dependencies(self, field: str, values: Any) -> tuple[Any, ...]:
        return self.sequence(field, values, is_dependency, "dependency")


def _is_output_path(value: Any) -> bool:
    return isinstance(value, OutputPath)


def _is_path(value: Any) -> bool:
    return isinstance(value, (SourcePath, OutputPath))


def _is_string(value: Any) -> bool:
    return isinstance(value, str)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_toolchain(value: Any) -> bool:
    return isinstance(value, Toolchain)


def is_dependency(value: Any) -> bool:
    """True if value can resolve itself to a library."""
    # Imported here: target imports this module
    from ccrules.core.target import LibraryResolvable

    return isinstance(value, LibraryResolvable)
