# SPDX-License-Identifier: MIT
"""Custom exceptions for ccrules.

All ccrules exceptions inherit from CcRulesError, which includes
optional source location information for better error messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ccrules.util.source_location import SourceLocation


class CcRulesError(Exception):
    """Base class for all ccrules exceptions.

    Attributes:
        message: The error message.
        location: Optional source location where the error occurred.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class ConfigurationError(CcRulesError):
    """Malformed target declaration.

    Raised at construction time when a field holds the wrong kind of
    value or a required field is missing.

    Attributes:
        target: Kind of target being declared (e.g. 'Library').
        field: Name of the offending field, or None.
    """

    def __init__(
        self,
        message: str,
        *,
        target: str | None = None,
        field: str | None = None,
        location: SourceLocation | None = None,
    ) -> None:
        self.target = target
        self.field = field
        if target and field:
            message = f"{target}.{field}: {message}"
        elif target:
            message = f"{target}: {message}"
        super().__init__(message, location)


class DependencyCycleError(CcRulesError):
    """Circular dependency detected in the library graph.

    Attributes:
        cycle: Output paths of the libraries forming the cycle, ending
            with the path at which the cycle was detected.
    """

    def __init__(
        self,
        cycle: list[str],
        location: SourceLocation | None = None,
    ) -> None:
        self.cycle = cycle
        cycle_str = " -> ".join(cycle)
        super().__init__(f"dependency cycle: {cycle_str}", location)


class UnknownLanguageError(CcRulesError):
    """Source file language cannot be determined from its extension.

    Attributes:
        path: The offending source path.
        extension: The extension found, or None if the path has none.
    """

    def __init__(
        self,
        path: str,
        extension: str | None,
        location: SourceLocation | None = None,
    ) -> None:
        self.path = path
        self.extension = extension
        if extension is None:
            message = f"source path does not have an extension: {path}"
        else:
            message = f"unknown language for extension '{extension}': {path}"
        super().__init__(message, location)


class InternalError(CcRulesError):
    """A closed enumeration reached an unmapped case.

    This indicates a defect in ccrules rather than a user error.
    """


class ToolchainError(CcRulesError):
    """Toolchain lookup failed or a toolchain is incomplete."""


class ToolchainSelectionError(ToolchainError):
    """A non-default toolchain was requested.

    Selecting anything but the default toolchain is not supported yet.

    Attributes:
        requested: The requested toolchain name.
        default: The name of the default toolchain.
    """

    def __init__(
        self,
        requested: str,
        default: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.requested = requested
        self.default = default
        super().__init__(
            f"toolchain '{requested}' was requested but only the default "
            f"toolchain '{default}' can be selected",
            location,
        )


class GenerateError(CcRulesError):
    """Error while collecting build actions or writing build files."""


class PackageError(CcRulesError):
    """External package lookup (pkg-config) failed.

    Attributes:
        package: Name of the package that was looked up.
    """

    def __init__(
        self,
        package: str,
        message: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.package = package
        super().__init__(f"{package}: {message}", location)
