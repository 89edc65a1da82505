"""
Plinth — Exception Types

A small taxonomy: everything Plinth raises derives from ``PlinthError``.
Exceptions can also be reported through the soft-error channel, in which
case ``user_severity`` decides how loud they are.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from plinth.primitives.common import Severity


class PlinthError(Exception):
    """
    Base exception.

    ``severity`` is optional and only matters when the exception is routed
    through ``trigger_exception``.
    """

    def __init__(self, message: str = "", severity: Severity | int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.severity = severity

    @property
    def code(self) -> int:
        return int(self.severity or 0)

    @property
    def user_severity(self) -> Severity:
        """Severity to report under. Anything not ERROR or WARNING is a NOTICE."""
        if self.severity == Severity.ERROR:
            return Severity.ERROR
        if self.severity == Severity.WARNING:
            return Severity.WARNING
        return Severity.NOTICE

    def __str__(self) -> str:
        return f"{type(self).__name__}: [{self.code}]: {self.message}"


class PluginError(PlinthError):
    """Raised by plugin code built on ``BasePlugin``."""


class RootPathNotFound(PluginError):
    """A root-relative path does not exist."""

    def __init__(self, path: str | Path, severity: Severity | int | None = None) -> None:
        super().__init__(f"Cannot locate root relative path '{path}'", severity)
        self.path = Path(path)


class ResolutionError(PlinthError, LookupError):
    """
    No search scope provides a type for ``short_name``.

    Returned as a value by ``CascadingResolver.find`` / ``try_resolve`` and
    raised by ``CascadingResolver.resolve``.
    """

    def __init__(self, short_name: str, scopes: Sequence[str] = ()) -> None:
        self.short_name = short_name
        self.scopes = tuple(scopes)
        searched = ", ".join(repr(s) for s in self.scopes) or "no scopes"
        super().__init__(f"Unable to locate cascading type '{short_name}' (searched {searched})")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResolutionError):
            return NotImplemented
        return self.short_name == other.short_name and self.scopes == other.scopes

    def __hash__(self) -> int:
        return hash((self.short_name, self.scopes))
