"""
Plinth — Interception Type Definitions

Stack entries, handler identities, and the ErrorEvent that flows from a
trigger point through the active handler.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, NamedTuple

from pydantic import Field

from plinth.primitives.common import Identified, Severity, Timestamped, severity_from_code


class HandlerOutcome(str, enum.Enum):
    """What a handler did with an event."""

    HANDLED = "handled"
    UNHANDLED = "unhandled"  # Defer to the built-in reporter


class HandlerIdentity(NamedTuple):
    """Owner of an activation: the owning type (or label) and its handler name."""

    owner: Any
    handler: str = "error_handler"

    def __str__(self) -> str:
        owner = getattr(self.owner, "__qualname__", self.owner)
        return f"{owner}.{self.handler}"


class ErrorEvent(Identified, Timestamped):
    """One triggered soft error."""

    severity_code: int
    message: str
    owner_label: str = ""
    file: str | None = None
    line: int | None = None
    context: dict[str, Any] = Field(default_factory=dict)

    @property
    def severity(self) -> Severity | None:
        """The recognized severity, or None for an unrecognized code."""
        return severity_from_code(self.severity_code)

    @property
    def source_location(self) -> str:
        if self.file is None:
            return "<unknown>"
        return f"{self.file}:{self.line}" if self.line is not None else self.file


ErrorHandlerFn = Callable[[ErrorEvent], HandlerOutcome]


@dataclass(frozen=True)
class HandlerStackEntry:
    """
    One activation. Owns the state that was live before it was pushed and
    puts it back when popped.
    """

    identity: HandlerIdentity | Any
    previous_handler: ErrorHandlerFn | None
    previous_handler_mask: int
    previous_reporting_mask: int
