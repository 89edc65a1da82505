"""
Plinth — Trigger Points

``trigger_error`` is the front door for soft errors: it captures the
caller's location, wraps everything in an ErrorEvent and dispatches it
through the interception stack.
"""

from __future__ import annotations

import sys
from typing import Any

from plinth.errors import PlinthError
from plinth.interception.stack import ErrorInterceptionStack, get_interception_stack
from plinth.interception.types import ErrorEvent, HandlerOutcome
from plinth.primitives.common import Severity


def _caller_location(stacklevel: int) -> tuple[str | None, int | None]:
    try:
        frame = sys._getframe(stacklevel + 1)
    except ValueError:
        return None, None
    return frame.f_code.co_filename, frame.f_lineno


def trigger_error(
    message: str,
    severity: Severity | int = Severity.NOTICE,
    *,
    owner_label: str = "",
    stack: ErrorInterceptionStack | None = None,
    stacklevel: int = 1,
    context: dict[str, Any] | None = None,
) -> HandlerOutcome:
    """
    Raise a soft error.

    ``stacklevel`` works like ``warnings.warn``: 1 records the line that
    called ``trigger_error``, 2 its caller, and so on.
    """
    file, line = _caller_location(stacklevel)
    event = ErrorEvent(
        severity_code=int(severity),
        message=message,
        owner_label=owner_label,
        file=file,
        line=line,
        context=context or {},
    )
    return (stack or get_interception_stack()).dispatch(event)


def trigger_exception(
    exc: BaseException,
    *,
    owner_label: str = "",
    stack: ErrorInterceptionStack | None = None,
    stacklevel: int = 1,
) -> HandlerOutcome:
    """
    Report a caught exception through the soft channel.

    Plinth errors use their ``user_severity``; anything else is a WARNING.
    """
    if isinstance(exc, PlinthError):
        severity = exc.user_severity
        message = exc.message or type(exc).__name__
    else:
        severity = Severity.WARNING
        message = f"{type(exc).__name__}: {exc}"

    return trigger_error(
        message,
        severity,
        owner_label=owner_label,
        stack=stack,
        stacklevel=stacklevel + 1,
        context={"exception_type": type(exc).__name__},
    )
