"""
Plinth — Python Warnings Bridge

Routes ``warnings.warn`` through the interception stack for the duration
of a ``with`` block, so library warnings raised inside a plugin region get
the same treatment as ``trigger_error``.
"""

from __future__ import annotations

import warnings
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from plinth.interception.stack import ErrorInterceptionStack, get_interception_stack
from plinth.interception.types import ErrorEvent
from plinth.primitives.common import Severity


def severity_for_warning(category: type[Warning]) -> Severity:
    """Deprecation categories map to DEPRECATED, everything else to WARNING."""
    if issubclass(category, (DeprecationWarning, PendingDeprecationWarning, FutureWarning)):
        return Severity.DEPRECATED
    return Severity.WARNING


@contextmanager
def capture_warnings(
    stack: ErrorInterceptionStack | None = None,
    owner_label: str = "",
    action: str = "always",
) -> Iterator[ErrorInterceptionStack]:
    """
    Send Python warnings to ``stack`` while the block runs.

    The warnings filter state and ``showwarning`` are restored on exit.
    """
    target = stack or get_interception_stack()

    def _show(
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: Any = None,
        line: str | None = None,
    ) -> None:
        target.dispatch(
            ErrorEvent(
                severity_code=int(severity_for_warning(category)),
                message=str(message),
                owner_label=owner_label,
                file=filename,
                line=lineno,
                context={"category": category.__name__},
            )
        )

    with warnings.catch_warnings():
        warnings.simplefilter(action)
        warnings.showwarning = _show
        yield target
