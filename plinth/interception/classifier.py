"""
Plinth — Soft Error Classification

Maps a severity code to a label, composes the user-facing message, and
decides whether the event is printed or fatal.

Classification is:
- mask-aware (an event outside the reporting mask is left UNHANDLED)
- closed (only NOTICE, WARNING, ERROR and DEPRECATED are understood;
  any other code is left UNHANDLED for the built-in reporter)
- terminal for ERROR (the composed message goes to the fatal sink)

The fatal sink is injected so tests can observe the message without the
process exiting. The default sink ends the whole process with ``os._exit``:
no exception is raised, so nothing can catch it and worker threads cannot
swallow it.
"""

from __future__ import annotations

import enum
import os
import re
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, TextIO

import structlog

from plinth.interception.types import ErrorEvent, HandlerOutcome
from plinth.primitives.common import Severity

if TYPE_CHECKING:
    from plinth.interception.stack import ErrorInterceptionStack

logger = structlog.get_logger()

_LABELS: dict[int, str] = {
    Severity.NOTICE.value: "NOTICE",
    Severity.ERROR.value: "ERROR",
    Severity.WARNING.value: "WARNING",
    Severity.DEPRECATED.value: "DEPRECATED",
}

_ANSI_BOLD = "\x1b[1m"
_ANSI_RESET = "\x1b[0m"
_MARKUP = re.compile(r"</?b>|\x1b\[[0-9;]*m")


class Emphasis(str, enum.Enum):
    """How the owner/label segment is emphasized."""

    HTML = "html"
    ANSI = "ansi"
    PLAIN = "plain"


def classify(code: int) -> str | None:
    """Label for a severity code, or None if the code is not a soft severity."""
    return _LABELS.get(int(code))


def compose_message(
    owner: str,
    label: str,
    message: str,
    emphasis: Emphasis | str = Emphasis.HTML,
) -> str:
    """
    Build ``"<owner> <LABEL>: <message>"`` with the ``owner LABEL:`` segment
    emphasized.
    """
    head = f"{owner} {label}:" if owner else f"{label}:"
    emphasis = Emphasis(emphasis)
    if emphasis is Emphasis.HTML:
        head = f"<b>{head}</b>"
    elif emphasis is Emphasis.ANSI:
        head = f"{_ANSI_BOLD}{head}{_ANSI_RESET}"
    return f"{head} {message}"


def strip_emphasis(text: str) -> str:
    """Remove HTML bold tags and ANSI escapes added by ``compose_message``."""
    return _MARKUP.sub("", text)


# ─── Sinks ────────────────────────────────────────────────────────


class FatalSink(Protocol):
    def __call__(self, message: str) -> None: ...


class ProcessTerminator:
    """
    Default fatal sink: print the message, then end the process.

    Termination is immediate from any thread. ``finally`` blocks and atexit
    hooks do not run, so the standard streams are flushed first.
    """

    def __init__(
        self,
        exit_code: int = 1,
        output: TextIO | None = None,
        terminate: Callable[[int], object] = os._exit,
    ) -> None:
        self.exit_code = exit_code
        self._output = output
        self._terminate = terminate

    def __call__(self, message: str) -> None:
        out = self._output or sys.stdout
        out.write(f"{message}\n")
        out.flush()
        for stream in (sys.stdout, sys.stderr):
            if stream is not None and stream is not out:
                stream.flush()
        self._terminate(self.exit_code)


# ─── Handler ──────────────────────────────────────────────────────


class SoftErrorHandler:
    """
    The handler a plugin installs on the interception stack.

    NOTICE, WARNING and DEPRECATED are written to the output channel and
    marked HANDLED. ERROR goes to the fatal sink.
    """

    def __init__(
        self,
        stack: ErrorInterceptionStack,
        owner_label: str | None = None,
        output: TextIO | None = None,
        fatal_sink: FatalSink | None = None,
        emphasis: Emphasis | str = Emphasis.HTML,
        exit_code: int = 1,
    ) -> None:
        self.owner_label = owner_label
        self.emphasis = Emphasis(emphasis)
        self._stack = stack
        self._output = output
        self._fatal_sink: FatalSink = fatal_sink or ProcessTerminator(exit_code, output=output)
        self._logger = logger.bind(system="interception", component="classifier")

    def __call__(self, event: ErrorEvent) -> HandlerOutcome:
        # Outside the reporting level: stay silent and let the reporter decide
        if not event.severity_code & self._stack.reporting_mask:
            return HandlerOutcome.UNHANDLED

        label = classify(event.severity_code)
        if label is None:
            return HandlerOutcome.UNHANDLED

        owner = self.owner_label if self.owner_label is not None else event.owner_label
        composed = compose_message(owner, label, event.message, self.emphasis)

        if event.severity_code == Severity.ERROR:
            self._logger.error(
                "soft_error_fatal",
                owner=owner,
                message=event.message,
                location=event.source_location,
            )
            self._fatal_sink(composed)
            return HandlerOutcome.HANDLED

        out = self._output or sys.stdout
        out.write(f"{composed}\n")
        out.flush()
        self._logger.debug("soft_error_handled", owner=owner, label=label)
        return HandlerOutcome.HANDLED
