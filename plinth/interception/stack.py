"""
Plinth — Error Interception Stack

The process-wide context for soft errors. It owns three pieces of state:

- the active handler slot (handler + the severities it is installed for)
- the reporting mask (which severities the process reports at all)
- a LIFO of HandlerStackEntry, one per activation

Activation installs a handler and pushes an entry that remembers what it
replaced; deactivation pops the entry and puts that state back. All reads
and writes of the three pieces happen under a single lock, so the
compare-top-then-push/pop sequence is atomic across threads. Handlers are
always called outside the lock.

Usage::

    stack = get_interception_stack()
    with stack.intercepting(identity, handler, Severity.WARNING | Severity.NOTICE):
        trigger_error("disk almost full", Severity.WARNING)
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from plinth.interception.types import (
    ErrorEvent,
    ErrorHandlerFn,
    HandlerOutcome,
    HandlerStackEntry,
)
from plinth.primitives.common import ALL_SOFT, Severity

logger = structlog.get_logger()

# Log level used by the built-in reporter per recognized severity
_REPORT_LEVELS: dict[Severity, str] = {
    Severity.NOTICE: "info",
    Severity.WARNING: "warning",
    Severity.DEPRECATED: "warning",
    Severity.ERROR: "error",
}


class ErrorInterceptionStack:
    """
    Ordered stack of active soft-error handlers.

    Starts empty with no handler installed. There is no teardown: matched
    activate/deactivate pairs leave it as they found it.
    """

    def __init__(self, reporting_mask: int = ALL_SOFT) -> None:
        self._lock = threading.Lock()
        self._entries: list[HandlerStackEntry] = []
        self._handler: ErrorHandlerFn | None = None
        self._handler_mask: int = 0
        self._reporting_mask: int = int(reporting_mask)
        self._logger = logger.bind(system="interception", component="stack")

    # ─── State ────────────────────────────────────────────────────

    @property
    def top(self) -> HandlerStackEntry | None:
        with self._lock:
            return self._entries[-1] if self._entries else None

    @property
    def depth(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def active_handler(self) -> ErrorHandlerFn | None:
        with self._lock:
            return self._handler

    @property
    def handler_mask(self) -> int:
        with self._lock:
            return self._handler_mask

    @property
    def reporting_mask(self) -> int:
        with self._lock:
            return self._reporting_mask

    def set_reporting_mask(self, mask: int) -> int:
        """Replace the reporting mask. Returns the previous one."""
        with self._lock:
            previous = self._reporting_mask
            self._reporting_mask = int(mask)
        return previous

    def entries(self) -> tuple[HandlerStackEntry, ...]:
        """Snapshot of the stack, bottom first."""
        with self._lock:
            return tuple(self._entries)

    # ─── Activation ───────────────────────────────────────────────

    def activate(self, identity: Any, handler: ErrorHandlerFn, mask: int = ALL_SOFT) -> None:
        """
        Install ``handler`` for the severities in ``mask``.

        No-op if ``identity`` already holds the top of the stack, so repeated
        activation by the same owner never stacks twice.
        """
        with self._lock:
            if self._entries and self._entries[-1].identity == identity:
                self._logger.debug("handler_already_active", identity=str(identity))
                return
            self._entries.append(
                HandlerStackEntry(
                    identity=identity,
                    previous_handler=self._handler,
                    previous_handler_mask=self._handler_mask,
                    previous_reporting_mask=self._reporting_mask,
                )
            )
            self._handler = handler
            self._handler_mask = int(mask)
            depth = len(self._entries)

        self._logger.debug(
            "handler_activated",
            identity=str(identity),
            mask=int(mask),
            depth=depth,
        )

    def deactivate(self, identity: Any) -> HandlerStackEntry | None:
        """
        Pop ``identity``'s activation and restore what it replaced.

        Returns the popped entry. If ``identity`` is not on top, nothing
        changes and the current top (possibly None) is returned instead;
        callers compare the returned entry's identity to tell the two apart.
        """
        with self._lock:
            if not self._entries or self._entries[-1].identity != identity:
                current = self._entries[-1] if self._entries else None
                self._logger.debug(
                    "deactivate_mismatch",
                    identity=str(identity),
                    top=str(current.identity) if current else None,
                )
                return current
            entry = self._entries.pop()
            self._handler = entry.previous_handler
            self._handler_mask = entry.previous_handler_mask
            self._reporting_mask = entry.previous_reporting_mask
            depth = len(self._entries)

        self._logger.debug("handler_deactivated", identity=str(identity), depth=depth)
        return entry

    @contextmanager
    def intercepting(
        self,
        identity: Any,
        handler: ErrorHandlerFn,
        mask: int = ALL_SOFT,
    ) -> Iterator[ErrorInterceptionStack]:
        """Activate for the duration of a ``with`` block, deactivating on any exit."""
        self.activate(identity, handler, mask)
        try:
            yield self
        finally:
            self.deactivate(identity)

    # ─── Dispatch ─────────────────────────────────────────────────

    def dispatch(self, event: ErrorEvent) -> HandlerOutcome:
        """
        Route a triggered event.

        The installed handler sees the event only if its mask covers the
        code. Anything it leaves UNHANDLED falls through to the built-in
        reporter.
        """
        with self._lock:
            handler = self._handler
            handler_mask = self._handler_mask

        if handler is not None and event.severity_code & handler_mask:
            outcome = handler(event)
            if outcome is HandlerOutcome.HANDLED:
                return outcome

        self._report(event)
        return HandlerOutcome.UNHANDLED

    def _report(self, event: ErrorEvent) -> None:
        """Built-in reporter: structlog only, never the output channel."""
        severity = event.severity
        if severity is not None and not severity & self.reporting_mask:
            return

        if severity is None:
            self._logger.warning(
                "unrecognized_severity",
                code=event.severity_code,
                message=event.message,
                owner=event.owner_label,
                location=event.source_location,
            )
            return

        log = getattr(self._logger, _REPORT_LEVELS[severity])
        log(
            "soft_error_unhandled",
            severity=severity.name,
            message=event.message,
            owner=event.owner_label,
            location=event.source_location,
        )


_process_stack: ErrorInterceptionStack | None = None
_process_stack_lock = threading.Lock()


def get_interception_stack() -> ErrorInterceptionStack:
    """
    Return the process-wide stack, built on first use from configuration.

    Concurrent first calls all receive the same instance.
    """
    global _process_stack
    if _process_stack is not None:
        return _process_stack

    with _process_stack_lock:
        if _process_stack is None:
            from plinth.config import load_config

            config = load_config()
            _process_stack = ErrorInterceptionStack(
                reporting_mask=config.interception.reporting_bits,
            )
    return _process_stack
