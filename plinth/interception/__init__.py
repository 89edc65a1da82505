"""
Plinth — Error Interception

Scoped redirection of soft errors (notices, warnings, deprecations and
soft-fatal errors) to a plugin-supplied handler, with exact restoration of
the previous handler and reporting mask on exit.
"""

from plinth.interception.classifier import (
    Emphasis,
    FatalSink,
    ProcessTerminator,
    SoftErrorHandler,
    classify,
    compose_message,
    strip_emphasis,
)
from plinth.interception.stack import ErrorInterceptionStack, get_interception_stack
from plinth.interception.trigger import trigger_error, trigger_exception
from plinth.interception.types import (
    ErrorEvent,
    ErrorHandlerFn,
    HandlerIdentity,
    HandlerOutcome,
    HandlerStackEntry,
)
from plinth.interception.warnings_bridge import capture_warnings, severity_for_warning

__all__ = [
    "Emphasis",
    "ErrorEvent",
    "ErrorHandlerFn",
    "ErrorInterceptionStack",
    "FatalSink",
    "HandlerIdentity",
    "HandlerOutcome",
    "HandlerStackEntry",
    "ProcessTerminator",
    "SoftErrorHandler",
    "capture_warnings",
    "classify",
    "compose_message",
    "get_interception_stack",
    "severity_for_warning",
    "strip_emphasis",
    "trigger_error",
    "trigger_exception",
]
