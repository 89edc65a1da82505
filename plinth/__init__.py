"""
Plinth — Plugin Foundation

Scoped soft-error interception and cascading type resolution for plugin
hosts.
"""

from plinth.config import PlinthConfig, load_config
from plinth.errors import PlinthError, PluginError, ResolutionError, RootPathNotFound
from plinth.interception import (
    Emphasis,
    ErrorEvent,
    ErrorInterceptionStack,
    HandlerIdentity,
    HandlerOutcome,
    HandlerStackEntry,
    ProcessTerminator,
    SoftErrorHandler,
    capture_warnings,
    get_interception_stack,
    trigger_error,
    trigger_exception,
)
from plinth.plugin import BasePlugin, default_registry
from plinth.primitives.common import ALL_SOFT, Severity
from plinth.resolver import (
    GLOBAL_SCOPE,
    CascadingFactory,
    CascadingResolver,
    ResolutionRequest,
    TypeRegistry,
)
from plinth.telemetry import ensure_stderr_logging, setup_logging

__version__ = "1.0.0"

ensure_stderr_logging()

__all__ = [
    "ALL_SOFT",
    "GLOBAL_SCOPE",
    "BasePlugin",
    "CascadingFactory",
    "CascadingResolver",
    "Emphasis",
    "ErrorEvent",
    "ErrorInterceptionStack",
    "HandlerIdentity",
    "HandlerOutcome",
    "HandlerStackEntry",
    "PlinthConfig",
    "PlinthError",
    "PluginError",
    "ProcessTerminator",
    "ResolutionError",
    "ResolutionRequest",
    "RootPathNotFound",
    "Severity",
    "SoftErrorHandler",
    "TypeRegistry",
    "capture_warnings",
    "default_registry",
    "get_interception_stack",
    "load_config",
    "setup_logging",
    "trigger_error",
    "trigger_exception",
]
