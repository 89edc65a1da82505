"""
Plinth — Plugin Base

Extend plugin classes from ``BasePlugin``. It wires the two primitives
into class-level helpers:

- soft-error handling scoped to the plugin, keyed by ``(cls, handler)``
- cascading type construction that searches the plugin's own module, then
  the framework scope, then the global scope

Trap triggered errors like this::

    MyPlugin.resume_error_handling()
    MyPlugin.trigger("cache directory missing", Severity.WARNING)
    MyPlugin.suspend_error_handling()

or, so the handler is always removed::

    with MyPlugin.handling_errors():
        MyPlugin.trigger("cache directory missing", Severity.WARNING)

NOTICE, WARNING and DEPRECATED are printed as ``<NAME> <LABEL>: message``.
ERROR prints the same way and then exits the process.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, ClassVar, TextIO

import structlog

from plinth.config import PlinthConfig
from plinth.errors import PluginError, RootPathNotFound
from plinth.interception.classifier import Emphasis, FatalSink, SoftErrorHandler
from plinth.interception.stack import ErrorInterceptionStack, get_interception_stack
from plinth.interception.trigger import trigger_error, trigger_exception
from plinth.interception.types import ErrorEvent, HandlerIdentity, HandlerOutcome, HandlerStackEntry
from plinth.primitives.common import ALL_SOFT, Severity
from plinth.resolver.cascade import CascadingResolver
from plinth.resolver.registry import GLOBAL_SCOPE, TypeRegistry

logger = structlog.get_logger()

FRAMEWORK_SCOPE = "plinth"


_default_registry: TypeRegistry | None = None
_default_registry_lock = threading.Lock()


def default_registry() -> TypeRegistry:
    """Process-wide registry, seeded with the framework's overridable types."""
    global _default_registry
    if _default_registry is not None:
        return _default_registry

    with _default_registry_lock:
        if _default_registry is None:
            registry = TypeRegistry()
            registry.register(FRAMEWORK_SCOPE, "PluginError", PluginError)
            registry.register(FRAMEWORK_SCOPE, "RootPathNotFound", RootPathNotFound)
            registry.register(GLOBAL_SCOPE, "Exception", Exception)
            _default_registry = registry
    return _default_registry


class BasePlugin:
    """
    Plugin base class. Everything is class-level: a plugin is its class.

    Subclasses override ``NAME`` and, if they want, ``bitmask``,
    ``emphasis``, ``fatal_exit_code`` or ``framework_scope``. Tests override
    ``error_stack``, ``registry``, ``output`` and ``fatal_sink``.
    """

    NAME: ClassVar[str] = "Base Plugin"

    # Severities the plugin's handler is installed for
    bitmask: ClassVar[int] = ALL_SOFT
    emphasis: ClassVar[Emphasis] = Emphasis.HTML
    framework_scope: ClassVar[str] = FRAMEWORK_SCOPE
    include_global_scope: ClassVar[bool] = True
    fatal_exit_code: ClassVar[int] = 1

    error_stack: ClassVar[ErrorInterceptionStack | None] = None
    registry: ClassVar[TypeRegistry | None] = None
    output: ClassVar[TextIO | None] = None
    fatal_sink: ClassVar[FatalSink | None] = None

    _root: ClassVar[Path | None] = None

    # ─── Setup ────────────────────────────────────────────────────

    @classmethod
    def init(cls, root: str | Path, config: PlinthConfig | None = None) -> None:
        """
        Initialize the plugin once, from the file that loads it.

        ``root`` may be the plugin directory or a file inside it.
        """
        path = Path(root)
        cls._root = path.parent if path.is_file() else path

        if config is not None:
            cls.bitmask = config.interception.handler_bits
            cls.emphasis = Emphasis(config.interception.emphasis)
            cls.fatal_exit_code = config.interception.fatal_exit_code
            cls.framework_scope = config.resolver.framework_scope
            cls.include_global_scope = config.resolver.include_global_scope

        logger.info("plugin_initialized", plugin=cls.NAME, root=str(cls._root))

    @classmethod
    def root(cls, path: str = "plugin.py") -> Path:
        """Path relative to the plugin root. Raises RootPathNotFound if missing."""
        if cls._root is None:
            raise PluginError(f"{cls.NAME} has not been initialized")
        candidate = cls._root / path.lstrip("/")
        if candidate.exists():
            return candidate
        raise cls.new_cascading("RootPathNotFound", candidate)

    # ─── Cascading types ──────────────────────────────────────────

    @classmethod
    def cascade_scopes(cls) -> list[str]:
        """Plugin module, then framework scope, then global scope."""
        scopes = [cls.__module__, cls.framework_scope]
        if cls.include_global_scope:
            scopes.append(GLOBAL_SCOPE)
        return list(dict.fromkeys(scopes))

    @classmethod
    def resolver(cls) -> CascadingResolver:
        registry = cls.registry if cls.registry is not None else default_registry()
        return CascadingResolver(registry)

    @classmethod
    def new_cascading(cls, short_name: str, *args: Any) -> Any:
        """Instantiate the most specific type named ``short_name``."""
        return cls.resolver().resolve(short_name, cls.cascade_scopes(), args)

    # ─── Error handling ───────────────────────────────────────────

    @classmethod
    def _stack(cls) -> ErrorInterceptionStack:
        return cls.error_stack if cls.error_stack is not None else get_interception_stack()

    @classmethod
    def _identity(cls, handler: str) -> HandlerIdentity:
        return HandlerIdentity(cls, handler)

    @classmethod
    def resume_error_handling(cls, handler: str = "error_handler") -> None:
        """Route following soft errors to ``cls.<handler>``."""
        cls._stack().activate(cls._identity(handler), getattr(cls, handler), cls.bitmask)

    @classmethod
    def suspend_error_handling(cls, handler: str = "error_handler") -> HandlerStackEntry | None:
        """
        Close handling resumed earlier.

        Returns the popped entry, or the unchanged top if this plugin's
        handler was not on top.
        """
        return cls._stack().deactivate(cls._identity(handler))

    @classmethod
    @contextmanager
    def handling_errors(cls, handler: str = "error_handler") -> Iterator[type[BasePlugin]]:
        cls.resume_error_handling(handler)
        try:
            yield cls
        finally:
            cls.suspend_error_handling(handler)

    @classmethod
    def error_handler(cls, event: ErrorEvent) -> HandlerOutcome:
        """Print soft errors under the plugin's NAME; exit on ERROR."""
        handler = SoftErrorHandler(
            cls._stack(),
            owner_label=cls.NAME,
            output=cls.output,
            fatal_sink=cls.fatal_sink,
            emphasis=cls.emphasis,
            exit_code=cls.fatal_exit_code,
        )
        return handler(event)

    @classmethod
    def trigger(cls, message: str, severity: Severity | int = Severity.NOTICE) -> HandlerOutcome:
        return trigger_error(
            message,
            severity,
            owner_label=cls.NAME,
            stack=cls._stack(),
            stacklevel=2,
        )

    @classmethod
    def report(cls, exc: BaseException) -> HandlerOutcome:
        """Report a caught exception through the soft channel."""
        return trigger_exception(exc, owner_label=cls.NAME, stack=cls._stack(), stacklevel=2)
