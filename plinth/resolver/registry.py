"""
Plinth — Type Registry

Maps scope-qualified type names to factories. A scope is a dotted prefix
(usually a module path); the global scope is the empty string and keys
names without any prefix.

Scopes populate the registry at import/startup time, either explicitly::

    registry.register("app.framework", "Widget", Widget)

or with the decorator, which defaults to the class's own module::

    @registry.provides()
    class Widget: ...

Lookups are plain dict reads; there is no runtime introspection.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import structlog

logger = structlog.get_logger()

GLOBAL_SCOPE = ""

T = TypeVar("T")

Factory = Callable[..., Any]


def qualify(scope: str, name: str) -> str:
    """``scope.name``, or just ``name`` in the global scope."""
    return name if scope == GLOBAL_SCOPE else f"{scope}.{name}"


class TypeRegistry:
    """
    Scope-qualified name → factory.

    Built at startup, queried at resolution time.
    """

    def __init__(self) -> None:
        self._factories: dict[str, Factory] = {}
        self._logger = logger.bind(system="resolver", component="registry")

    def register(self, scope: str, name: str, factory: Factory) -> str:
        """
        Register ``factory`` as ``name`` inside ``scope``. Returns the key.

        Raises ValueError on an empty name or a key that is already taken.
        """
        if not name:
            raise ValueError("Cannot register a type with an empty name")
        key = qualify(scope, name)
        if key in self._factories:
            raise ValueError(
                f"Type {key!r} already registered — "
                f"existing: {self._factories[key]!r}, new: {factory!r}"
            )
        self._factories[key] = factory
        self._logger.debug("type_registered", key=key)
        return key

    def register_type(self, cls: type, scope: str | None = None, name: str | None = None) -> str:
        """Register a class under its own module and name unless told otherwise."""
        return self.register(
            cls.__module__ if scope is None else scope,
            name or cls.__name__,
            cls,
        )

    def provides(self, scope: str | None = None, name: str | None = None) -> Callable[[type[T]], type[T]]:
        """Class decorator form of ``register_type``."""

        def _decorate(cls: type[T]) -> type[T]:
            self.register_type(cls, scope=scope, name=name)
            return cls

        return _decorate

    def unregister(self, key: str) -> Factory | None:
        """Remove a key. Returns its factory, or None if it was not registered."""
        factory = self._factories.pop(key, None)
        if factory is not None:
            self._logger.debug("type_unregistered", key=key)
        return factory

    def get(self, key: str) -> Factory | None:
        return self._factories.get(key)

    def get_strict(self, key: str) -> Factory:
        """Look up a factory; raise KeyError if not found."""
        factory = self.get(key)
        if factory is None:
            raise KeyError(
                f"No type registered as {key!r}. "
                f"Available: {self.names()}"
            )
        return factory

    def names(self) -> list[str]:
        return sorted(self._factories.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def __repr__(self) -> str:
        return f"<TypeRegistry types={self.names()}>"
