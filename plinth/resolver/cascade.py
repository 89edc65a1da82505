"""
Plinth — Cascading Resolver

Resolves a short type name by trying an ordered list of scopes, most
specific first, and instantiating the first match. A plugin shadows a
framework type simply by registering the same short name in its own scope,
which is searched earlier.

Search order is supplied by the caller. For plugins it is typically::

    [plugin module, framework scope, GLOBAL_SCOPE]
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from pydantic import Field

from plinth.errors import ResolutionError
from plinth.primitives.common import PlinthBaseModel
from plinth.resolver.registry import TypeRegistry, qualify

logger = structlog.get_logger()


class ResolutionRequest(PlinthBaseModel):
    """One lookup: what to find, where to look, and what to build it with."""

    short_name: str = Field(min_length=1)
    search_scopes: tuple[str, ...] = ()
    constructor_args: tuple[Any, ...] = ()


class CascadingResolver:
    """
    Ordered lookup over a TypeRegistry.

    ``find`` and ``try_resolve`` return a ResolutionError as a value when no
    scope matches; ``resolve`` raises it.
    """

    def __init__(self, registry: TypeRegistry) -> None:
        self._registry = registry
        self._logger = logger.bind(system="resolver", component="cascade")

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    def find(self, request: ResolutionRequest) -> str | ResolutionError:
        """Qualified name of the first scope providing the type, or the failure."""
        for scope in request.search_scopes:
            key = qualify(scope, request.short_name)
            if key in self._registry:
                return key
        return ResolutionError(request.short_name, request.search_scopes)

    def try_resolve(
        self,
        short_name: str,
        scopes: Sequence[str],
        args: Sequence[Any] = (),
    ) -> Any | ResolutionError:
        """Instantiate the first match, or return a ResolutionError."""
        request = ResolutionRequest(
            short_name=short_name,
            search_scopes=tuple(scopes),
            constructor_args=tuple(args),
        )
        found = self.find(request)
        if isinstance(found, ResolutionError):
            self._logger.debug(
                "resolution_failed",
                short_name=short_name,
                scopes=list(request.search_scopes),
            )
            return found

        self._logger.debug("type_resolved", short_name=short_name, key=found)
        factory = self._registry.get_strict(found)
        return factory(*request.constructor_args)

    def resolve(
        self,
        short_name: str,
        scopes: Sequence[str],
        args: Sequence[Any] = (),
    ) -> Any:
        """Instantiate the first match. Raises ResolutionError if none."""
        result = self.try_resolve(short_name, scopes, args)
        if isinstance(result, ResolutionError):
            raise result
        return result
