"""
Plinth — Factory Interface

``build(what, *args)`` is the one method a factory needs. CascadingFactory
implements it over a resolver and a fixed scope list.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from plinth.resolver.cascade import CascadingResolver


@runtime_checkable
class Factory(Protocol):
    def build(self, what: str, *args: Any) -> Any:
        """Build the thing named ``what``. Raises if it cannot be built."""
        ...


class CascadingFactory:
    """A Factory that builds by cascading resolution over fixed scopes."""

    def __init__(self, resolver: CascadingResolver, scopes: Sequence[str]) -> None:
        self._resolver = resolver
        self.scopes: tuple[str, ...] = tuple(scopes)

    def build(self, what: str, *args: Any) -> Any:
        return self._resolver.resolve(what, self.scopes, args)

    def __repr__(self) -> str:
        return f"<CascadingFactory scopes={list(self.scopes)}>"
