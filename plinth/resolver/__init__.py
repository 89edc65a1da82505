"""
Plinth — Cascading Type Resolution

Short-name lookup over an explicit registry, searched scope by scope so
more specific scopes override the framework's defaults.
"""

from plinth.resolver.cascade import CascadingResolver, ResolutionRequest
from plinth.resolver.factory import CascadingFactory, Factory
from plinth.resolver.registry import GLOBAL_SCOPE, TypeRegistry, qualify

__all__ = [
    "GLOBAL_SCOPE",
    "CascadingFactory",
    "CascadingResolver",
    "Factory",
    "ResolutionRequest",
    "TypeRegistry",
    "qualify",
]
