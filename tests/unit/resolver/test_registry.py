"""
Unit tests for the TypeRegistry.

Tests registration, scope qualification, lookup, and error handling.
"""

from __future__ import annotations

import pytest

from plinth.resolver.registry import GLOBAL_SCOPE, TypeRegistry, qualify


class _Widget:
    pass


# ─── Tests: Qualification ─────────────────────────────────────────


def test_qualify_scoped():
    assert qualify("app.framework", "Widget") == "app.framework.Widget"


def test_qualify_global():
    assert qualify(GLOBAL_SCOPE, "Widget") == "Widget"


# ─── Tests: Registration ──────────────────────────────────────────


def test_register_and_get(registry):
    key = registry.register("app.framework", "Widget", _Widget)
    assert key == "app.framework.Widget"
    assert registry.get("app.framework.Widget") is _Widget


def test_register_duplicate_raises(registry):
    registry.register("app", "Widget", _Widget)
    with pytest.raises(ValueError, match="already registered"):
        registry.register("app", "Widget", _Widget)


def test_register_empty_name_raises(registry):
    with pytest.raises(ValueError, match="empty name"):
        registry.register("app", "", _Widget)


def test_register_type_defaults_to_module(registry):
    key = registry.register_type(_Widget)
    assert key == f"{__name__}._Widget"


def test_provides_decorator(registry):
    @registry.provides("app.plugins.demo", name="Widget")
    class DemoWidget:
        pass

    assert registry.get("app.plugins.demo.Widget") is DemoWidget


def test_unregister(registry):
    registry.register("app", "Widget", _Widget)
    assert registry.unregister("app.Widget") is _Widget
    assert "app.Widget" not in registry
    assert registry.unregister("app.Widget") is None


# ─── Tests: Lookup ────────────────────────────────────────────────


def test_get_missing_returns_none(registry):
    assert registry.get("nope.Widget") is None


def test_get_strict_missing_raises(registry):
    registry.register("app", "Widget", _Widget)
    with pytest.raises(KeyError, match="app.Widget"):
        registry.get_strict("other.Widget")


def test_names_sorted(registry):
    registry.register("b", "Widget", _Widget)
    registry.register("a", "Widget", _Widget)
    assert registry.names() == ["a.Widget", "b.Widget"]


def test_len_and_contains():
    registry = TypeRegistry()
    assert len(registry) == 0
    registry.register(GLOBAL_SCOPE, "Widget", _Widget)
    assert len(registry) == 1
    assert "Widget" in registry
