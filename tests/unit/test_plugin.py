"""
Tests for BasePlugin.

Covers:
  - init / root path resolution
  - cascading construction with plugin overrides
  - resume / suspend error handling and the handling_errors() block
  - the plugin's error handler end to end
"""

from __future__ import annotations

import threading
import time

import pytest

import plinth.plugin as plugin_module
from plinth.config import PlinthConfig
from plinth.errors import PluginError, ResolutionError, RootPathNotFound
from plinth.interception.classifier import Emphasis
from plinth.interception.types import HandlerIdentity, HandlerOutcome
from plinth.plugin import FRAMEWORK_SCOPE, BasePlugin, default_registry
from plinth.primitives.common import ALL_SOFT, Severity
from plinth.resolver.registry import GLOBAL_SCOPE, TypeRegistry


class CustomNotFound(RootPathNotFound):
    pass


@pytest.fixture
def demo(stack, output, fatal_sink, registry):
    class Demo(BasePlugin):
        NAME = "Demo"
        emphasis = Emphasis.PLAIN

    registry.register(FRAMEWORK_SCOPE, "PluginError", PluginError)
    registry.register(FRAMEWORK_SCOPE, "RootPathNotFound", RootPathNotFound)
    registry.register(GLOBAL_SCOPE, "Exception", Exception)

    Demo.error_stack = stack
    Demo.registry = registry
    Demo.output = output
    Demo.fatal_sink = fatal_sink
    return Demo


# ─── Setup ────────────────────────────────────────────────────────


class TestRoot:
    def test_root_resolves_existing_file(self, demo, tmp_path):
        (tmp_path / "plugin.py").write_text("")
        demo.init(tmp_path)
        assert demo.root() == tmp_path / "plugin.py"

    def test_init_with_file_uses_parent(self, demo, tmp_path):
        main = tmp_path / "main.py"
        main.write_text("")
        demo.init(main)
        assert demo.root("main.py") == main

    def test_leading_slash_is_relative(self, demo, tmp_path):
        (tmp_path / "templates").mkdir()
        demo.init(tmp_path)
        assert demo.root("/templates") == tmp_path / "templates"

    def test_missing_path_raises(self, demo, tmp_path):
        demo.init(tmp_path)
        with pytest.raises(RootPathNotFound) as exc_info:
            demo.root("nope.txt")
        assert exc_info.value.path == tmp_path / "nope.txt"

    def test_missing_path_uses_plugin_override(self, demo, registry, tmp_path):
        registry.register(demo.__module__, "RootPathNotFound", CustomNotFound)
        demo.init(tmp_path)
        with pytest.raises(CustomNotFound):
            demo.root("nope.txt")

    def test_uninitialized_raises(self, demo):
        with pytest.raises(PluginError, match="not been initialized"):
            demo.root()

    def test_init_applies_config(self, demo, tmp_path):
        config = PlinthConfig()
        config.interception.handler_mask = ["warning"]
        config.interception.emphasis = "html"
        config.interception.fatal_exit_code = 5
        demo.init(tmp_path, config)
        assert demo.bitmask == Severity.WARNING
        assert demo.emphasis is Emphasis.HTML
        assert demo.fatal_exit_code == 5


# ─── Cascading construction ───────────────────────────────────────


class TestCascading:
    def test_scope_order(self, demo):
        assert demo.cascade_scopes() == [demo.__module__, FRAMEWORK_SCOPE, GLOBAL_SCOPE]

    def test_scopes_without_global(self, demo):
        demo.include_global_scope = False
        assert GLOBAL_SCOPE not in demo.cascade_scopes()

    def test_framework_type(self, demo):
        error = demo.new_cascading("PluginError", "bad")
        assert type(error) is PluginError
        assert error.message == "bad"

    def test_plugin_scope_shadows_framework(self, demo, registry):
        registry.register(demo.__module__, "PluginError", CustomNotFound)
        error = demo.new_cascading("PluginError", "x.txt")
        assert type(error) is CustomNotFound

    def test_global_scope(self, demo):
        assert type(demo.new_cascading("Exception", "plain")) is Exception

    def test_unknown_type(self, demo):
        with pytest.raises(ResolutionError) as exc_info:
            demo.new_cascading("Ghost")
        assert exc_info.value.short_name == "Ghost"

    def test_default_registry_seeded(self):
        registry = default_registry()
        assert "plinth.RootPathNotFound" in registry
        assert "plinth.PluginError" in registry
        assert "Exception" in registry

    def test_default_registry_built_once_under_contention(self, monkeypatch):
        class SlowRegistry(TypeRegistry):
            def __init__(self) -> None:
                time.sleep(0.1)
                super().__init__()

        monkeypatch.setattr(plugin_module, "_default_registry", None)
        monkeypatch.setattr(plugin_module, "TypeRegistry", SlowRegistry)

        barrier = threading.Barrier(4)
        results: list[TypeRegistry] = []

        def first_use() -> None:
            barrier.wait()
            results.append(default_registry())

        threads = [threading.Thread(target=first_use) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 4
        assert all(r is results[0] for r in results)
        assert len(results[0]) == 3


# ─── Error handling ───────────────────────────────────────────────


class TestErrorHandling:
    def test_resume_pushes_plugin_identity(self, demo, stack):
        demo.resume_error_handling()
        assert stack.top.identity == HandlerIdentity(demo, "error_handler")
        assert stack.handler_mask == ALL_SOFT

    def test_resume_twice_pushes_once(self, demo, stack):
        demo.resume_error_handling()
        demo.resume_error_handling()
        assert stack.depth == 1

    def test_suspend_pops(self, demo, stack):
        demo.resume_error_handling()
        entry = demo.suspend_error_handling()
        assert entry.identity == HandlerIdentity(demo, "error_handler")
        assert stack.depth == 0
        assert stack.active_handler is None

    def test_suspend_does_not_unwind_other_plugin(self, demo, stack):
        class Other(BasePlugin):
            NAME = "Other"
            error_stack = stack

        demo.resume_error_handling()
        Other.resume_error_handling()
        top = demo.suspend_error_handling()
        assert top.identity == HandlerIdentity(Other, "error_handler")
        assert stack.depth == 2

    def test_notice_printed(self, demo, output, fatal_sink):
        with demo.handling_errors():
            outcome = demo.trigger("hello", Severity.NOTICE)
        assert outcome is HandlerOutcome.HANDLED
        assert output.getvalue() == "Demo NOTICE: hello\n"
        assert fatal_sink.messages == []

    def test_error_goes_to_fatal_sink(self, demo, output, fatal_sink):
        with demo.handling_errors():
            demo.trigger("hello", Severity.ERROR)
        assert fatal_sink.messages == ["Demo ERROR: hello"]

    def test_outside_region_nothing_printed(self, demo, output):
        outcome = demo.trigger("hello", Severity.WARNING)
        assert outcome is HandlerOutcome.UNHANDLED
        assert output.getvalue() == ""

    def test_bitmask_limits_handler(self, demo, output):
        demo.bitmask = Severity.NOTICE
        with demo.handling_errors():
            outcome = demo.trigger("deprecated thing", Severity.DEPRECATED)
        assert outcome is HandlerOutcome.UNHANDLED
        assert output.getvalue() == ""

    def test_custom_handler_name(self, demo, stack):
        seen = []

        def quiet(event):
            seen.append(event.message)
            return HandlerOutcome.HANDLED

        demo.quiet_handler = staticmethod(quiet)
        with demo.handling_errors("quiet_handler"):
            assert stack.top.identity == HandlerIdentity(demo, "quiet_handler")
            demo.trigger("shh")
        assert seen == ["shh"]

    def test_report_exception(self, demo, output):
        with demo.handling_errors():
            demo.report(PluginError("cache stale", Severity.WARNING))
        assert output.getvalue() == "Demo WARNING: cache stale\n"
