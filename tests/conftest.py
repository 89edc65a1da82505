"""Shared fixtures for Plinth tests."""

from __future__ import annotations

import io
import os
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
import structlog

from plinth.interception.stack import ErrorInterceptionStack
from plinth.interception.types import ErrorEvent, HandlerOutcome
from plinth.primitives.common import ALL_SOFT
from plinth.resolver.registry import TypeRegistry

PROJECT_ROOT = Path(__file__).resolve().parents[1]


class RecordingHandler:
    """Handler stub that records events and returns a fixed outcome."""

    def __init__(self, outcome: HandlerOutcome = HandlerOutcome.HANDLED) -> None:
        self.outcome = outcome
        self.events: list[ErrorEvent] = []

    def __call__(self, event: ErrorEvent) -> HandlerOutcome:
        self.events.append(event)
        return self.outcome


class RecordingSink:
    """Fatal sink stub: keeps the message instead of exiting."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def stack() -> ErrorInterceptionStack:
    return ErrorInterceptionStack(reporting_mask=ALL_SOFT)


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def registry() -> TypeRegistry:
    return TypeRegistry()


@pytest.fixture
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def fatal_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture(autouse=True, scope="session")
def _structlog_to_stdlib():
    # Keep log lines off stdout, which is the soft-error output channel
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def run_python() -> Callable[..., subprocess.CompletedProcess[str]]:
    """Run a snippet in a fresh interpreter with structlog left unconfigured."""

    def _run(source: str, **env: str) -> subprocess.CompletedProcess[str]:
        child_env = {k: v for k, v in os.environ.items() if not k.startswith("PLINTH_")}
        child_env["PYTHONPATH"] = str(PROJECT_ROOT)
        child_env["NO_COLOR"] = "1"
        child_env.update(env)
        return subprocess.run(
            [sys.executable, "-c", source],
            cwd=PROJECT_ROOT,
            env=child_env,
            capture_output=True,
            text=True,
            timeout=60,
        )

    return _run
