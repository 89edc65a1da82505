"""
Plinth — Observability Infrastructure

Structured logging setup.
"""

from plinth.telemetry.logging import ensure_stderr_logging, setup_logging

__all__ = ["ensure_stderr_logging", "setup_logging"]
