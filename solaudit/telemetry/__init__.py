"""
solaudit — Observability

Structured logging setup.
"""

from solaudit.telemetry.logging import setup_logging

__all__ = ["setup_logging"]
