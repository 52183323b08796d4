"""
Shared utilities module

Domain-agnostic helpers used across the application.
"""

from .clock import Clock, ensure_utc, get_timezone, localize, utc_now
from .logger import (
    ContextLogger,
    configure_logging,
    get_audit_logger,
    get_logger,
    get_scheduler_logger,
    get_service_logger,
)
from .side_effects import SideEffectRunner, get_side_effect_runner

__all__ = [
    # Time
    "Clock",
    "utc_now",
    "ensure_utc",
    "get_timezone",
    "localize",
    # Logging
    "ContextLogger",
    "configure_logging",
    "get_logger",
    "get_service_logger",
    "get_audit_logger",
    "get_scheduler_logger",
    # Side effects
    "SideEffectRunner",
    "get_side_effect_runner",
]
