"""Poller-level constants shared across modules."""
from __future__ import annotations

from enum import Enum


class CycleOutcome(str, Enum):
    SUCCESS = "SUCCESS"
    IDLE = "IDLE"
    ERROR = "ERROR"


class ErrorBackoffPolicy(str, Enum):
    """How an ERROR cycle moves the idle backoff."""

    HOLD = "hold"
    GROW = "grow"
    RESET = "reset"


class REFERENCE_BACKEND:
    PATTERN = "pattern"
    FILE = "file"
