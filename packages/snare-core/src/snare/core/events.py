"""Execution event system for observable host round-trips."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Optional


class ExecutionEventType(Enum):
    """Types of execution events emitted while talking to the host."""

    EVAL_START = "eval_start"
    EVAL_END = "eval_end"
    RESOLVED = "resolved"
    INTERCEPT_INSTALLED = "intercept_installed"
    SCAN_COMPLETE = "scan_complete"


class ExecutionEvent:
    """Lightweight event emitted around evaluations and completed operations."""

    __slots__ = (
        "event_type",
        "program",
        "result",
        "succeeded",
        "duration",
        "metadata",
    )

    def __init__(
        self,
        event_type: ExecutionEventType,
        program: str = "",
        result: str = "",
        succeeded: Optional[bool] = None,
        duration: float = 0.0,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.event_type = event_type
        self.program = program
        self.result = result
        self.succeeded = succeeded
        self.duration = duration
        self.metadata = metadata or {}


ExecutionEventCallback = Callable[[ExecutionEvent], None]
