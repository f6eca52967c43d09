"""Snare — resolve addresses and request instrumentation from a host evaluator."""

from __future__ import annotations

from snare.bridge.types import InterceptHandler
from snare.core.address import AddressHandle
from snare.core.events import ExecutionEvent, ExecutionEventType
from snare.core.snare import Snare
from snare.core.types.config import BridgeConfig, SnareConfig, load_config

__all__ = [
    "Snare",
    "AddressHandle",
    "InterceptHandler",
    "ExecutionEvent",
    "ExecutionEventType",
    "BridgeConfig",
    "SnareConfig",
    "load_config",
]
