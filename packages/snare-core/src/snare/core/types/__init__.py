from __future__ import annotations

from snare.core.types.config import BridgeConfig, SnareConfig, load_config

__all__ = [
    "BridgeConfig",
    "SnareConfig",
    "load_config",
]
