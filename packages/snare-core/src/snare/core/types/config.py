from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, field_validator

from snare.bridge.types import BridgeSettings


class BridgeConfig(BaseModel):
    """Host entry-point names and call limits."""

    host_object: str = "h5gg"
    native_call: str = "callNative"
    eval_method: str = "eval"
    eval_selector: str = "frida_eval"
    fallback_selector: str = "frida_exec"
    global_evaluators: List[str] = ["frida_eval", "frida_exec"]
    timeout: Optional[float] = None

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("timeout must be positive")
        return value

    def to_settings(self) -> BridgeSettings:
        """Convert to the bridge package's plain settings record."""
        data = self.model_dump()
        data["global_evaluators"] = tuple(data["global_evaluators"])
        return BridgeSettings(**data)


class SnareConfig(BaseModel):
    """Top-level snare configuration."""

    bridge: BridgeConfig = BridgeConfig()
    verbose: bool = False


def load_config(path: Optional[str] = None) -> SnareConfig:
    """Load configuration from a snare.toml file, falling back to defaults.

    Uses ``tomllib`` on Python 3.11+ and ``tomli`` on older versions.
    """

    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib  # type: ignore[no-redef]

    config_path = Path(path) if path else Path("snare.toml")

    if not config_path.exists():
        return SnareConfig()

    with open(config_path, "rb") as f:
        raw = tomllib.load(f)

    return SnareConfig(**raw)
