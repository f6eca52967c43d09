"""Bridge-level types exchanged with the host evaluator.

Provides dataclasses for decoded host responses and for the foreign-code
fragments that make up an intercept handler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class BridgeSettings:
    """Names the bridge probes for when looking up host entry points."""

    host_object: str = "h5gg"
    native_call: str = "callNative"
    eval_method: str = "eval"
    eval_selector: str = "frida_eval"
    fallback_selector: str = "frida_exec"
    global_evaluators: Tuple[str, ...] = ("frida_eval", "frida_exec")
    timeout: Optional[float] = None
    """Seconds to wait for a single host call; ``None`` waits forever."""


@dataclass(frozen=True)
class EvalResponse:
    """A decoded host response.

    ``payload`` holds every field of the host's JSON object (including
    ``ok``); ``error`` is only set when ``ok`` is false.
    """

    ok: bool
    payload: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    raw: str = ""

    def get(self, key: str, default: Any = None) -> Any:
        """Return a payload field, or *default* when it is missing."""
        return self.payload.get(key, default)


def _fragment(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


@dataclass(frozen=True)
class InterceptHandler:
    """Enter/leave callback source for an intercept.

    Both halves are opaque source fragments that run inside the host, never
    locally.  A missing half means "no callback".
    """

    on_enter: Optional[str] = None
    on_leave: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "on_enter", _fragment(self.on_enter))
        object.__setattr__(self, "on_leave", _fragment(self.on_leave))

    @classmethod
    def coerce(cls, handler: Any) -> InterceptHandler:
        """Build a handler from an ``InterceptHandler`` or a mapping.

        Mappings may use either the host's ``onEnter``/``onLeave`` keys or
        ``on_enter``/``on_leave``.

        Raises
        ------
        ValueError
            If *handler* is ``None``.
        TypeError
            If *handler* is neither a handler nor a mapping.
        """
        if handler is None:
            raise ValueError("missing handler")
        if isinstance(handler, cls):
            return handler
        if isinstance(handler, Mapping):
            return cls(
                on_enter=handler.get("onEnter", handler.get("on_enter")),
                on_leave=handler.get("onLeave", handler.get("on_leave")),
            )
        raise TypeError(
            f"handler must be an InterceptHandler or a mapping, not {type(handler).__name__}"
        )
