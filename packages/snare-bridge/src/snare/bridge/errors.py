"""Exception hierarchy shared by the bridge and the core packages."""

from __future__ import annotations

from typing import Any


class SnareError(Exception):
    """Base class for all snare exceptions."""
    pass


class UnsupportedSpec(SnareError, ValueError):
    """Raised when an address spec matches none of the recognised forms."""

    def __init__(self, spec: Any):
        self.spec = spec
        super().__init__(f"unsupported spec: {spec!r}")


class NoBridgeAvailable(SnareError, RuntimeError):
    """Raised when no host evaluator entry point can be found."""
    pass


class BridgeEvaluationFailed(SnareError, RuntimeError):
    """Raised when every discovered host entry point failed to evaluate."""
    pass


class ResponseDecodeFailed(SnareError, ValueError):
    """Raised when the host returned text that is not a JSON object."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"could not decode host response: {raw!r}")


class InterceptInstallFailed(SnareError):
    """Raised when the host reports that an intercept could not be installed."""

    def __init__(self, error: str):
        self.error = error
        super().__init__(f"intercept install failed: {error}")


class ScanFailed(SnareError):
    """Raised when the host reports that a pattern scan failed."""

    def __init__(self, error: str):
        self.error = error
        super().__init__(f"scan failed: {error}")
