from __future__ import annotations

from snare.core.primitives.executor import ProgramExecutor
from snare.core.primitives.intercept import InstallHandler
from snare.core.primitives.resolve import ResolveHandler
from snare.core.primitives.scan import ScanHandler

__all__ = ["InstallHandler", "ProgramExecutor", "ResolveHandler", "ScanHandler"]
