"""Snare — top-level entry point."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from snare.bridge.evaluator import Evaluator, HostBridge
from snare.core.address import AddressHandle
from snare.core.events import ExecutionEventCallback
from snare.core.primitives import (
    InstallHandler,
    ProgramExecutor,
    ResolveHandler,
    ScanHandler,
)
from snare.core.types.config import SnareConfig, load_config

logger = logging.getLogger(__name__)


class Snare:
    """Resolve addresses, install intercepts and scan memory through a host evaluator.

    Usage:
        snare = Snare()
        addr = snare.resolve("libc.so!open")
        snare.install_intercept(addr, {"onEnter": "function(args){ console.log(args[0]); }"})
        hits = snare.scan_pattern("libgame.so", "12 34 ?? 56")

    Or with an explicit evaluator:
        with Snare(evaluator=my_host_eval) as snare:
            snare.resolve("main")
    """

    def __init__(
        self,
        config: Optional[SnareConfig] = None,
        config_path: Optional[str] = None,
        evaluator: Optional[Evaluator] = None,
        environment: Optional[Mapping[str, Any]] = None,
        event_callback: Optional[ExecutionEventCallback] = None,
    ):
        if config is not None:
            self.config = config
        else:
            self.config = load_config(config_path)

        if self.config.verbose:
            logging.basicConfig(level=logging.DEBUG)

        settings = self.config.bridge.to_settings()
        if evaluator is not None:
            self.bridge = HostBridge.from_callable(evaluator, settings=settings)
        else:
            self.bridge = HostBridge(environment, settings=settings)

        self._executor = ProgramExecutor(self.bridge, execution_callback=event_callback)
        self._resolver = ResolveHandler(self._executor, execution_callback=event_callback)
        self._installer = InstallHandler(
            self._executor, self._resolver, execution_callback=event_callback,
        )
        self._scanner = ScanHandler(self._executor, execution_callback=event_callback)

    @property
    def bridge_name(self) -> Optional[str]:
        """Label of the host entry point that would be tried first."""
        return self.bridge.name

    def resolve(self, spec: Any) -> AddressHandle:
        """Resolve a number, hex string, ``module!symbol``, ``module:offset`` or symbol."""
        return self._resolver.resolve(spec)

    hook = resolve

    def install_intercept(self, spec: Any, handler: Any) -> bool:
        """Attach *handler*'s ``onEnter``/``onLeave`` source at *spec*."""
        return self._installer.install(spec, handler)

    intercept = install_intercept

    def scan_pattern(self, module_name: str, pattern: str) -> List[AddressHandle]:
        """Return every address in *module_name* matching *pattern*."""
        return self._scanner.scan(module_name, pattern)

    scan = scan_pattern

    def evaluate(self, program: str) -> str:
        """Run raw *program* text in the host and return its result unchanged."""
        return self._executor.evaluate(program)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None
