"""InstallHandler — attach enter/leave callbacks at a resolved address."""

from __future__ import annotations

import logging
from typing import Any, Optional

from snare.bridge.errors import InterceptInstallFailed
from snare.bridge.types import InterceptHandler
from snare.core.events import (
    ExecutionEvent,
    ExecutionEventCallback,
    ExecutionEventType,
)
from snare.core.primitives.executor import ProgramExecutor
from snare.core.primitives.resolve import ResolveHandler
from snare.core.requests import build_install_intercept

logger = logging.getLogger(__name__)


class InstallHandler:
    """Installs intercepts through the host.

    Pipeline:
    1. Normalise the handler (``None`` is rejected before anything else)
    2. Resolve the spec via :class:`ResolveHandler`
    3. Build the install program and evaluate it
    4. Return ``True`` on ``ok:true``, raise :class:`InterceptInstallFailed` otherwise
    """

    def __init__(
        self,
        executor: ProgramExecutor,
        resolver: ResolveHandler,
        execution_callback: Optional[ExecutionEventCallback] = None,
    ):
        self.executor = executor
        self.resolver = resolver
        self._execution_callback = execution_callback

    def install(self, spec: Any, handler: Any) -> bool:
        intercept = InterceptHandler.coerce(handler)
        address = self.resolver.resolve(spec)
        if not address:
            logger.warning("Installing intercept at 0x0 for %r; the spec may be unresolved", spec)

        response = self.executor.run(build_install_intercept(address, intercept))
        if not response.ok:
            raise InterceptInstallFailed(response.error or "unknown")

        logger.info("Intercept installed at %s", address)
        if self._execution_callback is not None:
            self._execution_callback(ExecutionEvent(
                event_type=ExecutionEventType.INTERCEPT_INSTALLED,
                succeeded=True,
                metadata={
                    "address": str(address),
                    "on_enter": intercept.on_enter is not None,
                    "on_leave": intercept.on_leave is not None,
                },
            ))
        return True
