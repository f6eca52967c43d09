"""ScanHandler — byte-pattern search over a module's memory."""

from __future__ import annotations

import logging
from typing import List, Optional

from snare.bridge.errors import ScanFailed
from snare.core.address import AddressHandle
from snare.core.events import (
    ExecutionEvent,
    ExecutionEventCallback,
    ExecutionEventType,
)
from snare.core.primitives.executor import ProgramExecutor
from snare.core.requests import build_scan_pattern

logger = logging.getLogger(__name__)


class ScanHandler:
    """Asks the host to scan a whole module and returns every match, in host order."""

    def __init__(
        self,
        executor: ProgramExecutor,
        execution_callback: Optional[ExecutionEventCallback] = None,
    ):
        self.executor = executor
        self._execution_callback = execution_callback

    def scan(self, module: str, pattern: str) -> List[AddressHandle]:
        """Scan *module* for *pattern* (host syntax, e.g. ``"12 34 ?? 56"``).

        Raises
        ------
        ScanFailed
            If the host reports ``ok:false`` or sends back no usable match list.
        """
        response = self.executor.run(build_scan_pattern(module, pattern))
        if not response.ok:
            raise ScanFailed(response.error or "unknown")

        matches = response.get("matches")
        if not isinstance(matches, list):
            raise ScanFailed(f"response has no matches list: {response.raw}")

        handles: List[AddressHandle] = []
        for match in matches:
            if isinstance(match, int) and not isinstance(match, bool):
                handles.append(AddressHandle(match))
                continue
            try:
                handles.append(AddressHandle.from_string(str(match)))
            except ValueError as exc:
                raise ScanFailed(f"bad match address: {match!r}") from exc

        logger.info("Scan of %s for %r found %d match(es)", module, pattern, len(handles))
        if self._execution_callback is not None:
            self._execution_callback(ExecutionEvent(
                event_type=ExecutionEventType.SCAN_COMPLETE,
                succeeded=True,
                metadata={"module": module, "pattern": pattern, "count": len(handles)},
            ))
        return handles
