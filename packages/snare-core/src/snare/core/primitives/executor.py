"""ProgramExecutor — one observable round-trip to the host evaluator."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Optional

from snare.bridge.decoder import decode
from snare.core.events import (
    ExecutionEvent,
    ExecutionEventCallback,
    ExecutionEventType,
)

if TYPE_CHECKING:
    from snare.bridge.evaluator import HostBridge
    from snare.bridge.types import EvalResponse
    from snare.core.requests import EvalRequest

logger = logging.getLogger(__name__)

# Maximum characters of program/result text copied into events.
MAX_EVENT_CHARS = 20_000


def _truncate(text: str, limit: int = MAX_EVENT_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + f"\n... (truncated, {len(text)} chars total)"


class ProgramExecutor:
    """Sends programs through a bridge and decodes what comes back.

    Shared by the resolve, intercept and scan handlers so every host
    round-trip emits the same ``EVAL_START``/``EVAL_END`` pair.
    """

    def __init__(
        self,
        bridge: HostBridge,
        execution_callback: Optional[ExecutionEventCallback] = None,
    ):
        self.bridge = bridge
        self._execution_callback = execution_callback

    def _emit(self, event: ExecutionEvent) -> None:
        """Emit an execution event if a callback is registered."""
        if self._execution_callback is not None:
            self._execution_callback(event)

    def evaluate(self, program: str) -> str:
        """Evaluate raw *program* text and return the host's raw result."""
        self._emit(ExecutionEvent(
            event_type=ExecutionEventType.EVAL_START,
            program=_truncate(program),
        ))

        t0 = time.monotonic()
        try:
            raw = self.bridge.evaluate(program)
        except Exception as exc:
            self._emit(ExecutionEvent(
                event_type=ExecutionEventType.EVAL_END,
                program=_truncate(program),
                result=str(exc),
                succeeded=False,
                duration=time.monotonic() - t0,
            ))
            raise

        self._emit(ExecutionEvent(
            event_type=ExecutionEventType.EVAL_END,
            program=_truncate(program),
            result=_truncate(raw),
            succeeded=True,
            duration=time.monotonic() - t0,
        ))
        return raw

    def run(self, request: EvalRequest) -> EvalResponse:
        """Evaluate *request*'s program and decode the result."""
        raw = self.evaluate(request.program)
        response = decode(raw)
        if not response.ok:
            logger.debug("Host reported failure for %s: %s", request.kind.value, response.error)
        return response
