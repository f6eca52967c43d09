"""Decoding of the host evaluator's textual results."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from .errors import ResponseDecodeFailed
from .types import EvalResponse

logger = logging.getLogger(__name__)


def _parse_object(raw: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ResponseDecodeFailed(raw) from exc
    if not isinstance(parsed, dict):
        raise ResponseDecodeFailed(raw)
    return parsed


def _from_object(parsed: Dict[str, Any], raw: str) -> EvalResponse:
    if parsed.get("ok") is True:
        return EvalResponse(ok=True, payload=parsed, raw=raw)
    error = parsed.get("error")
    return EvalResponse(
        ok=False,
        payload=parsed,
        error=str(error) if error else "unknown",
        raw=raw,
    )


def decode(raw: str) -> EvalResponse:
    """Decode *raw* host output into an :class:`EvalResponse`.

    Text that is not a JSON object never raises: it becomes a failed
    response whose error message is the raw text itself, so host-side stack
    traces reach the caller intact.
    """
    try:
        parsed = _parse_object(raw)
    except ResponseDecodeFailed:
        logger.debug("Undecodable host response: %.200r", raw)
        return EvalResponse(ok=False, error=raw or "unknown", raw=raw)
    return _from_object(parsed, raw)


def decode_strict(raw: str) -> EvalResponse:
    """Like :func:`decode`, but raise :class:`ResponseDecodeFailed` on non-JSON output."""
    return _from_object(_parse_object(raw), raw)
