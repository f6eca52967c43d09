"""snare.bridge -- transport to a dynamic-instrumentation host evaluator.

This package finds the host's evaluator entry point, sends it program text,
and decodes the JSON it sends back.  It knows nothing about addresses or
the programs themselves; see :mod:`snare.core` for that.

Example::

    from snare.bridge import HostBridge, decode

    bridge = HostBridge()
    response = decode(bridge.evaluate(program))
    if not response.ok:
        print(response.error)
"""

from __future__ import annotations

from .decoder import decode, decode_strict
from .errors import (
    BridgeEvaluationFailed,
    InterceptInstallFailed,
    NoBridgeAvailable,
    ResponseDecodeFailed,
    ScanFailed,
    SnareError,
    UnsupportedSpec,
)
from .evaluator import (
    Candidate,
    HostBridge,
    default_environment,
    default_probes,
    global_function_probe,
    host_method_probe,
    native_call_probe,
)
from .types import BridgeSettings, EvalResponse, InterceptHandler

__all__ = [
    # Bridge
    "HostBridge",
    "Candidate",
    "default_environment",
    "default_probes",
    "native_call_probe",
    "host_method_probe",
    "global_function_probe",
    # Decoding
    "decode",
    "decode_strict",
    # Types
    "BridgeSettings",
    "EvalResponse",
    "InterceptHandler",
    # Errors
    "SnareError",
    "UnsupportedSpec",
    "NoBridgeAvailable",
    "BridgeEvaluationFailed",
    "ResponseDecodeFailed",
    "InterceptInstallFailed",
    "ScanFailed",
]
