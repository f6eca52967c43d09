"""Discovery of, and evaluation through, the host instrumentation evaluator.

The host exposes its evaluator under one of a handful of conventional
names.  Each convention is captured by a *probe*: a pure function that
inspects an environment mapping and returns a :class:`Candidate` when the
entry point it knows about is present.  :class:`HostBridge` tries the
candidates in order on every call.
"""

from __future__ import annotations

import builtins
import logging
import queue
import sys
import threading
from typing import Any, Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple

from .errors import BridgeEvaluationFailed, NoBridgeAvailable
from .types import BridgeSettings

logger = logging.getLogger(__name__)

Evaluator = Callable[[str], Any]
Environment = Mapping[str, Any]


class Candidate(NamedTuple):
    """A discovered host entry point."""

    label: str
    call: Evaluator


Probe = Callable[[Environment], Optional[Candidate]]


# ---------------------------------------------------------------------------
# Probes
# ---------------------------------------------------------------------------

def native_call_probe(host_object: str, native_call: str, selector: str) -> Probe:
    """Probe for ``<host_object>.<native_call>(selector, program)``."""
    label = f"{host_object}.{native_call}"

    def probe(environment: Environment) -> Optional[Candidate]:
        fn = getattr(environment.get(host_object), native_call, None)
        if not callable(fn):
            return None
        return Candidate(label, lambda program: fn(selector, program))

    return probe


def host_method_probe(host_object: str, method: str) -> Probe:
    """Probe for ``<host_object>.<method>(program)``."""
    label = f"{host_object}.{method}"

    def probe(environment: Environment) -> Optional[Candidate]:
        fn = getattr(environment.get(host_object), method, None)
        if not callable(fn):
            return None
        return Candidate(label, fn)

    return probe


def global_function_probe(name: str) -> Probe:
    """Probe for a free-standing ``<name>(program)`` function."""

    def probe(environment: Environment) -> Optional[Candidate]:
        fn = environment.get(name)
        if not callable(fn):
            return None
        return Candidate(name, fn)

    return probe


def default_probes(settings: BridgeSettings) -> List[Probe]:
    """Return the probe list in discovery order for *settings*."""
    probes: List[Probe] = [
        native_call_probe(settings.host_object, settings.native_call, settings.eval_selector),
        host_method_probe(settings.host_object, settings.eval_method),
    ]
    probes.extend(global_function_probe(name) for name in settings.global_evaluators)
    probes.append(
        native_call_probe(settings.host_object, settings.native_call, settings.fallback_selector)
    )
    return probes


def default_environment() -> Dict[str, Any]:
    """Snapshot the ambient environment: builtins overlaid with ``__main__`` globals."""
    env: Dict[str, Any] = dict(vars(builtins))
    main = sys.modules.get("__main__")
    if main is not None:
        env.update(vars(main))
    return env


def _as_text(result: Any) -> str:
    if result is None:
        return ""
    if isinstance(result, (bytes, bytearray)):
        return bytes(result).decode("utf-8", errors="replace")
    return str(result)


# ---------------------------------------------------------------------------
# Bridge
# ---------------------------------------------------------------------------

class HostBridge:
    """Runs program text in the host evaluator and returns its textual result.

    Usage::

        bridge = HostBridge()                 # probe builtins / __main__
        bridge = HostBridge({"frida_eval": fn})
        bridge = HostBridge.from_callable(fn)
        text = bridge.evaluate("1 + 1")
    """

    def __init__(
        self,
        environment: Optional[Environment] = None,
        settings: Optional[BridgeSettings] = None,
        probes: Optional[Iterable[Probe]] = None,
    ) -> None:
        self.settings = settings or BridgeSettings()
        self._environment = environment
        self._probes: List[Probe] = (
            list(probes) if probes is not None else default_probes(self.settings)
        )

    @classmethod
    def from_callable(
        cls,
        evaluator: Evaluator,
        label: str = "evaluator",
        settings: Optional[BridgeSettings] = None,
    ) -> HostBridge:
        """Wrap an explicit evaluator callable, skipping discovery."""
        candidate = Candidate(label, evaluator)
        return cls(environment={}, settings=settings, probes=[lambda env: candidate])

    # -- properties --------------------------------------------------------

    @property
    def environment(self) -> Environment:
        """Return the environment probes inspect (read fresh when defaulted)."""
        if self._environment is None:
            return default_environment()
        return self._environment

    @property
    def name(self) -> Optional[str]:
        """Return the label of the first available entry point, if any."""
        candidates = self.candidates()
        return candidates[0].label if candidates else None

    # -- public API --------------------------------------------------------

    def candidates(self) -> List[Candidate]:
        """Run every probe and return the entry points found, in order."""
        environment = self.environment
        found: List[Candidate] = []
        for probe in self._probes:
            candidate = probe(environment)
            if candidate is not None:
                found.append(candidate)
        return found

    def evaluate(self, program: str) -> str:
        """Evaluate *program* in the host and return its textual result.

        Raises
        ------
        NoBridgeAvailable
            If no probe found a host entry point.
        BridgeEvaluationFailed
            If every entry point raised, or a call exceeded the timeout.
        """
        candidates = self.candidates()
        if not candidates:
            raise NoBridgeAvailable(
                "no host evaluator available (tried "
                + ", ".join(self._describe_probes())
                + ")"
            )

        last_error: Optional[BaseException] = None
        for candidate in candidates:
            try:
                result = self._call(candidate, program)
            except BridgeEvaluationFailed:
                raise
            except Exception as exc:
                logger.debug("Host entry point %s failed: %s", candidate.label, exc)
                last_error = exc
                continue
            return _as_text(result)

        raise BridgeEvaluationFailed(
            f"host evaluation failed on every entry point: {last_error}"
        ) from last_error

    # -- internals ---------------------------------------------------------

    def _describe_probes(self) -> List[str]:
        s = self.settings
        names = [f"{s.host_object}.{s.native_call}", f"{s.host_object}.{s.eval_method}"]
        names.extend(s.global_evaluators)
        return names

    def _call(self, candidate: Candidate, program: str) -> Any:
        timeout = self.settings.timeout
        if timeout is None:
            return candidate.call(program)

        # Daemon thread: a call that never returns must not hold the
        # interpreter open at exit.
        outcome: queue.Queue[Tuple[bool, Any]] = queue.Queue(maxsize=1)

        def _run() -> None:
            try:
                outcome.put((True, candidate.call(program)))
            except Exception as exc:
                outcome.put((False, exc))

        worker = threading.Thread(
            target=_run, name=f"snare-eval-{candidate.label}", daemon=True
        )
        worker.start()
        try:
            succeeded, value = outcome.get(timeout=timeout)
        except queue.Empty as exc:
            raise BridgeEvaluationFailed(
                f"{candidate.label} did not return within {timeout}s"
            ) from exc
        if not succeeded:
            raise value
        return value
