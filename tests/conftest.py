"""Root conftest — shared fixtures for the entire test suite."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from snare.core.primitives import ProgramExecutor, ResolveHandler
from snare.core.snare import Snare
from snare.core.types.config import SnareConfig


def ok(**fields) -> str:
    """Serialise a successful host response."""
    return json.dumps({"ok": True, **fields})


# ---------------------------------------------------------------------------
# Mock bridge
# ---------------------------------------------------------------------------

@pytest.fixture()
def mock_bridge():
    """MagicMock standing in for HostBridge; evaluate() returns ``{"ok":true}``."""
    bridge = MagicMock(name="HostBridge")
    bridge.evaluate.return_value = ok()
    bridge.name = "mock"
    return bridge


@pytest.fixture()
def executor(mock_bridge):
    return ProgramExecutor(mock_bridge)


@pytest.fixture()
def resolver(executor):
    return ResolveHandler(executor)


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------

@pytest.fixture()
def host_eval():
    """A plain evaluator callable, as a host would expose it."""
    fn = MagicMock(name="frida_eval")
    fn.return_value = ok()
    return fn


@pytest.fixture()
def events():
    return []


@pytest.fixture()
def snare(host_eval, events):
    """Snare wired to ``host_eval`` with default config and an event recorder."""
    return Snare(config=SnareConfig(), evaluator=host_eval, event_callback=events.append)
