"""Bridge test fixtures — fake host objects for each entry-point convention."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest


class FakeHost:
    """Host object exposing ``callNative`` and ``eval`` like an embedding app."""

    def __init__(
        self, native_result="native", eval_result="eval", native_error=None, eval_error=None
    ):
        self.native_calls = []
        self.eval_calls = []
        self._native_result = native_result
        self._eval_result = eval_result
        self._native_error = native_error
        self._eval_error = eval_error

    def callNative(self, selector, program):  # noqa: N802
        self.native_calls.append((selector, program))
        if self._native_error is not None:
            raise self._native_error
        return self._native_result

    def eval(self, program):
        self.eval_calls.append(program)
        if self._eval_error is not None:
            raise self._eval_error
        return self._eval_result


class BareHost:
    """Host object with neither entry point."""


@pytest.fixture()
def fake_host():
    return FakeHost()


@pytest.fixture()
def make_host():
    """Factory for FakeHost instances with custom results or errors."""
    return FakeHost


@pytest.fixture()
def bare_host():
    return BareHost()


@pytest.fixture()
def frida_eval():
    fn = MagicMock(name="frida_eval")
    fn.return_value = "from frida_eval"
    return fn


@pytest.fixture()
def frida_exec():
    fn = MagicMock(name="frida_exec")
    fn.return_value = "from frida_exec"
    return fn
