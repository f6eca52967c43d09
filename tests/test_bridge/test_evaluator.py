"""Tests for host evaluator discovery and HostBridge."""

from __future__ import annotations

import builtins
import os
import subprocess
import sys
import textwrap
import threading
import time

import pytest

from snare.bridge.errors import BridgeEvaluationFailed, NoBridgeAvailable
from snare.bridge.evaluator import (
    HostBridge,
    default_environment,
    default_probes,
    global_function_probe,
    host_method_probe,
    native_call_probe,
)
from snare.bridge.types import BridgeSettings


class TestProbes:
    def test_native_call_probe_binds_selector(self, fake_host):
        probe = native_call_probe("h5gg", "callNative", "frida_eval")
        candidate = probe({"h5gg": fake_host})
        assert candidate.label == "h5gg.callNative"
        assert candidate.call("1+1") == "native"
        assert fake_host.native_calls == [("frida_eval", "1+1")]

    def test_native_call_probe_missing_host(self):
        probe = native_call_probe("h5gg", "callNative", "frida_eval")
        assert probe({}) is None

    def test_native_call_probe_host_without_method(self, bare_host):
        probe = native_call_probe("h5gg", "callNative", "frida_eval")
        assert probe({"h5gg": bare_host}) is None

    def test_host_method_probe(self, fake_host):
        candidate = host_method_probe("h5gg", "eval")({"h5gg": fake_host})
        assert candidate.label == "h5gg.eval"
        assert candidate.call("x") == "eval"

    def test_global_function_probe(self, frida_eval):
        candidate = global_function_probe("frida_eval")({"frida_eval": frida_eval})
        assert candidate.label == "frida_eval"
        assert candidate.call("x") == "from frida_eval"

    def test_global_function_probe_ignores_non_callables(self):
        assert global_function_probe("frida_eval")({"frida_eval": "not callable"}) is None

    def test_default_probe_order(self, fake_host, frida_eval, frida_exec):
        env = {"h5gg": fake_host, "frida_eval": frida_eval, "frida_exec": frida_exec}
        labels = [probe(env).label for probe in default_probes(BridgeSettings())]
        assert labels == [
            "h5gg.callNative",
            "h5gg.eval",
            "frida_eval",
            "frida_exec",
            "h5gg.callNative",
        ]

    def test_default_probes_follow_settings(self):
        settings = BridgeSettings(host_object="gg", global_evaluators=("run_js",))
        env = {"run_js": lambda program: "ran"}
        found = [p(env) for p in default_probes(settings)]
        assert [c.label for c in found if c is not None] == ["run_js"]


class TestHostBridgeDiscovery:
    def test_native_call_preferred(self, fake_host, frida_eval):
        bridge = HostBridge({"h5gg": fake_host, "frida_eval": frida_eval})
        assert bridge.evaluate("prog") == "native"
        assert fake_host.native_calls == [("frida_eval", "prog")]
        frida_eval.assert_not_called()

    def test_native_call_failure_falls_back_to_host_eval(self, make_host):
        host = make_host(native_error=RuntimeError("no such selector"))
        bridge = HostBridge({"h5gg": host})
        assert bridge.evaluate("prog") == "eval"
        assert host.eval_calls == ["prog"]

    def test_host_failures_fall_back_to_global_function(self, make_host, frida_eval):
        host = make_host(native_error=RuntimeError("a"), eval_error=RuntimeError("b"))
        bridge = HostBridge({"h5gg": host, "frida_eval": frida_eval})
        assert bridge.evaluate("prog") == "from frida_eval"
        frida_eval.assert_called_once_with("prog")

    def test_frida_exec_used_when_frida_eval_absent(self, frida_exec):
        bridge = HostBridge({"frida_exec": frida_exec})
        assert bridge.evaluate("prog") == "from frida_exec"

    def test_alternate_selector_is_last_resort(self):
        calls = []

        class PickyHost:
            def callNative(self, selector, program):  # noqa: N802
                calls.append(selector)
                if selector != "frida_exec":
                    raise RuntimeError("unknown selector")
                return "exec"

        bridge = HostBridge({"h5gg": PickyHost()})
        assert bridge.evaluate("prog") == "exec"
        assert calls == ["frida_eval", "frida_exec"]

    def test_no_entry_point_raises(self):
        with pytest.raises(NoBridgeAvailable, match="no host evaluator"):
            HostBridge({}).evaluate("prog")

    def test_every_entry_point_failing_raises(self, make_host):
        host = make_host(native_error=RuntimeError("a"), eval_error=RuntimeError("last"))
        bridge = HostBridge({"h5gg": host})
        with pytest.raises(BridgeEvaluationFailed) as exc_info:
            bridge.evaluate("prog")
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        # callNative(frida_eval), eval, callNative(frida_exec)
        assert len(host.native_calls) == 2
        assert len(host.eval_calls) == 1

    def test_none_result_becomes_empty_string(self):
        bridge = HostBridge({"frida_eval": lambda program: None})
        assert bridge.evaluate("prog") == ""

    def test_bytes_result_is_decoded(self):
        bridge = HostBridge({"frida_eval": lambda program: b'{"ok":true}'})
        assert bridge.evaluate("prog") == '{"ok":true}'

    def test_non_string_result_is_stringified(self):
        bridge = HostBridge({"frida_eval": lambda program: 42})
        assert bridge.evaluate("prog") == "42"


class TestHostBridgeName:
    def test_name_reports_first_entry_point(self, fake_host):
        assert HostBridge({"h5gg": fake_host}).name == "h5gg.callNative"

    def test_name_for_global_function(self, frida_eval):
        assert HostBridge({"frida_eval": frida_eval}).name == "frida_eval"

    def test_name_none_without_host(self):
        assert HostBridge({}).name is None


class TestFromCallable:
    def test_wraps_callable(self):
        bridge = HostBridge.from_callable(lambda program: program.upper(), label="custom")
        assert bridge.name == "custom"
        assert bridge.evaluate("abc") == "ABC"

    def test_errors_become_evaluation_failures(self):
        def broken(program):
            raise ValueError("host crashed")

        bridge = HostBridge.from_callable(broken)
        with pytest.raises(BridgeEvaluationFailed, match="host crashed"):
            bridge.evaluate("abc")


class TestDefaultEnvironment:
    def test_sees_builtins(self, monkeypatch, frida_eval):
        monkeypatch.setattr(builtins, "frida_eval", frida_eval, raising=False)
        env = default_environment()
        assert env["frida_eval"] is frida_eval

    def test_bridge_reads_environment_at_call_time(self, monkeypatch, frida_eval):
        bridge = HostBridge()
        monkeypatch.setattr(builtins, "frida_eval", frida_eval, raising=False)
        assert bridge.evaluate("prog") == "from frida_eval"


class TestTimeout:
    def test_hung_host_times_out(self):
        release = threading.Event()

        def hung(program):
            release.wait(5)
            return "late"

        bridge = HostBridge.from_callable(hung, settings=BridgeSettings(timeout=0.05))
        try:
            with pytest.raises(BridgeEvaluationFailed, match="did not return"):
                bridge.evaluate("prog")
        finally:
            release.set()

    def test_fast_host_within_timeout(self):
        bridge = HostBridge.from_callable(
            lambda program: "done", settings=BridgeSettings(timeout=5.0)
        )
        assert bridge.evaluate("prog") == "done"

    def test_host_error_within_timeout_falls_through(self):
        def broken(program):
            raise RuntimeError("boom")

        bridge = HostBridge(
            environment={"frida_eval": broken, "frida_exec": lambda p: "second"},
            settings=BridgeSettings(timeout=5.0),
        )
        assert bridge.evaluate("prog") == "second"

    def test_hung_host_does_not_block_exit(self):
        script = textwrap.dedent(
            """
            import time
            from snare.bridge.errors import BridgeEvaluationFailed
            from snare.bridge.evaluator import HostBridge
            from snare.bridge.types import BridgeSettings

            bridge = HostBridge.from_callable(
                lambda program: time.sleep(30), settings=BridgeSettings(timeout=0.1)
            )
            try:
                bridge.evaluate("prog")
            except BridgeEvaluationFailed:
                print("timed out")
            """
        )
        env = dict(os.environ, PYTHONPATH=os.pathsep.join(p for p in sys.path if p))
        started = time.monotonic()
        completed = subprocess.run(
            [sys.executable, "-c", script],
            env=env,
            capture_output=True,
            text=True,
            timeout=20,
        )
        elapsed = time.monotonic() - started

        assert completed.returncode == 0, completed.stderr
        assert completed.stdout.strip() == "timed out"
        assert elapsed < 10
