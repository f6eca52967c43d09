"""Request builder — the program text sent to the host evaluator.

Every program is a single self-invoking function expression that returns
``JSON.stringify({ok: true, ...})`` on success and
``JSON.stringify({ok: false, error: String(e)})`` when anything inside it
throws.  Resolution programs put their result under :data:`RESULT_KEY`;
scan programs return a ``matches`` list of hex strings.

Names, patterns and addresses reach a program only through
:func:`js_string`.  Handler source is inlined verbatim as a fragment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from string import Template
from typing import Mapping, Optional

from snare.bridge.types import InterceptHandler
from snare.core.address import AddressHandle

logger = logging.getLogger(__name__)

RESULT_KEY = "__r"
"""Payload key carrying a resolved pointer string."""

NO_CALLBACK = "undefined"
"""Rendered in place of an absent handler half."""

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def escape(value: str) -> str:
    """Escape *value* for use inside a double-quoted host string literal."""
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


def js_string(value: Optional[str]) -> str:
    """Render *value* as a quoted string literal, or ``null`` for ``None``."""
    if value is None:
        return "null"
    return f'"{escape(str(value))}"'


class RequestKind(Enum):
    """The operations a program can request from the host."""

    RESOLVE_EXPORT = "resolve_export"
    RESOLVE_MODULE_BASE = "resolve_module_base"
    INSTALL_INTERCEPT = "install_intercept"
    SCAN_PATTERN = "scan_pattern"


@dataclass(frozen=True)
class EvalRequest:
    """A rendered program and the operation it performs."""

    kind: RequestKind
    program: str


class ProgramTemplate:
    """A ``string.Template`` whose placeholders are filled by two routes.

    ``strings`` values are always passed through :func:`js_string`;
    ``fragments`` are inlined verbatim.  Every placeholder must be filled.
    """

    def __init__(self, kind: RequestKind, body: str):
        self.kind = kind
        self._template = Template(body)

    def render(
        self,
        strings: Optional[Mapping[str, Optional[str]]] = None,
        fragments: Optional[Mapping[str, str]] = None,
    ) -> EvalRequest:
        values = {name: js_string(value) for name, value in (strings or {}).items()}
        values.update(fragments or {})
        program = self._template.substitute(values)
        logger.debug("Built %s program: %s", self.kind.value, program)
        return EvalRequest(kind=self.kind, program=program)


_WRAPPER = (
    "(function(){ try { $body } "
    "catch (e) { return JSON.stringify({ok:false, error:String(e)}); } })();"
)


def _program(kind: RequestKind, body: str) -> ProgramTemplate:
    return ProgramTemplate(kind, Template(_WRAPPER).substitute(body=body))


RESOLVE_EXPORT = _program(
    RequestKind.RESOLVE_EXPORT,
    "var a = Module.findExportByName($module, $symbol); "
    "return JSON.stringify({ok:true, " + RESULT_KEY + ": a ? ptr(a).toString() : null});",
)

RESOLVE_MODULE_BASE = _program(
    RequestKind.RESOLVE_MODULE_BASE,
    "var m = Process.findModuleByName($module); "
    'if (!m) return JSON.stringify({ok:false, error:"module not found"}); '
    "return JSON.stringify({ok:true, " + RESULT_KEY + ": m.base.toString()});",
)

INSTALL_INTERCEPT = _program(
    RequestKind.INSTALL_INTERCEPT,
    "var target = ptr($address); "
    "Interceptor.attach(target, {onEnter: $on_enter, onLeave: $on_leave}); "
    "return JSON.stringify({ok:true});",
)

SCAN_PATTERN = _program(
    RequestKind.SCAN_PATTERN,
    "var mod = Process.findModuleByName($module); "
    'if (!mod) return JSON.stringify({ok:false, error:"module not found"}); '
    "var matches = Memory.scanSync(mod.base, mod.size, $pattern).map("
    "function(m){ return ptr(m.address).toString(); }); "
    "return JSON.stringify({ok:true, matches:matches});",
)


def build_resolve_export(module: Optional[str], symbol: str) -> EvalRequest:
    """Look up *symbol* in *module*'s exports (``None`` searches every module)."""
    return RESOLVE_EXPORT.render(strings={"module": module, "symbol": symbol})


def build_resolve_module_base(module: str) -> EvalRequest:
    """Look up the load base of *module*."""
    return RESOLVE_MODULE_BASE.render(strings={"module": module})


def build_install_intercept(address: AddressHandle, handler: InterceptHandler) -> EvalRequest:
    """Attach *handler*'s enter/leave fragments at *address*."""
    return INSTALL_INTERCEPT.render(
        strings={"address": str(address)},
        fragments={
            "on_enter": handler.on_enter or NO_CALLBACK,
            "on_leave": handler.on_leave or NO_CALLBACK,
        },
    )


def build_scan_pattern(module: str, pattern: str) -> EvalRequest:
    """Scan all of *module* for *pattern* (host pattern syntax, e.g. ``"12 34 ?? 56"``)."""
    return SCAN_PATTERN.render(strings={"module": module, "pattern": pattern})
