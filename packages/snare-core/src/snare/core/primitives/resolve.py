"""ResolveHandler — address spec → AddressHandle, asking the host when needed."""

from __future__ import annotations

import logging
from typing import Any, Optional

from snare.bridge.errors import NoBridgeAvailable, UnsupportedSpec
from snare.core.address import AddressHandle
from snare.core.events import (
    ExecutionEvent,
    ExecutionEventCallback,
    ExecutionEventType,
)
from snare.core.primitives.executor import ProgramExecutor
from snare.core.requests import (
    RESULT_KEY,
    EvalRequest,
    build_resolve_export,
    build_resolve_module_base,
)
from snare.core.spec import (
    BareSymbol,
    HexLiteral,
    ModuleOffset,
    ModuleSymbol,
    Numeric,
    classify,
    parse_offset,
)

logger = logging.getLogger(__name__)


def _parse_pointer(value: Any) -> Optional[AddressHandle]:
    """Turn a host pointer value (hex string or number) into a handle."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return AddressHandle(value)
    try:
        return AddressHandle.from_string(str(value))
    except ValueError:
        return None


class ResolveHandler:
    """Resolves address specs to :class:`AddressHandle` values.

    Numbers and hex literals resolve locally.  Symbolic specs are looked up
    through the host; when that lookup fails for any reason other than a
    missing bridge, the result is address ``0``, which callers should read
    as "unresolved".
    """

    def __init__(
        self,
        executor: ProgramExecutor,
        execution_callback: Optional[ExecutionEventCallback] = None,
    ):
        self.executor = executor
        self._execution_callback = execution_callback

    def resolve(self, spec: Any) -> AddressHandle:
        """Resolve *spec* to an address handle.

        Raises
        ------
        UnsupportedSpec
            If *spec* is not a handle, an integer or a non-empty string.
        NoBridgeAvailable
            If a symbolic spec needs the host and none can be found.
        """
        if isinstance(spec, AddressHandle):
            return spec

        descriptor = classify(spec)
        if isinstance(descriptor, (Numeric, HexLiteral)):
            return AddressHandle(descriptor.value)

        if isinstance(descriptor, ModuleSymbol):
            found = self._lookup(build_resolve_export(descriptor.module, descriptor.symbol))
        elif isinstance(descriptor, ModuleOffset):
            base = self._lookup(build_resolve_module_base(descriptor.module))
            found = base.add(parse_offset(descriptor.offset)) if base is not None else None
        elif isinstance(descriptor, BareSymbol):
            found = self._lookup(build_resolve_export(None, descriptor.name))
        else:
            raise UnsupportedSpec(spec)

        if found is None:
            logger.debug("Could not resolve %r; using 0x0", spec)

        handle = found if found is not None else AddressHandle(0)
        if self._execution_callback is not None:
            self._execution_callback(ExecutionEvent(
                event_type=ExecutionEventType.RESOLVED,
                succeeded=found is not None,
                metadata={"spec": spec, "address": str(handle)},
            ))
        return handle

    def _lookup(self, request: EvalRequest) -> Optional[AddressHandle]:
        try:
            response = self.executor.run(request)
        except NoBridgeAvailable:
            raise
        except Exception as exc:
            logger.debug("Host lookup (%s) failed: %s", request.kind.value, exc)
            return None

        value = response.get(RESULT_KEY)
        if value is None:
            return None
        return _parse_pointer(value)
