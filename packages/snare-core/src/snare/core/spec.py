"""Classification of caller-supplied address specs.

An address spec is one of:

* a number (``0x401000`` or ``4198400``)
* a hex literal string (``"0x401000"``)
* ``"module!symbol"`` — an export; an empty module searches every module
* ``"module:offset"`` — module base plus a hex or decimal offset
* a bare symbol name, looked up in the process-wide export table

:func:`classify` maps a raw spec onto exactly one descriptor.
"""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from snare.bridge.errors import UnsupportedSpec
from snare.core.address import mask32

HEX_LITERAL = re.compile(r"^0x[0-9a-fA-F]+$")
OFFSET_HEX = re.compile(r"^0[xX][0-9a-fA-F]+$")
OFFSET_DECIMAL = re.compile(r"^[+-]?\d+$", re.ASCII)


@dataclass(frozen=True)
class Numeric:
    value: int


@dataclass(frozen=True)
class HexLiteral:
    text: str

    @property
    def value(self) -> int:
        return mask32(int(self.text, 16))


@dataclass(frozen=True)
class ModuleSymbol:
    module: Optional[str]
    """``None`` means every loaded module."""
    symbol: str


@dataclass(frozen=True)
class ModuleOffset:
    module: str
    offset: str
    """Raw offset text; see :func:`parse_offset`."""


@dataclass(frozen=True)
class BareSymbol:
    name: str


AddressDescriptor = Union[Numeric, HexLiteral, ModuleSymbol, ModuleOffset, BareSymbol]


def parse_offset(text: str) -> int:
    """Parse a hex (``0x``/``0X``) or plain decimal offset.

    Anything else, including ``1_0``, ``1e3`` and ``-0x10``, gives ``0``.
    """
    text = (text or "").strip()
    if OFFSET_HEX.match(text):
        return mask32(int(text, 16))
    if OFFSET_DECIMAL.match(text):
        return mask32(int(text, 10))
    return 0


def classify(spec: Any) -> AddressDescriptor:
    """Classify *spec*; the first matching form wins.

    Any integral value (``int``, ``numbers.Integral`` or an object with
    ``__index__``) is a number; ``bool`` is not.

    Raises
    ------
    UnsupportedSpec
        If *spec* is not an integer or a non-empty string.
    """
    if isinstance(spec, bool):
        raise UnsupportedSpec(spec)
    if not isinstance(spec, str):
        try:
            return Numeric(mask32(operator.index(spec)))
        except TypeError:
            raise UnsupportedSpec(spec) from None

    text = spec.strip()
    if not text:
        raise UnsupportedSpec(spec)
    if HEX_LITERAL.match(text):
        return HexLiteral(text)
    if "!" in text:
        module, symbol = text.split("!", 1)
        return ModuleSymbol(module or None, symbol)
    if ":" in text:
        module, offset = text.split(":", 1)
        return ModuleOffset(module, offset)
    return BareSymbol(text)
