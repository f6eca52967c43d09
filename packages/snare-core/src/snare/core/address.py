"""AddressHandle — an immutable 32-bit address."""

from __future__ import annotations

from typing import Any

ADDRESS_MASK = 0xFFFFFFFF


def mask32(value: int) -> int:
    """Truncate *value* to an unsigned 32-bit integer (negative values wrap)."""
    return int(value) & ADDRESS_MASK


class AddressHandle:
    """A resolved address in the host's 32-bit addressing model.

    Handles never change after construction; :meth:`add` returns a new one.
    Equality and hashing go by numeric value, and a handle compares equal to
    a plain ``int`` holding the same address.
    """

    __slots__ = ("_address",)

    def __init__(self, address: int = 0):
        object.__setattr__(self, "_address", mask32(address))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("AddressHandle is immutable")

    @classmethod
    def from_string(cls, text: str) -> AddressHandle:
        """Parse a canonical ``0x``-prefixed hex string (as produced by ``str()``)."""
        return cls(int(text.strip(), 16))

    @property
    def address(self) -> int:
        """Return the numeric address."""
        return self._address

    def add(self, offset: int) -> AddressHandle:
        """Return a new handle *offset* bytes further on, wrapping at 2**32."""
        return AddressHandle(self._address + mask32(offset))

    def __add__(self, offset: int) -> AddressHandle:
        if isinstance(offset, bool) or not isinstance(offset, int):
            return NotImplemented
        return self.add(offset)

    __radd__ = __add__

    def __int__(self) -> int:
        return self._address

    __index__ = __int__

    def __bool__(self) -> bool:
        return self._address != 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AddressHandle):
            return self._address == other._address
        if isinstance(other, int) and not isinstance(other, bool):
            return self._address == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._address)

    def __str__(self) -> str:
        return f"0x{self._address:x}"

    def __repr__(self) -> str:
        return f"AddressHandle({self})"
