"""Fixed-size, NUL-padded strings as stored inside a shared ring file."""

from __future__ import annotations

from typing import Union

ARRAY_STRING_SIZE = 128


class ArrayString:
    """A string held in a fixed 128-byte, zero-padded buffer."""

    __slots__ = ("_data",)

    SIZE = ARRAY_STRING_SIZE

    def __init__(self, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"ArrayString needs a str, not {type(value).__name__}")
        raw = value.encode("utf-8")
        if len(raw) > ARRAY_STRING_SIZE:
            raise ValueError(
                f"ArrayString must be less than or equal to {ARRAY_STRING_SIZE} characters."
            )
        self._data = raw.ljust(ARRAY_STRING_SIZE, b"\0")

    @classmethod
    def empty(cls) -> "ArrayString":
        """Return a string whose buffer is all zero bytes."""
        return cls("")

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> "ArrayString":
        """Build a string from a raw buffer of at most 128 bytes."""
        raw = bytes(data)
        if len(raw) > ARRAY_STRING_SIZE:
            raise ValueError(
                f"ArrayString buffer must be at most {ARRAY_STRING_SIZE} bytes, got {len(raw)}"
            )
        instance = cls.__new__(cls)
        instance._data = raw.ljust(ARRAY_STRING_SIZE, b"\0")
        return instance

    def is_empty(self) -> bool:
        """True when the first byte of the buffer is zero."""
        return self._data[0] == 0

    def __bytes__(self) -> bytes:
        return self._data

    def __str__(self) -> str:
        # Each byte up to the first NUL becomes one character.
        return self._data.split(b"\0", 1)[0].decode("latin-1")

    def __repr__(self) -> str:
        return f'"{self}"'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArrayString):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(self._data)