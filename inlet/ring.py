"""Memory-mapped ring buffer shared between one producer and its consumers."""

from __future__ import annotations

import mmap
import os
import struct
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, BinaryIO, Optional, Tuple, Union

from .array_string import ARRAY_STRING_SIZE, ArrayString

PAD_SIZE = 64
_WORD = 8

_META = struct.Struct(f"<{ARRAY_STRING_SIZE}sQQQ?7x")
_INITIALISED_OFFSET = ARRAY_STRING_SIZE + 3 * _WORD
_DATA_OFFSET = _META.size + PAD_SIZE

_CLIENT_SIZE = PAD_SIZE + ARRAY_STRING_SIZE + 2 * _WORD
_ID = struct.Struct(f"<{ARRAY_STRING_SIZE}s")
_U64 = struct.Struct("<Q")
_ID_OFFSET = PAD_SIZE
_SEQUENCE_OFFSET = PAD_SIZE + ARRAY_STRING_SIZE
_TIMESTAMP_OFFSET = _SEQUENCE_OFFSET + _WORD

_RESERVED_NAMES = frozenset({"as_dict"})

PathLike = Union[str, "os.PathLike[str]"]


def _align(offset: int) -> int:
    return (offset + _WORD - 1) // _WORD * _WORD


def _as_view(buffer: Any) -> memoryview:
    return buffer if isinstance(buffer, memoryview) else memoryview(buffer)


def inlet_path(topic: Union[str, ArrayString], directory: Optional[PathLike] = None) -> Path:
    """Return the path of the shared file backing ``topic``."""
    base = Path(directory) if directory is not None else Path()
    return base / f"inlet-{topic}"


class EntryLayout:
    """Binary layout of one ring entry: named fields, each one struct code."""

    _BYTE_ORDERS = frozenset("<>=!")

    def __init__(
        self,
        fields: Union[Mapping[str, str], Iterable[Tuple[str, str]]],
        byte_order: str = "<",
    ) -> None:
        if byte_order not in self._BYTE_ORDERS:
            raise ValueError(f"byte order must be one of '<', '>', '=', '!', not {byte_order!r}")
        pairs = list(fields.items()) if isinstance(fields, Mapping) else [tuple(p) for p in fields]
        self._fields: dict[str, tuple[int, struct.Struct]] = {}
        offset = 0
        for name, fmt in pairs:
            if not isinstance(name, str) or not name.isidentifier() or name.startswith("_"):
                raise ValueError(f"invalid field name {name!r}")
            if name in _RESERVED_NAMES:
                raise ValueError(f"field name {name!r} is reserved")
            if name in self._fields:
                raise ValueError(f"duplicate field name {name!r}")
            try:
                codec = struct.Struct(byte_order + fmt)
            except struct.error as exc:
                raise ValueError(f"invalid format {fmt!r} for field {name!r}") from exc
            if len(codec.unpack(bytes(codec.size))) != 1:
                raise ValueError(f"format {fmt!r} for field {name!r} must hold exactly one value")
            self._fields[name] = (offset, codec)
            offset += codec.size
        self.byte_order = byte_order
        self.size = offset

    @property
    def names(self) -> Tuple[str, ...]:
        """Field names in layout order."""
        return tuple(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def _check_length(self, data: Any) -> None:
        if len(memoryview(data).cast("B")) < self.size:
            raise ValueError(f"entry data needs {self.size} bytes")

    def decode(self, data: Any) -> dict[str, Any]:
        """Unpack every field of an entry from ``data``."""
        self._check_length(data)
        return {name: codec.unpack_from(data, off)[0] for name, (off, codec) in self._fields.items()}

    def encode(self, values: Mapping[str, Any]) -> bytes:
        """Pack a full set of field values into entry bytes."""
        unknown = set(values) - set(self._fields)
        if unknown:
            raise ValueError(f"unknown fields: {', '.join(sorted(unknown))}")
        buffer = bytearray(self.size)
        for name in self._fields:
            if name not in values:
                raise KeyError(name)
            self._write(buffer, name, values[name])
        return bytes(buffer)

    def _read(self, buffer: Any, name: str) -> Any:
        offset, codec = self._fields[name]
        return codec.unpack_from(buffer, offset)[0]

    def _write(self, buffer: Any, name: str, value: Any) -> None:
        offset, codec = self._fields[name]
        try:
            codec.pack_into(buffer, offset, value)
        except struct.error as exc:
            raise ValueError(f"bad value for field {name!r}: {exc}") from exc


class Entry:
    """Live view of one ring slot; fields read and write through to memory."""

    __slots__ = ("_layout", "_buffer")

    def __init__(self, layout: EntryLayout, buffer: Any) -> None:
        view = _as_view(buffer)
        if view.nbytes != layout.size:
            raise ValueError(f"entry buffer must be {layout.size} bytes, got {view.nbytes}")
        object.__setattr__(self, "_layout", layout)
        object.__setattr__(self, "_buffer", view)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_") or name not in self._layout:
            raise AttributeError(f"entry has no field {name!r}")
        return self._layout._read(self._buffer, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self._layout:
            raise AttributeError(f"entry has no field {name!r}")
        self._layout._write(self._buffer, name, value)

    def as_dict(self) -> dict[str, Any]:
        """All field values of this slot."""
        return self._layout.decode(self._buffer)

    def _release(self) -> None:
        self._buffer.release()

    def __repr__(self) -> str:
        return f"Entry({self.as_dict()!r})"


class ClientMeta:
    """Live view of a producer's or consumer's bookkeeping record."""

    __slots__ = ("_buffer",)

    SIZE = _CLIENT_SIZE

    def __init__(self, buffer: Any) -> None:
        view = _as_view(buffer)
        if view.nbytes != self.SIZE:
            raise ValueError(f"client record must be {self.SIZE} bytes, got {view.nbytes}")
        self._buffer = view

    @property
    def id(self) -> ArrayString:
        """Name claimed by this client; empty when the slot is free."""
        return ArrayString.from_bytes(_ID.unpack_from(self._buffer, _ID_OFFSET)[0])

    @id.setter
    def id(self, value: Union[str, ArrayString]) -> None:
        name = value if isinstance(value, ArrayString) else ArrayString(value)
        _ID.pack_into(self._buffer, _ID_OFFSET, bytes(name))

    @property
    def sequence(self) -> int:
        """Next sequence number this client will handle."""
        return _U64.unpack_from(self._buffer, _SEQUENCE_OFFSET)[0]

    @sequence.setter
    def sequence(self, value: int) -> None:
        _U64.pack_into(self._buffer, _SEQUENCE_OFFSET, value)

    @property
    def timestamp(self) -> int:
        """Timestamp slot of this client."""
        return _U64.unpack_from(self._buffer, _TIMESTAMP_OFFSET)[0]

    @timestamp.setter
    def timestamp(self, value: int) -> None:
        _U64.pack_into(self._buffer, _TIMESTAMP_OFFSET, value)

    def _release(self) -> None:
        self._buffer.release()

    def __repr__(self) -> str:
        return f"ClientMeta(id={self.id!r}, sequence={self.sequence}, timestamp={self.timestamp})"


class Inlet:
    """A topic's ring buffer, mapped from the file ``inlet-<topic>``.

    The first opener creates and initialises the file; later openers map the
    existing file as it is.
    """

    def __init__(
        self,
        topic: Union[str, ArrayString],
        layout: EntryLayout,
        entry_count: int,
        max_consumers: int,
        directory: Optional[PathLike] = None,
    ) -> None:
        if entry_count < 1:
            raise ValueError("entry_count must be at least 1")
        if max_consumers < 0:
            raise ValueError("max_consumers must not be negative")
        name = topic if isinstance(topic, ArrayString) else ArrayString(topic)
        self.layout = layout
        self.entry_count = entry_count
        self.max_consumers = max_consumers
        self.path = inlet_path(name, directory)

        producer_offset = _align(_DATA_OFFSET + entry_count * layout.size)
        self.size = producer_offset + ClientMeta.SIZE * (1 + max_consumers) + PAD_SIZE

        self._closed = True
        self._file, created = self._open(name)
        try:
            actual = os.fstat(self._file.fileno()).st_size
            if actual < self.size:
                raise ValueError(f"{self.path} holds {actual} bytes, {self.size} are needed")
            self._map = mmap.mmap(self._file.fileno(), self.size)
        except BaseException:
            self._file.close()
            raise

        self._view = memoryview(self._map)
        size = layout.size
        self._entries = tuple(
            Entry(layout, self._view[start : start + size])
            for start in (_DATA_OFFSET + slot * size for slot in range(entry_count))
        )
        clients = tuple(
            ClientMeta(self._view[start : start + ClientMeta.SIZE])
            for start in (
                producer_offset + index * ClientMeta.SIZE for index in range(1 + max_consumers)
            )
        )
        self._producer = clients[0]
        self._consumers = clients[1:]
        self._closed = False

        if created:
            self._map[_INITIALISED_OFFSET] = 1
            self._map.flush()

    def _open(self, topic: ArrayString) -> Tuple[BinaryIO, bool]:
        try:
            handle = open(self.path, "x+b")
        except FileExistsError:
            return open(self.path, "r+b"), False
        try:
            image = bytearray(self.size)
            _META.pack_into(
                image,
                0,
                bytes(topic),
                self.layout.size,
                self.entry_count,
                self.max_consumers,
                False,
            )
            handle.write(image)
            handle.flush()
        except BaseException:
            handle.close()
            raise
        return handle, True

    @property
    def topic(self) -> ArrayString:
        """Topic recorded in the file header."""
        return ArrayString.from_bytes(self._map[:ARRAY_STRING_SIZE])

    @property
    def initialised(self) -> bool:
        """Whether the creator finished setting the file up."""
        return bool(self._map[_INITIALISED_OFFSET])

    def entry(self, sequence: int) -> Entry:
        """The slot that holds ``sequence``."""
        if sequence < 0:
            raise ValueError("sequence must not be negative")
        return self._entries[sequence % self.entry_count]

    @property
    def producer(self) -> ClientMeta:
        """The producer's record."""
        return self._producer

    @property
    def consumers(self) -> Tuple[ClientMeta, ...]:
        """The consumer records, claimed or free."""
        return self._consumers

    def close(self) -> None:
        """Unmap the file; views handed out stop working."""
        if self._closed:
            return
        self._closed = True
        for item in (*self._entries, self._producer, *self._consumers):
            item._release()
        self._view.release()
        self._map.close()
        self._file.close()

    def __enter__(self) -> "Inlet":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()