"""Consuming side of a topic's ring buffer."""

from __future__ import annotations

import itertools
import time
from typing import Any, Callable, Optional, Union

from .array_string import ArrayString
from .ring import ClientMeta, Entry, EntryLayout, Inlet, PathLike


class Consumer:
    """Reads entries from a topic's ring under a named consumer slot."""

    def __init__(
        self,
        topic: Union[str, ArrayString],
        consumer_id: Union[str, ArrayString],
        layout: EntryLayout,
        entry_count: int,
        max_consumers: int,
        directory: Optional[PathLike] = None,
    ) -> None:
        name = consumer_id if isinstance(consumer_id, ArrayString) else ArrayString(consumer_id)
        self.inlet = Inlet(topic, layout, entry_count, max_consumers, directory)
        try:
            self._index = self._claim(name)
        except BaseException:
            self.inlet.close()
            raise

    def _claim(self, name: ArrayString) -> int:
        records = self.inlet.consumers
        existing = next((i for i, record in enumerate(records) if record.id == name), None)
        if existing is not None:
            return existing
        free = next((i for i, record in enumerate(records) if record.id.is_empty()), None)
        if free is None:
            raise RuntimeError("Could not find an empty consumer to claim")
        records[free].id = name
        return free

    @property
    def _record(self) -> ClientMeta:
        return self.inlet.consumers[self._index]

    @property
    def index(self) -> int:
        """Position of this consumer's slot in the ring file."""
        return self._index

    def has_data_to_consume(self) -> bool:
        """True when the producer is ahead of this consumer."""
        return self.inlet.producer.sequence > self._record.sequence

    def process_current_entry(self, handler: Callable[[Entry], Any]) -> Any:
        """Hand the current slot to ``handler`` and advance past it."""
        record = self._record
        result = handler(self.inlet.entry(record.sequence))
        record.sequence += 1
        return result

    def process_entries(self, handler: Callable[[Entry], Any], limit: Optional[int] = None) -> None:
        """Wait for and handle entries; forever, or ``limit`` of them."""
        if limit is not None and limit < 0:
            raise ValueError("limit must not be negative")
        for _ in itertools.count() if limit is None else range(limit):
            while not self.has_data_to_consume():
                time.sleep(0)
            self.process_current_entry(handler)

    def close(self) -> None:
        """Release the shared mapping."""
        self.inlet.close()

    def __enter__(self) -> "Consumer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()