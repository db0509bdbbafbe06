"""Publishing side of a topic's ring buffer."""

from __future__ import annotations

import time
from typing import Any, Callable, Optional, Union

from .array_string import ArrayString
from .ring import Entry, EntryLayout, Inlet, PathLike


class Producer:
    """Writes entries into a topic's ring, waiting for the slowest consumer."""

    def __init__(
        self,
        topic: Union[str, ArrayString],
        layout: EntryLayout,
        entry_count: int,
        max_consumers: int,
        directory: Optional[PathLike] = None,
    ) -> None:
        self.inlet = Inlet(topic, layout, entry_count, max_consumers, directory)

    @property
    def next_sequence(self) -> int:
        """Sequence number the next published entry will take."""
        return self.inlet.producer.sequence

    @property
    def minimum_consumer_sequence(self) -> int:
        """Lowest sequence among claimed consumers, or 0 when none are claimed."""
        return min(
            (record.sequence for record in self.inlet.consumers if not record.id.is_empty()),
            default=0,
        )

    def publish(self, fill: Callable[[Entry], Any]) -> int:
        """Let ``fill`` write the next slot, then make it visible to consumers.

        Blocks while the ring is full. Returns the sequence that was published.
        """
        sequence = self.next_sequence
        while sequence - self.minimum_consumer_sequence >= self.inlet.entry_count:
            time.sleep(0)
        fill(self.inlet.entry(sequence))
        self.inlet.producer.sequence = sequence + 1
        return sequence

    def close(self) -> None:
        """Release the shared mapping."""
        self.inlet.close()

    def __enter__(self) -> "Producer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()