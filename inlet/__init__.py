"""Single-producer, multi-consumer ring buffer over a shared memory-mapped file."""

__version__ = "0.1.0"

__all__ = [
    "array_string",
    "ring",
    "producer",
    "consumer",
    "example_producer",
    "example_consumer",
]