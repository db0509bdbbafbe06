"""Example command: print every value published to a topic."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from .consumer import Consumer
from .example_producer import ENTRY_COUNT, LAYOUT, MAX_CONSUMERS


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inlet-example-consumer", description="Print values published to a topic."
    )
    parser.add_argument("--topic", default="example", help="topic to read from")
    parser.add_argument("--id", dest="consumer_id", default="consumer1", help="consumer name")
    parser.add_argument("--directory", default=None, help="directory of the ring file")
    parser.add_argument("--count", type=int, default=None, help="stop after this many entries")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)
    with Consumer(
        args.topic, args.consumer_id, LAYOUT, ENTRY_COUNT, MAX_CONSUMERS, args.directory
    ) as consumer:
        consumer.process_entries(lambda entry: print(f"Value: {entry.value}", flush=True), args.count)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())