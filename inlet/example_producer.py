"""Example command: publish an increasing counter to a topic."""

from __future__ import annotations

import argparse
import itertools
import time
from typing import Optional, Sequence

from .producer import Producer
from .ring import EntryLayout

LAYOUT = EntryLayout({"value": "Q"})
ENTRY_COUNT = 8
MAX_CONSUMERS = 2


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inlet-example-producer", description="Publish a counter to a topic."
    )
    parser.add_argument("--topic", default="example", help="topic to publish to")
    parser.add_argument("--directory", default=None, help="directory of the ring file")
    parser.add_argument("--count", type=int, default=None, help="stop after this many entries")
    parser.add_argument("--interval", type=float, default=1.0, help="seconds between entries")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)
    values = itertools.count() if args.count is None else range(args.count)
    with Producer(args.topic, LAYOUT, ENTRY_COUNT, MAX_CONSUMERS, args.directory) as producer:
        for counter in values:
            producer.publish(lambda entry, value=counter: setattr(entry, "value", value))
            if args.interval > 0:
                time.sleep(args.interval)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())