# inlet

`inlet` passes fixed-size records from one producer process to any number of
consumer processes. The records go through a ring buffer in a memory-mapped
file. There is no broker and no socket. Each side maps the same file and reads
and writes the shared sequence counters in place.

## How it works

- A topic is backed by a file named `inlet-<topic>`. The file goes in the
  directory you pass, or in the current directory if you pass none
  (`inlet.ring.inlet_path(topic, directory)` gives the path). The first process
  to open the topic creates the file, writes a zeroed image with a header, and
  sets the header's `initialised` flag. Any later process maps the file that is
  already there. If that file is smaller than the layout needs, `ValueError` is
  raised.
- The file holds a header (topic, entry size, entry count, consumer limit,
  `initialised` flag), `entry_count` record slots, the producer's record, and
  `max_consumers` consumer records.
- Topic names and consumer ids are `ArrayString`s. Each one is a 128-byte
  zero-padded buffer. A name longer than 128 bytes in UTF-8 raises
  `ValueError`.
- The producer writes into slot `sequence % entry_count` and then advances its
  sequence. If the slowest claimed consumer is a whole ring behind, `publish`
  waits before it writes.
- A consumer claims a record by its id. If a record already has that id, the
  consumer reuses it and resumes from that record's sequence. Otherwise it takes
  the first free record. If no record is free, `RuntimeError` is raised.

## Usage

The public pieces live in four modules:

- `inlet.ring`: `EntryLayout`, `Entry`, `ClientMeta`, `Inlet`, `inlet_path`
- `inlet.producer`: `Producer`
- `inlet.consumer`: `Consumer`
- `inlet.array_string`: `ArrayString`

Describe the record with an `EntryLayout`, which maps field names to single
`struct` format codes. The default byte order is little-endian (`"<"`). Field
names must be identifiers that do not start with `_`, and `as_dict` is
reserved. Open the topic from each side with the same layout, entry count and
consumer limit:

```python
from inlet.consumer import Consumer
from inlet.producer import Producer
from inlet.ring import EntryLayout

layout = EntryLayout({"value": "Q", "value2": "Q"})

with Producer("prices", layout, 8, 2, directory="/tmp") as producer, \
        Consumer("prices", "reader", layout, 8, 2, directory="/tmp") as consumer:

    def fill(entry):
        entry.value = 69420
        entry.value2 = 0xDEADBEEF

    producer.publish(fill)                      # returns the published sequence, 0
    consumer.has_data_to_consume()              # True
    consumer.process_current_entry(lambda e: e.as_dict())
    # {'value': 69420, 'value2': 3735928559}
```

- `Producer.publish(fill)` calls `fill` with the next writable `Entry`. It then
  makes that entry visible and returns its sequence number. The producer also
  has the `next_sequence` and `minimum_consumer_sequence` properties.
- `Consumer.has_data_to_consume()` tells you whether the producer is ahead of
  this consumer.
- `Consumer.process_current_entry(handler)` passes the current `Entry` to
  `handler`, advances the consumer, and returns what `handler` returned.
- `Consumer.process_entries(handler, limit=None)` waits for entries and handles
  them. It runs forever, or it stops after `limit` entries.
- `Consumer.index` is the position of the claimed record.

An `Entry` reads and writes its fields as attributes, straight through to the
mapped memory. `as_dict()` returns all fields at once. `EntryLayout.encode` and
`EntryLayout.decode` convert between a dict of values and raw entry bytes.

`Producer`, `Consumer` and `Inlet` are context managers. `close()` or leaving
the `with` block unmaps the file. After that, the views that were handed out
stop working. `Inlet` gives direct access to the mapped region:

- `topic` and `initialised`
- `entry(sequence)`
- `producer`, the producer's `ClientMeta`
- `consumers`, the consumer `ClientMeta` records

Each `ClientMeta` has `id`, `sequence` and `timestamp`.

## Example commands

Two commands show the pieces working together. Each entry has one
unsigned 64-bit field, `value`, in a ring of 8 entries with room for 2
consumers. Start them in two terminals from the same working directory:

```
inlet-example-producer
```

This publishes a counter starting at 0 to the topic `example`, one value per
second. It takes these options:

- `--topic`
- `--directory`
- `--count`, to stop after that many entries
- `--interval`, the seconds between entries (default 1.0)

```
inlet-example-consumer
```

This claims the record `consumer1` and prints `Value: <n>` for each entry. It
takes these options:

- `--topic`
- `--id`
- `--directory`
- `--count`, to stop after that many entries

## What it does not do

- Waiting is polling. A full ring makes `publish` spin, and an empty ring makes
  `process_entries` spin. There is no notification and no timeout.
- There is no check that processes agree on a layout. A later opener only
  checks that the existing file is large enough. It does not compare the
  header's entry size, entry count or consumer limit with its own. It also does
  not wait for the `initialised` flag.
- Consumer records are never released. The `timestamp` field is stored but not
  used, so a consumer that stops reading holds the producer back for good.
- Topic files are never removed. Delete `inlet-<topic>` yourself to start the
  topic over.
- Only one producer per topic is supported. Nothing prevents a second one from
  writing.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```