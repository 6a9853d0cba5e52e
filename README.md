# shuflr

Deterministic shuffling and sampling for newline-delimited record files
(JSONL / NDJSON). Every random choice is derived from an integer seed, so
a run with the same seed and input produces the same output.

Records are byte strings separated by `\n`. A final record without a
trailing newline is still a record; by default the pipelines add the
missing newline on output (`ensure_trailing_newline=True`).

## Installation

```
pip install .
```

The package has no runtime dependencies beyond the standard library.
Install the `test` extra to run the test suite with pytest.

## Modules

| Module                 | What it does                                                          |
|------------------------|-----------------------------------------------------------------------|
| `shuflr.records`       | Record framing (`iter_records`, `open_input`), `Stats`, `OnError`, errors. |
| `shuflr.passthrough`   | Emits records in file order, optionally capped or partitioned.        |
| `shuflr.buffer`        | Ring-buffer local shuffle; every kept record is emitted exactly once. |
| `shuflr.reservoir`     | Uniform random sample of exactly `k` records, emitted in random order. |
| `shuflr.index_perm`    | Uniform permutation of a whole file via a byte-offset `RecordIndex`.  |
| `shuflr.sampling`      | `SamplingReader`: a readable stream with head limit, Bernoulli rate and entropy gate. |
| `shuflr.seed`          | `Seed`: derives independent keys for epochs, permutations and frames. |

The pipelines each expose `run(...)` and a config dataclass
(`PassthroughConfig`, `BufferConfig`, `ReservoirConfig`,
`IndexPermConfig`). `run` writes to any binary sink with `write` and
`flush`, and returns a `shuflr.records.Stats` holding `records_in`,
`records_out`, `bytes_in`, `bytes_out`, `oversized_skipped`,
`oversized_passthrough` and `had_trailing_partial`.

The `source` argument of `passthrough.run`, `buffer.run`,
`reservoir.run`, `RecordIndex.build` and `SamplingReader` may be a
readable binary stream or an in-memory `bytes` object.

## Examples

Pass a file through unchanged, stopping after 100 records:

```python
import io
from shuflr.records import open_input
from shuflr.passthrough import PassthroughConfig, run

sink = io.BytesIO()
with open_input("corpus.jsonl") as source:
    stats = run(source, sink, PassthroughConfig(sample=100))
print(stats.records_in, stats.records_out)
```

Local shuffle through a ring of 1000 records:

```python
import io
from shuflr.buffer import BufferConfig, run

sink = io.BytesIO()
stats = run(b"a\nb\nc\nd\n", sink, BufferConfig(buffer_size=1000, seed=42))
```

Uniform sample of 10 records:

```python
import io
from shuflr.reservoir import ReservoirConfig, run

sink = io.BytesIO()
stats = run(b"".join(b"%d\n" % i for i in range(100)), sink, ReservoirConfig(k=10, seed=7))
```

A full uniform permutation needs an index over the file first; the file
is then read back by seeking to each record:

```python
import io
from shuflr.index_perm import IndexPermConfig, RecordIndex, run

index = RecordIndex.from_path("corpus.jsonl")
sink = io.BytesIO()
stats = run("corpus.jsonl", index, sink, IndexPermConfig(seed=3, epoch=0))
```

`RecordIndex` gives `count` (also `len(index)`), `record_range(i)` and
`record_len(i)`. Changing `epoch` with the same seed gives a different
permutation.

Filtering a stream on the fly:

```python
import io
from shuflr.sampling import SamplingConfig, SamplingReader, shannon_entropy_nats

reader = SamplingReader(
    io.BytesIO(b"xxxx\nhello\nworld\n"),
    SamplingConfig(min_entropy_nats=1.0, limit=2),
)
data = reader.read()  # b"hello\nworld\n"
print(reader.records_kept(), reader.entropy_dropped_low(), shannon_entropy_nats(b"hello"))
```

`SamplingConfig` takes `sample_rate` (keep probability, clamped to
`[0, 1]`), `limit`, `seed`, `min_entropy_nats` and `max_entropy_nats`.
The entropy gate runs before the limit, so `limit` counts records that
passed every gate.

## Oversized records

`passthrough`, `buffer` and `reservoir` take `max_line` (default 16 MiB)
and an `on_error` policy from `shuflr.records.OnError`: `SKIP` (default)
drops the record, `PASSTHROUGH` emits it anyway, and `FAIL` raises
`shuflr.records.OversizedRecordError`, a subclass of
`shuflr.records.ShuflrError`.

## Distributed partitions

`passthrough`, `buffer`, `reservoir` and `index_perm` accept
`partition=(rank, world_size)`. For the first three, rank `r` takes the
records at input positions `i % world_size == r`; for `index_perm`, rank
`r` takes every `world_size`-th position of the shuffled permutation
starting at `r`. With the same seed, ranks get disjoint records and
(except for `reservoir`, which samples from its share) together cover
the whole input.

## Seeds

`shuflr.seed.Seed(master)` derives 32-byte keys with `epoch(e)`,
`perm(e)` and `frame(e, frame_id)`, and `Seed.rng_from(key)` turns a
key into a `random.Random`. Seeds and indices must fit in an unsigned
64-bit integer.

## What this package does not do

It is a library only: there is no command-line tool and no network
server. It reads plain uncompressed record files; it does not handle
compressed input, does not convert files to a seekable compressed
format, and does not save indexes to disk — a `RecordIndex` is built in
memory on each use.