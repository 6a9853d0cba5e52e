import io

import pytest

from shuflr.passthrough import PassthroughConfig, run
from shuflr.records import OnError, OversizedRecordError, open_input


def run_bytes(data, cfg=None):
    out = io.BytesIO()
    stats = run(io.BytesIO(data), out, cfg)
    return out.getvalue(), stats


def test_trivial_three_lines():
    out, stats = run_bytes(b'{"a":1}\n{"a":2}\n{"a":3}\n', PassthroughConfig())
    assert stats.records_in == 3
    assert stats.records_out == 3
    assert out == b'{"a":1}\n{"a":2}\n{"a":3}\n'


def test_missing_trailing_newline_is_patched():
    out, stats = run_bytes(b"first\nsecond")
    assert stats.records_in == 2
    assert stats.records_out == 2
    assert stats.had_trailing_partial
    assert out == b"first\nsecond\n"


def test_empty_input_emits_nothing():
    out, stats = run_bytes(b"")
    assert stats.records_in == 0
    assert stats.records_out == 0
    assert stats.bytes_out == 0
    assert out == b""


def test_sample_caps_output():
    out, stats = run_bytes(b"a\nb\nc\nd\ne\n", PassthroughConfig(sample=3))
    assert stats.records_out == 3
    assert out == b"a\nb\nc\n"


def test_oversized_skip_drops_and_continues():
    cfg = PassthroughConfig(max_line=10, on_error=OnError.SKIP)
    out, stats = run_bytes(b"ok\nWAY_TOO_LONG\nalso_ok\n", cfg)
    assert stats.records_in == 3
    assert stats.records_out == 2
    assert stats.oversized_skipped == 1
    assert out == b"ok\nalso_ok\n"


def test_oversized_fail_errors():
    cfg = PassthroughConfig(max_line=5, on_error=OnError.FAIL)
    with pytest.raises(OversizedRecordError):
        run_bytes(b"ok\nWAY_TOO_LONG\n", cfg)


def test_oversized_passthrough_emits_anyway():
    cfg = PassthroughConfig(max_line=4, on_error=OnError.PASSTHROUGH)
    out, stats = run_bytes(b"ok\nWAY_TOO_LONG\nfin\n", cfg)
    assert stats.records_out == 3
    assert stats.oversized_passthrough == 1
    assert out == b"ok\nWAY_TOO_LONG\nfin\n"


def test_handles_crlf_by_default_preserving_cr():
    out, stats = run_bytes(b"one\r\ntwo\r\n")
    assert stats.records_in == 2
    assert out == b"one\r\ntwo\r\n"


def test_embedded_nuls_pass_through():
    out, stats = run_bytes(b"before\0after\nnext\n")
    assert stats.records_in == 2
    assert out == b"before\0after\nnext\n"


def test_zero_byte_file_is_empty_output():
    out, _ = run_bytes(b"")
    assert out == b""


def test_single_line_no_trailing_newline():
    out, stats = run_bytes(b"solo")
    assert stats.records_in == 1
    assert out == b"solo\n"


TINY = (
    b'{"id":1,"name":"alpha"}\n'
    b'{"id":2,"name":"bravo"}\n'
    b'{"id":3,"name":"charlie"}\n'
    b'{"id":4,"name":"delta"}\n'
    b'{"id":5,"name":"echo"}\n'
)


def test_tiny_fixture_roundtrips_exactly(tmp_path):
    path = tmp_path / "tiny.jsonl"
    path.write_bytes(TINY)
    out = io.BytesIO()
    with open_input(path) as fh:
        stats = run(fh, out, PassthroughConfig())
    assert stats.records_in == 5
    assert stats.records_out == 5
    assert out.getvalue() == path.read_bytes()


def test_tiny_fixture_sample_two_takes_first_two(tmp_path):
    path = tmp_path / "tiny.jsonl"
    path.write_bytes(TINY)
    out = io.BytesIO()
    with open_input(path) as fh:
        stats = run(fh, out, PassthroughConfig(sample=2))
    assert stats.records_out == 2
    lines = out.getvalue().decode().splitlines()
    assert len(lines) == 2
    assert "alpha" in lines[0]
    assert "bravo" in lines[1]


def test_synthetic_1mb_preserves_record_count(tmp_path):
    path = tmp_path / "synth.jsonl"
    record = b'{"a":1234567890,"b":"the quick brown fox jumps over the lazy dog"}\n'
    target = 1 << 20
    n_records = -(-target // len(record))
    path.write_bytes(record * n_records)
    out = io.BytesIO()
    with open_input(path) as fh:
        stats = run(fh, out, PassthroughConfig())
    assert stats.records_in == n_records
    assert stats.records_out == n_records
    assert out.getvalue() == path.read_bytes()


def build_input(n):
    return "".join(f"rec_{i:04}\n" for i in range(n)).encode()


def rank_output(raw, rank, world_size):
    cfg = PassthroughConfig(partition=(rank, world_size) if world_size > 1 else None)
    out, _ = run_bytes(raw, cfg)
    return out.decode().splitlines()


@pytest.mark.parametrize("world_size", [1, 2, 3, 4, 7, 8, 16])
def test_passthrough_partitions_disjointly_across_ranks(world_size):
    n = 1000
    raw = build_input(n)
    per_rank = [rank_output(raw, rank, world_size) for rank in range(world_size)]
    assert len(per_rank) == world_size

    flat = [rec for rank_out in per_rank for rec in rank_out]
    assert len(flat) == n
    assert set(flat) == {f"rec_{i:04}" for i in range(n)}

    target = n // world_size
    sizes = [len(rank_out) for rank_out in per_rank]
    assert all(size in (target, target + 1) for size in sizes), sizes
    assert sum(sizes) == n