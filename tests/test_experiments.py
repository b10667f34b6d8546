import csv

import pytest

import experiments
import huffman as huff


def test_generators_are_seeded_and_sized():
    for name in experiments.GENERATOR_REGISTRY:
        a = experiments.generate_dataset(name, 500, seed=3)
        b = experiments.generate_dataset(name, 500, seed=3)
        assert len(a) == 500
        assert a == b


def test_unknown_generator():
    with pytest.raises(ValueError):
        experiments.generate_dataset("nope", 10, seed=0)


def test_zipf_stays_in_alphabet():
    data = experiments.gen_zipf_like(2000, alphabet=64, seed=1)
    assert max(data) < 64


def test_run_one_single_symbol():
    row = experiments.run_one(experiments.gen_single_symbol(1000), "exp", "single_symbol", 1)
    assert row.correctness_ok == 1
    assert row.unique_symbols == 1
    assert row.tree_leaves == 2
    assert row.compression_ratio < 0.2


def test_header_bits_matches_empty_stream_size():
    root = huff.build_huffman_tree([0] * 256 + [1])
    # the whole empty-input stream is header: 42 bits in 6 bytes
    assert experiments.header_bits(root) == 42
    assert len(huff.compress_bytes(b"")) * 8 >= 42


def test_power_of_two_sizes():
    assert experiments.power_of_two_sizes(1024, 8192) == [1024, 2048, 4096, 8192]


def test_main_writes_csv_and_charts(tmp_path):
    outdir = tmp_path / "results"
    rc = experiments.main([
        "--outdir", str(outdir), "--runs", "2",
        "--exp1_size_kb", "1", "--exp1_generators", "uniform256,single_symbol",
        "--exp2_min_kb", "1", "--exp2_max_kb", "2", "--exp2_generators", "english_like",
    ])
    assert rc == 0

    with (outdir / "metrics.csv").open(newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 2 * 2 + 2 * 2
    assert all(r["correctness_ok"] == "1" for r in rows)

    with (outdir / "summary.csv").open(newline="") as f:
        summary = list(csv.DictReader(f))
    assert {r["dataset_name"] for r in summary} == {"uniform256", "single_symbol", "english_like"}
    assert all(float(r["correctness_ok_rate"]) == 1.0 for r in summary)

    assert (outdir / "exp1_compression_ratio.png").exists()
    assert (outdir / "exp2_time_english_like.png").exists()
