import csv

import pytest

import experiments as exp
from huffman import EmptyInputError


def test_generators_are_seeded():
    for name in exp.GENERATOR_REGISTRY:
        a = exp.generate_dataset(name, 512, seed=3)
        assert len(a) == 512
        assert a == exp.generate_dataset(name, 512, seed=3)


def test_unknown_generator():
    with pytest.raises(ValueError):
        exp.generate_dataset("nope", 10, seed=0)


@pytest.mark.parametrize("pipeline", exp.PIPELINES)
def test_run_one_roundtrips(pipeline):
    data = exp.generate_dataset("english_like", 2048, seed=1)
    row = exp.run_one(data, pipeline, dataset_name="english_like", run_id=1)
    assert row.correctness_ok == 1
    assert row.file_size_bytes == 2048
    assert row.compressed_bytes == (row.encoded_bits + 7) // 8
    assert 0 < row.compression_ratio < 1
    if pipeline == "obst":
        assert row.lookup_comparisons_per_symbol >= 1
    else:
        assert row.lookup_comparisons_per_symbol == 0


def test_run_one_single_symbol():
    row = exp.run_one(b"A" * 100, "obst")
    assert row.correctness_ok == 1
    assert row.encoded_bits == 100
    assert row.compression_ratio == pytest.approx(0.125)


def test_run_one_rejects_bad_input():
    with pytest.raises(ValueError):
        exp.run_one(b"abc", "huffman+magic")
    with pytest.raises(EmptyInputError):
        exp.run_one(b"", "table")


def test_csv_and_summary(tmp_path):
    rows = exp.run_experiments(["zipf128", "repetitive90"], 1024, runs=2, seed=5)
    assert len(rows) == 2 * 2 * len(exp.PIPELINES)

    exp.write_csv(tmp_path / "metrics.csv", rows)
    with (tmp_path / "metrics.csv").open(newline="", encoding="utf-8") as f:
        assert len(list(csv.DictReader(f))) == len(rows)

    summary = exp.group_summary(rows, tmp_path / "summary.csv")
    assert len(summary) == 2 * len(exp.PIPELINES)
    assert all(s["n_runs"] == 2 for s in summary)
    assert all(s["correctness_ok_rate"] == 1.0 for s in summary)


def test_main_writes_outputs(tmp_path, capsys):
    outdir = tmp_path / "results"
    rc = exp.main(["--outdir", str(outdir), "--runs", "1", "--size_kb", "1",
                   "--generators", "zipf128,single_symbol"])
    assert rc == 0
    assert (outdir / "metrics.csv").exists()
    assert (outdir / "summary.csv").exists()
    assert (outdir / "compression_ratio.png").exists()
    assert "Correctness rate across all runs: 1.000" in capsys.readouterr().out


def test_main_unknown_generator(tmp_path):
    with pytest.raises(SystemExit):
        exp.main(["--outdir", str(tmp_path), "--generators", "nope", "--no_plots"])
