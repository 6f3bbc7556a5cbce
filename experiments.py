"""
Benchmark harness: Huffman encode with a dict code table vs an OBST code lookup

Outputs (in --outdir):
  - metrics.csv     (raw row per run per configuration)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts, skipped with --no_plots)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --size_kb 64 --generators zipf128,english_like
"""

from __future__ import annotations

import argparse
import bisect
import csv
import itertools
import random
import statistics
import time
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import huffman as huff
import obst as obst_mod
from bitpack import pack_bits, unpack_bits


PIPELINES = ("table", "obst")


def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0


# Synthetic dataset generators

def _sample(symbols: Sequence[int], weights: Sequence[float], size: int, rng: random.Random) -> bytes:
    cdf = list(itertools.accumulate(weights))
    total = cdf[-1]
    last = len(cdf) - 1
    return bytes(symbols[min(bisect.bisect_left(cdf, rng.random() * total), last)] for _ in range(size))

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    others = [i for i in range(256) if i != dominant]
    return bytes(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    weights = [1.0 / ((i + 1) ** s) for i in range(alphabet)]
    return _sample(range(alphabet), weights, size, random.Random(seed))

def gen_english_like(size: int, seed: int = 0) -> bytes:
    chars = " etaoinshrdlcumwfgypbvkjxq\n"
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch == '\n':
            weights.append(1.5)
        elif ch in "etaoinshrdlu":
            weights.append(6.0)
        elif ch in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return _sample([ord(c) for c in chars], weights, size, random.Random(seed))

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
    "single_symbol": lambda size, seed: b"A" * size,
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> bytes:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r}, choose from {', '.join(GENERATOR_REGISTRY)}")
    return fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    dataset_name: str
    file_size_bytes: int
    run_id: int
    pipeline: str  # "table" or "obst"
    unique_symbols: int

    build_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    encoded_bits: int
    compressed_bytes: int
    pad_bits: int
    compression_ratio: float

    lookup_comparisons_per_symbol: float
    correctness_ok: int  # 1 or 0


def run_one(data: bytes, pipeline: str, dataset_name: str = "", run_id: int = 0) -> MetricRow:
    if pipeline not in PIPELINES:
        raise ValueError(f"pipeline must be one of {PIPELINES}, got {pipeline!r}")
    if not data:
        raise huff.EmptyInputError("benchmark datasets must not be empty")

    t0 = now_ns()
    ft = huff.count_frequencies(data)
    root = huff.build_huffman_tree(ft)
    code_map = huff.generate_huffman_codes(root)
    lookup = obst_mod.build_code_lookup(code_map, ft) if pipeline == "obst" else None
    t1 = now_ns()

    comparisons = 0
    if lookup is None:
        bits = huff.huffman_encode(data, code_map)
    else:
        bits, comparisons = obst_mod.obst_encode(data, lookup)
    packed, pad_bits = pack_bits(bits)
    t2 = now_ns()

    decoded = bytes(huff.huffman_decode(unpack_bits(packed, pad_bits), root))
    t3 = now_ns()

    return MetricRow(
        dataset_name=dataset_name,
        file_size_bytes=len(data),
        run_id=run_id,
        pipeline=pipeline,
        unique_symbols=len(ft),
        build_ms=ns_to_ms(t1 - t0),
        encode_ms=ns_to_ms(t2 - t1),
        decode_ms=ns_to_ms(t3 - t2),
        total_ms=ns_to_ms(t3 - t0),
        encoded_bits=len(bits),
        compressed_bytes=len(packed),
        pad_bits=pad_bits,
        compression_ratio=huff.compression_ratio(len(bits), len(data)),
        lookup_comparisons_per_symbol=comparisons / len(data),
        correctness_ok=int(decoded == data),
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    names = [f.name for f in fields(MetricRow)]
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=names)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in names})


SUMMARY_METRICS = ("compression_ratio", "build_ms", "encode_ms", "decode_ms", "total_ms",
                   "lookup_comparisons_per_symbol")

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> List[dict]:
    """Group by dataset_name, file_size_bytes, pipeline and compute mean/stdev"""
    key_to: Dict[Tuple[str, int, str], List[MetricRow]] = {}
    for r in rows:
        key_to.setdefault((r.dataset_name, r.file_size_bytes, r.pipeline), []).append(r)

    summary_fields = ["dataset_name", "file_size_bytes", "pipeline", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    summary = []
    for (dataset_name, size_b, pipeline), items in sorted(key_to.items()):
        row = {"dataset_name": dataset_name, "file_size_bytes": size_b, "pipeline": pipeline, "n_runs": len(items)}
        for m in SUMMARY_METRICS:
            row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
        row["correctness_ok_rate"] = sum(x.correctness_ok for x in items) / len(items)
        summary.append(row)

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        w.writerows(summary)
    return summary


# Plotting

def plot_by_dataset(rows: List[MetricRow], field: str, ylabel: str, title: str, out_file: Path) -> None:
    datasets = sorted(set(r.dataset_name for r in rows))
    x = list(range(len(datasets)))

    def mean_for(dataset: str, pipeline: str) -> float:
        vals = [getattr(r, field) for r in rows if r.dataset_name == dataset and r.pipeline == pipeline]
        return statistics.mean(vals) if vals else float("nan")

    plt.figure()
    for p in PIPELINES:
        plt.plot(x, [mean_for(d, p) for d in datasets], marker="o", label=p)
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel(ylabel)
    plt.title(title)
    plt.legend()
    plt.tight_layout()
    plt.savefig(out_file, dpi=200)
    plt.close()


def plot_all(rows: List[MetricRow], outdir: Path) -> None:
    if not rows:
        return
    plot_by_dataset(rows, "compression_ratio", "Encoded Bits / Raw Bits",
                    "Compression Ratio by Distribution", outdir / "compression_ratio.png")
    plot_by_dataset(rows, "encode_ms", "Encode Time (ms)",
                    "Encode Time by Distribution", outdir / "encode_time.png")
    plot_by_dataset(rows, "total_ms", "Total Time (ms) (build + encode + decode)",
                    "Total Runtime by Distribution", outdir / "total_time.png")
    plot_by_dataset(rows, "lookup_comparisons_per_symbol", "Comparisons per Symbol (avg)",
                    "Code Lookup Cost by Distribution", outdir / "lookup_cost.png")


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def run_experiments(generators: List[str], size_bytes: int, runs: int, seed: int) -> List[MetricRow]:
    rows: List[MetricRow] = []
    for gen_name in generators:
        for run_id in range(1, runs + 1):
            data = generate_dataset(gen_name, size_bytes, seed + run_id)
            for pipeline in PIPELINES:
                rows.append(run_one(data, pipeline, dataset_name=gen_name, run_id=run_id))
    return rows

def main(argv=None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--size_kb", type=int, default=256, help="Dataset size in KB")
    ap.add_argument("--generators", type=str, default="uniform256,zipf128,repetitive90,english_like",
                    help="Comma-separated dataset generator names")
    ap.add_argument("--no_plots", action="store_true", help="Only write the CSV files")
    args = ap.parse_args(argv)

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    try:
        rows = run_experiments(parse_csv_list(args.generators), max(1, args.size_kb) * 1024,
                               max(1, args.runs), args.seed)
    except ValueError as e:
        ap.error(str(e))

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)
    if not args.no_plots:
        plot_all(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
