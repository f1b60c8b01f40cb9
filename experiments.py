# Jacob Mitchell, Kyle Axtell
# CS 456 - Data Compression
# experiments.py
# 3/6/26

"""
Huffman coding experiments

Drives the full pipeline (count -> tree -> codes -> encode -> decode) over
synthetic datasets, with repeated runs, and compares the achieved bits per
symbol against the Shannon entropy of each input

Outputs (in --outdir):
  - metrics.csv     (raw row per run per dataset)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 256 --exp2_max_mb 4
  python experiments.py --outdir results --exp1_generators zipf64,single_symbol --no_exp3
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

import matplotlib.pyplot as plt

import bitcodec
import huffman as huff


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def shannon_entropy(ft: Dict[int, int]) -> float:
    """Entropy in bits per symbol of the empirical distribution in ft"""
    total = sum(ft.values())
    if total == 0:
        return 0.0
    h = 0.0
    for count in ft.values():
        p = count / total
        h -= p * math.log2(p)
    return h


# Synthetic dataset generators

def _sample_weighted(rng: random.Random, symbols: Sequence[int], weights: Sequence[float], size: int) -> bytes:
    # inverse-CDF sampling with a binary search over the cumulative weights
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)

    out = bytearray()
    for _ in range(size):
        r = rng.random()
        lo, hi = 0, len(cdf) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            if r <= cdf[mid]:
                hi = mid
            else:
                lo = mid + 1
        out.append(symbols[lo])
    return bytes(out)

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    others = [i for i in range(256) if i != dominant]
    return bytes(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(alphabet)]
    return _sample_weighted(rng, list(range(alphabet)), weights, size)

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    chars = (
        " etaoinshrdlcumwfgypbvkjxq"
        "ETAOINSHRDLCUMWFGYPBVKJXQ"
        "\n"
    )

    def weight(ch: str) -> float:
        if ch == ' ':
            return 13.0
        if ch == '\n':
            return 1.5
        if ch.lower() in "etaoinshrdlu":
            return 6.0
        if ch.lower() in "cmfwgypbvk":
            return 2.5
        return 1.2

    return _sample_weighted(rng, [ord(ch) for ch in chars], [weight(ch) for ch in chars], size)

def gen_single_symbol(size: int, symbol: int = ord('A')) -> bytes:
    # one distinct byte: the tree is a lone leaf and decoding replays its weight
    return bytes([symbol]) * size

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform128": lambda size, seed: gen_uniform(size, alphabet=128, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
    "single_symbol": lambda size, seed: gen_single_symbol(size),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> Tuple[str, bytes]:
    """
    Unknown generator names fall back to uniform256 so a typo in the
    generator list does not abort a long run; the fallback is visible in
    the dataset name
    """
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        return f"{name}_fallback_uniform256", gen_uniform(size_bytes, alphabet=256, seed=seed)
    return name, fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    unique_symbols: int
    tree_depth: int

    count_ms: float
    build_tree_ms: float
    build_codes_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    compressed_bytes: int
    pad_bits: int
    compression_ratio: float
    bits_per_symbol: float
    entropy_bits_per_symbol: float
    efficiency: float  # entropy / bits_per_symbol, 1.0 is the Shannon limit

    correctness_ok: int  # 1 or 0


def run_one(data: bytes) -> MetricRow:
    t0 = now_ns()
    ft = huff.count_frequencies(data)
    t1 = now_ns()
    root = huff.build_huffman_tree(ft)
    t2 = now_ns()
    code_map = huff.generate_huffman_codes(root)
    t3 = now_ns()
    packed = bitcodec.huffman_encode(data, code_map)
    t4 = now_ns()
    decoded = bitcodec.decode_bytes(packed, root)
    t5 = now_ns()

    n = len(data)
    bits_per_symbol = packed.bit_length / n if n else 0.0
    entropy = shannon_entropy(ft)
    efficiency = entropy / bits_per_symbol if bits_per_symbol else 1.0

    return MetricRow(
        exp_name="",
        dataset_name="",
        file_size_bytes=n,
        run_id=0,
        unique_symbols=len(ft),
        tree_depth=huff.tree_depth(root),
        count_ms=ns_to_ms(t1 - t0),
        build_tree_ms=ns_to_ms(t2 - t1),
        build_codes_ms=ns_to_ms(t3 - t2),
        encode_ms=ns_to_ms(t4 - t3),
        decode_ms=ns_to_ms(t5 - t4),
        total_ms=ns_to_ms(t5 - t0),
        compressed_bytes=len(packed.data),
        pad_bits=packed.pad_bits,
        compression_ratio=len(packed.data) / max(1, n),
        bits_per_symbol=bits_per_symbol,
        entropy_bits_per_symbol=entropy,
        efficiency=efficiency,
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


SUMMARY_METRICS = (
    "compression_ratio",
    "bits_per_symbol",
    "efficiency",
    "build_tree_ms",
    "encode_ms",
    "decode_ms",
    "total_ms",
)

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes and compute mean/stdev
    of every metric in SUMMARY_METRICS
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.file_size_bytes)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "file_size_bytes", "n_runs", "entropy_bits_per_symbol"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, size_b = key
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "n_runs": len(items),
                "entropy_bits_per_symbol": statistics.mean(x.entropy_bits_per_symbol for x in items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)


# Plotting

def _save(outdir: Path, name: str) -> None:
    plt.tight_layout()
    plt.savefig(outdir / name, dpi=200)
    plt.close()

def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset]
        return statistics.mean(vals) if vals else float("nan")

    x = list(range(len(datasets)))

    plt.figure()
    plt.plot(x, [mean_for(d, "bits_per_symbol") for d in datasets], marker="o", label="huffman")
    plt.plot(x, [mean_for(d, "entropy_bits_per_symbol") for d in datasets], marker="x", linestyle="--", label="entropy")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 1: Bits per Symbol by Distribution")
    plt.legend()
    _save(outdir, "exp1_bits_per_symbol.png")

    plt.figure()
    plt.plot(x, [mean_for(d, "compression_ratio") for d in datasets], marker="o")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Original Bytes")
    plt.title("Experiment 1: Compression Ratio by Distribution")
    _save(outdir, "exp1_compression_ratio.png")

    plt.figure()
    for field in ("build_tree_ms", "encode_ms", "decode_ms"):
        plt.plot(x, [mean_for(d, field) for d in datasets], marker="o", label=field)
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Time (ms)")
    plt.title("Experiment 1: Stage Timings by Distribution")
    plt.legend()
    _save(outdir, "exp1_stage_time.png")


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.file_size_bytes == size]
            return statistics.mean(vals) if vals else float("nan")

        plt.figure()
        for field in ("encode_ms", "decode_ms"):
            plt.plot(sizes, [mean_size(s, field) for s in sizes], marker="o", label=field)
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Encode/Decode Time vs Size ({dist})")
        plt.legend()
        _save(outdir, f"exp2_codec_time_{dist}.png")

        plt.figure()
        plt.plot(sizes, [mean_size(s, "efficiency") for s in sizes], marker="o")
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Entropy / Bits per Symbol")
        plt.title(f"Experiment 2: Coding Efficiency vs Size ({dist})")
        _save(outdir, f"exp2_efficiency_{dist}.png")


ALPHABET_SWEEP_PREFIX = "uniform"

def alphabet_sweep_groups(rows: List[MetricRow]) -> Dict[int, List[MetricRow]]:
    """
    Group exp3 rows by the alphabet the data was drawn from, read back from
    the dataset name; small samples need not contain every symbol, so
    unique_symbols can fall short of it
    """
    groups: Dict[int, List[MetricRow]] = {}
    for r in rows:
        if r.exp_name != "exp3_alphabet_sweep":
            continue
        alphabet = int(r.dataset_name[len(ALPHABET_SWEEP_PREFIX):])
        groups.setdefault(alphabet, []).append(r)
    return dict(sorted(groups.items()))

def plot_experiment_3(rows: List[MetricRow], outdir: Path) -> None:
    groups = alphabet_sweep_groups(rows)
    if not groups:
        return

    alphabets = list(groups)

    def mean_alpha(k: int, field: str) -> float:
        return statistics.mean(getattr(r, field) for r in groups[k])

    plt.figure()
    plt.plot(alphabets, [mean_alpha(k, "bits_per_symbol") for k in alphabets], marker="o", label="huffman")
    plt.plot(alphabets, [math.log2(k) for k in alphabets], linestyle="--", label="log2(alphabet)")
    plt.xscale("log", base=2)
    plt.xlabel("Alphabet Size")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 3: Bits per Symbol vs Alphabet Size (uniform)")
    plt.legend()
    _save(outdir, "exp3_alphabet_sweep.png")

    plt.figure()
    plt.plot(alphabets, [mean_alpha(k, "tree_depth") for k in alphabets], marker="o")
    plt.xscale("log", base=2)
    plt.xlabel("Alphabet Size")
    plt.ylabel("Tree Depth")
    plt.title("Experiment 3: Tree Depth vs Alphabet Size (uniform)")
    _save(outdir, "exp3_tree_depth.png")


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def power_of_two_sizes(min_bytes: int, max_bytes: int) -> List[int]:
    sizes: List[int] = []
    s = min_bytes
    while s <= max_bytes:
        sizes.append(s)
        s *= 2
    return sizes

def run_experiments(args: argparse.Namespace) -> List[MetricRow]:
    rows: List[MetricRow] = []

    def record(row: MetricRow, exp_name: str, dataset_name: str, run_id: int) -> None:
        row.exp_name = exp_name
        row.dataset_name = dataset_name
        row.run_id = run_id
        rows.append(row)

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, data = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                record(run_one(data), "exp1_distribution", dataset_name, run_id)

    # Experiment 2: size scaling (powers of 2)
    if not args.no_exp2:
        sizes = power_of_two_sizes(max(1, args.exp2_min_kb) * 1024, max(1, args.exp2_max_mb) * 1024 * 1024)
        for gen_name in parse_csv_list(args.exp2_generators):
            for size_b in sizes:
                for run_id in range(1, args.runs + 1):
                    dataset_name, data = generate_dataset(gen_name, size_b, args.seed + 10_000 + size_b + run_id)
                    record(run_one(data), "exp2_size_scaling", dataset_name, run_id)

    # Experiment 3: uniform alphabets of growing size
    if not args.no_exp3:
        size_b = max(1, args.exp3_size_kb) * 1024
        alphabet = 2
        while alphabet <= 256:
            for run_id in range(1, args.runs + 1):
                data = gen_uniform(size_b, alphabet=alphabet, seed=args.seed + 200_000 + alphabet + run_id)
                record(run_one(data), "exp3_alphabet_sweep", f"{ALPHABET_SWEEP_PREFIX}{alphabet}", run_id)
            alphabet *= 2

    return rows

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Huffman coding experiments")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")
    ap.add_argument("--no_exp3", action="store_true", help="Disable experiment 3 (alphabet sweep)")
    ap.add_argument("--no_plots", action="store_true", help="Write CSVs only")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=512, help="Experiment 1 fixed file size in KB")
    ap.add_argument("--exp1_generators", type=str, default="uniform256,zipf128,repetitive90,english_like,single_symbol",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in KB (power-of-two growth)")
    ap.add_argument("--exp2_max_mb", type=int, default=8, help="Experiment 2 max size in MB (power-of-two growth)")
    ap.add_argument("--exp2_generators", type=str, default="uniform256,zipf128,repetitive90",
                    help="Comma-separated dataset generator names for experiment 2")

    # Experiment 3 controls
    ap.add_argument("--exp3_size_kb", type=int, default=256, help="Experiment 3 file size in KB")
    return ap

def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows = run_experiments(args)

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    # Plots
    if not args.no_plots:
        plot_experiment_1(rows, outdir)
        plot_experiment_2(rows, outdir)
        plot_experiment_3(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
