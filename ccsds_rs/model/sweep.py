#!/usr/bin/env python3

# Monte-Carlo performance sweep for the RS(255,223) codec:
# random data -> RS encoder -> symbol error channel -> RS decoder -> statistics

# examples:
#   python -m ccsds_rs.model.sweep --error-rates 0.02:0.10:0.01 --trials 200
#   python -m ccsds_rs.model.sweep --error-rates 0.05,0.08 --erasure-fraction 0.5 --save rs
#   python -m ccsds_rs.model.sweep --error-rates 0.06 --dual-basis --no-plot --save rs_dual

# Notes:
# - every symbol of the 255-byte codeword is hit independently with the
#   requested probability, a hit XORs a random nonzero value into the symbol
# - with --erasure-fraction, that share of the hit positions is handed to the
#   decoder as known erasures (capped at 32)
# - a block counts as a frame error when its 223-byte payload differs from the
#   one that was sent

import argparse
import csv
import sys
from typing import Dict, List, Optional, Sequence

import numpy as np

from ccsds_rs.model.helpers import corrupt_block, count_byte_differences
from ccsds_rs.model.reed_solomon import (
    UNCORRECTABLE,
    k as RS_K,
    n as RS_N,
    rs_decode_block,
    rs_encode_block,
    two_t as RS_TWO_T,
)

FIELDNAMES = [
    "error_rate",
    "trials",
    "mean_symbol_errors",
    "corrected",
    "miscorrected",
    "uncorrectable",
    "fer",
    "fer_no_rs",
    "ser_in",
    "ser_out",
    "mean_corrected_symbols",
    "seed",
]


def parse_value_list(spec: str, label: str) -> List[float]:
    """Parse comma/range based CLI specs (e.g., '0.01:0.1:0.01' or '0.02,0.05')."""
    if not spec:
        return []
    spec = spec.strip()
    values: List[float] = []
    if ":" in spec:
        parts = [p.strip() for p in spec.split(":")]
        if len(parts) not in (2, 3):
            raise ValueError(f"{label}: expected start:stop[:step]")
        start = float(parts[0])
        stop = float(parts[1])
        step = float(parts[2]) if len(parts) == 3 else 1.0
        if step <= 0:
            raise ValueError(f"{label}: step must be > 0 (got {step})")
        current = start
        # Include stop (within tolerance)
        while current <= stop + 1e-12:
            values.append(round(current, 6))
            current += step
    else:
        for token in spec.split(","):
            token = token.strip()
            if token:
                values.append(float(token))

    if not values:
        raise ValueError(f"{label}: no values parsed from '{spec}'")
    return values


def _pick_erasures(positions: Sequence[int], fraction: float, rng: np.random.Generator) -> List[int]:
    count = min(int(round(fraction * len(positions))), RS_TWO_T)
    if count == 0:
        return []
    chosen = rng.choice(np.asarray(positions), size=count, replace=False)
    return [int(p) for p in chosen]


def run_sweep(
    error_rates: Sequence[float],
    trials: int,
    seed: int = 0,
    dual_basis: bool = False,
    erasure_fraction: float = 0.0,
) -> List[dict]:
    """Decode ``trials`` random blocks per symbol error probability.

    Each row of the result describes one error rate; see FIELDNAMES for the
    keys. The same seed always reproduces the same rows.
    """
    if trials <= 0:
        raise ValueError(f"trials must be positive, got {trials}")
    if not 0.0 <= erasure_fraction <= 1.0:
        raise ValueError(f"erasure_fraction must be in [0, 1], got {erasure_fraction}")

    results: List[dict] = []
    for idx, rate in enumerate(error_rates):
        if not 0.0 <= rate <= 1.0:
            raise ValueError(f"error rate must be in [0, 1], got {rate}")
        point_seed = seed + idx
        rng = np.random.default_rng(point_seed)

        corrected = 0
        miscorrected = 0
        uncorrectable = 0
        frame_errors = 0
        frame_errors_no_rs = 0
        symbols_in = 0
        symbols_out = 0
        fixed_symbols = 0

        for _ in range(trials):
            data = rng.integers(0, 256, size=RS_K, dtype=np.uint8).tobytes()
            codeword = rs_encode_block(data, dual_basis=dual_basis)

            received = bytearray(codeword)
            positions = corrupt_block(received, rate, rng=rng)
            erasures = _pick_erasures(positions, erasure_fraction, rng) if erasure_fraction else []

            symbols_in += len(positions)
            if received[:RS_K] != codeword[:RS_K]:
                frame_errors_no_rs += 1

            count = rs_decode_block(received, erasures or None, dual_basis=dual_basis)
            if count == UNCORRECTABLE:
                uncorrectable += 1
            elif bytes(received) == codeword:
                corrected += 1
                fixed_symbols += count
            else:
                miscorrected += 1
                fixed_symbols += count

            symbols_out += count_byte_differences(received, codeword)
            if received[:RS_K] != codeword[:RS_K]:
                frame_errors += 1

        decoded_ok = corrected + miscorrected
        results.append(
            {
                "error_rate": rate,
                "trials": trials,
                "mean_symbol_errors": symbols_in / trials,
                "corrected": corrected,
                "miscorrected": miscorrected,
                "uncorrectable": uncorrectable,
                "fer": frame_errors / trials,
                "fer_no_rs": frame_errors_no_rs / trials,
                "ser_in": symbols_in / (trials * RS_N),
                "ser_out": symbols_out / (trials * RS_N),
                "mean_corrected_symbols": fixed_symbols / decoded_ok if decoded_ok else 0.0,
                "seed": point_seed,
            }
        )

    return results


def print_sweep_summary(results: Sequence[dict]) -> None:
    if not results:
        return
    results_sorted = sorted(results, key=lambda r: r["error_rate"])
    print("\nSymbol error sweep summary (per RS(255,223) block):")
    print("  p(sym)\terrs/blk\tFER(RS)\t\tFER(no RS)\tSER out\t\tok/mis/fail")
    for row in results_sorted:
        print(
            f"  {row['error_rate']:.4f}\t{row['mean_symbol_errors']:>8.2f}\t"
            f"{row['fer']:>.3e}\t{row['fer_no_rs']:>.3e}\t{row['ser_out']:>.3e}\t"
            f"{row['corrected']}/{row['miscorrected']}/{row['uncorrectable']}"
        )


def _plot_sweep_results(results_sorted: Sequence[dict], png_path: str) -> None:
    import matplotlib.pyplot as plt

    rates = [r["error_rate"] for r in results_sorted]
    fers = [max(r["fer"], 1e-12) for r in results_sorted]
    fers_no_rs = [max(r["fer_no_rs"], 1e-12) for r in results_sorted]
    errs = [r["mean_symbol_errors"] for r in results_sorted]
    fixed = [r["mean_corrected_symbols"] for r in results_sorted]

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    axes[0].semilogy(rates, fers, marker="o", linewidth=1.5, label="With RS")
    axes[0].semilogy(rates, fers_no_rs, marker="s", linestyle="--", linewidth=1.2,
                     label="Without RS correction")
    axes[0].set_xlabel("Symbol error probability")
    axes[0].set_ylabel("Frame Error Rate (FER)")
    axes[0].grid(True, which="both", alpha=0.3)
    axes[0].set_title("FER vs. symbol error probability")
    axes[0].legend()

    axes[1].plot(rates, errs, marker="o", label="Symbol errors / 255B block")
    axes[1].plot(rates, fixed, marker="s", label="Corrected symbols / decoded block")
    axes[1].axhline(RS_TWO_T // 2, color="gray", linestyle=":", label="t = 16")
    axes[1].set_xlabel("Symbol error probability")
    axes[1].set_ylabel("Symbols per RS(255,223) block")
    axes[1].grid(True, alpha=0.3)
    axes[1].legend()
    axes[1].set_title("Per-Block Errors")

    fig.suptitle("RS(255,223) Symbol Error Sweep", fontsize=14, fontweight="bold")
    fig.tight_layout(rect=(0, 0, 1, 0.96))
    fig.savefig(png_path, dpi=150, bbox_inches="tight")
    plt.close(fig)


def save_sweep_results(results: Sequence[dict], prefix: str, plot: bool = True) -> Dict[str, str]:
    """Write the sweep rows to ``<prefix>_sweep.csv`` and optionally a plot.

    Returns a mapping of artifact kind ("csv", "png") to the path written.
    """
    written: Dict[str, str] = {}
    if not results:
        return written
    results_sorted = sorted(results, key=lambda r: r["error_rate"])

    csv_path = f"{prefix}_sweep.csv"
    with open(csv_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        for row in results_sorted:
            writer.writerow({key: row.get(key, "") for key in FIELDNAMES})
    written["csv"] = csv_path
    print(f"Saved sweep data  -> {csv_path}")

    if plot:
        png_path = f"{prefix}_sweep.png"
        _plot_sweep_results(results_sorted, png_path)
        written["png"] = png_path
        print(f"Saved sweep plot -> {png_path}")

    return written


def main(argv: Optional[list] = None) -> int:
    p = argparse.ArgumentParser(description="Monte-Carlo symbol error sweep for RS(255,223).")
    p.add_argument("--error-rates", required=True,
                   help="Symbol error probabilities, 'start:stop[:step]' or comma list.")
    p.add_argument("--trials", type=int, default=100,
                   help="Blocks decoded per error rate.")
    p.add_argument("--seed", type=int, default=0,
                   help="Base RNG seed (point i uses seed+i).")
    p.add_argument("--dual-basis", action="store_true",
                   help="Run the codec in the dual basis representation.")
    p.add_argument("--erasure-fraction", type=float, default=0.0,
                   help="Share of corrupted positions passed to the decoder as erasures.")
    p.add_argument("--save", metavar="PREFIX",
                   help="Write PREFIX_sweep.csv (and PREFIX_sweep.png).")
    p.add_argument("--no-plot", action="store_true",
                   help="Skip the PNG when saving.")
    args = p.parse_args(argv)

    try:
        rates = parse_value_list(args.error_rates, "--error-rates")
    except ValueError as exc:
        print(f"Error parsing --error-rates: {exc}", file=sys.stderr)
        return 2

    print(f"\n=== Running symbol error sweep ({len(rates)} points, {args.trials} trials each) ===")
    print(f"Values: {rates}")
    try:
        results = run_sweep(
            rates,
            args.trials,
            seed=args.seed,
            dual_basis=args.dual_basis,
            erasure_fraction=args.erasure_fraction,
        )
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print_sweep_summary(results)
    if args.save:
        save_sweep_results(results, args.save, plot=not args.no_plot)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
