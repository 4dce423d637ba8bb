#!/usr/bin/env python3
"""Generate RS(255,223) reference vectors from the Python golden model.

Encoder vectors pair a 223-byte message with its 255-byte codeword. Decoder
vectors pair a corrupted block and its erasure list with the count and the
codeword the decoder is expected to produce, so other implementations of the
codec can be checked against exactly the same cases.
"""

from __future__ import annotations

import argparse
import json
import random
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from ccsds_rs.model.gf_tables import TABLES
from ccsds_rs.model.helpers import bytes_to_hex_string
from ccsds_rs.model.reed_solomon import (
    UNCORRECTABLE,
    k as RS_K,
    n as RS_N,
    rs_decode_block,
    rs_encode_block,
    t as RS_T,
    two_t as RS_TWO_T,
)

DEFAULT_SEED = 0x52535F5645435F  # "RS_VEC_" in ASCII-ish

EncoderVector = Tuple[str, bytes, bytes]
# name, received block, erasures, expected count, expected block
DecoderVector = Tuple[str, bytes, List[int], int, bytes]


def _edge_messages() -> List[Tuple[str, bytes]]:
    return [
        ("all_zeros", bytes(RS_K)),
        ("all_ones", bytes([0xFF] * RS_K)),
        ("pattern_aa", bytes([0xAA] * RS_K)),
        ("pattern_55", bytes([0x55] * RS_K)),
        ("impulse_start", bytes([0x80] + [0] * (RS_K - 1))),
        ("impulse_end", bytes([0] * (RS_K - 1) + [0x01])),
        ("counter", bytes(i % 256 for i in range(RS_K))),
        ("reverse_counter", bytes((255 - i) % 256 for i in range(RS_K))),
    ]


def generate_encoder_vectors(
    num_random: int = 10,
    seed: int = DEFAULT_SEED,
    dual_basis: bool = False,
) -> List[EncoderVector]:
    rng = random.Random(seed)
    messages = _edge_messages()
    for i in range(num_random):
        messages.append((f"random_{i:02d}", bytes(rng.randrange(256) for _ in range(RS_K))))
    return [(name, msg, rs_encode_block(msg, dual_basis=dual_basis)) for name, msg in messages]


def _corrupt(codeword: bytes, errors: List[int], erasures: List[int], rng: random.Random) -> bytes:
    rx = bytearray(codeword)
    for pos in errors:
        rx[pos] ^= rng.randrange(1, 256)
    # an erased symbol may or may not hold a wrong value
    for pos in erasures:
        rx[pos] = rng.randrange(256)
    return bytes(rx)


def _decoder_case(
    name: str,
    codeword: bytes,
    errors: List[int],
    erasures: List[int],
    rng: random.Random,
    dual_basis: bool,
) -> DecoderVector:
    rx = _corrupt(codeword, errors, erasures, rng)
    block = bytearray(rx)
    located = list(erasures)
    count = rs_decode_block(block, located or None, dual_basis=dual_basis)
    return (name, rx, sorted(erasures), count, bytes(block))


def generate_decoder_vectors(
    num_random: int = 10,
    seed: int = DEFAULT_SEED,
    dual_basis: bool = False,
) -> List[DecoderVector]:
    rng = random.Random(seed ^ 0xDEC0DE)
    vectors: List[DecoderVector] = []

    for name, msg in _edge_messages():
        cw = rs_encode_block(msg, dual_basis=dual_basis)
        vectors.append(_decoder_case(f"{name}_clean", cw, [], [], rng, dual_basis))
        vectors.append(_decoder_case(f"{name}_ends", cw, [0, RS_N - 1], [], rng, dual_basis))
        vectors.append(_decoder_case(f"{name}_t_errors", cw, rng.sample(range(RS_N), RS_T), [], rng, dual_basis))
        vectors.append(_decoder_case(f"{name}_2t_erasures", cw, [], rng.sample(range(RS_N), RS_TWO_T), rng, dual_basis))

    for i in range(num_random):
        msg = bytes(rng.randrange(256) for _ in range(RS_K))
        cw = rs_encode_block(msg, dual_basis=dual_basis)
        num_err = rng.randint(0, RS_T)
        num_era = rng.randint(0, RS_TWO_T - 2 * num_err)
        picked = rng.sample(range(RS_N), num_err + num_era)
        vectors.append(
            _decoder_case(f"random_{i:02d}_e{num_err}_s{num_era}", cw, picked[:num_err], picked[num_err:], rng, dual_basis)
        )

    # one past the capacity; decoder must flag it or (rarely) miscorrect
    msg = bytes(rng.randrange(256) for _ in range(RS_K))
    cw = rs_encode_block(msg, dual_basis=dual_basis)
    vectors.append(_decoder_case("over_capacity", cw, rng.sample(range(RS_N), RS_T + 1), [], rng, dual_basis))

    return vectors


def _write_encoder_text(path: Path, vectors: List[EncoderVector], dual_basis: bool) -> None:
    with path.open("w", encoding="utf-8") as f:
        f.write("// RS(255,223) Encoder Test Vectors\n")
        f.write("// Generated from golden model (reed_solomon.py)\n")
        f.write(f"// Representation: {'dual basis' if dual_basis else 'conventional'}\n")
        f.write("// Format: test_name | input_message (223 bytes) | expected_codeword (255 bytes)\n")
        f.write("// Each byte in hex, space-separated\n")
        f.write("//\n")
        f.write(f"// Total test vectors: {len(vectors)}\n")
        f.write("//\n\n")
        for name, msg, cw in vectors:
            f.write(f"// Test: {name}\n")
            f.write(f"MSG: {bytes_to_hex_string(msg)}\n")
            f.write(f"CW:  {bytes_to_hex_string(cw)}\n")
            f.write("\n")


def _write_encoder_binary(path: Path, vectors: List[EncoderVector]) -> None:
    with path.open("wb") as f:
        # header: number of vectors (4 bytes)
        f.write(len(vectors).to_bytes(4, "little"))
        # each vector: message (223 bytes) + codeword (255 bytes)
        for _, msg, cw in vectors:
            f.write(msg)
            f.write(cw)


def _write_decoder_text(path: Path, vectors: List[DecoderVector], dual_basis: bool) -> None:
    with path.open("w", encoding="utf-8") as f:
        f.write("// RS(255,223) Decoder Test Vectors\n")
        f.write("// Generated from golden model (reed_solomon.py)\n")
        f.write(f"// Representation: {'dual basis' if dual_basis else 'conventional'}\n")
        f.write("// Format: RX received block | ERA erasure positions ('-' if none)\n")
        f.write(f"//         CNT corrected symbols ({UNCORRECTABLE} = uncorrectable) | CW expected block\n")
        f.write("//\n")
        f.write(f"// Total test vectors: {len(vectors)}\n")
        f.write("//\n\n")
        for name, rx, erasures, count, expected in vectors:
            f.write(f"// Test: {name}\n")
            f.write(f"RX:  {bytes_to_hex_string(rx)}\n")
            f.write(f"ERA: {','.join(str(p) for p in erasures) if erasures else '-'}\n")
            f.write(f"CNT: {count}\n")
            f.write(f"CW:  {bytes_to_hex_string(expected)}\n")
            f.write("\n")


def write_vectors(
    out_dir: Path,
    num_random: int = 10,
    seed: int = DEFAULT_SEED,
    dual_basis: bool = False,
) -> dict:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    enc = generate_encoder_vectors(num_random, seed, dual_basis)
    dec = generate_decoder_vectors(num_random, seed, dual_basis)

    _write_encoder_text(out_dir / "rs_encoder_vectors.txt", enc, dual_basis)
    _write_encoder_binary(out_dir / "rs_encoder_vectors.bin", enc)
    _write_decoder_text(out_dir / "rs_decoder_vectors.txt", dec, dual_basis)
    print(f"[OK] Wrote {len(enc)} encoder vectors to {out_dir / 'rs_encoder_vectors.txt'}")
    print(f"[OK] Wrote {len(dec)} decoder vectors to {out_dir / 'rs_decoder_vectors.txt'}")

    summary = {
        "n": RS_N,
        "k": RS_K,
        "prim_poly": TABLES.cfg.prim_poly,
        "fcr": TABLES.fcr,
        "prim": TABLES.prim,
        "dual_basis": dual_basis,
        "seed": seed,
        "num_random": num_random,
        "encoder_vectors": len(enc),
        "decoder_vectors": len(dec),
        "uncorrectable_vectors": sum(1 for v in dec if v[3] == UNCORRECTABLE),
    }
    with (out_dir / "vector_summary.json").open("w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)
    print(f"[OK] Summary written to {out_dir / 'vector_summary.json'}")
    return summary


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Generate RS(255,223) reference vectors from the golden model")
    p.add_argument("--out-dir", default="vectors", help="Destination directory for generated files")
    p.add_argument("--num-random", type=int, default=20, help="Random cases on top of the fixed patterns")
    p.add_argument("--seed", type=lambda s: int(s, 0), default=DEFAULT_SEED, help="Seed for the random cases")
    p.add_argument("--dual-basis", action="store_true", help="Emit vectors in the dual basis representation")
    return p


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.num_random < 0:
        print("--num-random must be >= 0", file=sys.stderr)
        return 2
    write_vectors(Path(args.out_dir), args.num_random, args.seed, args.dual_basis)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
