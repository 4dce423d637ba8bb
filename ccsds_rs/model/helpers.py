# ccsds_rs/model/helpers.py
# common helper functions used across the codec tools
# provides padding, hex formatting, symbol distance and
# channel-style corruption of blocks

from typing import List, MutableSequence, Optional

import numpy as np


def pad_to_block(data: bytes, block_size: int) -> bytes:
    rem = len(data) % block_size
    if rem == 0:
        return data
    return data + bytes(block_size - rem)


def bytes_to_hex_string(data: bytes) -> str:
    return " ".join(f"{b:02X}" for b in data)


def format_hex_lines(data: bytes, bytes_per_line: int = 16) -> str:
    # uppercase hex pairs, no separators, bytes_per_line per line, trailing newline
    lines = []
    for i in range(0, len(data), bytes_per_line):
        lines.append("".join(f"{b:02X}" for b in data[i:i + bytes_per_line]))
    return "\n".join(lines) + "\n"


def hex_dump(data: bytes, bytes_per_line: int = 16, label: str = "") -> str:
    # offset-prefixed dump, one line per bytes_per_line symbols
    prefix = f"{label} " if label else ""
    lines = []
    for off in range(0, len(data), bytes_per_line):
        row = " ".join(f"{b:02X}" for b in data[off:off + bytes_per_line])
        lines.append(f"{prefix}{off:03d}: {row}")
    return "\n".join(lines)


def count_byte_differences(a: bytes, b: bytes) -> int:
    # number of symbol (byte) positions where a and b differ
    if len(a) != len(b):
        raise ValueError(f"Sequences must have equal length: {len(a)} != {len(b)}")
    return sum(1 for byte_a, byte_b in zip(a, b) if byte_a != byte_b)


def corrupt_block(
    block: MutableSequence[int],
    chance: float,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> List[int]:
    """Flip symbols of a block in place, as a noisy byte channel would.

    Args:
        block: Mutable byte buffer (bytearray or list of ints).
        chance: Probability that any given symbol is hit. 0 leaves the block
            alone, anything >= 1 hits every symbol.
        rng: numpy Generator to draw from (takes precedence over seed).
        seed: Optional seed for a fresh generator, to make the damage repeatable.

    Returns:
        Sorted list of the positions that were changed. Every hit symbol is
        XOR'd with a nonzero value, so it always differs from the original.
    """
    if chance < 0:
        raise ValueError(f"chance must be non-negative, got {chance}")
    if rng is None:
        rng = np.random.default_rng(seed)

    size = len(block)
    if chance <= 0 or size == 0:
        return []
    if chance >= 1:
        hit = np.ones(size, dtype=bool)
    else:
        hit = rng.random(size) < chance

    positions = [int(p) for p in np.flatnonzero(hit)]
    flips = rng.integers(1, 256, size=len(positions))
    for pos, flip in zip(positions, flips):
        block[pos] ^= int(flip)
    return positions
