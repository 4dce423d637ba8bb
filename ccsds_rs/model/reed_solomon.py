# ccsds_rs/model/reed_solomon.py
# Reed-Solomon (255,223) errors-and-erasures codec for GF(2^8), CCSDS flavour
# Field: p(x) = x^8 + x^7 + x^2 + x + 1  -> 0x187
# Systematic codeword: [data (223 bytes)] || [parity (32 bytes)]
# Consecutive roots: alpha^(PRIM*(FCR+i)), i=0..(2t-1) with FCR=112, PRIM=11
#
# all field arithmetic is done in the log domain through the shared tables;
# A0 (=255) stands for log(0) and any A0 operand makes its product zero
#
# decode corrects up to 2*errors + erasures <= 32 and returns the number of
# corrected symbols, or UNCORRECTABLE (-1). The caller's block is only written
# once every error value has been computed, so an uncorrectable block is left
# exactly as it was received.

import operator
from collections.abc import MutableSequence
from typing import List, Optional, Sequence, Tuple

from ccsds_rs.model.dual_basis import to_conventional, to_dual_basis
from ccsds_rs.model.gf_tables import (
    A0,
    BLOCK_LENGTH,
    DATA_LENGTH,
    NN,
    NROOTS,
    PARITY_LENGTH,
    TABLES,
    GFTables,
)

# code parameters
n = BLOCK_LENGTH            # num of symbols per codeword
k = DATA_LENGTH             # num of data symbols per codeword
two_t = PARITY_LENGTH       # num of parity symbols
t = two_t // 2              # num of correctable symbol errors

UNCORRECTABLE = -1


# systematic encoder: parity is the remainder of x^32 * m(x) mod g(x),
# computed with a linear feedback shift register
def rs_encode_parity(data: bytes, dual_basis: bool = False, tables: GFTables = TABLES) -> bytes:
    """Compute the 32 parity bytes for one block of data.

    Only the first 223 bytes of ``data`` are read, so a full 255-byte block may
    be passed as well. With ``dual_basis`` the data is taken to be in the dual
    basis and the parity is returned in the dual basis; ``data`` itself is never
    modified.
    """
    if len(data) < DATA_LENGTH:
        raise ValueError(f"data must have at least {DATA_LENGTH} bytes, got {len(data)}")

    msg = bytes(data[:DATA_LENGTH])
    if dual_basis:
        msg = to_conventional(msg, tables)

    alpha_to = tables.alpha_to
    index_of = tables.index_of
    gen_poly = tables.gen_poly

    # remainder register, start at all zeros
    parity = [0] * NROOTS
    for b in msg:
        # feedback = incoming byte XOR top of remainder, in index form
        feedback = index_of[b ^ parity[0]]
        # shift left by 1 (drop parity[0]), adding the taps on the way
        if feedback != A0:
            for j in range(1, NROOTS):
                parity[j - 1] = parity[j] ^ alpha_to[(feedback + gen_poly[NROOTS - j]) % NN]
            parity[NROOTS - 1] = alpha_to[(feedback + gen_poly[0]) % NN]
        else:
            for j in range(1, NROOTS):
                parity[j - 1] = parity[j]
            parity[NROOTS - 1] = 0

    out = bytes(parity)
    if dual_basis:
        out = to_dual_basis(out, tables)
    return out


def rs_encode_block(data: bytes, dual_basis: bool = False, tables: GFTables = TABLES) -> bytes:
    # full 255-byte codeword: data || parity
    return bytes(data[:DATA_LENGTH]) + rs_encode_parity(data, dual_basis, tables)


# convenience for multiple blocks (exact multiples of 223)
# raises if data length is not a multiple of 223 (padding is up to the caller)
def rs_encode(data: bytes, dual_basis: bool = False) -> bytes:
    if len(data) % k != 0:
        raise ValueError(f"Input length must be a multiple of {k} bytes (got {len(data)})")
    out = bytearray()
    for i in range(0, len(data), k):
        out += rs_encode_block(data[i:i + k], dual_basis)
    return bytes(out)


# syndrome helper for tests and vector generation
# S_j = c(alpha^(PRIM*(FCR+j))), j=0..31, poly form
# all zeros means 'valid codeword'
def rs_syndromes(codeword: bytes, tables: GFTables = TABLES) -> List[int]:
    if len(codeword) < BLOCK_LENGTH:
        raise ValueError(f"codeword must have at least {BLOCK_LENGTH} bytes, got {len(codeword)}")
    return _syndromes(list(codeword[:BLOCK_LENGTH]), tables)


def _syndromes(received: Sequence[int], tables: GFTables) -> List[int]:
    # Horner evaluation of received(x) at every root of g(x)
    alpha_to = tables.alpha_to
    index_of = tables.index_of
    roots = [((tables.fcr + i) * tables.prim) % NN for i in range(NROOTS)]

    s = [received[0]] * NROOTS
    for byte in received[1:NN]:
        for i in range(NROOTS):
            if s[i] == 0:
                s[i] = byte
            else:
                s[i] = byte ^ alpha_to[(index_of[s[i]] + roots[i]) % NN]
    return s


def _erasure_locator(erasures: Sequence[int], tables: GFTables) -> List[int]:
    # lambda(x) = prod (1 - alpha^(prim*(NN-1-pos)) x), poly form
    alpha_to = tables.alpha_to
    index_of = tables.index_of
    prim = tables.prim

    lam = [0] * (NROOTS + 1)
    lam[0] = 1
    if not erasures:
        return lam

    lam[1] = alpha_to[(prim * (NN - 1 - erasures[0])) % NN]
    for i in range(1, len(erasures)):
        u = (prim * (NN - 1 - erasures[i])) % NN
        for j in range(i + 1, 0, -1):
            tmp = index_of[lam[j - 1]]
            if tmp != A0:
                lam[j] ^= alpha_to[(u + tmp) % NN]
    return lam


def _berlekamp_massey(s: Sequence[int], lam: List[int], no_eras: int, tables: GFTables) -> List[int]:
    # s in index form, lam in poly form (seeded with the erasure locator)
    # returns the errors+erasures locator lambda(x) in poly form
    alpha_to = tables.alpha_to
    index_of = tables.index_of

    b = [index_of[c] for c in lam]
    el = no_eras

    # r is the step number
    for r in range(no_eras + 1, NROOTS + 1):
        # discrepancy at the r-th step, poly form, then index form
        discr_r = 0
        for i in range(r):
            if lam[i] != 0 and s[r - i - 1] != A0:
                discr_r ^= alpha_to[(index_of[lam[i]] + s[r - i - 1]) % NN]
        discr_r = index_of[discr_r]

        if discr_r == A0:
            # B(x) <- x*B(x)
            b = [A0] + b[:NROOTS]
            continue

        # T(x) <- lambda(x) - discr_r*x*B(x)
        tx = [lam[0]] + [
            lam[i + 1] ^ alpha_to[(discr_r + b[i]) % NN] if b[i] != A0 else lam[i + 1]
            for i in range(NROOTS)
        ]

        if 2 * el <= r + no_eras - 1:
            el = r + no_eras - el
            # B(x) <- inv(discr_r) * lambda(x)
            b = [A0 if c == 0 else (index_of[c] - discr_r + NN) % NN for c in lam]
        else:
            # B(x) <- x*B(x)
            b = [A0] + b[:NROOTS]

        lam = tx

    return lam


def _chien_search(lam: Sequence[int], deg_lambda: int, tables: GFTables) -> Tuple[List[int], List[int]]:
    # lam in index form. Returns (roots, locations): roots as the index i of
    # alpha^-i where lambda vanishes, locations as byte positions in the block
    alpha_to = tables.alpha_to
    iprim = tables.iprim

    reg = list(lam)
    roots: List[int] = []
    locs: List[int] = []

    loc = iprim - 1
    for i in range(1, NN + 1):
        q = 1  # lambda[0] is always alpha^0
        for j in range(deg_lambda, 0, -1):
            if reg[j] != A0:
                reg[j] = (reg[j] + j) % NN
                q ^= alpha_to[reg[j]]

        if q == 0:
            roots.append(i)
            locs.append(loc)
            # no more roots than the degree of lambda
            if len(roots) == deg_lambda:
                break

        loc = (loc + iprim) % NN

    return roots, locs


def _error_evaluator(s: Sequence[int], lam: Sequence[int], deg_lambda: int, tables: GFTables) -> Tuple[List[int], int]:
    # omega(x) = s(x)*lambda(x) mod x^NROOTS, index form, plus deg(omega)
    alpha_to = tables.alpha_to
    index_of = tables.index_of

    omega = [A0] * (NROOTS + 1)
    deg_omega = 0
    for i in range(NROOTS):
        tmp = 0
        for j in range(min(deg_lambda, i), -1, -1):
            if s[i - j] != A0 and lam[j] != A0:
                tmp ^= alpha_to[(s[i - j] + lam[j]) % NN]
        if tmp != 0:
            deg_omega = i
        omega[i] = index_of[tmp]
    return omega, deg_omega


def _forney(
    omega: Sequence[int],
    deg_omega: int,
    lam: Sequence[int],
    deg_lambda: int,
    roots: Sequence[int],
    locs: Sequence[int],
    tables: GFTables,
) -> Optional[List[Tuple[int, int]]]:
    # error values: omega(X^-1) * X^-(fcr-1) / lambda'(X^-1), poly form
    # returns [(location, magnitude), ...] or None if lambda' vanishes at a root
    alpha_to = tables.alpha_to
    index_of = tables.index_of
    fcr = tables.fcr

    # lambda[i+1] for even i is the formal derivative of lambda
    start = min(deg_lambda, NROOTS - 1) & ~1

    corrections: List[Tuple[int, int]] = []
    for j in range(len(roots) - 1, -1, -1):
        num1 = 0
        for i in range(deg_omega, -1, -1):
            if omega[i] != A0:
                num1 ^= alpha_to[(omega[i] + i * roots[j]) % NN]

        num2 = alpha_to[(roots[j] * (fcr - 1) + NN) % NN]

        den = 0
        for i in range(start, -1, -2):
            if lam[i + 1] != A0:
                den ^= alpha_to[(lam[i + 1] + i * roots[j]) % NN]

        if den == 0:
            return None

        if num1 != 0:
            magnitude = alpha_to[(index_of[num1] + index_of[num2] + NN - index_of[den]) % NN]
            corrections.append((locs[j], magnitude))

    return corrections


def _check_erasures(erasures: Optional[Sequence[int]]) -> List[int]:
    if erasures is None or len(erasures) == 0:
        return []
    if not isinstance(erasures, MutableSequence):
        raise TypeError(f"erasures must be a mutable sequence such as a list, got {type(erasures).__name__}")
    positions = []
    for pos in erasures:
        try:
            positions.append(operator.index(pos))
        except TypeError:
            raise ValueError(f"erasure position {pos!r} is not an integer") from None
    if len(positions) > NROOTS:
        raise ValueError(f"at most {NROOTS} erasures can be corrected, got {len(positions)}")
    for pos in positions:
        if not 0 <= pos < NN:
            raise ValueError(f"erasure position {pos!r} outside [0, {NN})")
    if len(set(positions)) != len(positions):
        raise ValueError(f"duplicate erasure positions in {positions}")
    return positions


def rs_decode_block(
    block: MutableSequence[int],
    erasures: Optional[List[int]] = None,
    dual_basis: bool = False,
    tables: GFTables = TABLES,
) -> int:
    """Correct one RS(255,223) block in place.

    Args:
        block: Mutable buffer (bytearray, writable memoryview or list of ints)
            holding at least 255 bytes; only the first 255 are used.
        erasures: Optional list of known-bad positions in [0, 255). On a
            successful correction a non-empty list is replaced with the
            positions that were located (errors and erasures alike).
        dual_basis: The block is in the dual basis on input and output.
        tables: Field tables, defaults to the shared CCSDS tables.

    Returns:
        Number of corrected symbols (0 for a valid codeword), or
        UNCORRECTABLE (-1) when the errata exceed the correction capacity.
        An uncorrectable block is left untouched.
    """
    if isinstance(block, (bytes, str)) or (isinstance(block, memoryview) and block.readonly):
        raise TypeError(f"block must be a mutable buffer, got {type(block).__name__}")
    if len(block) < BLOCK_LENGTH:
        raise ValueError(f"block must have at least {BLOCK_LENGTH} bytes, got {len(block)}")
    eras = _check_erasures(erasures)

    # basis normalization into a private working copy
    received = bytes(block[:BLOCK_LENGTH])
    if dual_basis:
        received = to_conventional(received, tables)
    work = list(received)

    s = _syndromes(work, tables)
    if not any(s):
        # block is already a codeword
        return 0

    index_of = tables.index_of
    s = [index_of[c] for c in s]

    lam = _erasure_locator(eras, tables)
    lam = _berlekamp_massey(s, lam, len(eras), tables)

    # lambda to index form, deg(lambda)
    lam = [index_of[c] for c in lam]
    deg_lambda = max(i for i, c in enumerate(lam) if c != A0)

    roots, locs = _chien_search(lam, deg_lambda, tables)
    if len(roots) != deg_lambda:
        # deg(lambda) unequal to number of roots => uncorrectable
        return UNCORRECTABLE

    omega, deg_omega = _error_evaluator(s, lam, deg_lambda, tables)
    corrections = _forney(omega, deg_omega, lam, deg_lambda, roots, locs, tables)
    if corrections is None:
        return UNCORRECTABLE

    for pos, magnitude in corrections:
        work[pos] ^= magnitude

    out = bytes(work)
    if dual_basis:
        out = to_dual_basis(out, tables)
    block[:BLOCK_LENGTH] = out

    if eras:
        erasures[:] = locs

    return len(roots)


# convenience for multiple blocks (exact multiples of 255)
# returns the 223-byte payloads and the per-block correction counts;
# an uncorrectable block contributes its systematic bytes unchanged
def rs_decode(data: bytes, dual_basis: bool = False) -> Tuple[bytes, List[int]]:
    if len(data) % n != 0:
        raise ValueError(f"Input length must be a multiple of {n} bytes (got {len(data)})")
    payload = bytearray()
    counts: List[int] = []
    for off in range(0, len(data), n):
        block = bytearray(data[off:off + n])
        counts.append(rs_decode_block(block, dual_basis=dual_basis))
        payload += block[:k]
    return bytes(payload), counts


if __name__ == "__main__":
    import random
    import reedsolo  # pip install reedsolo
    random.seed(69)

    RS = reedsolo.RSCodec(
        two_t,                                  # 32 parity bytes
        nsize=n,                                # codeword length
        c_exp=8,                                # GF(2^8)
        generator=TABLES.alpha_to[TABLES.prim], # alpha^11
        fcr=TABLES.fcr,                         # first consecutive root = 112
        prim=TABLES.cfg.prim_poly,              # primitive polynomial 0x187
    )
    print("[info] reedsolo oracle configured (prim=0x%X, fcr=%d)" % (TABLES.cfg.prim_poly, TABLES.fcr))

    total = 0
    bad = 0
    for rix in range(200):
        msg = bytes(random.randrange(256) for _ in range(k))
        got = rs_encode_block(msg)
        ref = bytes(RS.encode(msg))
        total += 1
        if got != ref:
            bad += 1
            print(f"[FAIL] RAND#{rix}: encoder mismatch")

        rx = bytearray(got)
        for pos in random.sample(range(n), t):
            rx[pos] ^= random.randrange(1, 256)
        total += 1
        if rs_decode_block(rx) != t or bytes(rx) != got:
            bad += 1
            print(f"[FAIL] RAND#{rix}: decoder did not restore {t} errors")

    print("\n=== SUMMARY ===")
    print(f"Total checks: {total}, mismatches: {bad}")
