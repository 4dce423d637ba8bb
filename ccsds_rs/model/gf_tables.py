# ccsds_rs/model/gf_tables.py
# GF(2^8) tables and code constants for the CCSDS RS(255,223) golden model
# Field: p(x) = x^8 + x^7 + x^2 + x + 1  -> 0x187
# Generator roots: alpha^(PRIM*(FCR+i)), i=0..NROOTS-1 with FCR=112, PRIM=11
#
# every table is built once at import from default_rs_cfg and is read-only
# afterwards (tuples / bytes), so encoder and decoder can share it freely

from dataclasses import dataclass
from math import gcd
from typing import Tuple

# code parameters
NN = 255                    # symbols per codeword (field order - 1)
NROOTS = 32                 # parity symbols
DATA_LENGTH = NN - NROOTS   # 223
BLOCK_LENGTH = NN
PARITY_LENGTH = NROOTS
A0 = NN                     # log of zero ("not found")

# conversion matrix rows, conventional -> dual basis (Berlekamp's T matrix)
TAL_ROWS = (0x8D, 0xEF, 0xEC, 0x86, 0xFA, 0x99, 0xAF, 0x7B)


@dataclass(frozen=True)
class RSCfg:
    # p(x) = x^8 + x^7 + x^2 + x + 1
    prim_poly: int = 0b110000111
    # index of the first consecutive root of g(x), in units of prim
    first_consecutive_root: int = 112
    # step between consecutive roots (alpha^prim is the root generator)
    prim: int = 11
    # RS(n,k) over GF(256)
    n: int = NN
    k: int = DATA_LENGTH

    def __post_init__(self):
        if self.n != NN or self.k != DATA_LENGTH:
            raise ValueError(f"only RS({NN},{DATA_LENGTH}) is supported, got RS({self.n},{self.k})")
        if not 0 < self.prim < NN or gcd(self.prim, NN) != 1:
            raise ValueError(f"prim must be coprime with {NN}, got {self.prim}")
        if not 0 <= self.first_consecutive_root < NN:
            raise ValueError(f"first_consecutive_root must be in [0, {NN}), got {self.first_consecutive_root}")
        if not 0x100 <= self.prim_poly < 0x200:
            raise ValueError(f"prim_poly must be a degree 8 polynomial, got {self.prim_poly:#x}")


default_rs_cfg = RSCfg()


@dataclass(frozen=True)
class GFTables:
    cfg: RSCfg
    alpha_to: Tuple[int, ...]       # index -> element, alpha_to[A0] aliases alpha_to[0]
    index_of: Tuple[int, ...]       # element -> index, index_of[0] == A0
    gen_poly: Tuple[int, ...]       # g(x) in index form, lowest degree first
    iprim: int                      # prim^-1 mod NN
    tal_to_conventional: bytes      # bytes.translate table, dual -> conventional
    tal_to_dual_basis: bytes        # bytes.translate table, conventional -> dual

    @property
    def fcr(self) -> int:
        return self.cfg.first_consecutive_root

    @property
    def prim(self) -> int:
        return self.cfg.prim


def _build_log_tables(prim_poly: int) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    alpha_to = [0] * (NN + 1)
    index_of = [A0] * (NN + 1)
    x = 1
    for i in range(NN):
        if x == 0 or index_of[x] != A0:
            # x came back around before visiting all 255 nonzero elements
            raise ValueError(f"prim_poly {prim_poly:#x} is not primitive")
        alpha_to[i] = x
        index_of[x] = i
        x <<= 1
        if x & 0x100:
            x ^= prim_poly
    if x != 1:
        raise ValueError(f"prim_poly {prim_poly:#x} is not primitive")
    alpha_to[A0] = alpha_to[0]
    return tuple(alpha_to), tuple(index_of)


def _build_gen_poly(alpha_to, index_of, fcr: int, prim: int) -> Tuple[int, ...]:
    # g(x) = prod_{i=0}^{NROOTS-1} (x - alpha^(prim*(fcr+i))), poly form, lowest degree first
    g = [0] * (NROOTS + 1)
    g[0] = 1
    root = fcr * prim
    for i in range(NROOTS):
        g[i + 1] = 1
        # multiply g(x) by (x + alpha^root)
        for j in range(i, 0, -1):
            if g[j] != 0:
                g[j] = g[j - 1] ^ alpha_to[(index_of[g[j]] + root) % NN]
            else:
                g[j] = g[j - 1]
        g[0] = alpha_to[(index_of[g[0]] + root) % NN]
        root += prim
    # index form for the encoder
    return tuple(index_of[c] for c in g)


def _build_tal_tables() -> Tuple[bytes, bytes]:
    to_dual = bytearray(256)
    to_conv = bytearray(256)
    for value in range(256):
        out = 0
        for bit in range(8):
            if value & (1 << bit):
                out ^= TAL_ROWS[7 - bit]
        to_dual[value] = out
        to_conv[out] = value
    return bytes(to_conv), bytes(to_dual)


def build_tables(cfg: RSCfg = default_rs_cfg) -> GFTables:
    alpha_to, index_of = _build_log_tables(cfg.prim_poly)
    gen_poly = _build_gen_poly(alpha_to, index_of, cfg.first_consecutive_root, cfg.prim)
    tal_to_conventional, tal_to_dual_basis = _build_tal_tables()
    return GFTables(
        cfg=cfg,
        alpha_to=alpha_to,
        index_of=index_of,
        gen_poly=gen_poly,
        iprim=pow(cfg.prim, -1, NN),
        tal_to_conventional=tal_to_conventional,
        tal_to_dual_basis=tal_to_dual_basis,
    )


TABLES = build_tables(default_rs_cfg)

# convenience aliases for the default tables
FCR = TABLES.fcr
PRIM = TABLES.prim
IPRIM = TABLES.iprim


if __name__ == "__main__":
    print(f"prim_poly = {TABLES.cfg.prim_poly:#x}, fcr = {FCR}, prim = {PRIM}, iprim = {IPRIM}")
    print("gen_poly (index form) =")
    print(" ".join(f"{c:02X}" for c in TABLES.gen_poly))
    print("gen_poly (poly form) =")
    print(" ".join(f"{TABLES.alpha_to[c]:02X}" for c in TABLES.gen_poly))
