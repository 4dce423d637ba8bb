import dataclasses

import pytest

from ccsds_rs.model.gf_tables import (
    A0,
    FCR,
    IPRIM,
    NN,
    PRIM,
    TABLES,
    RSCfg,
    build_tables,
    default_rs_cfg,
)

GEN_POLY_INDEX = bytes.fromhex(
    "00F93B42042B7EFB611E03D53242AA0518"
    "05AA4232D5031E61FB7E2B04423BF900"
)
GEN_POLY_POLY = bytes.fromhex(
    "015B7F56101E0DEB61A5082A3656AB2071"
    "20AB56362A08A561EB0D1E10567F5B01"
)


def test_parameters():
    assert default_rs_cfg.prim_poly == 0x187
    assert FCR == 112
    assert PRIM == 11
    assert IPRIM == 116
    assert (PRIM * IPRIM) % NN == 1


def test_log_tables():
    assert list(TABLES.alpha_to[:10]) == [1, 2, 4, 8, 16, 32, 64, 128, 135, 137]
    assert list(TABLES.index_of[1:10]) == [0, 1, 99, 2, 198, 100, 106, 3, 205]
    assert TABLES.index_of[0] == A0
    assert TABLES.alpha_to[A0] == 1


def test_log_tables_are_inverse():
    for x in range(1, 256):
        assert TABLES.alpha_to[TABLES.index_of[x]] == x
    # every nonzero element appears exactly once
    assert sorted(TABLES.alpha_to[:NN]) == list(range(1, 256))


def test_generator_polynomial():
    assert len(TABLES.gen_poly) == 33
    assert bytes(TABLES.gen_poly) == GEN_POLY_INDEX
    assert bytes(TABLES.alpha_to[c] for c in TABLES.gen_poly) == GEN_POLY_POLY


def test_generator_polynomial_is_palindromic():
    poly = [TABLES.alpha_to[c] for c in TABLES.gen_poly]
    assert poly == poly[::-1]


def test_dual_basis_tables():
    assert TABLES.tal_to_dual_basis[:16] == bytes.fromhex("007BAFD499E2364DFA81552E6318CCB7")
    assert TABLES.tal_to_conventional[:16] == bytes.fromhex("00CCAC6079B5D519F03C5C90894525E9")
    assert sorted(TABLES.tal_to_dual_basis) == list(range(256))
    for x in range(256):
        assert TABLES.tal_to_conventional[TABLES.tal_to_dual_basis[x]] == x


def test_tables_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        TABLES.iprim = 3
    with pytest.raises(TypeError):
        TABLES.alpha_to[0] = 5


def test_build_tables_is_deterministic():
    assert build_tables(RSCfg()) == TABLES


@pytest.mark.parametrize(
    "kwargs",
    [
        {"n": 204},
        {"k": 239},
        {"prim": 0},
        {"prim": 15},       # shares a factor with 255
        {"prim": 255},
        {"first_consecutive_root": -1},
        {"first_consecutive_root": 255},
        {"prim_poly": 0x87},
    ],
)
def test_rs_cfg_rejects_bad_parameters(kwargs):
    with pytest.raises(ValueError):
        RSCfg(**kwargs)


def test_non_primitive_polynomial_is_rejected():
    # x^8 + x^4 + x^3 + x + 1 (AES) is irreducible but not primitive
    with pytest.raises(ValueError, match="not primitive"):
        build_tables(RSCfg(prim_poly=0x11B))
    # reducible polynomial
    with pytest.raises(ValueError, match="not primitive"):
        build_tables(RSCfg(prim_poly=0x100))


def test_other_valid_config_builds():
    tables = build_tables(RSCfg(prim_poly=0x11D, first_consecutive_root=0, prim=1))
    assert tables.iprim == 1
    assert tables.alpha_to[8] == 0x1D
