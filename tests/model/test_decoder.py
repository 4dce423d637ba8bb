import random

import numpy as np
import pytest
from pytest_benchmark.fixture import BenchmarkFixture

from ccsds_rs.model.reed_solomon import (
    UNCORRECTABLE,
    k,
    n,
    rs_decode,
    rs_decode_block,
    rs_encode,
    rs_encode_block,
    t,
    two_t,
)


def _random_codeword(seed: int, dual_basis: bool = False) -> bytes:
    rng = random.Random(seed)
    return rs_encode_block(rng.randbytes(k), dual_basis=dual_basis)


def _counter_codeword() -> bytes:
    return rs_encode_block(bytes(i % 256 for i in range(k)))


def _damage(codeword: bytes, positions, rng: random.Random) -> bytearray:
    rx = bytearray(codeword)
    for pos in positions:
        rx[pos] ^= rng.randrange(1, 256)
    return rx


def test_clean_block_is_left_alone():
    cw = _random_codeword(1)
    block = bytearray(cw)
    erasures = [3, 4, 5]
    assert rs_decode_block(block, erasures) == 0
    assert bytes(block) == cw
    # nothing to locate, the caller's list is not touched
    assert erasures == [3, 4, 5]


def test_clean_block_without_erasures():
    cw = _random_codeword(2)
    block = bytearray(cw)
    assert rs_decode_block(block) == 0
    assert bytes(block) == cw


@pytest.mark.parametrize("num_err", [1, 2, 8, 15, t])
def test_corrects_errors(num_err):
    rng = random.Random(100 + num_err)
    cw = _random_codeword(num_err)
    rx = _damage(cw, rng.sample(range(n), num_err), rng)
    assert rs_decode_block(rx) == num_err
    assert bytes(rx) == cw


@pytest.mark.parametrize(
    "num_err,num_era",
    [(0, 1), (0, 17), (0, two_t), (1, 30), (4, 24), (8, 16), (12, 8), (15, 2), (t, 0)],
)
def test_corrects_errors_and_erasures(num_err, num_era):
    rng = random.Random(1000 + 40 * num_err + num_era)
    cw = _random_codeword(num_err * 64 + num_era)
    picked = rng.sample(range(n), num_err + num_era)
    errors, erasures = picked[:num_err], picked[num_err:]
    rx = _damage(cw, picked, rng)

    located = list(erasures)
    count = rs_decode_block(rx, located)
    assert count == num_err + num_era
    assert bytes(rx) == cw
    if erasures:
        assert sorted(located) == sorted(picked)


def test_randomised_capacity():
    rng = random.Random(0xC0DE)
    for trial in range(40):
        num_err = rng.randint(0, t)
        num_era = rng.randint(0, two_t - 2 * num_err)
        cw = _random_codeword(trial)
        picked = rng.sample(range(n), num_err + num_era)
        rx = _damage(cw, picked, rng)
        expected = num_err + num_era
        assert rs_decode_block(rx, picked[num_err:]) == expected
        assert bytes(rx) == cw


def test_erasure_with_correct_value_is_still_reported():
    cw = _counter_codeword()
    rx = bytearray(cw)
    rx[20] ^= 0x55
    erasures = [10, 20, 30]
    assert rs_decode_block(rx, erasures) == 3
    assert bytes(rx) == cw
    assert sorted(erasures) == [10, 20, 30]


def test_errors_at_block_edges():
    cw = _counter_codeword()
    rx = bytearray(cw)
    for pos in (0, n - 1, 100):
        rx[pos] ^= 0xA5
    assert rs_decode_block(rx) == 3
    assert bytes(rx) == cw


def test_parity_only_errors():
    rng = random.Random(5)
    cw = _random_codeword(5)
    rx = _damage(cw, range(k, k + t), rng)
    assert rs_decode_block(rx) == t
    assert bytes(rx) == cw


def test_over_capacity_is_detected():
    rng = random.Random(17)
    for trial in range(10):
        cw = _random_codeword(200 + trial)
        rx = _damage(cw, rng.sample(range(n), t + 1), rng)
        received = bytes(rx)
        assert rs_decode_block(rx) == UNCORRECTABLE
        # no partial write on failure
        assert bytes(rx) == received


def test_uncorrectable_leaves_erasure_list_alone():
    rng = random.Random(18)
    cw = _random_codeword(18)
    picked = rng.sample(range(n), t + 2)
    rx = _damage(cw, picked, rng)
    erasures = [picked[0]]
    received = bytes(rx)
    assert rs_decode_block(rx, erasures) == UNCORRECTABLE
    assert erasures == [picked[0]]
    assert bytes(rx) == received


def test_dual_basis_round_trip():
    rng = random.Random(21)
    cw = _random_codeword(21, dual_basis=True)
    picked = rng.sample(range(n), 12)
    rx = _damage(cw, picked, rng)
    located = picked[6:]
    assert rs_decode_block(rx, located, dual_basis=True) == 12
    assert bytes(rx) == cw
    assert sorted(located) == sorted(picked)


def test_dual_basis_block_is_not_a_conventional_codeword():
    cw = rs_encode_block(bytes(i % 256 for i in range(k)), dual_basis=True)
    block = bytearray(cw)
    assert rs_decode_block(bytearray(cw), dual_basis=True) == 0
    # decoded in the wrong basis it is just noise
    assert rs_decode_block(block) != 0


def test_list_and_memoryview_blocks():
    rng = random.Random(30)
    cw = _random_codeword(30)

    as_list = list(_damage(cw, [1, 50, 200], rng))
    assert rs_decode_block(as_list) == 3
    assert bytes(as_list) == cw

    backing = _damage(cw, [7, 8], rng)
    view = memoryview(backing)
    assert rs_decode_block(view) == 2
    assert bytes(backing) == cw


def test_only_first_255_bytes_are_used():
    rng = random.Random(31)
    cw = _random_codeword(31)
    rx = _damage(cw, [9], rng) + bytearray(b"\xee" * 10)
    assert rs_decode_block(rx) == 1
    assert bytes(rx[:n]) == cw
    assert bytes(rx[n:]) == b"\xee" * 10


def test_immutable_block_is_rejected():
    cw = _random_codeword(40)
    with pytest.raises(TypeError):
        rs_decode_block(cw)
    with pytest.raises(TypeError):
        rs_decode_block(memoryview(cw))


def test_short_block_is_rejected():
    with pytest.raises(ValueError):
        rs_decode_block(bytearray(n - 1))


@pytest.mark.parametrize(
    "erasures",
    [
        list(range(two_t + 1)),
        [1, 2, 2],
        [n],
        [-1],
        [1.5],
    ],
)
def test_bad_erasures_are_rejected(erasures):
    cw = _random_codeword(41)
    block = bytearray(cw)
    with pytest.raises(ValueError):
        rs_decode_block(block, erasures)
    assert bytes(block) == cw


def test_non_integer_erasure_is_named_as_such():
    block = bytearray(_random_codeword(43))
    with pytest.raises(ValueError, match="is not an integer"):
        rs_decode_block(block, [4, 1.5])


def test_numpy_integer_erasures():
    rng = random.Random(44)
    cw = _random_codeword(44)
    picked = rng.sample(range(n), 10)
    rx = _damage(cw, picked, rng)
    erasures = [np.int64(p) for p in picked]
    assert rs_decode_block(rx, erasures) == 10
    assert bytes(rx) == cw
    assert sorted(int(p) for p in erasures) == sorted(picked)


def test_immutable_erasure_list_is_rejected():
    block = bytearray(_random_codeword(42))
    with pytest.raises(TypeError):
        rs_decode_block(block, (1, 2, 3))


def test_multi_block_decode():
    rng = random.Random(50)
    data = rng.randbytes(3 * k)
    stream = bytearray(rs_encode(data))
    for pos in rng.sample(range(n), 5):
        stream[pos] ^= 0x11
    for pos in rng.sample(range(n), t + 1):
        stream[2 * n + pos] ^= 0x22

    payload, counts = rs_decode(bytes(stream))
    assert counts[:2] == [5, 0]
    assert counts[2] == UNCORRECTABLE
    assert payload[:2 * k] == data[:2 * k]
    # an uncorrectable block passes its systematic bytes through
    assert payload[2 * k:] == bytes(stream[2 * n:2 * n + k])


def test_multi_block_decode_requires_whole_blocks():
    with pytest.raises(ValueError, match="multiple of 255"):
        rs_decode(bytes(n + 3))


@pytest.mark.benchmark(group='rs255-decode')
def test_benchmark_decode_clean(benchmark: BenchmarkFixture):
    cw = _random_codeword(42)
    benchmark(lambda: rs_decode_block(bytearray(cw)))


@pytest.mark.benchmark(group='rs255-decode')
def test_benchmark_decode_t_errors(benchmark: BenchmarkFixture):
    rng = random.Random(42)
    cw = _random_codeword(42)
    rx = bytes(_damage(cw, rng.sample(range(n), t), rng))
    benchmark(lambda: rs_decode_block(bytearray(rx)))
