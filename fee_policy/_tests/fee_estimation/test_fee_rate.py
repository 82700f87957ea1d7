from __future__ import annotations

import math

import pytest

from fee_policy.types.fee_rate import FeeRate
from fee_policy.types.sized_bytes import bytes32
from fee_policy.types.tx_entry import DEFAULT_CYCLES_PER_BYTE, TxEntry
from fee_policy.util.ints import uint32, uint64


def test_from_float_nan() -> None:
    assert FeeRate.from_float(math.nan) is None


def test_from_float() -> None:
    fee_rate = FeeRate.from_float(2.5)
    assert fee_rate is not None
    assert fee_rate.fee_per_vbyte == 2.5
    assert float(fee_rate) == 2.5


def test_construct_nan_raises() -> None:
    with pytest.raises(ValueError):
        FeeRate(math.nan)


def test_zero_add_zero() -> None:
    assert FeeRate.zero().add(FeeRate.zero()) == FeeRate.zero()


def test_add() -> None:
    assert FeeRate(1.5).add(FeeRate(2.0)) == FeeRate(3.5)


def test_add_nan_sum() -> None:
    assert FeeRate(math.inf).add(FeeRate(-math.inf)) is None


def test_total_order() -> None:
    rates = [FeeRate(3.0), FeeRate(1.0), FeeRate(2.0), FeeRate.zero()]
    assert sorted(rates) == [FeeRate.zero(), FeeRate(1.0), FeeRate(2.0), FeeRate(3.0)]
    assert FeeRate(1.0) < FeeRate(1.5) <= FeeRate(1.5) < FeeRate(2.0)
    assert max(rates) == FeeRate(3.0)


def test_hashable_key() -> None:
    index = {FeeRate(1000.0): 0, FeeRate(1050.0): 1}
    assert index[FeeRate(1050.0)] == 1


def test_calculate() -> None:
    assert FeeRate.calculate(2_000_000, 1000) == FeeRate(2000.0)
    assert FeeRate.calculate(1000, 0) == FeeRate.zero()


def test_fee_for_size() -> None:
    fee_rate = FeeRate(2.5)
    assert fee_rate.fee(1000) == uint64(2500)
    assert fee_rate.fee(3) == uint64(7)
    assert FeeRate.zero().fee(1000) == uint64(0)


def make_tx(size: int, cycles: int, fee: int) -> TxEntry:
    return TxEntry(bytes32(b"\x01" * 32), uint32(1), uint64(cycles), uint64(fee), uint64(size))


def test_virtual_size_by_bytes() -> None:
    tx = make_tx(size=500, cycles=DEFAULT_CYCLES_PER_BYTE * 100, fee=1000)
    assert tx.virtual_size == 500
    assert tx.fee_rate == FeeRate(2.0)


def test_virtual_size_by_cycles() -> None:
    tx = make_tx(size=100, cycles=DEFAULT_CYCLES_PER_BYTE * 400, fee=1000)
    assert tx.virtual_size == 400
    assert tx.fee_rate == FeeRate(2.5)


def test_zero_virtual_size() -> None:
    tx = make_tx(size=0, cycles=DEFAULT_CYCLES_PER_BYTE - 1, fee=1000)
    assert tx.virtual_size == 0
    assert tx.fee_rate == FeeRate.zero()
