from __future__ import annotations

import threading
from typing import List

import pytest

from fee_policy.policy.estimator import Estimator
from fee_policy.policy.fee_estimator_config import FeeEstimatorConfig
from fee_policy.policy.fee_estimator_interface import FeeEstimatorInterface
from fee_policy.policy.shared_estimator import SharedEstimator
from fee_policy.types.fee_rate import FeeRate
from fee_policy.types.sized_bytes import bytes32
from fee_policy.types.tx_entry import TxEntry
from fee_policy.util.ints import uint32, uint64


def make_tx(n: int, height: int, fee_rate: float) -> TxEntry:
    return TxEntry(bytes32(n.to_bytes(32, "big")), uint32(height), uint64(0), uint64(int(fee_rate * 250)), uint64(250))


def test_shared_estimator_delegates() -> None:
    shared: FeeEstimatorInterface = SharedEstimator(Estimator())
    shared.process_block(uint32(10), [])
    txs = [make_tx(n, 10, 2000.0) for n in range(0, 25)]
    for tx in txs:
        shared.track_tx(tx)
    shared.track_tx(make_tx(99, 10, 2000.0))
    assert shared.drop_tx(make_tx(99, 10, 2000.0).hash) is True
    assert shared.drop_tx(make_tx(99, 10, 2000.0).hash) is False
    shared.process_block(uint32(12), txs)
    assert shared.estimate(2) == FeeRate(2000.0)


def test_estimate_fees() -> None:
    shared = SharedEstimator(Estimator())
    assert shared.estimate_fees([1, 2, 3]) == [FeeRate.zero()] * 3


def test_context_manager_holds_lock() -> None:
    estimator = Estimator()
    shared = SharedEstimator(estimator)
    with shared as inner:
        assert inner is estimator
        assert shared._lock.locked()
    assert not shared._lock.locked()


def test_lock_released_on_error() -> None:
    shared = SharedEstimator(Estimator(FeeEstimatorConfig(max_confirm_blocks=10)))
    with pytest.raises(ValueError):
        shared.estimate(11)
    assert not shared._lock.locked()


def test_concurrent_tracking() -> None:
    shared = SharedEstimator(Estimator(FeeEstimatorConfig(max_confirm_blocks=10)))
    shared.process_block(uint32(1), [])
    errors: List[BaseException] = []

    def track(first: int) -> None:
        try:
            for n in range(first, first + 200):
                shared.track_tx(make_tx(n, 1, 1000.0 + n % 50))
        except BaseException as e:
            errors.append(e)
            raise

    threads = [threading.Thread(target=track, args=(i * 1000,)) for i in range(0, 4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    with shared as estimator:
        assert estimator.tracked_count == 800
        stat = estimator.tx_confirm_stat
        assert sum(stat.tracked_unconfirmed(i) for i in range(0, stat.bucket_count)) == 800
