from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from fee_policy.policy.fee_estimator_config import FeeEstimatorConfig
from fee_policy.policy.tx_confirm_stat import TxConfirmStat
from fee_policy.types.fee_rate import FeeRate
from fee_policy.types.sized_bytes import bytes32
from fee_policy.types.tx_entry import TxEntry
from fee_policy.util.ints import uint32

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TxRecord:
    height: uint32
    bucket_index: int


def init_buckets(min_fee_rate: float, max_fee_rate: float, spacing: float) -> List[FeeRate]:
    assert min_fee_rate > 0
    assert spacing > 1
    buckets: List[FeeRate] = []
    boundary = min_fee_rate
    while boundary <= max_fee_rate:
        buckets.append(FeeRate(boundary))
        boundary *= spacing
    return buckets


class Estimator:
    """
    Fee Estimator

    The estimator follows new blocks and the tx pool to collect samples.
    Every tx entering the pool is tracked with the tip height and its fee rate.
    When the tx is included in a new block, or dropped by the pool, we get a sample
    of how long a tx paying that fee rate takes to confirm, or that it failed to.

    Samples are grouped into predefined fee rate buckets. To estimate a fee rate we
    travel through the buckets looking for the fee rate X that gets a tx confirmed
    with probability Y within T blocks.

    Not thread safe: callers serialize access, see `SharedEstimator`.
    """

    config: FeeEstimatorConfig
    tx_confirm_stat: TxConfirmStat
    tracked_txs: Dict[bytes32, TxRecord]
    _best_height: uint32
    _first_record_height: uint32

    def __init__(self, config: Optional[FeeEstimatorConfig] = None) -> None:
        self.config = config if config is not None else FeeEstimatorConfig()
        buckets = init_buckets(
            self.config.min_bucket_fee_rate, self.config.max_bucket_fee_rate, self.config.fee_spacing
        )
        self.tx_confirm_stat = TxConfirmStat(buckets, self.config.max_confirm_blocks, self.config.decay_factor)
        self.tracked_txs = {}
        self._best_height = uint32(0)
        self._first_record_height = uint32(0)

    @property
    def best_height(self) -> uint32:
        return self._best_height

    @property
    def first_record_height(self) -> uint32:
        return self._first_record_height

    @property
    def tracked_count(self) -> int:
        return len(self.tracked_txs)

    def is_tracked(self, tx_hash: bytes32) -> bool:
        return tx_hash in self.tracked_txs

    def process_block(self, height: uint32, txs: Iterable[TxEntry]) -> None:
        """A new block has been connected and these pool transactions have been included in it"""
        # For simplicity we assume a chain reorg does not affect tx fees
        if height <= self._best_height:
            log.debug(f"Ignoring block at height {height}, best height is {self._best_height}")
            return

        self._best_height = uint32(height)
        self.tx_confirm_stat.move_track_window(height)
        self.tx_confirm_stat.decay()

        processed_txs = 0
        for tx in txs:
            if self.process_block_tx(height, tx):
                processed_txs += 1

        if self._first_record_height == 0 and processed_txs > 0:
            self._first_record_height = self._best_height
            log.info(f"Fee Estimator first recorded height: {self._first_record_height}")

    def process_block_tx(self, height: uint32, tx: TxEntry) -> bool:
        if not self._drop_tx(tx.hash, count_failure=False):
            # tx was not being tracked
            return False

        blocks_to_confirm = max(height - tx.height, 0)
        self.tx_confirm_stat.add_confirmed_tx(blocks_to_confirm, tx.fee_rate)
        return True

    def track_tx(self, tx: TxEntry) -> None:
        """A transaction has been accepted into the pool"""
        if tx.hash in self.tracked_txs:
            return
        if tx.height != self._best_height:
            # only txs entering at the known tip are tracked
            return

        bucket_index = self.tx_confirm_stat.add_unconfirmed_tx(tx.height, tx.fee_rate)
        if bucket_index is not None:
            self.tracked_txs[tx.hash] = TxRecord(tx.height, bucket_index)

    def drop_tx(self, tx_hash: bytes32) -> bool:
        """A transaction has been removed from the pool without being confirmed"""
        return self._drop_tx(tx_hash, count_failure=True)

    def _drop_tx(self, tx_hash: bytes32, count_failure: bool) -> bool:
        record = self.tracked_txs.pop(tx_hash, None)
        if record is None:
            return False
        self.tx_confirm_stat.remove_unconfirmed_tx(
            record.height, self._best_height, record.bucket_index, count_failure
        )
        return True

    def estimate(self, confirm_target: int) -> FeeRate:
        """
        Returns the lowest fee rate expected to confirm within `confirm_target` blocks,
        or FeeRate.zero() when there is not enough data for a confident estimate.
        """
        return self.tx_confirm_stat.estimate_median(
            confirm_target,
            self.config.min_estimate_samples,
            self.config.min_estimate_confirm_rate,
        )

    def estimate_fees(self, confirm_targets: Iterable[int]) -> List[FeeRate]:
        return [self.estimate(target) for target in confirm_targets]
