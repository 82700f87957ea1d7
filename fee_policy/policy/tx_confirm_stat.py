from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from sortedcontainers import SortedDict

from fee_policy.types.fee_rate import FeeRate

log = logging.getLogger(__name__)


@dataclass
class BucketStat:
    # Sum the fee rate of all confirmed txs in the bucket, decayed every block
    total_fee_rate: FeeRate
    # Count of confirmed txs in the bucket, decayed every block
    txs_count: float
    # Txs still unconfirmed after they left the tracking window, never decayed
    old_unconfirmed_txs: int

    def inc_total_fee_rate(self, fee_rate: FeeRate) -> None:
        total = self.total_fee_rate.add(fee_rate)
        assert total is not None, f"NaN total fee rate: {self.total_fee_rate} + {fee_rate}"
        self.total_fee_rate = total

    def avg_fee_rate(self) -> Optional[FeeRate]:
        if self.txs_count == 0:
            return None
        return FeeRate.from_float(self.total_fee_rate.fee_per_vbyte / self.txs_count)


class TxConfirmStat:
    """
    Track tx fee rate and confirmation time.

    The unconfirmed counters follow txs as they are added to or removed from the pool.
    When a tx is confirmed it is recorded as a sample in the bucket of its fee rate.
    The median fee is estimated by walking up the buckets until the confirm rate is met.
    """

    buckets: List[FeeRate]
    fee_rate_to_bucket: SortedDict  # key is upper bound of bucket, val is index in buckets

    bucket_stats: List[BucketStat]

    # Count the number of txs in each bucket confirmed within Y + 1 blocks
    confirmed_txs: List[List[float]]  # confirmed_txs[y][x]

    # Count the number of txs in each bucket evicted from the pool
    # after failing to be confirmed within Y + 1 blocks
    failed_txs: List[List[float]]  # failed_txs[y][x]

    # Pool counts of outstanding transactions.
    # For each tip height modulo the window, for each bucket x,
    # the number of txs that entered the pool at that height and are still unconfirmed
    block_unconfirmed_txs: List[List[int]]  # block_unconfirmed_txs[height % window][x]

    decay_factor: float

    def __init__(self, buckets: Sequence[FeeRate], max_confirm_blocks: int, decay_factor: float) -> None:
        self.buckets = list(buckets)
        self.fee_rate_to_bucket = SortedDict()
        for index, fee_rate in enumerate(self.buckets):
            self.fee_rate_to_bucket[fee_rate] = index
        assert len(self.fee_rate_to_bucket) == len(self.buckets), "bucket boundaries must be unique"

        self.bucket_stats = [BucketStat(FeeRate.zero(), 0.0, 0) for _ in range(0, len(self.buckets))]
        self.confirmed_txs = [[0.0 for _ in range(0, len(self.buckets))] for _ in range(0, max_confirm_blocks)]
        self.failed_txs = [[0.0 for _ in range(0, len(self.buckets))] for _ in range(0, max_confirm_blocks)]
        self.block_unconfirmed_txs = [[0 for _ in range(0, len(self.buckets))] for _ in range(0, max_confirm_blocks)]
        self.decay_factor = decay_factor

    @property
    def bucket_count(self) -> int:
        return len(self.buckets)

    @property
    def max_confirms(self) -> int:
        return len(self.confirmed_txs)

    def bucket_index_by_fee_rate(self, fee_rate: FeeRate) -> Optional[int]:
        """
        Return the index of the upper bound bucket of `fee_rate`, or None if it is above every bucket.
        With buckets [1.0, 2.0, 3.0] a fee rate of 1.5 is in bucket 1.
        """
        position = self.fee_rate_to_bucket.bisect_left(fee_rate)
        if position == len(self.fee_rate_to_bucket):
            return None
        _, bucket_index = self.fee_rate_to_bucket.peekitem(position)
        return int(bucket_index)

    def tracked_unconfirmed(self, bucket_index: int) -> int:
        in_window = sum(row[bucket_index] for row in self.block_unconfirmed_txs)
        return in_window + self.bucket_stats[bucket_index].old_unconfirmed_txs

    def add_confirmed_tx(self, blocks_to_confirm: int, fee_rate: FeeRate) -> None:
        if blocks_to_confirm < 1:
            return
        bucket_index = self.bucket_index_by_fee_rate(fee_rate)
        if bucket_index is None:
            return

        # confirmed within N blocks is also confirmed within any larger target
        for i in range(blocks_to_confirm - 1, self.max_confirms):
            self.confirmed_txs[i][bucket_index] += 1

        stat = self.bucket_stats[bucket_index]
        stat.txs_count += 1
        stat.inc_total_fee_rate(fee_rate)

    def add_unconfirmed_tx(self, entry_height: int, fee_rate: FeeRate) -> Optional[int]:
        """entry_height is the tip height when the tx entered the pool"""
        bucket_index = self.bucket_index_by_fee_rate(fee_rate)
        if bucket_index is None:
            return None
        block_index = entry_height % len(self.block_unconfirmed_txs)
        self.block_unconfirmed_txs[block_index][bucket_index] += 1
        return bucket_index

    def remove_unconfirmed_tx(
        self, entry_height: int, tip_height: int, bucket_index: int, count_failure: bool
    ) -> None:
        tx_age = max(tip_height - entry_height, 0)
        if tx_age < 1:
            # resolved in the block it entered, its window slot is retired by move_track_window
            return

        if tx_age >= len(self.block_unconfirmed_txs):
            stat = self.bucket_stats[bucket_index]
            if stat.old_unconfirmed_txs > 0:
                stat.old_unconfirmed_txs -= 1
            else:
                log.warning(f"Fee estimator error: no old unconfirmed tx in bucket {bucket_index}")
        else:
            block_index = entry_height % len(self.block_unconfirmed_txs)
            if self.block_unconfirmed_txs[block_index][bucket_index] > 0:
                self.block_unconfirmed_txs[block_index][bucket_index] -= 1
            else:
                log.warning(f"Fee estimator error: no unconfirmed tx at height {entry_height} in bucket {bucket_index}")

        if count_failure:
            target_index = min(tx_age, self.max_confirms) - 1
            self.failed_txs[target_index][bucket_index] += 1

    def move_track_window(self, height: int) -> None:
        block_index = height % len(self.block_unconfirmed_txs)
        row = self.block_unconfirmed_txs[block_index]
        for bucket_index in range(0, len(self.buckets)):
            # mark unconfirmed txs as old unconfirmed txs
            self.bucket_stats[bucket_index].old_unconfirmed_txs += row[bucket_index]
            row[bucket_index] = 0

    def decay(self) -> None:
        """
        Apply the decay factor on the historical stats.
        This smoothly removes the effect of old data in favor of new data.
        """
        decay_factor = self.decay_factor
        for row in self.confirmed_txs:
            row[:] = [count * decay_factor for count in row]
        for row in self.failed_txs:
            row[:] = [count * decay_factor for count in row]

        for stat in self.bucket_stats:
            total = FeeRate.from_float(stat.total_fee_rate.fee_per_vbyte * decay_factor)
            assert total is not None, f"NaN decayed total fee rate: {stat.total_fee_rate}"
            stat.total_fee_rate = total
            stat.txs_count *= decay_factor

    def find_best_range(self, confirm_target: int, min_samples: int, min_confirm_rate: float) -> Tuple[int, int]:
        """
        The range always starts at bucket 0 and grows until it has more than `min_samples`
        txs and confirms at least `min_confirm_rate` of them within `confirm_target` blocks.
        If no range qualifies, (0, 0) is returned.
        """
        target_index = confirm_target - 1
        confirmed_txs = 0.0
        failed_txs = 0.0
        extra_txs = 0
        txs_count = 0.0

        for bucket_index, stat in enumerate(self.bucket_stats):
            confirmed_txs += self.confirmed_txs[target_index][bucket_index]
            failed_txs += self.failed_txs[target_index][bucket_index]
            extra_txs += self.block_unconfirmed_txs[target_index][bucket_index]
            txs_count += stat.txs_count
            # we have enough data points to test for success
            if txs_count > min_samples:
                confirm_rate = confirmed_txs / (txs_count + failed_txs + extra_txs)
                assert not math.isnan(confirm_rate), "NaN confirm rate"
                if confirm_rate >= min_confirm_rate:
                    log.debug(
                        f"Found bucket range [0, {bucket_index}] for target {confirm_target}: "
                        f"confirmed: {confirmed_txs} txs: {txs_count} failed: {failed_txs} extra: {extra_txs}"
                    )
                    return 0, bucket_index

        log.debug(f"No bucket range satisfies target {confirm_target}, txs: {txs_count}")
        return 0, 0

    def estimate_median(self, confirm_target: int, min_samples: int, min_confirm_rate: float) -> FeeRate:
        """
        confirm_target is the number of blocks within which we hope to get our tx confirmed

        1. find the best range of buckets satisfying the sample size and confirm rate
        2. return the average fee rate of the median bucket of that range, weighted by tx count
        """
        if confirm_target < 1:
            return FeeRate.zero()
        if confirm_target > self.max_confirms:
            raise ValueError(
                f"Bad argument to estimate_median: confirm_target must be <= {self.max_confirms}. Got {confirm_target}"
            )

        best_start, best_end = self.find_best_range(confirm_target, min_samples, min_confirm_rate)
        best_range = self.bucket_stats[best_start : best_end + 1]
        range_txs_count = sum(stat.txs_count for stat in best_range)
        if range_txs_count == 0:
            return FeeRate.zero()

        half_count = range_txs_count / 2
        for stat in best_range:
            if stat.txs_count >= half_count:
                avg = stat.avg_fee_rate()
                return avg if avg is not None else FeeRate.zero()
            half_count -= stat.txs_count
        return FeeRate.zero()
