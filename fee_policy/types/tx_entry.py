from __future__ import annotations

from dataclasses import dataclass

from fee_policy.types.fee_rate import FeeRate
from fee_policy.types.sized_bytes import bytes32
from fee_policy.util.ints import uint32, uint64

# Execution cycles that cost the same as one byte of transaction size
DEFAULT_CYCLES_PER_BYTE = 2000


@dataclass(frozen=True)
class TxEntry:
    """
    The information the fee estimator is passed for each transaction that's
    accepted into the pool, included in a block or evicted from the pool.

    Attributes:
        hash (bytes32): transaction identity
        height (uint32): tip height at the time the transaction entered the pool
        cycles (uint64): execution cycles consumed by verifying the transaction
        fee (uint64): fee paid, in shannons
        size (uint64): serialized size in bytes
    """

    hash: bytes32
    height: uint32
    cycles: uint64
    fee: uint64
    size: uint64

    @property
    def virtual_size(self) -> int:
        # Virtual bytes unify the size and cycles of a transaction into one billable unit
        return max(self.size, self.cycles // DEFAULT_CYCLES_PER_BYTE)

    @property
    def fee_rate(self) -> FeeRate:
        return FeeRate.calculate(self.fee, self.virtual_size)
