from __future__ import annotations

from typing import Iterable

from typing_extensions import Protocol

from fee_policy.types.fee_rate import FeeRate
from fee_policy.types.sized_bytes import bytes32
from fee_policy.types.tx_entry import TxEntry
from fee_policy.util.ints import uint32


class FeeEstimatorInterface(Protocol):
    def process_block(self, height: uint32, txs: Iterable[TxEntry]) -> None:
        """A new block has been connected, `txs` are the pool transactions it included"""

    def track_tx(self, tx: TxEntry) -> None:
        """A transaction has been accepted into the pool"""

    def drop_tx(self, tx_hash: bytes32) -> bool:
        """A transaction has left the pool without being confirmed. Returns whether it was tracked"""

    def estimate(self, confirm_target: int) -> FeeRate:
        """confirm_target: number of blocks within which the transaction should be confirmed"""
