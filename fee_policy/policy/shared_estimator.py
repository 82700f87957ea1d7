from __future__ import annotations

import threading
from types import TracebackType
from typing import Iterable, List, Optional, Type

from typing_extensions import final

from fee_policy.policy.estimator import Estimator
from fee_policy.types.fee_rate import FeeRate
from fee_policy.types.sized_bytes import bytes32
from fee_policy.types.tx_entry import TxEntry
from fee_policy.util.ints import uint32


@final
class SharedEstimator:
    """
    Serializes every call into an `Estimator` behind one lock, for pools that
    notify the estimator from more than one thread.

    `with shared as estimator:` holds the lock for a batch of calls.
    """

    _estimator: Estimator
    _lock: threading.Lock

    def __init__(self, estimator: Estimator) -> None:
        self._estimator = estimator
        self._lock = threading.Lock()

    def __enter__(self) -> Estimator:
        self._lock.acquire()
        return self._estimator

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self._lock.release()

    def process_block(self, height: uint32, txs: Iterable[TxEntry]) -> None:
        with self as estimator:
            estimator.process_block(height, txs)

    def track_tx(self, tx: TxEntry) -> None:
        with self as estimator:
            estimator.track_tx(tx)

    def drop_tx(self, tx_hash: bytes32) -> bool:
        with self as estimator:
            return estimator.drop_tx(tx_hash)

    def estimate(self, confirm_target: int) -> FeeRate:
        with self as estimator:
            return estimator.estimate(confirm_target)

    def estimate_fees(self, confirm_targets: Iterable[int]) -> List[FeeRate]:
        with self as estimator:
            return estimator.estimate_fees(confirm_targets)
