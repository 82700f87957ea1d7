from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict

from fee_policy.policy.fee_estimator_constants import (
    DEFAULT_DECAY_FACTOR,
    FEE_SPACING,
    MAX_BUCKET_FEE_RATE,
    MAX_CONFIRM_BLOCKS,
    MIN_BUCKET_FEE_RATE,
    MIN_ESTIMATE_CONFIRM_RATE,
    MIN_ESTIMATE_SAMPLES,
)

FEE_ESTIMATOR_SECTION = "fee_estimator"


@dataclass(frozen=True)
class FeeEstimatorConfig:
    """
    Holds configuration values used to tune the Estimator.

    min_bucket_fee_rate  # upper bound of the lowest bucket
    max_bucket_fee_rate  # buckets are generated while their boundary stays at or below this
    fee_spacing  # ratio between two adjacent bucket boundaries
    max_confirm_blocks  # longest confirmation delay tracked, also the unconfirmed window size
    decay_factor  # applied to historical counters once per block
    min_estimate_samples  # txs a bucket range must exceed before it is considered
    min_estimate_confirm_rate  # confirmation rate a bucket range must reach
    """

    min_bucket_fee_rate: float = MIN_BUCKET_FEE_RATE
    max_bucket_fee_rate: float = MAX_BUCKET_FEE_RATE
    fee_spacing: float = FEE_SPACING
    max_confirm_blocks: int = MAX_CONFIRM_BLOCKS
    decay_factor: float = DEFAULT_DECAY_FACTOR
    min_estimate_samples: int = MIN_ESTIMATE_SAMPLES
    min_estimate_confirm_rate: float = MIN_ESTIMATE_CONFIRM_RATE

    def __post_init__(self) -> None:
        if not self.min_bucket_fee_rate > 0:
            raise ValueError(f"min_bucket_fee_rate must be > 0. Got {self.min_bucket_fee_rate}")
        if self.max_bucket_fee_rate < self.min_bucket_fee_rate:
            raise ValueError(
                f"max_bucket_fee_rate ({self.max_bucket_fee_rate}) must be >= "
                f"min_bucket_fee_rate ({self.min_bucket_fee_rate})"
            )
        if not self.fee_spacing > 1:
            raise ValueError(f"fee_spacing must be > 1. Got {self.fee_spacing}")
        if self.max_confirm_blocks < 1:
            raise ValueError(f"max_confirm_blocks must be >= 1. Got {self.max_confirm_blocks}")
        if not 0 < self.decay_factor < 1:
            raise ValueError(f"decay_factor must be in (0, 1). Got {self.decay_factor}")
        if self.min_estimate_samples < 0:
            raise ValueError(f"min_estimate_samples must be >= 0. Got {self.min_estimate_samples}")
        if not 0 < self.min_estimate_confirm_rate <= 1:
            raise ValueError(f"min_estimate_confirm_rate must be in (0, 1]. Got {self.min_estimate_confirm_rate}")

    @classmethod
    def from_dict(cls, section: Dict[str, Any]) -> FeeEstimatorConfig:
        names = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in section.items() if k in names})

