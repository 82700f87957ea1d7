from __future__ import annotations

MIN_BUCKET_FEE_RATE = 1000.0  # Upper bound of the first bucket, shannons per vbyte
MAX_BUCKET_FEE_RATE = 1e7  # No bucket boundary above this value

FEE_SPACING = 1.05  # bucket increase by 1.05

# Track confirm delays up to MAX_CONFIRM_BLOCKS blocks
MAX_CONFIRM_BLOCKS = 1000

MIN_ESTIMATE_SAMPLES = 20  # Require more than 20 txs in the bucket range for statistical significance
MIN_ESTIMATE_CONFIRM_RATE = 0.85  # Require 85 % success rate for target confirmations

# half life each 100 blocks
DEFAULT_DECAY_FACTOR = 0.993
