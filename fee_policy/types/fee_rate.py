from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import typing_extensions

from fee_policy.util.ints import uint64


@typing_extensions.final
@dataclass(frozen=True, order=True)
class FeeRate:
    """
    Represents a Fee Rate in shannons per virtual byte.
    Similar to 'fee per vbyte'.

    A FeeRate is never NaN, so ordering between any two instances is total and
    instances can be used as sorted map keys (bucket boundaries).
    Negative values are representable, but callers are expected not to build them.
    """

    fee_per_vbyte: float

    def __post_init__(self) -> None:
        if math.isnan(self.fee_per_vbyte):
            raise ValueError("FeeRate can not be NaN")

    @classmethod
    def from_float(cls, value: float) -> Optional[FeeRate]:
        if math.isnan(value):
            return None
        return cls(float(value))

    @classmethod
    def zero(cls) -> FeeRate:
        return cls(0.0)

    @classmethod
    def calculate(cls, fee: int, virtual_size: int) -> FeeRate:
        if virtual_size == 0:
            return cls.zero()
        return cls(fee / virtual_size)

    def add(self, other: FeeRate) -> Optional[FeeRate]:
        return FeeRate.from_float(self.fee_per_vbyte + other.fee_per_vbyte)

    def fee(self, virtual_size: int) -> uint64:
        """The fee, in shannons, a transaction of `virtual_size` pays at this rate"""
        return uint64(math.floor(self.fee_per_vbyte * virtual_size))

    def __float__(self) -> float:
        return self.fee_per_vbyte
