# simulator/categories.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict


class FoodBoxCategory(str, Enum):
    SINGLE = "single"
    COUPLE = "couple"
    FAMILY = "family"
    LARGE_FAMILY = "large_family"


CategoryCounts = Dict[FoodBoxCategory, int]


def zero_counts() -> CategoryCounts:
    return {c: 0 for c in FoodBoxCategory}


def counts_to_json(counts: CategoryCounts) -> Dict[str, int]:
    return {c.value: int(n) for c, n in counts.items()}


@dataclass(frozen=True)
class ReferralProbabilities:
    """Per-household-type referral probability, each in [0, 1]."""
    single: float
    couple: float
    family: float
    large_family: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)
