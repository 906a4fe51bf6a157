# simulator/variates.py
"""
Random draws used by the food bank engine.

Shelf life and daily referral volume both come from here so a run's
behaviour is fully determined by the generator it is handed.
"""
from __future__ import annotations

import math
from typing import Mapping

import numpy as np

from .categories import FoodBoxCategory

# Irwin-Hall: six uniforms sum to a bell-ish shape centred on 3.0
UNIFORMS_PER_VARIATE = 6
_CENTRE = UNIFORMS_PER_VARIATE / 2

SHELF_LIFE_MEAN = 5
SHELF_LIFE_MIN = 2
SHELF_LIFE_MAX = 8

# Referral category -> probability field it reads.
# FAMILY and LARGE_FAMILY read neighbouring fields; `family` is never used.
LEGACY_REFERRAL_FIELDS: Mapping[FoodBoxCategory, str] = {
    FoodBoxCategory.SINGLE: "single",
    FoodBoxCategory.COUPLE: "couple",
    FoodBoxCategory.FAMILY: "large_family",
    FoodBoxCategory.LARGE_FAMILY: "single",
}

CORRECTED_REFERRAL_FIELDS: Mapping[FoodBoxCategory, str] = {
    c: c.value for c in FoodBoxCategory
}


def _round_half_up(x):
    return np.floor(np.asarray(x) + 0.5).astype(int)


def bounded_variate(rng, mean: float, low: int, high: int) -> int:
    """
    Integer clustered around `mean`, always within [low, high].

    Sum of six U[0,1) draws, re-centred on `mean`, clamped, then rounded
    half up.
    """
    total = float(np.sum(rng.random(UNIFORMS_PER_VARIATE)))
    value = min(high, max(low, mean + (total - _CENTRE)))
    return int(math.floor(value + 0.5))


def bounded_variates(rng, mean: float, low: int, high: int, size: int) -> np.ndarray:
    """Vectorised `bounded_variate` for a whole delivery batch."""
    if size <= 0:
        return np.zeros(0, dtype=int)
    totals = rng.random((size, UNIFORMS_PER_VARIATE)).sum(axis=1)
    values = np.clip(mean + (totals - _CENTRE), low, high)
    return _round_half_up(values)


def shelf_life(rng) -> int:
    return bounded_variate(rng, SHELF_LIFE_MEAN, SHELF_LIFE_MIN, SHELF_LIFE_MAX)


def referral_count(rng, category: FoodBoxCategory, probabilities, corrected: bool = False) -> int:
    """
    Number of referrals for `category` today: floor(U * 100 * p).

    `probabilities` is a ReferralProbabilities (or anything with the four
    snake_case attributes). The default lookup keeps the historical field
    mapping; pass `corrected=True` to read each category's own field.
    """
    fields = CORRECTED_REFERRAL_FIELDS if corrected else LEGACY_REFERRAL_FIELDS
    p = float(getattr(probabilities, fields[category]))
    return int(math.floor(float(rng.random()) * 100 * p))
