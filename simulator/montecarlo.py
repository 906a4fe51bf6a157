# simulator/montecarlo.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Iterable, Iterator, Optional

import numpy as np
from django.conf import settings

from .engine import RESTOCK_THRESHOLD, FoodBank, RunSummary
from .exceptions import SimulationCancelled
from .params import MAX_RESTOCK_QUANTITY, SimulationParams

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
CancelCheck = Callable[[], bool]


def _q2(x: float) -> float:
    """Round the decimal form of x half up to 2dp (1.005 -> 1.01, unlike round())."""
    return float(Decimal(repr(float(x))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def configured_restock_threshold() -> int:
    return int(getattr(settings, "FOODBANK_SIM", {}).get("RESTOCK_THRESHOLD", RESTOCK_THRESHOLD))


def configured_max_restock() -> int:
    return int(getattr(settings, "FOODBANK_SIM", {}).get("MAX_RESTOCK", MAX_RESTOCK_QUANTITY))


def spawn_generators(seed: Optional[int], n: int) -> Iterator[np.random.Generator]:
    """
    One independent Generator per run, created as the run starts.

    Streams are spawned one at a time from a single SeedSequence, which
    yields the same children as spawning all `n` at once: a fixed seed
    reproduces the whole sweep and no two runs share a stream.
    """
    root = np.random.SeedSequence(seed)
    for _ in range(n):
        (child,) = root.spawn(1)
        yield np.random.default_rng(child)


@dataclass(frozen=True)
class AggregateResult:
    avg_number_of_unfulfilled_referrals: float
    avg_number_of_deliveries_per_day: float
    avg_number_of_expired_boxes_of_food: float
    simulations: int

    def as_json(self) -> Dict[str, float]:
        """Wire shape expected by the front-end."""
        return {
            "avgNumberOfUnfulfilledReferrals": self.avg_number_of_unfulfilled_referrals,
            "avgNumberOfDeliveriesPerDay": self.avg_number_of_deliveries_per_day,
            "avgNumberOfExpiredBoxesOfFood": self.avg_number_of_expired_boxes_of_food,
        }


class RunningTotals:
    """Sums of the headline statistics; a run can be dropped once added."""

    def __init__(self) -> None:
        self.runs = 0
        self.unfulfilled = 0
        self.deliveries = 0.0
        self.expired = 0

    def add(self, summary: RunSummary) -> None:
        self.runs += 1
        self.unfulfilled += summary.number_of_unfulfilled_referrals
        self.deliveries += summary.average_deliveries_per_day
        self.expired += summary.number_of_expired_boxes

    def result(self) -> AggregateResult:
        n = self.runs
        if n == 0:
            raise ValueError("Cannot aggregate zero simulation runs")
        return AggregateResult(
            avg_number_of_unfulfilled_referrals=self.unfulfilled / n,
            avg_number_of_deliveries_per_day=_q2(self.deliveries / n),
            avg_number_of_expired_boxes_of_food=_q2(self.expired / n),
            simulations=n,
        )


def aggregate(summaries: Iterable[RunSummary]) -> AggregateResult:
    """Population means of the three headline statistics (sum, then divide)."""
    totals = RunningTotals()
    for s in summaries:
        totals.add(s)
    return totals.result()


def run_monte_carlo(
    params: SimulationParams,
    *,
    seed: Optional[int] = None,
    restock_threshold: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None,
    should_cancel: Optional[CancelCheck] = None,
) -> AggregateResult:
    """
    Run `params.number_of_simulations` independent food bank runs and
    average them.

    Parameters are validated up front; nothing runs if they are invalid.
    `should_cancel` is polled before each run (never mid-run) and a true
    result raises SimulationCancelled. `progress_callback(done, total)` is
    called after each completed run.
    """
    params.validate(max_restock_quantity=configured_max_restock())
    if seed is None:
        seed = params.seed
    if restock_threshold is None:
        restock_threshold = configured_restock_threshold()

    start_date = params.start_date or date.today()
    total = params.number_of_simulations
    logger.info(
        "Monte Carlo start: simulations=%d days=%d restock=%d seed=%s",
        total, params.number_of_days, params.restock_quantity, seed,
    )
    started = time.perf_counter()

    totals = RunningTotals()
    for i, rng in enumerate(spawn_generators(seed, total)):
        if should_cancel is not None and should_cancel():
            logger.info("Monte Carlo cancelled after %d of %d runs", i, total)
            raise SimulationCancelled(i, total)

        bank = FoodBank(
            params.restock_quantity,
            params.referral_probabilities,
            rng=rng,
            start_date=start_date,
            restock_threshold=restock_threshold,
            corrected_referral_mapping=params.corrected_referral_mapping,
        )
        totals.add(bank.advance(params.number_of_days))

        if progress_callback is not None:
            progress_callback(i + 1, total)

    result = totals.result()
    logger.info(
        "Monte Carlo done in %.2fs: %s",
        time.perf_counter() - started, result.as_json(),
    )
    return result
