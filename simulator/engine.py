# simulator/engine.py
"""
Day-by-day process model of a single food bank.

One FoodBank instance is one run: build it fresh, call advance(days), read
the summary, throw it away. The engine is plain Python and does no I/O
apart from DEBUG logging of each simulated day.

Daily order of operations (see FoodBank.step):
  1. calendar +1 day, open Mon-Thu, closed Fri-Sun
  2. open days: restock any category holding fewer than RESTOCK_THRESHOLD boxes
  3. put today's deliveries on the shelves with a fresh shelf life
  4. open days: draw today's referrals per category
  5. age every box by one day, discard the ones that hit zero (expired)
  6. hand out one box per referral, count the ones we could not serve
  7. fold today's deliveries into the running average
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Deque, Dict, List, Optional

import numpy as np

from .categories import CategoryCounts, FoodBoxCategory, ReferralProbabilities, counts_to_json, zero_counts
from .variates import SHELF_LIFE_MAX, SHELF_LIFE_MEAN, SHELF_LIFE_MIN, bounded_variates, referral_count

logger = logging.getLogger(__name__)

RESTOCK_THRESHOLD = 10

# date.weekday(): Monday == 0 ... Sunday == 6
CLOSED_WEEKDAYS = frozenset({4, 5, 6})


def is_open_on(day: date) -> bool:
    return day.weekday() not in CLOSED_WEEKDAYS


@dataclass
class FoodBox:
    category: FoodBoxCategory
    days_until_expiry: int


@dataclass(frozen=True)
class DayReport:
    """What happened on one simulated day."""
    day_index: int
    date: date
    is_open: bool
    inventory_start: CategoryCounts
    deliveries: CategoryCounts
    referrals: CategoryCounts
    expired: CategoryCounts
    fulfilled: CategoryCounts
    unfulfilled: CategoryCounts
    inventory_end: CategoryCounts

    @property
    def total_delivered(self) -> int:
        return sum(self.deliveries.values())


@dataclass(frozen=True)
class RunSummary:
    number_of_unfulfilled_referrals: int
    average_deliveries_per_day: float
    final_inventory: List[FoodBox] = field(repr=False)
    final_date: date
    days_elapsed: int
    number_of_expired_boxes: int

    def inventory_counts(self) -> CategoryCounts:
        counts = zero_counts()
        for box in self.final_inventory:
            counts[box.category] += 1
        return counts


class FoodBank:
    """
    Mutable state of one simulation run.

    `rng` is a numpy Generator (or anything with the same `random()`
    signature); one generator per run keeps runs independent.
    """

    def __init__(
        self,
        restock_quantity: int,
        probabilities: ReferralProbabilities,
        *,
        rng=None,
        start_date: Optional[date] = None,
        restock_threshold: int = RESTOCK_THRESHOLD,
        corrected_referral_mapping: bool = False,
    ):
        self.restock_quantity = int(restock_quantity)
        self.probabilities = probabilities
        self.rng = rng if rng is not None else np.random.default_rng()
        self.restock_threshold = int(restock_threshold)
        self.corrected_referral_mapping = corrected_referral_mapping

        self.current_date: date = start_date or date.today()
        self.is_open: bool = True
        self.days_elapsed = 0
        self.inventory: Dict[FoodBoxCategory, Deque[FoodBox]] = {c: deque() for c in FoodBoxCategory}

        self.deliveries_today: CategoryCounts = zero_counts()
        self.referrals_today: CategoryCounts = zero_counts()

        self.number_of_expired_boxes = 0
        self.number_of_unfulfilled_referrals = 0
        self.average_deliveries_per_day = 0.0

    # ------------------------------------------------------------
    # Inventory helpers
    # ------------------------------------------------------------
    def inventory_count(self, category: FoodBoxCategory) -> int:
        return len(self.inventory[category])

    def inventory_counts(self) -> CategoryCounts:
        return {c: len(boxes) for c, boxes in self.inventory.items()}

    def _receive(self, category: FoodBoxCategory, quantity: int) -> None:
        lives = bounded_variates(self.rng, SHELF_LIFE_MEAN, SHELF_LIFE_MIN, SHELF_LIFE_MAX, quantity)
        shelf = self.inventory[category]
        for life in lives:
            shelf.append(FoodBox(category, int(life)))

    def _expire(self) -> CategoryCounts:
        expired = zero_counts()
        for category, shelf in self.inventory.items():
            kept: Deque[FoodBox] = deque()
            for box in shelf:
                box.days_until_expiry -= 1
                if box.days_until_expiry > 0:
                    kept.append(box)
                else:
                    expired[category] += 1
            self.inventory[category] = kept
        self.number_of_expired_boxes += sum(expired.values())
        return expired

    def _fulfil(self) -> tuple[CategoryCounts, CategoryCounts]:
        fulfilled, unfulfilled = zero_counts(), zero_counts()
        for category, wanted in self.referrals_today.items():
            shelf = self.inventory[category]
            served = min(wanted, len(shelf))
            for _ in range(served):
                shelf.popleft()
            fulfilled[category] = served
            unfulfilled[category] = wanted - served
        self.number_of_unfulfilled_referrals += sum(unfulfilled.values())
        return fulfilled, unfulfilled

    def _reset_daily_counts(self) -> None:
        self.deliveries_today = zero_counts()
        self.referrals_today = zero_counts()

    # ------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------
    def step(self) -> DayReport:
        """Simulate one day and report what happened."""
        self.current_date += timedelta(days=1)
        self.is_open = is_open_on(self.current_date)
        inventory_start = self.inventory_counts()

        if self.is_open:
            for category in FoodBoxCategory:
                if inventory_start[category] < self.restock_threshold:
                    self.deliveries_today[category] = self.restock_quantity

        for category, quantity in self.deliveries_today.items():
            self._receive(category, quantity)

        if self.is_open:
            for category in FoodBoxCategory:
                self.referrals_today[category] = referral_count(
                    self.rng, category, self.probabilities, corrected=self.corrected_referral_mapping
                )

        expired = self._expire()
        fulfilled, unfulfilled = self._fulfil()

        delivered = sum(self.deliveries_today.values())
        self.average_deliveries_per_day = (
            self.average_deliveries_per_day * self.days_elapsed + delivered
        ) / (self.days_elapsed + 1)

        report = DayReport(
            day_index=self.days_elapsed,
            date=self.current_date,
            is_open=self.is_open,
            inventory_start=inventory_start,
            deliveries=dict(self.deliveries_today),
            referrals=dict(self.referrals_today),
            expired=expired,
            fulfilled=fulfilled,
            unfulfilled=unfulfilled,
            inventory_end=self.inventory_counts(),
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "day=%d date=%s open=%s delivered=%s referred=%s expired_total=%d unfulfilled_total=%d "
                "inventory=%s avg_deliveries=%.2f",
                report.day_index + 1,
                report.date.isoformat(),
                report.is_open,
                counts_to_json(report.deliveries),
                counts_to_json(report.referrals),
                self.number_of_expired_boxes,
                self.number_of_unfulfilled_referrals,
                counts_to_json(report.inventory_end),
                self.average_deliveries_per_day,
            )

        self._reset_daily_counts()
        self.days_elapsed += 1
        return report

    def advance(self, days: int) -> RunSummary:
        """Run `days` more days from the current state and return the summary."""
        for _ in range(max(0, int(days))):
            self.step()
        return self.summary()

    def summary(self) -> RunSummary:
        return RunSummary(
            number_of_unfulfilled_referrals=self.number_of_unfulfilled_referrals,
            average_deliveries_per_day=self.average_deliveries_per_day,
            final_inventory=[box for shelf in self.inventory.values() for box in shelf],
            final_date=self.current_date,
            days_elapsed=self.days_elapsed,
            number_of_expired_boxes=self.number_of_expired_boxes,
        )
