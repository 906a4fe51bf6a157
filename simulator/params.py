# simulator/params.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from .categories import ReferralProbabilities
from .exceptions import InvalidSimulationParameters

# boxes per category per delivery; each box costs six uniforms
MAX_RESTOCK_QUANTITY = 10_000


def _is_int(x: Any) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


@dataclass(frozen=True)
class SimulationParams:
    """
    Everything one Monte Carlo sweep needs.

    `to_payload()` / `from_payload()` round-trip through JSON so the same
    parameters can be handed to a Celery worker.
    """
    number_of_days: int
    number_of_simulations: int
    restock_quantity: int
    referral_probabilities: ReferralProbabilities
    start_date: Optional[date] = None
    corrected_referral_mapping: bool = False
    seed: Optional[int] = field(default=None, compare=False)

    def validate(self, max_restock_quantity: int = MAX_RESTOCK_QUANTITY) -> "SimulationParams":
        errors: Dict[str, List[str]] = {}

        if not _is_int(self.number_of_days) or self.number_of_days <= 0:
            errors.setdefault("numberOfDays", []).append("Must be a positive integer.")
        if not _is_int(self.number_of_simulations) or self.number_of_simulations <= 0:
            errors.setdefault("numberOfSimulations", []).append("Must be a positive integer.")
        if not _is_int(self.restock_quantity) or self.restock_quantity < 0:
            errors.setdefault("restockQuantity", []).append("Must be a non-negative integer.")
        elif self.restock_quantity > max_restock_quantity:
            errors.setdefault("restockQuantity", []).append(f"Must be at most {max_restock_quantity}.")
        for name, value in self.referral_probabilities.as_dict().items():
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not 0.0 <= value <= 1.0:
                errors.setdefault(f"referralProbabilities.{name}", []).append("Must be between 0 and 1.")
        if self.seed is not None and (not _is_int(self.seed) or self.seed < 0):
            errors.setdefault("seed", []).append("Must be a non-negative integer.")

        if errors:
            raise InvalidSimulationParameters(errors)
        return self

    # ------------------------------------------------------------
    # JSON payloads (Celery, management command --json)
    # ------------------------------------------------------------
    def to_payload(self) -> Dict[str, Any]:
        return {
            "number_of_days": self.number_of_days,
            "number_of_simulations": self.number_of_simulations,
            "restock_quantity": self.restock_quantity,
            "referral_probabilities": self.referral_probabilities.as_dict(),
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "corrected_referral_mapping": self.corrected_referral_mapping,
            "seed": self.seed,
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SimulationParams":
        raw_date = payload.get("start_date")
        return cls(
            number_of_days=payload["number_of_days"],
            number_of_simulations=payload["number_of_simulations"],
            restock_quantity=payload["restock_quantity"],
            referral_probabilities=ReferralProbabilities(**payload["referral_probabilities"]),
            start_date=date.fromisoformat(raw_date) if raw_date else None,
            corrected_referral_mapping=bool(payload.get("corrected_referral_mapping", False)),
            seed=payload.get("seed"),
        )
