from django import forms
from django.conf import settings

from .categories import ReferralProbabilities
from .params import MAX_RESTOCK_QUANTITY, SimulationParams


def _sim_limit(key: str, default: int) -> int:
    return int(getattr(settings, "FOODBANK_SIM", {}).get(key, default))


class ReferralProbabilitiesForm(forms.Form):
    """
    The nested `referralProbabilities` object. Every field is a probability.
    """
    single = forms.FloatField(min_value=0.0, max_value=1.0)
    couple = forms.FloatField(min_value=0.0, max_value=1.0)
    family = forms.FloatField(min_value=0.0, max_value=1.0)
    largeFamily = forms.FloatField(min_value=0.0, max_value=1.0)


class SimulationRequestForm(forms.Form):
    """
    Validates a simulation request body (already JSON-decoded).

    Rejects rather than clamps: out-of-range values are errors, and zero
    simulations is never accepted.
    """
    numberOfDays = forms.IntegerField(min_value=1)
    numberOfSimulations = forms.IntegerField(min_value=1)
    restockQuantity = forms.IntegerField(min_value=0)
    referralProbabilities = forms.JSONField()

    # optional knobs
    startDate = forms.DateField(required=False)
    seed = forms.IntegerField(required=False, min_value=0)
    correctedReferralMapping = forms.BooleanField(required=False)

    def clean_numberOfDays(self):
        v = self.cleaned_data.get("numberOfDays")
        limit = _sim_limit("MAX_DAYS", 3650)
        if v is not None and v > limit:
            raise forms.ValidationError(f"Number of days must be at most {limit}.")
        return v

    def clean_numberOfSimulations(self):
        v = self.cleaned_data.get("numberOfSimulations")
        limit = _sim_limit("MAX_SIMULATIONS", 10000)
        if v is not None and v > limit:
            raise forms.ValidationError(f"Number of simulations must be at most {limit}.")
        return v

    def clean_restockQuantity(self):
        v = self.cleaned_data.get("restockQuantity")
        limit = _sim_limit("MAX_RESTOCK", MAX_RESTOCK_QUANTITY)
        if v is not None and v > limit:
            raise forms.ValidationError(f"Restock quantity must be at most {limit}.")
        return v

    def clean_referralProbabilities(self):
        raw = self.cleaned_data.get("referralProbabilities")
        if not isinstance(raw, dict):
            raise forms.ValidationError("Must be an object with single, couple, family and largeFamily.")
        nested = ReferralProbabilitiesForm(raw)
        if not nested.is_valid():
            raise forms.ValidationError(
                [f"{name}: {msg}" for name, msgs in nested.errors.items() for msg in msgs]
            )
        return ReferralProbabilities(
            single=nested.cleaned_data["single"],
            couple=nested.cleaned_data["couple"],
            family=nested.cleaned_data["family"],
            large_family=nested.cleaned_data["largeFamily"],
        )

    def to_params(self) -> SimulationParams:
        if not hasattr(self, "cleaned_data") or self.errors:
            raise ValueError("Form must be valid before building parameters")
        d = self.cleaned_data
        return SimulationParams(
            number_of_days=d["numberOfDays"],
            number_of_simulations=d["numberOfSimulations"],
            restock_quantity=d["restockQuantity"],
            referral_probabilities=d["referralProbabilities"],
            start_date=d.get("startDate"),
            corrected_referral_mapping=bool(d.get("correctedReferralMapping")),
            seed=d.get("seed"),
        )
