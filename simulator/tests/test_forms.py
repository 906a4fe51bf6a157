from datetime import date

import pytest

from simulator.categories import ReferralProbabilities
from simulator.forms import SimulationRequestForm


def body(**overrides):
    data = {
        "numberOfDays": 30,
        "numberOfSimulations": 50,
        "restockQuantity": 20,
        "referralProbabilities": {"single": 0.3, "couple": 0.2, "family": 0.25, "largeFamily": 0.1},
    }
    data.update(overrides)
    return data


def test_valid_body_builds_params():
    form = SimulationRequestForm(body(startDate="2024-01-07", seed=3, correctedReferralMapping=True))
    assert form.is_valid(), form.errors
    params = form.to_params()
    assert params.number_of_days == 30
    assert params.number_of_simulations == 50
    assert params.restock_quantity == 20
    assert params.referral_probabilities == ReferralProbabilities(0.3, 0.2, 0.25, 0.1)
    assert params.start_date == date(2024, 1, 7)
    assert params.seed == 3
    assert params.corrected_referral_mapping is True


def test_optional_fields_default():
    form = SimulationRequestForm(body())
    assert form.is_valid(), form.errors
    params = form.to_params()
    assert params.start_date is None
    assert params.seed is None
    assert params.corrected_referral_mapping is False


def test_zero_restock_is_allowed():
    assert SimulationRequestForm(body(restockQuantity=0)).is_valid()


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"numberOfDays": 0}, "numberOfDays"),
        ({"numberOfSimulations": 0}, "numberOfSimulations"),
        ({"numberOfSimulations": -2}, "numberOfSimulations"),
        ({"restockQuantity": -1}, "restockQuantity"),
        ({"numberOfDays": 2.5}, "numberOfDays"),
        ({"seed": -1}, "seed"),
        ({"startDate": "not-a-date"}, "startDate"),
    ],
)
def test_bad_scalars_are_rejected(overrides, field):
    form = SimulationRequestForm(body(**overrides))
    assert not form.is_valid()
    assert field in form.errors


def test_missing_fields_are_required():
    form = SimulationRequestForm({})
    assert not form.is_valid()
    assert set(form.errors) == {"numberOfDays", "numberOfSimulations", "restockQuantity", "referralProbabilities"}


def test_probability_out_of_range_is_not_clamped():
    probs = {"single": 1.5, "couple": 0.2, "family": 0.25, "largeFamily": 0.1}
    form = SimulationRequestForm(body(referralProbabilities=probs))
    assert not form.is_valid()
    assert any(msg.startswith("single:") for msg in form.errors["referralProbabilities"])


def test_probability_object_must_be_complete():
    form = SimulationRequestForm(body(referralProbabilities={"single": 0.5}))
    assert not form.is_valid()
    messages = form.errors["referralProbabilities"]
    assert any(m.startswith("largeFamily:") for m in messages)


def test_probabilities_must_be_an_object():
    form = SimulationRequestForm(body(referralProbabilities=[0.1, 0.2]))
    assert not form.is_valid()
    assert "referralProbabilities" in form.errors


def test_upper_bounds_come_from_settings(settings):
    settings.FOODBANK_SIM = {**settings.FOODBANK_SIM, "MAX_DAYS": 10, "MAX_SIMULATIONS": 5}
    form = SimulationRequestForm(body(numberOfDays=11, numberOfSimulations=6))
    assert not form.is_valid()
    assert {"numberOfDays", "numberOfSimulations"} <= set(form.errors)


def test_huge_restock_quantity_is_rejected():
    form = SimulationRequestForm(body(numberOfDays=1, numberOfSimulations=1, restockQuantity=10**9))
    assert not form.is_valid()
    assert "restockQuantity" in form.errors


def test_restock_bound_comes_from_settings(settings):
    settings.FOODBANK_SIM = {**settings.FOODBANK_SIM, "MAX_RESTOCK": 30}
    assert SimulationRequestForm(body(restockQuantity=30)).is_valid()
    form = SimulationRequestForm(body(restockQuantity=31))
    assert not form.is_valid()
    assert form.errors["restockQuantity"] == ["Restock quantity must be at most 30."]


def test_to_params_requires_valid_form():
    form = SimulationRequestForm(body(numberOfDays=0))
    form.is_valid()
    with pytest.raises(ValueError):
        form.to_params()
