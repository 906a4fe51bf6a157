import json

RUN_URL = "/api/simulation"
JOBS_URL = "/api/simulation/jobs/"


def payload(**overrides):
    data = {
        "numberOfDays": 14,
        "numberOfSimulations": 10,
        "restockQuantity": 20,
        "referralProbabilities": {"single": 0.3, "couple": 0.2, "family": 0.25, "largeFamily": 0.1},
    }
    data.update(overrides)
    return data


def post_json(client, url, data):
    return client.post(url, data=json.dumps(data), content_type="application/json")


# ------------------------------------------------------------
# POST /api/simulation
# ------------------------------------------------------------
def test_run_returns_three_averages(client):
    r = post_json(client, RUN_URL, payload())
    assert r.status_code == 200
    data = r.json()
    assert set(data) == {
        "avgNumberOfUnfulfilledReferrals",
        "avgNumberOfDeliveriesPerDay",
        "avgNumberOfExpiredBoxesOfFood",
    }
    assert all(isinstance(v, (int, float)) for v in data.values())
    assert all(v >= 0 for v in data.values())
    assert data["avgNumberOfDeliveriesPerDay"] == round(data["avgNumberOfDeliveriesPerDay"], 2)


def test_trailing_slash_also_works(client):
    assert post_json(client, RUN_URL + "/", payload(numberOfSimulations=1)).status_code == 200


def test_monday_scenario_over_http(client):
    r = post_json(client, RUN_URL, payload(numberOfDays=1, numberOfSimulations=3, startDate="2024-01-07"))
    assert r.status_code == 200
    assert r.json()["avgNumberOfDeliveriesPerDay"] == 80.0


def test_seeded_requests_are_reproducible(client):
    body = payload(seed=77, startDate="2024-03-03")
    first = post_json(client, RUN_URL, body).json()
    second = post_json(client, RUN_URL, body).json()
    assert first == second


def test_zero_simulations_is_a_client_error(client):
    r = post_json(client, RUN_URL, payload(numberOfDays=5, numberOfSimulations=0))
    assert r.status_code == 400
    data = r.json()
    assert data["ok"] is False
    assert "numberOfSimulations" in data["errors"]


def test_bad_probability_is_a_client_error(client):
    probs = {"single": 0.3, "couple": 2, "family": 0.25, "largeFamily": 0.1}
    r = post_json(client, RUN_URL, payload(referralProbabilities=probs))
    assert r.status_code == 400
    assert "referralProbabilities" in r.json()["errors"]


def test_huge_restock_is_a_client_error(client):
    r = post_json(client, RUN_URL, payload(numberOfDays=1, numberOfSimulations=1, restockQuantity=10**9))
    assert r.status_code == 400
    assert "restockQuantity" in r.json()["errors"]


def test_invalid_json_is_rejected(client):
    r = client.post(RUN_URL, data="{not json", content_type="application/json")
    assert r.status_code == 400
    assert r.json()["errors"]["__all__"] == ["Invalid JSON."]


def test_non_object_body_is_rejected(client):
    r = post_json(client, RUN_URL, [1, 2, 3])
    assert r.status_code == 400


def test_get_is_not_allowed(client):
    assert client.get(RUN_URL).status_code == 405


def test_large_sweeps_are_sent_to_jobs(client, settings):
    settings.FOODBANK_SIM = {**settings.FOODBANK_SIM, "SYNC_WORK_LIMIT": 100}
    r = post_json(client, RUN_URL, payload(numberOfDays=50, numberOfSimulations=3))
    assert r.status_code == 400
    assert "/api/simulation/jobs/" in r.json()["errors"]["__all__"][0]


# ------------------------------------------------------------
# Background jobs (Celery runs eagerly under tests)
# ------------------------------------------------------------
def test_job_lifecycle(client):
    r = post_json(client, JOBS_URL, payload(seed=4, startDate="2024-01-07"))
    assert r.status_code == 202
    job_id = r.json()["jobId"]

    status = client.get(f"{JOBS_URL}{job_id}/")
    assert status.status_code == 200
    data = status.json()
    assert data["state"] == "succeeded"
    assert data["completedRuns"] == data["totalRuns"] == 10

    direct = post_json(client, RUN_URL, payload(seed=4, startDate="2024-01-07")).json()
    assert data["result"] == direct


def test_job_rejects_invalid_body(client):
    r = post_json(client, JOBS_URL, payload(numberOfSimulations=0))
    assert r.status_code == 400


def test_unknown_job_is_404(client):
    assert client.get(f"{JOBS_URL}nope/").status_code == 404
    assert client.post(f"{JOBS_URL}nope/cancel/").status_code == 404


def test_cancel_queued_job(client):
    from simulator import jobs

    jobs.create_job("queued1", total_runs=5)
    r = client.post(f"{JOBS_URL}queued1/cancel/")
    assert r.status_code == 202
    assert r.json()["cancelRequested"] is True
    assert jobs.cancel_requested("queued1")


def test_cancel_finished_job_conflicts(client):
    r = post_json(client, JOBS_URL, payload(numberOfSimulations=1))
    job_id = r.json()["jobId"]
    r = client.post(f"{JOBS_URL}{job_id}/cancel/")
    assert r.status_code == 409
    assert r.json()["state"] == "succeeded"


# ------------------------------------------------------------
# CORS: the browser front end runs on another origin
# ------------------------------------------------------------
FRONT_END = "http://localhost:3000"


def test_preflight_from_front_end_is_allowed(client, settings):
    settings.CORS_ALLOWED_ORIGINS = [FRONT_END]
    r = client.options(
        RUN_URL,
        HTTP_ORIGIN=FRONT_END,
        HTTP_ACCESS_CONTROL_REQUEST_METHOD="POST",
        HTTP_ACCESS_CONTROL_REQUEST_HEADERS="content-type",
    )
    assert r.status_code == 200
    assert r["Access-Control-Allow-Origin"] == FRONT_END
    assert "POST" in r["Access-Control-Allow-Methods"]
    assert "content-type" in r["Access-Control-Allow-Headers"]


def test_cross_origin_post_carries_allow_origin(client, settings):
    settings.CORS_ALLOWED_ORIGINS = [FRONT_END]
    r = client.post(
        RUN_URL,
        data=json.dumps(payload(numberOfSimulations=1)),
        content_type="application/json",
        HTTP_ORIGIN=FRONT_END,
    )
    assert r.status_code == 200
    assert r["Access-Control-Allow-Origin"] == FRONT_END


def test_unknown_origin_gets_no_allow_origin(client, settings):
    settings.CORS_ALLOWED_ORIGINS = [FRONT_END]
    r = client.post(
        RUN_URL,
        data=json.dumps(payload(numberOfSimulations=1)),
        content_type="application/json",
        HTTP_ORIGIN="http://evil.example",
    )
    assert r.status_code == 200
    assert not r.has_header("Access-Control-Allow-Origin")
