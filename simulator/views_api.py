from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from . import jobs
from .exceptions import InvalidSimulationParameters
from .forms import SimulationRequestForm
from .montecarlo import run_monte_carlo
from .tasks import run_simulation_job

logger = logging.getLogger(__name__)


# ============================================================
# Helpers
# ============================================================
def _read_json(request: HttpRequest) -> Tuple[Optional[Dict[str, Any]], Optional[JsonResponse]]:
    """Decode a JSON object body, or return a ready-made 400."""
    try:
        body = json.loads(request.body.decode("utf-8") or "{}")
    except (UnicodeDecodeError, ValueError):
        return None, _bad_request({"__all__": ["Invalid JSON."]})
    if not isinstance(body, dict):
        return None, _bad_request({"__all__": ["Request body must be a JSON object."]})
    return body, None


def _bad_request(errors: Dict[str, Any]) -> JsonResponse:
    return JsonResponse({"ok": False, "errors": errors}, status=400)


def _form_errors(form: SimulationRequestForm) -> Dict[str, Any]:
    return {field: list(msgs) for field, msgs in form.errors.items()}


def _sync_work_limit() -> int:
    return int(getattr(settings, "FOODBANK_SIM", {}).get("SYNC_WORK_LIMIT", 2_000_000))


# ============================================================
# API views
# ============================================================
@csrf_exempt
@require_POST
def run_simulation(request: HttpRequest) -> JsonResponse:
    """
    POST JSON to run a Monte Carlo sweep synchronously:
      {
        "numberOfDays": 30,
        "numberOfSimulations": 100,
        "restockQuantity": 20,
        "referralProbabilities": {"single": .3, "couple": .2, "family": .2, "largeFamily": .1},
        "startDate": "2024-01-07",      # optional
        "seed": 42,                     # optional
        "correctedReferralMapping": false   # optional
      }
    Responds with the three averaged statistics.
    """
    body, error = _read_json(request)
    if error is not None:
        return error

    form = SimulationRequestForm(body)
    if not form.is_valid():
        return _bad_request(_form_errors(form))
    params = form.to_params()

    work = params.number_of_days * params.number_of_simulations
    limit = _sync_work_limit()
    if work > limit:
        return _bad_request({
            "__all__": [
                f"numberOfDays x numberOfSimulations is {work}, above the synchronous limit of {limit}. "
                "Submit it to /api/simulation/jobs/ instead."
            ]
        })

    try:
        result = run_monte_carlo(params)
    except InvalidSimulationParameters as exc:
        return _bad_request(exc.errors)

    return JsonResponse(result.as_json(), status=200)


@csrf_exempt
@require_POST
def create_job(request: HttpRequest) -> JsonResponse:
    """Validate and queue a sweep for a Celery worker; poll the returned jobId."""
    body, error = _read_json(request)
    if error is not None:
        return error

    form = SimulationRequestForm(body)
    if not form.is_valid():
        return _bad_request(_form_errors(form))
    params = form.to_params()

    job_id = jobs.new_job_id()
    jobs.create_job(job_id, total_runs=params.number_of_simulations)
    run_simulation_job.delay(job_id, params.to_payload())
    logger.info("Queued job %s (%d x %d)", job_id, params.number_of_simulations, params.number_of_days)

    job = jobs.get_job(job_id) or {"id": job_id, "state": jobs.QUEUED}
    return JsonResponse({"ok": True, **jobs.job_as_json(job)}, status=202)


@require_GET
def job_status(request: HttpRequest, job_id: str) -> JsonResponse:
    job = jobs.get_job(job_id)
    if job is None:
        return JsonResponse({"ok": False, "error": "Job not found."}, status=404)
    return JsonResponse({"ok": True, **jobs.job_as_json(job)}, status=200)


@csrf_exempt
@require_POST
def cancel_job(request: HttpRequest, job_id: str) -> JsonResponse:
    job = jobs.get_job(job_id)
    if job is None:
        return JsonResponse({"ok": False, "error": "Job not found."}, status=404)
    if not jobs.request_cancel(job_id):
        return JsonResponse(
            {"ok": False, "error": f"Job already {job.get('state')}.", **jobs.job_as_json(job)},
            status=409,
        )
    return JsonResponse({"ok": True, "jobId": job_id, "cancelRequested": True}, status=202)
