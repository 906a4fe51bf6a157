# simulator/jobs.py
"""
Background job bookkeeping kept in the Django cache.

A job record is a small dict under `simulator:job:<id>`; the cancel flag
lives under its own key so a worker can poll it cheaply between runs.
"""
from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

QUEUED = "queued"
RUNNING = "running"
SUCCEEDED = "succeeded"
FAILED = "failed"
CANCELLED = "cancelled"

FINISHED_STATES = frozenset({SUCCEEDED, FAILED, CANCELLED})

_KEY = "simulator:job:{}"
_CANCEL_KEY = "simulator:job:{}:cancel"


def _ttl() -> int:
    return int(getattr(settings, "FOODBANK_SIM", {}).get("JOB_TTL", 3600))


def new_job_id() -> str:
    return uuid.uuid4().hex


def get_job(job_id: str) -> Optional[Dict[str, Any]]:
    return cache.get(_KEY.format(job_id))


def save_job(job_id: str, **fields: Any) -> Dict[str, Any]:
    """Merge `fields` into the job record and store it."""
    job = get_job(job_id) or {"id": job_id, "created_at": timezone.now().isoformat()}
    job.update(fields)
    job["updated_at"] = timezone.now().isoformat()
    cache.set(_KEY.format(job_id), job, _ttl())
    return job


def create_job(job_id: str, total_runs: int) -> Dict[str, Any]:
    return save_job(job_id, state=QUEUED, completed_runs=0, total_runs=total_runs, result=None, errors=None)


def request_cancel(job_id: str) -> bool:
    """Flag a job for cancellation. False if the job is unknown or already finished."""
    job = get_job(job_id)
    if job is None or job.get("state") in FINISHED_STATES:
        return False
    cache.set(_CANCEL_KEY.format(job_id), True, _ttl())
    return True


def cancel_requested(job_id: str) -> bool:
    return bool(cache.get(_CANCEL_KEY.format(job_id)))


def job_as_json(job: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "jobId": job["id"],
        "state": job.get("state"),
        "completedRuns": job.get("completed_runs", 0),
        "totalRuns": job.get("total_runs", 0),
        "result": job.get("result"),
        "errors": job.get("errors"),
        "createdAt": job.get("created_at"),
        "updatedAt": job.get("updated_at"),
    }
