# simulator/tasks.py
from __future__ import annotations

import logging
from typing import Any, Dict

from celery import shared_task

from . import jobs
from .exceptions import InvalidSimulationParameters, SimulationCancelled
from .montecarlo import run_monte_carlo
from .params import SimulationParams

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def run_simulation_job(self, job_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run a Monte Carlo sweep in a worker, reporting progress through the
    job record and stopping between runs if a cancel was requested.
    """
    params = SimulationParams.from_payload(payload)
    total = params.number_of_simulations
    step = max(1, total // 100)

    def _progress(done: int, of: int) -> None:
        if done == of or done % step == 0:
            jobs.save_job(job_id, completed_runs=done)

    jobs.save_job(job_id, state=jobs.RUNNING, celery_task_id=self.request.id)
    logger.info("Job %s started (%d runs)", job_id, total)

    try:
        result = run_monte_carlo(
            params,
            progress_callback=_progress,
            should_cancel=lambda: jobs.cancel_requested(job_id),
        )
    except SimulationCancelled as exc:
        logger.info("Job %s cancelled at %d/%d", job_id, exc.completed_runs, exc.total_runs)
        job = jobs.save_job(job_id, state=jobs.CANCELLED, completed_runs=exc.completed_runs)
        return jobs.job_as_json(job)
    except InvalidSimulationParameters as exc:
        logger.warning("Job %s rejected: %s", job_id, exc.errors)
        job = jobs.save_job(job_id, state=jobs.FAILED, errors=exc.errors)
        return jobs.job_as_json(job)
    except Exception as exc:
        logger.exception("Job %s failed", job_id)
        jobs.save_job(job_id, state=jobs.FAILED, errors={"__all__": [str(exc)]})
        raise

    job = jobs.save_job(job_id, state=jobs.SUCCEEDED, completed_runs=total, result=result.as_json())
    logger.info("Job %s finished", job_id)
    return jobs.job_as_json(job)
