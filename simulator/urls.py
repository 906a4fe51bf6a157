# simulator/urls.py
from django.urls import path

from . import views_api as api

app_name = "simulator"

urlpatterns = [
    path("simulation",  api.run_simulation, name="run_noslash"),
    path("simulation/", api.run_simulation, name="run"),

    # Background sweeps (Celery)
    path("simulation/jobs/",                    api.create_job, name="job_create"),
    path("simulation/jobs/<str:job_id>/",        api.job_status, name="job_status"),
    path("simulation/jobs/<str:job_id>/cancel/", api.cancel_job, name="job_cancel"),
]
