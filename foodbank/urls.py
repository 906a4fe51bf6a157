# foodbank/urls.py
from __future__ import annotations

from django.urls import include, path

from foodbank import views as core_views

urlpatterns = [
    path("healthz", core_views.healthz, name="healthz_noslash"),
    path("healthz/", core_views.healthz, name="healthz"),
    path("api/", include("simulator.urls")),
]

handler404 = "foodbank.views.handler404"
handler500 = "foodbank.views.handler500"
