# foodbank/views.py
from __future__ import annotations

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET


# ==============================================================================
# Health & error handlers
# ==============================================================================
@require_GET
def healthz(_request: HttpRequest) -> JsonResponse:
    """Liveness probe. Never touches the simulator."""
    return JsonResponse({"status": "ok"})


def _error(request: HttpRequest, status: int, message: str) -> JsonResponse:
    return JsonResponse(
        {"ok": False, "error": message, "request_id": getattr(request, "request_id", None)},
        status=status,
    )


def handler404(request: HttpRequest, exception=None) -> JsonResponse:
    return _error(request, 404, "Not found.")


def handler500(request: HttpRequest) -> JsonResponse:
    return _error(request, 500, "Internal server error.")
