# foodbank/middleware.py
from __future__ import annotations

import logging
import re
import time
import uuid

from django.http import HttpRequest, HttpResponse
from django.utils import timezone
from django.utils.deprecation import MiddlewareMixin

access_logger = logging.getLogger("access")

# proxy-supplied ids are trusted only if they look like an id
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


# ------------------------------------------------------------------
# Request ID
# ------------------------------------------------------------------
class RequestIDMiddleware(MiddlewareMixin):
    """
    Tags every simulation request with an id so a slow sweep can be
    matched to its log lines (see RequestIDLogFilter).

    The id comes from `X-Request-ID` when a proxy or the front end set a
    sane one; otherwise a fresh uuid4 is used. It is returned on the
    response under the same header.
    """
    IN_HEADER = "HTTP_X_REQUEST_ID"
    OUT_HEADER = "X-Request-ID"

    def process_request(self, request: HttpRequest):
        incoming = request.META.get(self.IN_HEADER, "")
        request.request_id = incoming if _SAFE_REQUEST_ID.match(incoming) else str(uuid.uuid4())

    def process_response(self, request: HttpRequest, response: HttpResponse):
        rid = getattr(request, "request_id", None)
        if rid:
            response[self.OUT_HEADER] = rid
        return response


# ------------------------------------------------------------------
# Access log
# ------------------------------------------------------------------
class AccessLogMiddleware(MiddlewareMixin):
    """One `access` record per response, with wall-clock latency."""

    def process_request(self, request: HttpRequest):
        request._started = time.perf_counter()

    def process_response(self, request: HttpRequest, response: HttpResponse):
        started = getattr(request, "_started", None)
        elapsed_ms = int((time.perf_counter() - started) * 1000) if started is not None else 0
        path = request.get_full_path()
        access_logger.info(
            "http_request %s %s %s %dms",
            request.method, path, response.status_code, elapsed_ms,
            extra={
                "ts": timezone.now().isoformat(),
                "request_id": getattr(request, "request_id", None),
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "latency_ms": elapsed_ms,
                "ip": request.META.get("REMOTE_ADDR"),
            },
        )
        return response
