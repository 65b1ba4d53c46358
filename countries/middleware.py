import logging
import time

from django.conf import settings
from django.db import DatabaseError

from .models import RequestLog

logger = logging.getLogger("countries.requests")


class RequestLogMiddleware:
    """Log every request to the console and, optionally, to request_logs."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        start = time.perf_counter()
        response = self.get_response(request)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 3)

        if request.path != "/favicon.ico":
            self._log(request, response, elapsed_ms)
        return response

    def _log(self, request, response, elapsed_ms):
        status_code = response.status_code
        level = logging.ERROR if status_code >= 500 else logging.WARNING if status_code >= 400 else logging.INFO
        logger.log(level, "%s %s %s %.3f ms", request.method, request.get_full_path(), status_code, elapsed_ms)

        if not settings.REQUEST_LOG_TO_DB:
            return
        try:
            RequestLog.objects.create(
                method=request.method,
                path=request.get_full_path(),
                status_code=status_code,
                ip_address=request.META.get("REMOTE_ADDR") or None,
                user_agent=request.META.get("HTTP_USER_AGENT", ""),
                response_time_ms=elapsed_ms,
            )
        except DatabaseError as exc:
            logger.warning("Could not store request log: %s", exc)
