import logging
import time

from django.conf import settings

monitoring_logger = logging.getLogger("monitoring")


class PerformanceMonitoringMiddleware:
    """
    Times API requests whose path starts with one of
    ``settings.PERFORMANCE_API_PREFIXES`` and logs them under
    ``"{short_name}_performance"``.

    Requests slower than ``SLOW_REQUEST_THRESHOLD_SEC`` and server errors are
    also reported to the ``monitoring`` logger. Every timed response carries an
    ``X-Response-Time`` header.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    @staticmethod
    def _short_name(path):
        for prefix, short_name in settings.PERFORMANCE_API_PREFIXES.items():
            if path.startswith(prefix):
                return short_name
        return None

    def __call__(self, request):
        short_name = self._short_name(request.path)
        if short_name is None:
            return self.get_response(request)

        started = time.perf_counter()
        response = self.get_response(request)
        duration = time.perf_counter() - started

        logger = logging.getLogger(f"{short_name}_performance")
        line = (
            f"{request.method} {request.path} took {duration:.3f}s "
            f"- Status {response.status_code}"
        )
        if duration > settings.SLOW_REQUEST_THRESHOLD_SEC:
            logger.warning(f"Slow {short_name} request: {line}")
            monitoring_logger.warning(f"[{short_name}] slow request: {line}")
        else:
            logger.info(line)

        if response.status_code >= 500:
            monitoring_logger.error(f"[{short_name}] server error: {line}")

        response["X-Response-Time"] = f"{duration:.3f}s"
        return response
