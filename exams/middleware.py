import logging
import time

logger = logging.getLogger("exams.requests")


class RequestLogMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Only the API is logged; admin pages are noisy
        if not request.path.startswith("/api/"):
            return self.get_response(request)

        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000

        # DRF authenticates inside the view, so the user is read from the
        # wrapped request it leaves behind when available
        user = getattr(getattr(response, "renderer_context", {}).get("request"), "user", None)
        logger.info(
            "%s %s -> %s (%.1fms) user=%s",
            request.method,
            request.path,
            response.status_code,
            elapsed_ms,
            user.pk if user is not None and user.is_authenticated else "-",
        )
        return response
