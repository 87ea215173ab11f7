import logging
import time
import uuid

logger = logging.getLogger(__name__)


class RequestLogMiddleware:
    """Tag each API request with an id and log its outcome."""
    PREFIX = '/api/'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not (request.path or '').startswith(self.PREFIX):
            return self.get_response(request)
        request_id = str(request.headers.get('X-Request-ID') or uuid.uuid4())
        request.request_id = request_id
        start = time.perf_counter()
        response = self.get_response(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            'request_completed method=%s path=%s status=%s elapsed_ms=%.2f request_id=%s',
            request.method, request.path, response.status_code, elapsed_ms, request_id,
        )
        response['X-Request-ID'] = request_id
        return response
