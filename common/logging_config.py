"""
Logging configuration with request ID support
"""
import logging
import threading
import uuid

_request_state = threading.local()

REQUEST_ID_HEADER = 'HTTP_X_REQUEST_ID'


def get_request_id():
    """ID of the request being served on this thread, if any"""
    return getattr(_request_state, 'request_id', None)


class RequestIDFilter(logging.Filter):
    """
    Logging filter to add request ID to log records
    """
    def filter(self, record):
        request_id = getattr(record, 'request_id', None) or get_request_id()
        record.request_id = request_id or 'N/A'
        return True


class RequestIDMiddleware:
    """
    Middleware to attach a request ID to each request.
    Reuses an incoming X-Request-ID header, otherwise generates a short one.
    Request ID is available in request.request_id and in all log messages.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        incoming = request.META.get(REQUEST_ID_HEADER, '')[:32]
        request_id = incoming or uuid.uuid4().hex[:8]
        request.request_id = request_id
        _request_state.request_id = request_id

        try:
            response = self.get_response(request)
        finally:
            _request_state.request_id = None

        response['X-Request-ID'] = request_id
        return response

    def process_exception(self, request, exception):
        """Log exceptions with request ID"""
        request_id = getattr(request, 'request_id', 'N/A')
        logger = logging.getLogger('django.request')
        logger.error(
            f"[{request_id}] Exception: {type(exception).__name__}: {str(exception)}",
            exc_info=True,
            extra={'request_id': request_id}
        )
