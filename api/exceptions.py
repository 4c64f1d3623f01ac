"""
Maps application exceptions onto HTTP responses.

Every error body has the shape ``{"success": false, "code", "message", "details"}``.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import (
    BaseApplicationException, ValidationError, NotFoundError, BusinessLogicError, StorageFailureError,
)

logger = logging.getLogger(__name__)

STATUS_BY_EXCEPTION = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (BusinessLogicError, status.HTTP_409_CONFLICT),
    (StorageFailureError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: BaseApplicationException) -> int:
    for exc_class, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(code, message, details=None) -> dict:
    return {'success': False, 'code': code, 'message': message, 'details': details or {}}


def application_exception_handler(exc, context):
    """REST_FRAMEWORK['EXCEPTION_HANDLER']"""
    if isinstance(exc, BaseApplicationException):
        status_code = status_for(exc)
        view = context.get('view')
        view_name = view.__class__.__name__ if view else 'unknown'
        if isinstance(exc, StorageFailureError):
            logger.error(f"Storage failure in {view_name}: {exc.message} {exc.details}", exc_info=exc)
            return Response(error_body(exc.code, StorageFailureError.default_message), status=status_code)
        logger.info(f"{exc.__class__.__name__} in {view_name}: {exc.message}")
        return Response(error_body(exc.code, exc.message, exc.details), status=status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    if isinstance(data, dict) and set(data) == {'detail'}:
        message, details = str(data['detail']), {}
    elif isinstance(data, dict):
        message, details = "Validation failed", data
    else:
        message, details = "Validation failed", {'non_field_errors': data}
    code = getattr(exc, 'default_code', 'error')
    response.data = error_body(str(code).upper(), message, details)
    return response
