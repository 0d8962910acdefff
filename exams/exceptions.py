import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ExamError(exceptions.APIException):
    error_code = "error"


class NotFound(ExamError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    error_code = "not_found"


class AlreadySubmitted(ExamError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Exam already submitted."
    error_code = "already_submitted"


class NotActive(ExamError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Exam is not currently active."
    error_code = "not_active"


class InvalidInput(ExamError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    error_code = "invalid_input"


class Unauthorized(ExamError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not authorized to perform this action."
    error_code = "unauthorized"


class InUse(ExamError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Object is still referenced."
    error_code = "in_use"


_DRF_CODES = {
    exceptions.ValidationError: "invalid_input",
    exceptions.ParseError: "invalid_input",
    exceptions.NotAuthenticated: "not_authenticated",
    exceptions.AuthenticationFailed: "not_authenticated",
    exceptions.PermissionDenied: "unauthorized",
    exceptions.NotFound: "not_found",
}


def error_code_for(exc):
    if isinstance(exc, ExamError):
        return exc.error_code
    for exc_class, code in _DRF_CODES.items():
        if isinstance(exc, exc_class):
            return code
    return getattr(exc, "default_code", "error")


def exception_handler(exc, context):
    """DRF's handler plus a stable ``error_code`` on every error body."""
    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, Http404):
        code = "not_found"
    elif isinstance(exc, PermissionDenied):
        code = "unauthorized"
    else:
        code = error_code_for(exc)
    if isinstance(response.data, dict):
        response.data["error_code"] = code
    else:
        response.data = {"detail": response.data, "error_code": code}

    view = context.get("view")
    logger.info(
        "%s rejected with %s (%s)",
        view.__class__.__name__ if view else "request",
        code,
        response.status_code,
    )
    return response
