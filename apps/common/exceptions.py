import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _error_payload(code, message, status_code):
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "status_code": status_code,
            "timestamp": timezone.now().isoformat(),
        },
    }


def _message_for(exc, data):
    if isinstance(exc, ValidationError):
        if isinstance(data, list) and len(data) == 1:
            return str(data[0])
        return "Validation failed"
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    return str(exc)


def api_exception_handler(exc, context):
    """
    Wrap every API failure in a uniform error envelope.

    DRF exceptions keep their status code and `default_code`. Anything else is
    an infrastructure failure: logged with traceback and reported as a generic
    500 so internals never leak to the client.
    """
    response = exception_handler(exc, context)
    request = context.get("request")
    view = context.get("view")
    user = getattr(request, "user", None)

    log_extra = {
        "user": user.pk if user is not None and user.is_authenticated else None,
        "path": request.path if request else None,
        "method": request.method if request else None,
        "view": view.__class__.__name__ if view else None,
    }

    if response is None:
        logger.exception(
            f"Unhandled API exception: {exc.__class__.__name__} - {exc}",
            extra=log_extra,
        )
        return Response(
            _error_payload(
                "internal_error",
                "An unexpected error occurred. Please try again later.",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if response.status_code >= 500:
        logger.error(
            f"API Exception: {exc.__class__.__name__} - {exc}",
            extra={**log_extra, "status_code": response.status_code},
        )
    else:
        logger.warning(
            f"API Exception: {exc.__class__.__name__} - {exc}",
            extra={**log_extra, "status_code": response.status_code},
        )

    code = getattr(exc, "default_code", "error")
    if isinstance(exc, ValidationError):
        code = "validation_failed"
    elif isinstance(exc, APIException):
        codes = exc.get_codes()
        if isinstance(codes, str):
            code = codes

    payload = _error_payload(
        code, _message_for(exc, response.data), response.status_code
    )
    if isinstance(exc, ValidationError):
        payload["error"]["field_errors"] = response.data

    response.data = payload
    return response
