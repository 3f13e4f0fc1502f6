import logging

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotFound,
    PermissionDenied,
    Throttled,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

__all__ = [
    "Conflict",
    "Forbidden",
    "NotFound",
    "ValidationError",
    "custom_exception_handler",
]


class Conflict(APIException):
    """The request is valid but clashes with the current state of a resource."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = _("The request conflicts with the current state.")
    default_code = "conflict"


# Actor lacks the capability for the requested operation
Forbidden = PermissionDenied


THROTTLE_MESSAGES = {
    "conversation_initiate": "Too many chat requests. Please wait before contacting more sellers.",
    "message_send": "You are sending messages too quickly. Please slow down.",
    "sale_action": "Too many sale actions. Please wait a moment and try again.",
    "seller_rating": "Too many rating attempts. Please try again later.",
    "listing_create": "Too many listings created. Please wait before posting again.",
    "complaint_create": "Too many reports submitted. Please wait before reporting again.",
}


def _first_message(data):
    """Pull a single human readable message out of DRF's error payload."""
    if isinstance(data, dict):
        if "detail" in data:
            return str(data["detail"])
        if not data:
            return "Invalid request."
        field, errors = next(iter(data.items()))
        message = _first_message(errors)
        if field == "non_field_errors":
            return message
        return f"{field}: {message}"
    if isinstance(data, list):
        return _first_message(data[0]) if data else "Invalid request."
    return str(data)


def custom_exception_handler(exc, context):
    """
    Render every API error in the standard envelope:

        {"status": "error", "status_code": int, "message": str, "data": ...}

    Throttled errors get a per-scope message and ``retry_after``. Anything
    DRF does not know how to handle is logged and reported as a 500.
    """
    response = exception_handler(exc, context)
    view = context.get("view", None)

    if response is None:
        logger.exception(
            f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}"
        )
        return Response(
            {
                "status": "error",
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "message": "An internal error occurred. Please try again later.",
                "data": None,
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, Throttled):
        throttles = [] if view is None else getattr(view, "get_throttles", lambda: [])()
        scope = None
        if throttles:
            scope = getattr(throttles[0], "scope", None)

        wait_seconds = int(exc.wait) if exc.wait is not None else None

        if scope in THROTTLE_MESSAGES:
            detail = THROTTLE_MESSAGES[scope]
        elif wait_seconds is not None:
            detail = f"Request rate limit exceeded. Please wait {wait_seconds} seconds and try again."
        else:
            detail = "Request rate limit exceeded. Please try again later."

        response.data = {
            "status": "error",
            "status_code": status.HTTP_429_TOO_MANY_REQUESTS,
            "message": detail,
            "retry_after": wait_seconds,
        }
        response.status_code = status.HTTP_429_TOO_MANY_REQUESTS
        return response

    errors = response.data
    field_errors = (
        errors if isinstance(errors, dict) and "detail" not in errors else None
    )
    response.data = {
        "status": "error",
        "status_code": response.status_code,
        "message": _first_message(errors),
        "data": field_errors,
    }
    return response
