"""Domain errors shared by the POS services and their API rendering.

Services raise these plain exceptions; ``api_exception_handler`` turns them
into ``{"detail", "code"}`` responses so views stay free of try/except blocks.
Anything unexpected is logged with its traceback and rendered as a generic 500.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger("pos.errors")


class DomainError(Exception):
    """Base class for failures surfaced verbatim to the caller."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Unable to complete the operation."
    code = "error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(DomainError):
    default_detail = "Invalid input."
    code = "validation_error"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    code = "not_found"


class InsufficientStock(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Insufficient stock."
    code = "insufficient_stock"


class NoBranchAssigned(DomainError):
    default_detail = "The user has no branch assigned."
    code = "no_branch_assigned"


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The record conflicts with an existing one."
    code = "conflict"


class Unauthorized(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action."
    code = "unauthorized"


GENERIC_ERROR_DETAIL = "Something went wrong. Please try again."


def api_exception_handler(exc, context):
    """DRF exception handler aware of ``DomainError``.

    DRF's own exceptions (serializer validation, auth, 404) keep their default
    rendering. Unknown exceptions are logged and hidden behind a safe message.
    """

    if isinstance(exc, DomainError):
        return Response({"detail": exc.detail, "code": exc.code}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    logger.exception(
        "api.unhandled_error",
        extra={"event": "api.unhandled_error", "view": type(view).__name__ if view else None},
    )
    return Response(
        {"detail": GENERIC_ERROR_DETAIL, "code": "server_error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
