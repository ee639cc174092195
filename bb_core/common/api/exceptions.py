# bb_core/common/api/exceptions.py

from __future__ import annotations

import logging
import uuid
from typing import Any

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Safe to call from middleware and DRF exception handler.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical error envelope for the blood bank API.
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        }
    }


class ConflictError(APIException):
    """
    409 Conflict, e.g. a duplicate unique key such as a blood bag number.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class StateError(APIException):
    """
    The requested workflow transition is not allowed from the current state.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid state transition."
    default_code = "invalid_state"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class InsufficientStockError(APIException):
    """
    A ledger withdrawal asked for more units than the blood group holds.
    The response details carry the currently available quantity.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "insufficient_stock"

    def __init__(self, *, blood_group: str, requested_units: int, available_units: int, message: str | None = None):
        self.blood_group = blood_group
        self.requested_units = requested_units
        self.available_units = available_units
        message = message or f"Insufficient stock. Only {available_units} unit(s) available"
        super().__init__(detail=message, code=self.default_code)
        # Keep numbers as numbers in the response body (DRF would coerce them to strings)
        self.detail = {
            "detail": self.detail,
            "blood_group": blood_group,
            "requested_units": requested_units,
            "available_units": available_units,
        }


class IneligibleDonorError(APIException):
    """
    A donation was refused by the eligibility rules; nothing was stored.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "ineligible_donor"

    def __init__(self, *, ineligibility_reasons: list[str], warning_messages: list[str], eligibility: dict | None = None):
        self.ineligibility_reasons = list(ineligibility_reasons)
        self.warning_messages = list(warning_messages)
        super().__init__(detail="Donor is not eligible to donate at this time", code=self.default_code)
        self.detail = {
            "detail": self.detail,
            "ineligibility_reasons": self.ineligibility_reasons,
            "warning_messages": self.warning_messages,
            "eligibility": eligibility,
        }


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, (Http404, NotFound)):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def _translate(exc: Exception) -> Exception:
    """
    Map Django-level errors raised from services onto their DRF equivalents.
    """
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "message_dict"):
            return ValidationError(exc.message_dict)
        return ValidationError({"detail": " ".join(exc.messages)})
    if isinstance(exc, ObjectDoesNotExist):
        return NotFound(str(exc) or "Not found.")
    return exc


def _flatten_detail(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    exc = _translate(exc)
    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.exception("Unhandled API error", exc_info=exc)
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)

    # DRF standardizes errors into response.data
    data = response.data

    # 1) {"detail": "..."} -> message=detail, details=None
    # 2) {"detail": "...", ...} -> message=detail, details={...without detail}
    # 3) otherwise -> message="Request failed.", details=data
    message = "Request failed."
    details = data

    if isinstance(data, dict) and "detail" in data:
        message = _flatten_detail(data.get("detail"))
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None

    return Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=response.headers,
    )
