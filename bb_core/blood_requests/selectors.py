# bb_core/blood_requests/selectors.py
from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from bb_core.blood_requests.models import ApprovalStatus, BloodRequest, RequestStatus, Urgency
from bb_core.common.permissions import is_admin

_TRUTHY = {"1", "true", "yes"}


def _choice(params: Any, name: str, choices) -> str | None:
    value = params.get(name)
    if not value:
        return None
    if value not in choices.values:
        raise ValidationError({name: f"{name} must be one of {', '.join(choices.values)}"})
    return value


class BloodRequestSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def get(*, request_id) -> BloodRequest:
        try:
            return BloodRequest.objects.get(id=request_id)
        except (BloodRequest.DoesNotExist, ValidationError):
            raise BloodRequestSelector.NotFound()

    @staticmethod
    def list_requests(*, params: Any, user=None) -> QuerySet[BloodRequest]:
        """
        Public board: approved and not cancelled.
        Admins may pass all=1 to see every request.

        Query params:
          - blood_group
          - district (case-insensitive)
          - status, urgency, approval_status
        """
        qs = BloodRequest.objects.all()

        if not (is_admin(user) and str(params.get("all", "")).lower() in _TRUTHY):
            qs = qs.filter(approval_status=ApprovalStatus.APPROVED).exclude(status=RequestStatus.CANCELLED)

        blood_group = params.get("blood_group")
        if blood_group:
            qs = qs.filter(blood_group=blood_group)

        district = params.get("district")
        if district:
            qs = qs.filter(district__iexact=district.strip())

        status = _choice(params, "status", RequestStatus)
        if status:
            qs = qs.filter(status=status)

        urgency = _choice(params, "urgency", Urgency)
        if urgency:
            qs = qs.filter(urgency=urgency)

        approval_status = _choice(params, "approval_status", ApprovalStatus)
        if approval_status:
            qs = qs.filter(approval_status=approval_status)

        return qs.order_by("-created_at")

    @staticmethod
    def for_requester(*, email: str | None) -> QuerySet[BloodRequest]:
        email = (email or "").strip()
        if not email:
            raise ValidationError("Email is required")
        return BloodRequest.objects.filter(requester_email__iexact=email).order_by("-created_at")
