# bb_core/donations/selectors.py
from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from bb_core.donations.models import DonationApprovalStatus, DonationRequest, DonationStatus


class DonationSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def get(*, donation_id) -> DonationRequest:
        try:
            return DonationRequest.objects.get(id=donation_id)
        except (DonationRequest.DoesNotExist, ValidationError):
            raise DonationSelector.NotFound()

    @staticmethod
    def list_requests(*, params: Any) -> QuerySet[DonationRequest]:
        """
        Query params:
          - blood_group
          - district (case-insensitive)
          - approval_status: pending | approved | rejected
          - status: pending | completed | cancelled
        """
        qs = DonationRequest.objects.all()

        blood_group = params.get("blood_group")
        if blood_group:
            qs = qs.filter(blood_group=blood_group)

        district = params.get("district")
        if district:
            qs = qs.filter(district__iexact=district.strip())

        approval_status = params.get("approval_status")
        if approval_status:
            if approval_status not in DonationApprovalStatus.values:
                raise ValidationError({"approval_status": "approval_status must be pending, approved or rejected."})
            qs = qs.filter(approval_status=approval_status)

        status = params.get("status")
        if status:
            if status not in DonationStatus.values:
                raise ValidationError({"status": "status must be pending, completed or cancelled."})
            qs = qs.filter(status=status)

        return qs.order_by("-created_at")

    @staticmethod
    def pending() -> QuerySet[DonationRequest]:
        return DonationRequest.objects.filter(approval_status=DonationApprovalStatus.PENDING).order_by("-created_at")
