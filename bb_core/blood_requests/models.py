from django.conf import settings
from django.db import models

from bb_core.common.blood_groups import BloodGroup
from bb_core.common.models import DocumentModel


class Urgency(models.TextChoices):
    NORMAL = "normal", "Normal"
    URGENT = "urgent", "Urgent"
    EMERGENCY = "emergency", "Emergency"


class RequestStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACTIVE = "active", "Active"
    FULFILLED = "fulfilled", "Fulfilled"
    CANCELLED = "cancelled", "Cancelled"


class ApprovalStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class BloodRequest(DocumentModel):
    """
    A recipient's request for blood.

    `status` is the fulfilment lifecycle, `approval_status` only gates public
    listing. `counters_updated` records that the requester/donor lifetime
    counters were already incremented for this request.
    """
    # Requester
    requester_name = models.CharField(max_length=255, blank=True)
    requester_email = models.CharField(max_length=255, blank=True, db_index=True)
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="blood_requests",
        null=True,
        blank=True,
    )

    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, db_index=True)
    units_required = models.PositiveIntegerField(default=1)

    hospital_name = models.CharField(max_length=255)
    hospital_location = models.CharField(max_length=255)
    district = models.CharField(max_length=128, db_index=True)
    contact_number = models.CharField(max_length=32)
    reason = models.TextField()
    urgency = models.CharField(max_length=16, choices=Urgency.choices, default=Urgency.NORMAL)

    status = models.CharField(max_length=16, choices=RequestStatus.choices, default=RequestStatus.PENDING, db_index=True)
    approval_status = models.CharField(
        max_length=16,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
        db_index=True,
    )
    rejection_reason = models.TextField(blank=True)
    reviewed_by = models.CharField(max_length=255, blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)

    # Donor / fulfilment
    donor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="pledged_requests",
        null=True,
        blank=True,
    )
    donor_name = models.CharField(max_length=255, blank=True)
    donor_phone = models.CharField(max_length=32, blank=True)
    fulfilled_by = models.CharField(max_length=255, blank=True)
    fulfilled_at = models.DateTimeField(null=True, blank=True)
    transaction_id = models.UUIDField(null=True, blank=True)

    counters_updated = models.BooleanField(default=False)

    class Meta:
        db_table = "blood_requests_blood_request"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["approval_status", "status", "created_at"], name="req_visibility_idx"),
            models.Index(fields=["blood_group", "district"], name="req_group_district_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(units_required__gte=1), name="ck_request_units_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.blood_group} x{self.units_required} @ {self.hospital_name} ({self.status})"
