# bb_core/donations/models.py
from django.conf import settings
from django.db import models

from bb_core.common.blood_groups import BloodGroup
from bb_core.common.models import DocumentModel


class DonationApprovalStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class DonationStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class DonationRequest(DocumentModel):
    """
    A donor's offer to give blood. Only eligible submissions are ever stored;
    the eligibility snapshot taken at submission is kept unchanged for audit.
    """
    # Donor
    donor_name = models.CharField(max_length=255)
    donor_phone = models.CharField(max_length=32)
    donor_email = models.CharField(max_length=255, blank=True, db_index=True)
    donor_address = models.CharField(max_length=512, blank=True)
    donor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="donation_requests",
        null=True,
        blank=True,
    )
    date_of_birth = models.DateField(null=True, blank=True)
    weight = models.PositiveIntegerField(null=True, blank=True)
    district = models.CharField(max_length=128, blank=True)
    last_donation_date = models.DateField(null=True, blank=True)
    medical_conditions = models.CharField(max_length=512, default="None")
    availability = models.CharField(max_length=64, default="Available")
    notes = models.TextField(blank=True)

    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, db_index=True)
    units = models.PositiveIntegerField(default=1)

    approval_status = models.CharField(
        max_length=16,
        choices=DonationApprovalStatus.choices,
        default=DonationApprovalStatus.PENDING,
        db_index=True,
    )
    status = models.CharField(
        max_length=16,
        choices=DonationStatus.choices,
        default=DonationStatus.PENDING,
        db_index=True,
    )

    eligibility = models.JSONField(default=dict)

    # Approval
    blood_bag_number = models.CharField(max_length=64, blank=True)
    transaction_id = models.UUIDField(null=True, blank=True)
    approved_by = models.CharField(max_length=255, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    added_to_stock_at = models.DateTimeField(null=True, blank=True)

    # Rejection
    rejection_reason = models.TextField(blank=True)
    rejected_by = models.CharField(max_length=255, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "donations_donation_request"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["approval_status", "created_at"], name="don_approval_created_idx"),
            models.Index(fields=["blood_group", "district"], name="don_group_district_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(units__gte=1), name="ck_donation_units_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.donor_name} {self.blood_group} x{self.units} ({self.approval_status})"
