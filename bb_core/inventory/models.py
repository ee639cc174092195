# bb_core/inventory/models.py
from django.conf import settings
from django.db import models

from bb_core.common.blood_groups import BloodGroup
from bb_core.common.models import DocumentModel


def default_low_stock_threshold() -> int:
    return int(getattr(settings, "BLOOD_BANK_LOW_STOCK_THRESHOLD", 5))


class BloodStock(models.Model):
    """
    One ledger row per blood group, created by the first deposit.
    Mutated only through StockLedger.
    """
    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, unique=True)
    units = models.IntegerField(default=0)

    last_updated = models.DateTimeField(auto_now=True)
    updated_by = models.CharField(max_length=255, default="system")

    low_stock_threshold = models.PositiveIntegerField(default=default_low_stock_threshold)

    class Meta:
        db_table = "inventory_blood_stock"
        ordering = ["blood_group"]
        constraints = [
            models.CheckConstraint(condition=models.Q(units__gte=0), name="ck_stock_units_non_negative"),
        ]

    @property
    def is_low_stock(self) -> bool:
        return self.units < self.low_stock_threshold

    def __str__(self) -> str:
        return f"{self.blood_group}: {self.units}"


class BagStatus(models.TextChoices):
    AVAILABLE = "available", "Available"
    USED = "used", "Used"


class DonationHistory(DocumentModel):
    """
    One physical blood bag collected into stock (approved donation or direct entry).
    """
    blood_bag_number = models.CharField(max_length=64, unique=True)
    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, db_index=True)
    units = models.PositiveIntegerField(default=1)

    donor_name = models.CharField(max_length=255, blank=True)
    donor_phone = models.CharField(max_length=32, blank=True)
    donor_address = models.CharField(max_length=512, blank=True)
    donor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="donated_bags",
        null=True,
        blank=True,
    )
    is_registered_user = models.BooleanField(default=False)

    donation_request_id = models.UUIDField(null=True, blank=True, db_index=True)
    transaction_id = models.UUIDField(null=True, blank=True)

    donation_date = models.DateTimeField()
    approved_by = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=16, choices=BagStatus.choices, default=BagStatus.AVAILABLE, db_index=True)
    notes = models.TextField(blank=True)

    blood_used = models.BooleanField(default=False, db_index=True)
    used_for_patient_name = models.CharField(max_length=255, blank=True)
    used_for_patient_id = models.CharField(max_length=64, blank=True)
    used_for_hospital_name = models.CharField(max_length=255, blank=True)
    used_for_doctor_name = models.CharField(max_length=255, blank=True)
    used_at = models.DateTimeField(null=True, blank=True)
    used_by = models.CharField(max_length=255, blank=True)
    used_notes = models.TextField(blank=True)

    class Meta:
        db_table = "inventory_donation_history"
        ordering = ["-donation_date"]
        indexes = [
            models.Index(fields=["blood_group", "blood_used"], name="inv_bag_group_used_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.blood_bag_number} ({self.blood_group})"
