# bb_core/transactions/models.py
from django.conf import settings
from django.db import models

from bb_core.common.blood_groups import BloodGroup
from bb_core.common.models import DocumentModel


class TransactionType(models.TextChoices):
    ENTRY = "entry", "Entry"
    DONATE = "donate", "Donate"
    EXCHANGE = "exchange", "Exchange"
    DISPOSAL = "disposal", "Disposal"


class BloodTransaction(DocumentModel):
    """
    Immutable stock movement record.
    previous_stock/new_stock are the ledger balances at the instant of the paired update;
    for an exchange they describe the "from" side and to_* the "to" side.
    """
    type = models.CharField(max_length=16, choices=TransactionType.choices, db_index=True)

    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, blank=True, db_index=True)
    from_blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, blank=True)
    to_blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, blank=True)

    units = models.PositiveIntegerField()

    previous_stock = models.IntegerField()
    new_stock = models.IntegerField()
    to_previous_stock = models.IntegerField(null=True, blank=True)
    to_new_stock = models.IntegerField(null=True, blank=True)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="blood_transactions",
        null=True,
        blank=True,
    )
    performed_by_label = models.CharField(max_length=255, default="system")

    # Parties
    donor_name = models.CharField(max_length=255, blank=True)
    donor_phone = models.CharField(max_length=32, blank=True)
    donor_email = models.CharField(max_length=255, blank=True)
    donor_address = models.CharField(max_length=512, blank=True)
    blood_bag_number = models.CharField(max_length=64, blank=True)
    receiver_name = models.CharField(max_length=255, blank=True)
    receiver_phone = models.CharField(max_length=32, blank=True)
    hospital_name = models.CharField(max_length=255, blank=True)
    patient_id = models.CharField(max_length=64, blank=True)
    needed_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)  # donor biographical extras

    status = models.CharField(max_length=16, default="completed")

    donation_request_id = models.UUIDField(null=True, blank=True, db_index=True)
    blood_request_id = models.UUIDField(null=True, blank=True, db_index=True)

    class Meta:
        db_table = "transactions_blood_transaction"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["type", "created_at"], name="tx_type_created_idx"),
            models.Index(fields=["blood_group", "created_at"], name="tx_group_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(units__gt=0), name="ck_tx_units_positive"),
        ]

    def __str__(self) -> str:
        group = self.blood_group or f"{self.from_blood_group}->{self.to_blood_group}"
        return f"{self.type} {self.units} x {group}"
