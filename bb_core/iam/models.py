# bb_core/iam/models.py
from django.conf import settings
from django.db import models

from bb_core.common.blood_groups import BloodGroup
from bb_core.common.models import TimeStampedModel


class UserProfile(TimeStampedModel):
    """
    Donor-facing profile anchored to Django's AUTH_USER_MODEL.

    The blood bank core never rewrites these rows wholesale: it only issues
    atomic increments on the counters and stamps last_donate_date.
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="bb_profile")

    phone = models.CharField(max_length=32, blank=True)
    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, blank=True)
    district = models.CharField(max_length=128, blank=True)

    blood_given = models.PositiveIntegerField(default=0)
    blood_taken = models.PositiveIntegerField(default=0)

    last_donate_date = models.DateField(null=True, blank=True)
    available = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "iam_user_profile"
        indexes = [
            models.Index(fields=["blood_group", "available"], name="iam_profile_group_avail_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user.get_username()} ({self.blood_group or '-'})"
