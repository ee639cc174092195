# bb_core/common/blood_groups.py
from django.db import models


class BloodGroup(models.TextChoices):
    A_POS = "A+", "A+"
    A_NEG = "A-", "A-"
    B_POS = "B+", "B+"
    B_NEG = "B-", "B-"
    AB_POS = "AB+", "AB+"
    AB_NEG = "AB-", "AB-"
    O_POS = "O+", "O+"
    O_NEG = "O-", "O-"


# Canonical ordering used by every stock snapshot
BLOOD_GROUPS = [g.value for g in BloodGroup]


def is_valid_blood_group(value) -> bool:
    return isinstance(value, str) and value in BLOOD_GROUPS
