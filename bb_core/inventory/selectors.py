# bb_core/inventory/selectors.py
from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError
from django.db.models import F, QuerySet

from bb_core.common.blood_groups import BLOOD_GROUPS, is_valid_blood_group
from bb_core.inventory.models import BloodStock, DonationHistory


class StockSelector:
    @staticmethod
    def snapshot() -> dict[str, int]:
        """
        {group: units} for all 8 blood groups; groups without a ledger row read as 0.
        """
        stored = dict(BloodStock.objects.values_list("blood_group", "units"))
        return {group: stored.get(group, 0) for group in BLOOD_GROUPS}

    @staticmethod
    def rows() -> QuerySet[BloodStock]:
        return BloodStock.objects.order_by("blood_group")

    @staticmethod
    def by_group(*, blood_group: str | None) -> dict[str, Any]:
        blood_group = (blood_group or "").strip()
        if not blood_group:
            raise ValidationError("Blood group is required")
        if not is_valid_blood_group(blood_group):
            raise ValidationError(f"Invalid blood group: {blood_group}")

        stock = BloodStock.objects.filter(blood_group=blood_group).first()
        if stock is None:
            return {"blood_group": blood_group, "units": 0, "last_updated": None, "updated_by": None}
        return {
            "blood_group": stock.blood_group,
            "units": stock.units,
            "last_updated": stock.last_updated,
            "updated_by": stock.updated_by,
        }

    @staticmethod
    def low_stock() -> QuerySet[BloodStock]:
        return BloodStock.objects.filter(units__lt=F("low_stock_threshold")).order_by("units", "blood_group")


class BagSelector:
    @staticmethod
    def list_history(*, params: Any) -> QuerySet[DonationHistory]:
        """
        Query params:
          - blood_group
          - used=1|0
        """
        qs = DonationHistory.objects.all()

        blood_group = params.get("blood_group")
        if blood_group:
            qs = qs.filter(blood_group=blood_group)

        used = params.get("used")
        if used in {"1", "true", "True"}:
            qs = qs.filter(blood_used=True)
        elif used in {"0", "false", "False"}:
            qs = qs.filter(blood_used=False)

        return qs.order_by("-donation_date")

    @staticmethod
    def available_bags(*, blood_group: str | None) -> QuerySet[DonationHistory]:
        blood_group = (blood_group or "").strip()
        if not blood_group:
            raise ValidationError("Blood group is required")
        return DonationHistory.objects.filter(blood_group=blood_group, blood_used=False).order_by("-donation_date")
