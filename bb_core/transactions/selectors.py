# bb_core/transactions/selectors.py
from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError
from django.db.models import Count, Q, QuerySet, Sum
from django.utils.dateparse import parse_date, parse_datetime

from bb_core.transactions.models import BloodTransaction, TransactionType

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


def _parse_bound(value: str, name: str):
    dt = parse_datetime(value)
    if dt is not None:
        return dt, False
    d = parse_date(value)
    if d is not None:
        return d, True
    raise ValidationError({name: f"{name} is invalid. Use YYYY-MM-DD or ISO datetime."})


class TransactionSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def get(*, transaction_id) -> BloodTransaction:
        try:
            return BloodTransaction.objects.get(id=transaction_id)
        except (BloodTransaction.DoesNotExist, ValidationError):
            raise TransactionSelector.NotFound()

    @staticmethod
    def list_transactions(*, params: Any) -> QuerySet[BloodTransaction]:
        """
        Query params:
          - type
          - blood_group (matches either side of an exchange)
          - start_date / end_date (date or ISO datetime, inclusive)
          - limit (default 100)
        """
        tx_type = params.get("type")
        blood_group = params.get("blood_group")
        start = params.get("start_date")
        end = params.get("end_date")
        limit = params.get("limit")

        qs = BloodTransaction.objects.all()

        if tx_type:
            if tx_type not in TransactionType.values:
                raise ValidationError({"type": f"type must be one of {', '.join(TransactionType.values)}"})
            qs = qs.filter(type=tx_type)

        if blood_group:
            qs = qs.filter(
                Q(blood_group=blood_group) | Q(from_blood_group=blood_group) | Q(to_blood_group=blood_group)
            )

        if start:
            value, is_date = _parse_bound(start, "start_date")
            qs = qs.filter(created_at__date__gte=value) if is_date else qs.filter(created_at__gte=value)

        if end:
            value, is_date = _parse_bound(end, "end_date")
            qs = qs.filter(created_at__date__lte=value) if is_date else qs.filter(created_at__lte=value)

        try:
            limit_n = int(limit) if limit else DEFAULT_LIMIT
        except (TypeError, ValueError):
            raise ValidationError({"limit": "limit must be an integer."})
        limit_n = max(1, min(limit_n, MAX_LIMIT))

        return qs.order_by("-created_at")[:limit_n]

    @staticmethod
    def stats() -> dict[str, Any]:
        """
        Totals per type, entries vs donations per blood group, and the 10 most recent records.
        """
        by_type = [
            {"type": row["type"], "count": row["count"], "total_units": row["total_units"] or 0}
            for row in BloodTransaction.objects.values("type")
            .annotate(count=Count("id"), total_units=Sum("units"))
            .order_by("type")
        ]

        by_group = [
            {
                "blood_group": row["blood_group"],
                "entries": row["entries"] or 0,
                "donations": row["donations"] or 0,
            }
            for row in BloodTransaction.objects.filter(type__in=[TransactionType.ENTRY, TransactionType.DONATE])
            .values("blood_group")
            .annotate(
                entries=Sum("units", filter=Q(type=TransactionType.ENTRY)),
                donations=Sum("units", filter=Q(type=TransactionType.DONATE)),
            )
            .order_by("blood_group")
        ]

        recent = list(BloodTransaction.objects.order_by("-created_at")[:10])

        return {
            "total_by_type": by_type,
            "total_by_blood_group": by_group,
            "recent_transactions": recent,
        }
