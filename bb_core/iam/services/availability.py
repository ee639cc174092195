# bb_core/iam/services/availability.py
from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, transaction
from django.utils import timezone

from bb_core.iam.models import UserProfile

logger = logging.getLogger(__name__)


def add_months(value: date, months: int) -> date:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


@dataclass(frozen=True)
class AvailabilityRefresh:
    checked: int
    became_available: int
    became_unavailable: int


def refresh_donor_availability(*, today: date | None = None, using: str = DEFAULT_DB_ALIAS) -> AvailabilityRefresh:
    """
    A donor is available again once the rest period after last_donate_date has passed.
    Only rows whose computed availability differs from the stored one are written.
    """
    today = today or timezone.localdate()
    months = int(getattr(settings, "BLOOD_BANK_DONOR_AVAILABILITY_MONTHS", 4))

    qs = UserProfile.objects.using(using).filter(last_donate_date__isnull=False).only("id", "last_donate_date", "available")

    to_available: list[int] = []
    to_unavailable: list[int] = []
    checked = 0

    for profile in qs.iterator():
        checked += 1
        is_available = today >= add_months(profile.last_donate_date, months)
        if profile.available == is_available:
            continue
        (to_available if is_available else to_unavailable).append(profile.id)

    now = timezone.now()
    with transaction.atomic(using=using):
        if to_available:
            UserProfile.objects.using(using).filter(id__in=to_available).update(available=True, updated_at=now)
        if to_unavailable:
            UserProfile.objects.using(using).filter(id__in=to_unavailable).update(available=False, updated_at=now)

    result = AvailabilityRefresh(
        checked=checked,
        became_available=len(to_available),
        became_unavailable=len(to_unavailable),
    )
    logger.info(
        "donor availability refreshed: checked=%s available=%s unavailable=%s",
        result.checked,
        result.became_available,
        result.became_unavailable,
    )
    return result
