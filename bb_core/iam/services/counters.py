# bb_core/iam/services/counters.py
from __future__ import annotations

import logging
from datetime import date

from django.db import DEFAULT_DB_ALIAS
from django.db.models import F, Q
from django.utils import timezone

from bb_core.iam.models import UserProfile

logger = logging.getLogger(__name__)


class CounterAccumulator:
    """
    Lifetime blood counters on UserProfile.

    Only ever issues single-statement F() increments; never reads a counter
    back to rewrite it. A party that has no profile (anonymous requester,
    walk-in donor) is a logged no-op, not an error.
    """

    def __init__(self, *, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def _profiles(self, *, user_id: int | None = None, email: str | None = None, phone: str | None = None):
        """
        Resolve at most one profile: user_id wins, then email, then phone.
        A lower-precedence key is never consulted once a higher one is given.
        """
        profiles = UserProfile.objects.using(self.using)
        if user_id is not None:
            lookup = Q(user_id=user_id)
        elif email and email.strip():
            lookup = Q(user__email__iexact=email.strip())
        elif phone and phone.strip():
            lookup = Q(phone=phone.strip())
        else:
            return profiles.none()

        pk = profiles.filter(lookup).order_by("pk").values_list("pk", flat=True).first()
        if pk is None:
            return profiles.none()
        return profiles.filter(pk=pk)

    def add_taken(self, *, user_id: int | None = None, email: str | None = None, units: int = 1) -> int:
        updated = self._profiles(user_id=user_id, email=email).update(
            blood_taken=F("blood_taken") + units,
            updated_at=timezone.now(),
        )
        if not updated:
            logger.warning("blood_taken not incremented: no profile for user_id=%s email=%s", user_id, email)
        return updated

    def add_given(
        self,
        *,
        user_id: int | None = None,
        phone: str | None = None,
        donated_on: date | None = None,
        units: int = 1,
    ) -> int:
        updated = self._profiles(user_id=user_id, phone=phone).update(
            blood_given=F("blood_given") + units,
            last_donate_date=donated_on or timezone.localdate(),
            available=False,
            updated_at=timezone.now(),
        )
        if not updated:
            logger.warning("blood_given not incremented: no profile for user_id=%s phone=%s", user_id, phone)
        return updated
