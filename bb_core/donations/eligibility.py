# bb_core/donations/eligibility.py
"""
Donor eligibility rules.

Every rule runs on every call; the result lists all disqualifying reasons
and all warnings rather than stopping at the first failure. The evaluator
has no I/O: "today" is a parameter so callers (and tests) pin the date.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from django.utils import timezone
from django.utils.dateparse import parse_date

from bb_core.common.blood_groups import is_valid_blood_group

MIN_AGE = 18
MAX_AGE = 65
MIN_WEIGHT_KG = 50
MIN_DAYS_BETWEEN_DONATIONS = 56

RESTRICTED_CONDITIONS = (
    "hiv",
    "hepatitis",
    "malaria",
    "tb",
    "tuberculosis",
    "heart disease",
    "cancer",
    "epilepsy",
    "diabetes",
)

_INVALID = object()


@dataclass(frozen=True)
class EligibilityChecks:
    age: Optional[int]
    weight: Optional[int]
    days_since_last_donation: Optional[int]
    has_restricted_conditions: bool


@dataclass(frozen=True)
class EligibilityResult:
    is_eligible: bool
    ineligibility_reasons: list[str] = field(default_factory=list)
    warning_messages: list[str] = field(default_factory=list)
    checks: Optional[EligibilityChecks] = None
    checked_at: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _as_date(value: Any):
    """None for missing, _INVALID for unparseable, else a date."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value).strip()[:10])
    except ValueError:
        return _INVALID
    return parsed if parsed is not None else _INVALID


def coerce_date(value: Any) -> Optional[date]:
    """Date or None; unparseable input is treated as missing."""
    parsed = _as_date(value)
    return None if parsed is _INVALID else parsed


def calculate_age(date_of_birth: date, today: date) -> int:
    """Whole years, birthday-aware (not day-count division)."""
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def days_since(last: date, today: date) -> int:
    # Absolute difference: a future last-donation date also counts as elapsed days.
    return abs((today - last).days)


def _weight_kg(value: Any):
    if value in (None, ""):
        return None
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return _INVALID
    if not math.isfinite(weight):
        return _INVALID
    return int(weight)


def coerce_weight(value: Any) -> Optional[int]:
    """Whole kilograms or None; unparseable or non-finite input is treated as missing."""
    weight = _weight_kg(value)
    return None if weight is _INVALID else weight


def _has_condition(conditions: str) -> bool:
    text = conditions.strip().lower()
    if not text or text == "none":
        return False
    return any(term in text for term in RESTRICTED_CONDITIONS)


def evaluate_eligibility(donor: Mapping[str, Any], *, today: date | None = None) -> EligibilityResult:
    """
    donor keys: blood_group, date_of_birth, weight, last_donation_date, medical_conditions.
    """
    today = today or timezone.localdate()
    reasons: list[str] = []
    warnings: list[str] = []

    # Age
    age = None
    dob = _as_date(donor.get("date_of_birth"))
    if dob is None:
        warnings.append("Date of birth not provided - age verification required")
    elif dob is _INVALID:
        reasons.append("Invalid date of birth provided")
    else:
        age = calculate_age(dob, today)
        if age < MIN_AGE:
            reasons.append(f"Age {age} - Minimum age required is {MIN_AGE} years")
        elif age > MAX_AGE:
            reasons.append(f"Age {age} - Maximum age allowed is {MAX_AGE} years")

    # Weight
    weight = _weight_kg(donor.get("weight"))
    if weight is None:
        warnings.append("Weight not provided - weight verification required")
    elif weight is _INVALID:
        reasons.append("Invalid weight provided")
        weight = None
    elif weight < MIN_WEIGHT_KG:
        reasons.append(f"Weight {weight}kg - Minimum weight required is {MIN_WEIGHT_KG} kg")

    # Interval since last donation
    elapsed = None
    last = _as_date(donor.get("last_donation_date"))
    if last is _INVALID:
        reasons.append("Invalid last donation date")
    elif last is not None:
        elapsed = days_since(last, today)
        if elapsed < MIN_DAYS_BETWEEN_DONATIONS:
            reasons.append(
                f"Only {elapsed} days since last donation - Must wait {MIN_DAYS_BETWEEN_DONATIONS - elapsed} more days "
                f"(minimum {MIN_DAYS_BETWEEN_DONATIONS} days between donations)"
            )

    # Medical history
    conditions = str(donor.get("medical_conditions") or "")
    restricted = _has_condition(conditions)
    if restricted:
        reasons.append(f"Medical condition detected: {conditions.strip()} - Requires medical clearance")

    # Blood group
    blood_group = donor.get("blood_group")
    if not blood_group:
        reasons.append("Blood group is required")
    elif not is_valid_blood_group(blood_group):
        reasons.append(f"Invalid blood group: {blood_group}")

    return EligibilityResult(
        is_eligible=not reasons,
        ineligibility_reasons=reasons,
        warning_messages=warnings,
        checks=EligibilityChecks(
            age=age,
            weight=weight,
            days_since_last_donation=elapsed,
            has_restricted_conditions=restricted,
        ),
        checked_at=timezone.now().isoformat(),
    )
