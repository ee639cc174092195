from datetime import date
from io import StringIO

import pytest
from django.core.management import call_command

from bb_core.iam.models import UserProfile
from bb_core.iam.services.availability import add_months, refresh_donor_availability
from bb_core.iam.services.counters import CounterAccumulator

pytestmark = pytest.mark.django_db


def test_add_taken_by_email_is_case_insensitive(requester_user):
    updated = CounterAccumulator().add_taken(email="REQUESTER@bloodbank.test")

    assert updated == 1
    assert UserProfile.objects.get(user=requester_user).blood_taken == 1


def test_add_given_stamps_last_donation(donor_user):
    CounterAccumulator().add_given(phone="01700000001", donated_on=date(2026, 3, 1))

    profile = UserProfile.objects.get(user=donor_user)
    assert profile.blood_given == 1
    assert profile.last_donate_date == date(2026, 3, 1)
    assert profile.available is False


def test_unknown_party_is_a_no_op(donor_user):
    assert CounterAccumulator().add_taken(email="nobody@example.com") == 0
    assert CounterAccumulator().add_given() == 0
    assert UserProfile.objects.get(user=donor_user).blood_given == 0


def test_add_months_clamps_day():
    assert add_months(date(2026, 10, 31), 4) == date(2027, 2, 28)
    assert add_months(date(2026, 1, 15), 4) == date(2026, 5, 15)


def test_refresh_only_writes_changed_rows(donor_user, requester_user):
    UserProfile.objects.filter(user=donor_user).update(last_donate_date=date(2026, 1, 10), available=False)
    UserProfile.objects.filter(user=requester_user).update(last_donate_date=date(2026, 5, 1), available=False)

    result = refresh_donor_availability(today=date(2026, 5, 10))

    assert (result.checked, result.became_available, result.became_unavailable) == (2, 1, 0)
    assert UserProfile.objects.get(user=donor_user).available is True
    assert UserProfile.objects.get(user=requester_user).available is False


def test_refresh_marks_recent_donor_unavailable(donor_user):
    UserProfile.objects.filter(user=donor_user).update(last_donate_date=date(2026, 5, 1), available=True)

    result = refresh_donor_availability(today=date(2026, 5, 10))

    assert result.became_unavailable == 1


def test_refresh_command(donor_user):
    UserProfile.objects.filter(user=donor_user).update(last_donate_date=date(2025, 1, 1), available=False)
    out = StringIO()

    call_command("refresh_donor_availability", "--today", "2026-01-01", stdout=out)

    assert "1 became available" in out.getvalue()
    assert UserProfile.objects.get(user=donor_user).available is True


def test_user_id_takes_precedence_over_email(donor_user, requester_user):
    updated = CounterAccumulator().add_taken(user_id=donor_user.id, email=requester_user.email)

    assert updated == 1
    assert UserProfile.objects.get(user=donor_user).blood_taken == 1
    assert UserProfile.objects.get(user=requester_user).blood_taken == 0


def test_user_id_takes_precedence_over_phone(donor_user, requester_user):
    updated = CounterAccumulator().add_given(user_id=donor_user.id, phone="01700000002")

    assert updated == 1
    assert UserProfile.objects.get(user=donor_user).blood_given == 1
    assert UserProfile.objects.get(user=requester_user).blood_given == 0


def test_shared_phone_credits_a_single_profile(donor_user, requester_user):
    UserProfile.objects.filter(user=requester_user).update(phone="01700000001")

    assert CounterAccumulator().add_given(phone="01700000001") == 1
    given = UserProfile.objects.filter(user__in=[donor_user, requester_user]).values_list("blood_given", flat=True)
    assert sorted(given) == [0, 1]
