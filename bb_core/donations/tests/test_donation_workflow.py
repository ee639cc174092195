from datetime import date

import pytest
from django.core.exceptions import ValidationError

from bb_core.common.api.exceptions import ConflictError, IneligibleDonorError, StateError
from bb_core.donations.models import DonationApprovalStatus, DonationRequest, DonationStatus
from bb_core.donations.services import DonationService
from bb_core.inventory.models import BloodStock, DonationHistory
from bb_core.inventory.services import BagService
from bb_core.transactions.models import BloodTransaction, TransactionType

pytestmark = pytest.mark.django_db

TODAY = date(2026, 6, 15)


def service(**kwargs):
    return DonationService(today=lambda: TODAY, **kwargs)


def submission(**overrides):
    data = {
        "blood_group": "A+",
        "units": 2,
        "donor_name": "Rahim",
        "donor_phone": "01700000001",
        "donor_email": "Rahim@Example.com",
        "date_of_birth": "1995-01-10",
        "weight": "62",
        "district": "Dhaka",
        "medical_conditions": "None",
    }
    data.update(overrides)
    return data


class ExplodingBags(BagService):
    def record_bag(self, **kwargs):
        raise RuntimeError("bag store unavailable")


def test_create_stores_eligibility_snapshot():
    donation = service().create(data=submission())

    assert donation.approval_status == DonationApprovalStatus.PENDING
    assert donation.donor_email == "rahim@example.com"
    assert donation.date_of_birth == date(1995, 1, 10)
    assert donation.eligibility["is_eligible"] is True
    assert donation.eligibility["checks"]["age"] == 31


def test_ineligible_weight_is_refused_and_not_persisted():
    with pytest.raises(IneligibleDonorError) as exc:
        service().create(data=submission(weight="40"))

    assert exc.value.ineligibility_reasons == ["Weight 40kg - Minimum weight required is 50 kg"]
    assert DonationRequest.objects.count() == 0


def test_approve_deposits_records_and_tracks_bag(admin_user):
    donation = service().create(data=submission())

    result = service().approve(donation_id=donation.id, blood_bag_number="BAG-777", actor=admin_user)

    donation.refresh_from_db()
    assert donation.approval_status == DonationApprovalStatus.APPROVED
    assert donation.status == DonationStatus.COMPLETED
    assert donation.blood_bag_number == "BAG-777"
    assert donation.transaction_id == result.transaction_id
    assert donation.approved_by == "admin@bloodbank.test"

    assert BloodStock.objects.get(blood_group="A+").units == 2
    tx = BloodTransaction.objects.get(id=result.transaction_id)
    assert tx.type == TransactionType.ENTRY
    assert tx.donation_request_id == donation.id
    assert tx.previous_stock + 2 == tx.new_stock

    bag = DonationHistory.objects.get(blood_bag_number="BAG-777")
    assert bag.donation_request_id == donation.id
    assert bag.transaction_id == tx.id
    assert result.history_recorded


def test_second_approval_fails_and_stock_moves_once(admin_user):
    donation = service().create(data=submission())
    service().approve(donation_id=donation.id, blood_bag_number="BAG-1", actor=admin_user)

    with pytest.raises(StateError):
        service().approve(donation_id=donation.id, blood_bag_number="BAG-2", actor=admin_user)

    assert BloodStock.objects.get(blood_group="A+").units == 2
    assert BloodTransaction.objects.count() == 1


def test_approve_requires_bag_number(admin_user):
    donation = service().create(data=submission())

    with pytest.raises(ValidationError):
        service().approve(donation_id=donation.id, blood_bag_number="  ", actor=admin_user)

    assert not BloodStock.objects.exists()


def test_approve_refuses_known_bag_number(admin_user):
    first = service().create(data=submission())
    second = service().create(data=submission(donor_phone="01700000009"))
    service().approve(donation_id=first.id, blood_bag_number="BAG-DUP", actor=admin_user)

    with pytest.raises(ConflictError):
        service().approve(donation_id=second.id, blood_bag_number="BAG-DUP", actor=admin_user)


def test_bag_history_failure_does_not_undo_approval(admin_user):
    donation = service().create(data=submission())

    result = service(bags=ExplodingBags()).approve(donation_id=donation.id, blood_bag_number="BAG-9", actor=admin_user)

    donation.refresh_from_db()
    assert donation.approval_status == DonationApprovalStatus.APPROVED
    assert BloodStock.objects.get(blood_group="A+").units == 2
    assert not result.history_recorded
    assert not DonationHistory.objects.exists()


def test_reject_has_no_ledger_effect(admin_user):
    donation = service().create(data=submission())

    service().reject(donation_id=donation.id, reason="Low haemoglobin", actor=admin_user)

    donation.refresh_from_db()
    assert donation.approval_status == DonationApprovalStatus.REJECTED
    assert donation.status == DonationStatus.CANCELLED
    assert donation.rejection_reason == "Low haemoglobin"
    assert not BloodStock.objects.exists()

    with pytest.raises(StateError):
        service().approve(donation_id=donation.id, blood_bag_number="BAG-1", actor=admin_user)
