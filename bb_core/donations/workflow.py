# bb_core/donations/workflow.py
"""
Donation request lifecycle: Pending -> Approved | Rejected (both terminal).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
from uuid import UUID

from django.core.exceptions import ValidationError

from bb_core.common.api.exceptions import StateError
from bb_core.common.workflow import AdjustStock, Effect, RecordBag, RecordTransaction
from bb_core.donations.models import DonationApprovalStatus, DonationStatus
from bb_core.transactions.models import TransactionType


@dataclass(frozen=True)
class Pending:
    pass


@dataclass(frozen=True)
class Approved:
    blood_bag_number: str
    transaction_id: Optional[UUID] = None


@dataclass(frozen=True)
class Rejected:
    reason: str = ""


DonationState = Union[Pending, Approved, Rejected]


@dataclass(frozen=True)
class DonationFacts:
    """Immutable request data the transitions need."""
    donation_id: UUID
    blood_group: str
    units: int
    donor_name: str
    donor_phone: str
    donor_email: str = ""
    donor_address: str = ""
    donor_user_id: Optional[int] = None
    details: Optional[dict] = None


def state_of(donation) -> DonationState:
    if donation.approval_status == DonationApprovalStatus.APPROVED:
        return Approved(blood_bag_number=donation.blood_bag_number, transaction_id=donation.transaction_id)
    if donation.approval_status == DonationApprovalStatus.REJECTED:
        return Rejected(reason=donation.rejection_reason)
    return Pending()


def status_fields(state: DonationState) -> dict:
    """Column values that encode a state."""
    if isinstance(state, Approved):
        return {
            "approval_status": DonationApprovalStatus.APPROVED,
            "status": DonationStatus.COMPLETED,
            "blood_bag_number": state.blood_bag_number,
        }
    if isinstance(state, Rejected):
        return {
            "approval_status": DonationApprovalStatus.REJECTED,
            "status": DonationStatus.CANCELLED,
            "rejection_reason": state.reason,
        }
    return {"approval_status": DonationApprovalStatus.PENDING, "status": DonationStatus.PENDING}


def _require_pending(state: DonationState) -> None:
    if isinstance(state, Approved):
        raise StateError("Donation request already approved")
    if isinstance(state, Rejected):
        raise StateError("Donation request already rejected")


def approve(state: DonationState, facts: DonationFacts, *, blood_bag_number: str) -> tuple[Approved, list[Effect]]:
    bag = (blood_bag_number or "").strip()
    if not bag:
        raise ValidationError({"blood_bag_number": "Blood bag number is required"})
    _require_pending(state)

    parties = {
        "donor_name": facts.donor_name,
        "donor_phone": facts.donor_phone,
        "donor_email": facts.donor_email,
        "donor_address": facts.donor_address,
        "blood_bag_number": bag,
        **(facts.details or {}),
    }
    return Approved(blood_bag_number=bag), [
        AdjustStock(blood_group=facts.blood_group, delta=facts.units),
        RecordTransaction(
            tx_type=TransactionType.ENTRY,
            units=facts.units,
            parties=parties,
            donation_request_id=facts.donation_id,
        ),
        RecordBag(
            blood_bag_number=bag,
            blood_group=facts.blood_group,
            units=facts.units,
            donor_name=facts.donor_name,
            donor_phone=facts.donor_phone,
            donor_address=facts.donor_address,
            donor_user_id=facts.donor_user_id,
            donation_request_id=facts.donation_id,
        ),
    ]


def reject(state: DonationState, *, reason: str = "") -> tuple[Rejected, list[Effect]]:
    _require_pending(state)
    return Rejected(reason=(reason or "").strip()), []
