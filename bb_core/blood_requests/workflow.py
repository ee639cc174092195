# bb_core/blood_requests/workflow.py
"""
Blood request lifecycle.

    pending -> active | fulfilled | cancelled
    active  -> fulfilled | cancelled
    fulfilled, cancelled: terminal

Whether the requester/donor counters were already credited is carried by the
state itself (`counters_applied`), so a fulfilment reached from a pledged
Active state has no counter effects to emit.

The approval dimension (pending -> approved | rejected) is independent of the
lifecycle and only gates public listing.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
from uuid import UUID

from django.core.exceptions import ValidationError

from bb_core.blood_requests.models import ApprovalStatus, RequestStatus
from bb_core.common.api.exceptions import StateError
from bb_core.common.workflow import AdjustStock, Effect, IncrementGiven, IncrementTaken, RecordTransaction
from bb_core.transactions.models import TransactionType

BANK_FULFILLER = "Blood Bank"


@dataclass(frozen=True)
class Pending:
    pass


@dataclass(frozen=True)
class Active:
    counters_applied: bool = False
    donor_user_id: Optional[int] = None
    donor_name: str = ""
    donor_phone: str = ""


@dataclass(frozen=True)
class Fulfilled:
    fulfilled_by: str = ""
    counters_applied: bool = True
    donor_user_id: Optional[int] = None
    donor_name: str = ""
    donor_phone: str = ""


@dataclass(frozen=True)
class Cancelled:
    counters_applied: bool = False


RequestState = Union[Pending, Active, Fulfilled, Cancelled]

_STATUS = {
    Pending: RequestStatus.PENDING,
    Active: RequestStatus.ACTIVE,
    Fulfilled: RequestStatus.FULFILLED,
    Cancelled: RequestStatus.CANCELLED,
}

_ALLOWED = {
    RequestStatus.PENDING: {RequestStatus.ACTIVE, RequestStatus.FULFILLED, RequestStatus.CANCELLED},
    RequestStatus.ACTIVE: {RequestStatus.FULFILLED, RequestStatus.CANCELLED},
    RequestStatus.FULFILLED: set(),
    RequestStatus.CANCELLED: set(),
}


@dataclass(frozen=True)
class RequestFacts:
    request_id: UUID
    blood_group: str
    units_required: int
    requester_user_id: Optional[int] = None
    requester_email: str = ""
    requester_name: str = ""
    contact_number: str = ""
    hospital_name: str = ""
    reason: str = ""


def status_of(state: RequestState) -> str:
    return _STATUS[type(state)]


def state_of(req) -> RequestState:
    donor = {"donor_user_id": req.donor_user_id, "donor_name": req.donor_name, "donor_phone": req.donor_phone}
    if req.status == RequestStatus.ACTIVE:
        return Active(counters_applied=req.counters_updated, **donor)
    if req.status == RequestStatus.FULFILLED:
        return Fulfilled(fulfilled_by=req.fulfilled_by, counters_applied=req.counters_updated, **donor)
    if req.status == RequestStatus.CANCELLED:
        return Cancelled(counters_applied=req.counters_updated)
    return Pending()


def status_fields(state: RequestState) -> dict:
    """Column values that encode a state."""
    fields = {"status": status_of(state), "counters_updated": getattr(state, "counters_applied", False)}
    if isinstance(state, (Active, Fulfilled)):
        fields.update(donor_user_id=state.donor_user_id, donor_name=state.donor_name, donor_phone=state.donor_phone)
    if isinstance(state, Fulfilled):
        fields["fulfilled_by"] = state.fulfilled_by
    return fields


def _require_pending(state: RequestState) -> None:
    if not isinstance(state, Pending):
        raise StateError(f"Blood request is not pending (current status: {status_of(state)})")


def _taken(facts: RequestFacts) -> IncrementTaken:
    return IncrementTaken(user_id=facts.requester_user_id, email=facts.requester_email)


# -------------------------
# Lifecycle transitions
# -------------------------
def donate(
    state: RequestState,
    facts: RequestFacts,
    *,
    donor_name: str,
    donor_phone: str,
    donor_user_id: Optional[int] = None,
) -> tuple[Active, list[Effect]]:
    """Direct donor-to-requester pledge: both counters are credited now."""
    _require_pending(state)
    return Active(
        counters_applied=True,
        donor_user_id=donor_user_id,
        donor_name=donor_name,
        donor_phone=donor_phone,
    ), [
        _taken(facts),
        IncrementGiven(user_id=donor_user_id, phone=donor_phone),
    ]


def donate_from_bank(
    state: RequestState,
    facts: RequestFacts,
    *,
    units: Optional[int] = None,
) -> tuple[Fulfilled, list[Effect]]:
    _require_pending(state)
    units = units or facts.units_required
    if isinstance(units, bool) or not isinstance(units, int) or units < 1:
        raise ValidationError({"units": "Units must be a positive whole number."})

    return Fulfilled(fulfilled_by=BANK_FULFILLER, counters_applied=True), [
        AdjustStock(blood_group=facts.blood_group, delta=-units),
        RecordTransaction(
            tx_type=TransactionType.DONATE,
            units=units,
            parties={
                "receiver_name": facts.requester_name,
                "receiver_phone": facts.contact_number,
                "hospital_name": facts.hospital_name,
                "notes": facts.reason,
            },
            blood_request_id=facts.request_id,
        ),
        _taken(facts),
    ]


def update_status(
    state: RequestState,
    facts: RequestFacts,
    *,
    status: str,
    fulfilled_by: str = "",
    donor_name: str = "",
    donor_phone: str = "",
) -> tuple[RequestState, list[Effect]]:
    if status not in RequestStatus.values:
        raise ValidationError({"status": "Invalid status"})

    current = status_of(state)
    if status == current:
        return state, []
    if status not in _ALLOWED[current]:
        raise StateError(f"Cannot change blood request status from {current} to {status}")

    applied = getattr(state, "counters_applied", False)
    donor_user_id = getattr(state, "donor_user_id", None)
    donor_name = donor_name or getattr(state, "donor_name", "")
    donor_phone = donor_phone or getattr(state, "donor_phone", "")

    if status == RequestStatus.ACTIVE:
        return Active(
            counters_applied=applied,
            donor_user_id=donor_user_id,
            donor_name=donor_name,
            donor_phone=donor_phone,
        ), []

    if status == RequestStatus.CANCELLED:
        return Cancelled(counters_applied=applied), []

    # Fulfilled
    fulfiller = fulfilled_by or donor_name
    effects: list[Effect] = []
    if not applied:
        effects.append(_taken(facts))
        if fulfiller and (donor_user_id is not None or donor_phone):
            effects.append(IncrementGiven(user_id=donor_user_id, phone=donor_phone))

    return Fulfilled(
        fulfilled_by=fulfiller,
        counters_applied=True,
        donor_user_id=donor_user_id,
        donor_name=donor_name,
        donor_phone=donor_phone,
    ), effects


# -------------------------
# Approval (listing gate)
# -------------------------
def review(approval_status: str, *, approve: bool) -> str:
    if approval_status == ApprovalStatus.APPROVED:
        raise StateError("Blood request already approved")
    if approval_status == ApprovalStatus.REJECTED:
        raise StateError("Blood request already rejected")
    return ApprovalStatus.APPROVED if approve else ApprovalStatus.REJECTED
