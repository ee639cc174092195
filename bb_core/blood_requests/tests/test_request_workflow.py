import pytest
from django.core.exceptions import ValidationError

from bb_core.blood_requests import workflow
from bb_core.blood_requests.models import RequestStatus
from bb_core.common.api.exceptions import StateError
from bb_core.common.workflow import AdjustStock, IncrementGiven, IncrementTaken, RecordTransaction

FACTS = workflow.RequestFacts(
    request_id="00000000-0000-0000-0000-000000000001",
    blood_group="O-",
    units_required=2,
    requester_user_id=7,
    requester_email="requester@bloodbank.test",
)


def test_pledge_credits_both_parties_once():
    state, effects = workflow.donate(workflow.Pending(), FACTS, donor_name="X", donor_phone="Y", donor_user_id=9)

    assert state == workflow.Active(counters_applied=True, donor_user_id=9, donor_name="X", donor_phone="Y")
    assert effects == [
        IncrementTaken(user_id=7, email="requester@bloodbank.test"),
        IncrementGiven(user_id=9, phone="Y"),
    ]


def test_fulfilling_a_pledged_request_has_no_counter_effects():
    pledged, _ = workflow.donate(workflow.Pending(), FACTS, donor_name="X", donor_phone="Y")

    state, effects = workflow.update_status(pledged, FACTS, status=RequestStatus.FULFILLED)

    assert isinstance(state, workflow.Fulfilled)
    assert state.fulfilled_by == "X"
    assert effects == []


def test_direct_fulfilment_credits_requester_and_known_donor():
    state, effects = workflow.update_status(
        workflow.Pending(),
        FACTS,
        status=RequestStatus.FULFILLED,
        fulfilled_by="Walk-in donor",
        donor_phone="01900000000",
    )

    assert state.counters_applied
    assert effects == [
        IncrementTaken(user_id=7, email="requester@bloodbank.test"),
        IncrementGiven(user_id=None, phone="01900000000"),
    ]


def test_direct_fulfilment_without_fulfiller_credits_requester_only():
    _, effects = workflow.update_status(workflow.Pending(), FACTS, status=RequestStatus.FULFILLED)

    assert effects == [IncrementTaken(user_id=7, email="requester@bloodbank.test")]


def test_bank_fulfilment_withdraws_then_records_then_credits():
    state, effects = workflow.donate_from_bank(workflow.Pending(), FACTS)

    assert state == workflow.Fulfilled(fulfilled_by="Blood Bank", counters_applied=True)
    assert [type(e) for e in effects] == [AdjustStock, RecordTransaction, IncrementTaken]
    assert effects[0] == AdjustStock(blood_group="O-", delta=-2)
    assert effects[1].tx_type == "donate"


@pytest.mark.parametrize(
    "state",
    [workflow.Active(), workflow.Fulfilled(), workflow.Cancelled()],
)
def test_pledge_and_bank_fulfilment_require_pending(state):
    with pytest.raises(StateError):
        workflow.donate(state, FACTS, donor_name="X", donor_phone="Y")
    with pytest.raises(StateError):
        workflow.donate_from_bank(state, FACTS)


def test_unknown_status_is_invalid():
    with pytest.raises(ValidationError):
        workflow.update_status(workflow.Pending(), FACTS, status="archived")


def test_terminal_states_do_not_move():
    with pytest.raises(StateError):
        workflow.update_status(workflow.Fulfilled(), FACTS, status=RequestStatus.CANCELLED)
    with pytest.raises(StateError):
        workflow.update_status(workflow.Cancelled(), FACTS, status=RequestStatus.ACTIVE)


def test_active_cannot_go_back_to_pending():
    with pytest.raises(StateError):
        workflow.update_status(workflow.Active(), FACTS, status=RequestStatus.PENDING)


def test_same_status_is_a_no_op():
    state = workflow.Active(counters_applied=True)

    next_state, effects = workflow.update_status(state, FACTS, status=RequestStatus.ACTIVE)

    assert next_state is state
    assert effects == []


def test_review_is_one_shot():
    assert workflow.review("pending", approve=True) == "approved"
    assert workflow.review("pending", approve=False) == "rejected"
    with pytest.raises(StateError):
        workflow.review("approved", approve=False)
