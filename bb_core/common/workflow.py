# bb_core/common/workflow.py
"""
Side effects requested by workflow transitions.

Transition functions (blood_requests.workflow, donations.workflow) are pure:
they take the current state and return (next_state, effects). Services hand
the effects to EffectRunner, which executes them against the injected
ledger / recorder / counters in a fixed order:

    stock changes -> transaction record -> persist new state -> follow-ups

Follow-ups (counter increments, bag bookkeeping) only run once the new state
has been written.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from uuid import UUID

from django.db import DEFAULT_DB_ALIAS, transaction

logger = logging.getLogger(__name__)


class Effect:
    pass


class FollowUp(Effect):
    pass


@dataclass(frozen=True)
class AdjustStock(Effect):
    blood_group: str
    delta: int


@dataclass(frozen=True)
class RecordTransaction(Effect):
    tx_type: str
    units: int
    parties: dict[str, Any] = field(default_factory=dict)
    donation_request_id: Optional[UUID] = None
    blood_request_id: Optional[UUID] = None


@dataclass(frozen=True)
class IncrementTaken(FollowUp):
    user_id: Optional[int] = None
    email: str = ""


@dataclass(frozen=True)
class IncrementGiven(FollowUp):
    user_id: Optional[int] = None
    phone: str = ""


@dataclass(frozen=True)
class RecordBag(FollowUp):
    blood_bag_number: str
    blood_group: str
    units: int
    donor_name: str = ""
    donor_phone: str = ""
    donor_address: str = ""
    donor_user_id: Optional[int] = None
    donation_request_id: Optional[UUID] = None


@dataclass
class EffectOutcome:
    changes: list = field(default_factory=list)
    transaction_id: Optional[UUID] = None
    failed_follow_ups: list = field(default_factory=list)

    @property
    def change(self):
        return self.changes[0] if self.changes else None


class EffectRunner:
    def __init__(self, *, ledger, recorder, counters=None, bags=None, using: str = DEFAULT_DB_ALIAS):
        self.ledger = ledger
        self.recorder = recorder
        self.counters = counters
        self.bags = bags
        self.using = using

    def run(self, effects: list[Effect], *, actor=None, persist: Callable[[EffectOutcome], None]) -> EffectOutcome:
        outcome = EffectOutcome()
        persisted = False

        for effect in effects:
            if isinstance(effect, FollowUp) and not persisted:
                persist(outcome)
                persisted = True
            self._run_one(effect, actor=actor, outcome=outcome)

        if not persisted:
            persist(outcome)

        return outcome

    def _run_one(self, effect: Effect, *, actor, outcome: EffectOutcome) -> None:
        if isinstance(effect, AdjustStock):
            outcome.changes.append(self.ledger.apply_delta(effect.blood_group, effect.delta, actor))

        elif isinstance(effect, RecordTransaction):
            change, to_change = (outcome.changes + [None, None])[:2]
            outcome.transaction_id = self.recorder.record(
                tx_type=effect.tx_type,
                change=change,
                to_change=to_change,
                units=effect.units,
                actor=actor,
                parties=effect.parties,
                donation_request_id=effect.donation_request_id,
                blood_request_id=effect.blood_request_id,
            )

        elif isinstance(effect, IncrementTaken):
            self.counters.add_taken(user_id=effect.user_id, email=effect.email)

        elif isinstance(effect, IncrementGiven):
            self.counters.add_given(user_id=effect.user_id, phone=effect.phone)

        elif isinstance(effect, RecordBag):
            self._best_effort(effect, outcome, lambda: self.bags.record_bag(
                blood_bag_number=effect.blood_bag_number,
                blood_group=effect.blood_group,
                units=effect.units,
                donor_name=effect.donor_name,
                donor_phone=effect.donor_phone,
                donor_address=effect.donor_address,
                donor_user_id=effect.donor_user_id,
                donation_request_id=effect.donation_request_id,
                transaction_id=outcome.transaction_id,
                approved_by=getattr(actor, "email", "") or getattr(actor, "username", "") or "",
            ))

        else:
            raise TypeError(f"Unsupported effect: {effect!r}")

    def _best_effort(self, effect: FollowUp, outcome: EffectOutcome, call: Callable[[], Any]) -> None:
        # Savepoint: a failure here must not roll back the enclosing workflow write
        try:
            with transaction.atomic(using=self.using):
                call()
        except Exception:
            logger.exception("best-effort follow-up failed: %r", effect)
            outcome.failed_follow_ups.append(effect)
