# bb_core/blood_requests/services.py
from __future__ import annotations

import logging
from typing import Any, Mapping

from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS, transaction
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from bb_core.blood_requests import workflow
from bb_core.blood_requests.models import BloodRequest, Urgency
from bb_core.common.blood_groups import is_valid_blood_group
from bb_core.common.permissions import is_admin
from bb_core.common.workflow import EffectOutcome, EffectRunner
from bb_core.iam.services.counters import CounterAccumulator
from bb_core.inventory.services import StockLedger
from bb_core.transactions.services import TransactionRecorder, actor_label

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "blood_group",
    "hospital_name",
    "hospital_location",
    "district",
    "contact_number",
    "reason",
    "urgency",
)


def _clean(value) -> str:
    return str(value).strip() if value is not None else ""


def _facts(req: BloodRequest) -> workflow.RequestFacts:
    return workflow.RequestFacts(
        request_id=req.id,
        blood_group=req.blood_group,
        units_required=req.units_required,
        requester_user_id=req.requested_by_id,
        requester_email=req.requester_email,
        requester_name=req.requester_name,
        contact_number=req.contact_number,
        hospital_name=req.hospital_name,
        reason=req.reason,
    )


class BloodRequestService:
    """
    Blood request workflow.

    Every transition runs in one database transaction on the locked request
    row: stock withdrawal -> transaction record -> new state -> counters. A
    failure at any step (typically insufficient stock) leaves the request
    exactly as it was.
    """

    def __init__(
        self,
        *,
        using: str = DEFAULT_DB_ALIAS,
        ledger: StockLedger | None = None,
        recorder: TransactionRecorder | None = None,
        counters: CounterAccumulator | None = None,
    ):
        self.using = using
        self.ledger = ledger or StockLedger(using=using)
        self.recorder = recorder or TransactionRecorder(using=using)
        self.counters = counters or CounterAccumulator(using=using)

    def _runner(self) -> EffectRunner:
        return EffectRunner(ledger=self.ledger, recorder=self.recorder, counters=self.counters, using=self.using)

    def _locked(self, request_id) -> BloodRequest:
        return BloodRequest.objects.using(self.using).select_for_update().get(id=request_id)

    def _apply(self, req: BloodRequest, next_state, effects, *, actor=None) -> EffectOutcome:
        """Run the transition's effects and write the new state in between."""

        def persist(outcome: EffectOutcome) -> None:
            for name, value in workflow.status_fields(next_state).items():
                setattr(req, name, value)
            if isinstance(next_state, workflow.Fulfilled) and req.fulfilled_at is None:
                req.fulfilled_at = timezone.now()
            if outcome.transaction_id is not None:
                req.transaction_id = outcome.transaction_id
            req.save(using=self.using)

        return self._runner().run(effects, actor=actor, persist=persist)

    # -------------------------
    # Create
    # -------------------------
    def create(self, *, data: Mapping[str, Any], requested_by=None) -> BloodRequest:
        values = {name: _clean(data.get(name)) for name in REQUIRED_FIELDS}
        if not all(values.values()):
            raise ValidationError("All fields are required")
        if not is_valid_blood_group(values["blood_group"]):
            raise ValidationError({"blood_group": f"Invalid blood group: {values['blood_group']}"})
        if values["urgency"] not in Urgency.values:
            raise ValidationError({"urgency": "urgency must be normal, urgent or emergency."})

        try:
            units = int(data.get("units_required") or 1)
        except (TypeError, ValueError):
            raise ValidationError({"units_required": "units_required must be a positive whole number."})
        if units < 1:
            raise ValidationError({"units_required": "units_required must be a positive whole number."})

        authenticated = requested_by is not None and getattr(requested_by, "is_authenticated", False)
        email = _clean(data.get("requester_email")).lower()
        if not email and authenticated:
            email = (requested_by.email or "").lower()

        req = BloodRequest.objects.using(self.using).create(
            **values,
            units_required=units,
            requester_name=_clean(data.get("requester_name")),
            requester_email=email,
            requested_by=requested_by if authenticated else None,
        )
        logger.info("blood request %s created (%s x%s, %s)", req.id, req.blood_group, units, req.urgency)
        return req

    # -------------------------
    # Approval gate
    # -------------------------
    def approve(self, *, request_id, actor=None) -> BloodRequest:
        return self._review(request_id=request_id, approve=True, actor=actor)

    def reject(self, *, request_id, reason: str = "", actor=None) -> BloodRequest:
        return self._review(request_id=request_id, approve=False, reason=reason, actor=actor)

    def _review(self, *, request_id, approve: bool, reason: str = "", actor=None) -> BloodRequest:
        with transaction.atomic(using=self.using):
            req = self._locked(request_id)
            req.approval_status = workflow.review(req.approval_status, approve=approve)
            req.rejection_reason = "" if approve else _clean(reason)
            req.reviewed_by = actor_label(actor)
            req.reviewed_at = timezone.now()
            req.save(
                using=self.using,
                update_fields=["approval_status", "rejection_reason", "reviewed_by", "reviewed_at", "updated_at"],
            )
        logger.info("blood request %s %s", req.id, req.approval_status)
        return req

    # -------------------------
    # Lifecycle
    # -------------------------
    def donate(self, *, request_id, donor, donor_name: str = "", donor_phone: str = "") -> BloodRequest:
        if is_admin(donor):
            raise PermissionDenied("Admins fulfil requests from the blood bank, not as donors.")

        profile = getattr(donor, "bb_profile", None)
        name = _clean(donor_name) or donor.get_full_name() or donor.get_username()
        phone = _clean(donor_phone) or (profile.phone if profile else "")
        if not phone:
            raise ValidationError({"donor_phone": "Donor phone is required"})

        with transaction.atomic(using=self.using):
            req = self._locked(request_id)
            next_state, effects = workflow.donate(
                workflow.state_of(req),
                _facts(req),
                donor_name=name,
                donor_phone=phone,
                donor_user_id=donor.pk,
            )
            self._apply(req, next_state, effects, actor=donor)

        logger.info("blood request %s pledged by donor user=%s", req.id, donor.pk)
        return req

    def donate_from_bank(self, *, request_id, units: int | None = None, actor=None) -> tuple[BloodRequest, EffectOutcome]:
        with transaction.atomic(using=self.using):
            req = self._locked(request_id)
            next_state, effects = workflow.donate_from_bank(workflow.state_of(req), _facts(req), units=units)
            outcome = self._apply(req, next_state, effects, actor=actor)

        logger.info(
            "blood request %s fulfilled from bank: %s %s -> %s",
            req.id,
            req.blood_group,
            outcome.change.previous_units,
            outcome.change.new_units,
        )
        return req, outcome

    def update_status(
        self,
        *,
        request_id,
        status: str,
        fulfilled_by: str = "",
        donor_name: str = "",
        donor_phone: str = "",
        actor=None,
    ) -> BloodRequest:
        with transaction.atomic(using=self.using):
            req = self._locked(request_id)
            state = workflow.state_of(req)
            next_state, effects = workflow.update_status(
                state,
                _facts(req),
                status=_clean(status),
                fulfilled_by=_clean(fulfilled_by),
                donor_name=_clean(donor_name),
                donor_phone=_clean(donor_phone),
            )
            if next_state is not state:
                self._apply(req, next_state, effects, actor=actor)

        logger.info("blood request %s status -> %s", req.id, req.status)
        return req

    def delete(self, *, request_id) -> None:
        deleted, _ = BloodRequest.objects.using(self.using).filter(id=request_id).delete()
        if not deleted:
            raise BloodRequest.DoesNotExist("Blood request not found")
        logger.info("blood request %s deleted", request_id)
