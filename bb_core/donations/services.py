# bb_core/donations/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS, transaction
from django.utils import timezone

from bb_core.common.api.exceptions import ConflictError, IneligibleDonorError
from bb_core.common.workflow import EffectRunner
from bb_core.donations import workflow
from bb_core.donations.eligibility import EligibilityResult, coerce_date, coerce_weight, evaluate_eligibility
from bb_core.donations.models import DonationRequest
from bb_core.inventory.models import DonationHistory
from bb_core.inventory.services import BagService, StockChange, StockLedger
from bb_core.transactions.services import TransactionRecorder, actor_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DonationApproval:
    donation: DonationRequest
    change: StockChange
    transaction_id: UUID
    history_recorded: bool


def _clean(value) -> str:
    return str(value).strip() if value is not None else ""


class DonationService:
    """
    Donation request workflow (submission -> admin approval/rejection).

    Approval order: ledger deposit -> entry transaction -> approved state ->
    bag history. The bag history write is best-effort: it runs in its own
    savepoint and a failure is logged without undoing the approval.
    """

    def __init__(
        self,
        *,
        using: str = DEFAULT_DB_ALIAS,
        ledger: StockLedger | None = None,
        recorder: TransactionRecorder | None = None,
        bags: BagService | None = None,
        evaluator: Callable[..., EligibilityResult] = evaluate_eligibility,
        today: Callable[[], date] | None = None,
    ):
        self.using = using
        self.ledger = ledger or StockLedger(using=using)
        self.recorder = recorder or TransactionRecorder(using=using)
        self.bags = bags or BagService(using=using)
        self.evaluator = evaluator
        self.today = today or timezone.localdate

    def _runner(self) -> EffectRunner:
        return EffectRunner(ledger=self.ledger, recorder=self.recorder, bags=self.bags, using=self.using)

    def _locked(self, donation_id) -> DonationRequest:
        return DonationRequest.objects.using(self.using).select_for_update().get(id=donation_id)

    # -------------------------
    # Submission
    # -------------------------
    def create(self, *, data: Mapping[str, Any], donor_user=None) -> DonationRequest:
        blood_group = _clean(data.get("blood_group"))
        donor_name = _clean(data.get("donor_name"))
        donor_phone = _clean(data.get("donor_phone"))
        if not blood_group or not donor_name or not donor_phone:
            raise ValidationError("Blood group, donor name, and phone are required")

        result = self.evaluator(
            {
                "blood_group": blood_group,
                "date_of_birth": data.get("date_of_birth"),
                "weight": data.get("weight"),
                "last_donation_date": data.get("last_donation_date"),
                "medical_conditions": data.get("medical_conditions"),
            },
            today=self.today(),
        )
        if not result.is_eligible:
            logger.warning("donation refused donor_phone=%s reasons=%s", donor_phone, result.ineligibility_reasons)
            raise IneligibleDonorError(
                ineligibility_reasons=result.ineligibility_reasons,
                warning_messages=result.warning_messages,
                eligibility=result.as_dict(),
            )

        try:
            units = int(data.get("units") or 1)
        except (TypeError, ValueError):
            units = 1
        if units < 1:
            raise ValidationError({"units": "Units must be a positive whole number."})

        authenticated = donor_user is not None and getattr(donor_user, "is_authenticated", False)

        donation = DonationRequest.objects.using(self.using).create(
            blood_group=blood_group,
            units=units,
            donor_name=donor_name,
            donor_phone=donor_phone,
            donor_address=_clean(data.get("donor_address")),
            donor_email=_clean(data.get("donor_email")).lower(),
            donor_user=donor_user if authenticated else None,
            date_of_birth=coerce_date(data.get("date_of_birth")),
            weight=coerce_weight(data.get("weight")),
            district=_clean(data.get("district")),
            last_donation_date=coerce_date(data.get("last_donation_date")),
            medical_conditions=_clean(data.get("medical_conditions")) or "None",
            availability=_clean(data.get("availability")) or "Available",
            notes=_clean(data.get("notes")),
            eligibility=result.as_dict(),
        )
        logger.info("donation request %s submitted (%s x%s)", donation.id, blood_group, units)
        return donation

    # -------------------------
    # Admin review
    # -------------------------
    def approve(self, *, donation_id, blood_bag_number: str, actor=None) -> DonationApproval:
        bag = _clean(blood_bag_number)
        if bag and DonationHistory.objects.using(self.using).filter(blood_bag_number=bag).exists():
            raise ConflictError("Blood bag number already exists")

        with transaction.atomic(using=self.using):
            donation = self._locked(donation_id)
            facts = workflow.DonationFacts(
                donation_id=donation.id,
                blood_group=donation.blood_group,
                units=donation.units,
                donor_name=donation.donor_name,
                donor_phone=donation.donor_phone,
                donor_email=donation.donor_email,
                donor_address=donation.donor_address,
                donor_user_id=donation.donor_user_id,
                details={
                    "date_of_birth": donation.date_of_birth,
                    "weight": donation.weight,
                    "district": donation.district,
                    "last_donation_date": donation.last_donation_date,
                    "medical_conditions": donation.medical_conditions,
                    "availability": donation.availability,
                    "notes": donation.notes,
                },
            )
            next_state, effects = workflow.approve(workflow.state_of(donation), facts, blood_bag_number=bag)

            def persist(outcome):
                now = timezone.now()
                for name, value in workflow.status_fields(next_state).items():
                    setattr(donation, name, value)
                donation.transaction_id = outcome.transaction_id
                donation.approved_by = actor_label(actor)
                donation.approved_at = now
                donation.added_to_stock_at = now
                donation.save(
                    using=self.using,
                    update_fields=[
                        "approval_status",
                        "status",
                        "blood_bag_number",
                        "transaction_id",
                        "approved_by",
                        "approved_at",
                        "added_to_stock_at",
                        "updated_at",
                    ],
                )

            outcome = self._runner().run(effects, actor=actor, persist=persist)

        logger.info(
            "donation %s approved: %s +%s (%s -> %s)",
            donation.id,
            donation.blood_group,
            donation.units,
            outcome.change.previous_units,
            outcome.change.new_units,
        )
        return DonationApproval(
            donation=donation,
            change=outcome.change,
            transaction_id=outcome.transaction_id,
            history_recorded=not outcome.failed_follow_ups,
        )

    def reject(self, *, donation_id, reason: str = "", actor=None) -> DonationRequest:
        with transaction.atomic(using=self.using):
            donation = self._locked(donation_id)
            next_state, _ = workflow.reject(workflow.state_of(donation), reason=reason)

            for name, value in workflow.status_fields(next_state).items():
                setattr(donation, name, value)
            donation.rejected_by = actor_label(actor)
            donation.rejected_at = timezone.now()
            donation.save(
                using=self.using,
                update_fields=["approval_status", "status", "rejection_reason", "rejected_by", "rejected_at", "updated_at"],
            )

        logger.info("donation %s rejected", donation.id)
        return donation

    def delete(self, *, donation_id) -> None:
        deleted, _ = DonationRequest.objects.using(self.using).filter(id=donation_id).delete()
        if not deleted:
            raise DonationRequest.DoesNotExist("Donation request not found")
        logger.info("donation request %s deleted", donation_id)
