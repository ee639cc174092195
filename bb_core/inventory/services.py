# bb_core/inventory/services.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import F
from django.utils import timezone

from bb_core.common.api.exceptions import ConflictError, InsufficientStockError
from bb_core.common.blood_groups import is_valid_blood_group
from bb_core.inventory.models import BagStatus, BloodStock, DonationHistory
from bb_core.transactions.models import TransactionType
from bb_core.transactions.services import TransactionRecorder, actor_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockChange:
    blood_group: str
    previous_units: int
    new_units: int

    @property
    def delta(self) -> int:
        return self.new_units - self.previous_units


def _clean(value) -> str:
    return str(value).strip() if value is not None else ""


def _positive_units(units) -> int:
    if isinstance(units, bool) or not isinstance(units, int) or units < 1:
        raise ValidationError({"units": "Units must be a positive whole number."})
    return units


def _generated_bag_number() -> str:
    return f"BAG-{timezone.now():%Y%m%d%H%M%S}-{uuid.uuid4().hex[:6].upper()}"


class StockLedger:
    """
    Per-blood-group unit counter.

    Every call locks the group's row for the duration of the update, so
    concurrent deltas on one group serialize and compose. Units never go
    below zero: an over-withdrawal raises InsufficientStockError and leaves
    the stored balance untouched.
    """

    def __init__(self, *, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def _rows(self):
        return BloodStock.objects.using(self.using)

    def apply_delta(self, blood_group: str, delta: int, actor=None) -> StockChange:
        if not is_valid_blood_group(blood_group):
            raise ValidationError({"blood_group": f"Invalid blood group: {blood_group}"})
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise ValidationError({"units": "Stock delta must be a non-zero whole number."})

        with transaction.atomic(using=self.using):
            stock = self._rows().select_for_update().filter(blood_group=blood_group).first()

            if stock is None:
                if delta < 0:
                    logger.warning("withdrawal refused group=%s requested=%s available=0", blood_group, -delta)
                    raise InsufficientStockError(blood_group=blood_group, requested_units=-delta, available_units=0)
                stock, _ = self._rows().select_for_update().get_or_create(blood_group=blood_group)

            previous = stock.units
            if previous + delta < 0:
                logger.warning(
                    "withdrawal refused group=%s requested=%s available=%s", blood_group, -delta, previous
                )
                raise InsufficientStockError(blood_group=blood_group, requested_units=-delta, available_units=previous)

            self._rows().filter(pk=stock.pk).update(
                units=F("units") + delta,
                last_updated=timezone.now(),
                updated_by=actor_label(actor),
            )

        change = StockChange(blood_group=blood_group, previous_units=previous, new_units=previous + delta)
        logger.info("stock %s %+d: %s -> %s", blood_group, delta, change.previous_units, change.new_units)
        return change

    def balance(self, blood_group: str) -> int:
        row = self._rows().filter(blood_group=blood_group).values_list("units", flat=True).first()
        return row or 0


@dataclass(frozen=True)
class StockOperationResult:
    transaction_id: UUID
    change: StockChange
    to_change: Optional[StockChange] = None
    bag: Optional[DonationHistory] = None


class StockService:
    """
    Direct admin stock operations: each one is a ledger call followed by its
    transaction record, committed together.
    """

    def __init__(
        self,
        *,
        using: str = DEFAULT_DB_ALIAS,
        ledger: StockLedger | None = None,
        recorder: TransactionRecorder | None = None,
        bags: BagService | None = None,
    ):
        self.using = using
        self.ledger = ledger or StockLedger(using=using)
        self.recorder = recorder or TransactionRecorder(using=using)
        self.bags = bags or BagService(using=using)

    # -------------------------
    # Entry (deposit + bag)
    # -------------------------
    def entry(
        self,
        *,
        blood_group: str,
        units: int,
        donor_name: str,
        actor=None,
        donor_phone: str = "",
        donor_address: str = "",
        donor_email: str = "",
        blood_bag_number: str = "",
        notes: str = "",
        donor_details: Optional[dict[str, Any]] = None,
    ) -> StockOperationResult:
        if not _clean(blood_group) or not units or not _clean(donor_name):
            raise ValidationError("Blood group, units, and donor name are required")
        units = _positive_units(units)

        bag_number = _clean(blood_bag_number)
        if bag_number and DonationHistory.objects.using(self.using).filter(blood_bag_number=bag_number).exists():
            raise ConflictError("Blood bag number already exists")

        with transaction.atomic(using=self.using):
            change = self.ledger.apply_delta(blood_group, units, actor)
            tx_id = self.recorder.record(
                tx_type=TransactionType.ENTRY,
                change=change,
                units=units,
                actor=actor,
                parties={
                    "donor_name": _clean(donor_name),
                    "donor_phone": _clean(donor_phone),
                    "donor_email": _clean(donor_email),
                    "donor_address": _clean(donor_address),
                    "blood_bag_number": bag_number,
                    "notes": _clean(notes),
                    **(donor_details or {}),
                },
            )
            bag = self.bags.record_bag(
                blood_bag_number=bag_number or _generated_bag_number(),
                blood_group=blood_group,
                units=units,
                donor_name=_clean(donor_name),
                donor_phone=_clean(donor_phone),
                donor_address=_clean(donor_address),
                transaction_id=tx_id,
                approved_by=actor_label(actor),
                notes=_clean(notes),
            )

        return StockOperationResult(transaction_id=tx_id, change=change, bag=bag)

    # -------------------------
    # Donate (withdrawal to a receiver)
    # -------------------------
    def donate(
        self,
        *,
        blood_group: str,
        units: int,
        receiver_name: str,
        hospital_name: str,
        actor=None,
        receiver_phone: str = "",
        patient_id: str = "",
        needed_date: date | None = None,
        notes: str = "",
        blood_request_id: UUID | None = None,
    ) -> StockOperationResult:
        if not _clean(blood_group) or not units or not _clean(receiver_name) or not _clean(hospital_name):
            raise ValidationError("Blood group, units, receiver name, and hospital are required")
        units = _positive_units(units)

        with transaction.atomic(using=self.using):
            change = self.ledger.apply_delta(blood_group, -units, actor)
            tx_id = self.recorder.record(
                tx_type=TransactionType.DONATE,
                change=change,
                units=units,
                actor=actor,
                parties={
                    "receiver_name": _clean(receiver_name),
                    "receiver_phone": _clean(receiver_phone),
                    "hospital_name": _clean(hospital_name),
                    "patient_id": _clean(patient_id),
                    "needed_date": needed_date,
                    "notes": _clean(notes),
                },
                blood_request_id=blood_request_id,
            )

        return StockOperationResult(transaction_id=tx_id, change=change)

    # -------------------------
    # Exchange (withdraw one group, deposit another)
    # -------------------------
    def exchange(
        self,
        *,
        from_blood_group: str,
        to_blood_group: str,
        units: int,
        hospital_name: str,
        actor=None,
        patient_id: str = "",
        needed_date: date | None = None,
        notes: str = "",
    ) -> StockOperationResult:
        if not _clean(from_blood_group) or not _clean(to_blood_group) or not units or not _clean(hospital_name):
            raise ValidationError("Both blood groups, units, and hospital are required")
        if from_blood_group == to_blood_group:
            raise ValidationError("Cannot exchange same blood group")
        units = _positive_units(units)
        if not is_valid_blood_group(to_blood_group):
            raise ValidationError({"to_blood_group": f"Invalid blood group: {to_blood_group}"})

        with transaction.atomic(using=self.using):
            # Withdrawal first; the deposit is only attempted once it succeeded
            try:
                from_change = self.ledger.apply_delta(from_blood_group, -units, actor)
            except InsufficientStockError as exc:
                raise InsufficientStockError(
                    blood_group=from_blood_group,
                    requested_units=units,
                    available_units=exc.available_units,
                    message=f"Insufficient stock of {from_blood_group}. Only {exc.available_units} unit(s) available",
                ) from exc
            to_change = self.ledger.apply_delta(to_blood_group, units, actor)

            tx_id = self.recorder.record(
                tx_type=TransactionType.EXCHANGE,
                change=from_change,
                to_change=to_change,
                units=units,
                actor=actor,
                parties={
                    "hospital_name": _clean(hospital_name),
                    "patient_id": _clean(patient_id),
                    "needed_date": needed_date,
                    "notes": _clean(notes),
                },
            )

        return StockOperationResult(transaction_id=tx_id, change=from_change, to_change=to_change)

    # -------------------------
    # Disposal (expired / discarded units)
    # -------------------------
    def dispose(
        self,
        *,
        blood_group: str,
        units: int,
        reason: str,
        actor=None,
        notes: str = "",
    ) -> StockOperationResult:
        if not _clean(blood_group) or not units or not _clean(reason):
            raise ValidationError("Blood group, units, and reason are required")
        units = _positive_units(units)

        with transaction.atomic(using=self.using):
            change = self.ledger.apply_delta(blood_group, -units, actor)
            tx_id = self.recorder.record(
                tx_type=TransactionType.DISPOSAL,
                change=change,
                units=units,
                actor=actor,
                parties={"notes": _clean(notes), "reason": _clean(reason)},
            )

        return StockOperationResult(transaction_id=tx_id, change=change)


class BagService:
    """
    Physical blood bag tracking (DonationHistory rows).
    """

    def __init__(self, *, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def record_bag(
        self,
        *,
        blood_bag_number: str,
        blood_group: str,
        units: int,
        donor_name: str = "",
        donor_phone: str = "",
        donor_address: str = "",
        donor_user_id: int | None = None,
        donation_request_id: UUID | None = None,
        transaction_id: UUID | None = None,
        approved_by: str = "",
        notes: str = "",
    ) -> DonationHistory:
        return DonationHistory.objects.using(self.using).create(
            blood_bag_number=blood_bag_number,
            blood_group=blood_group,
            units=units,
            donor_name=donor_name,
            donor_phone=donor_phone,
            donor_address=donor_address,
            donor_user_id=donor_user_id,
            is_registered_user=donor_user_id is not None,
            donation_request_id=donation_request_id,
            transaction_id=transaction_id,
            donation_date=timezone.now(),
            approved_by=approved_by,
            notes=notes,
        )

    def mark_used(
        self,
        *,
        blood_bag_number: str,
        actor=None,
        patient_name: str = "",
        patient_id: str = "",
        hospital_name: str = "",
        doctor_name: str = "",
        used_at=None,
        used_by: str = "",
        notes: str = "",
    ) -> DonationHistory:
        bag_number = _clean(blood_bag_number)
        if not bag_number:
            raise ValidationError("Blood bag number is required")

        with transaction.atomic(using=self.using):
            try:
                bag = DonationHistory.objects.using(self.using).select_for_update().get(blood_bag_number=bag_number)
            except DonationHistory.DoesNotExist:
                raise DonationHistory.DoesNotExist("Blood bag not found")

            bag.blood_used = True
            bag.status = BagStatus.USED
            bag.used_for_patient_name = _clean(patient_name)
            bag.used_for_patient_id = _clean(patient_id)
            bag.used_for_hospital_name = _clean(hospital_name)
            bag.used_for_doctor_name = _clean(doctor_name)
            bag.used_at = used_at or timezone.now()
            bag.used_by = _clean(used_by) or actor_label(actor)
            bag.used_notes = _clean(notes)
            bag.save(
                using=self.using,
                update_fields=[
                    "blood_used",
                    "status",
                    "used_for_patient_name",
                    "used_for_patient_id",
                    "used_for_hospital_name",
                    "used_for_doctor_name",
                    "used_at",
                    "used_by",
                    "used_notes",
                    "updated_at",
                ],
            )

        logger.info("bag %s marked used", bag_number)
        return bag
