# bb_core/transactions/services.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS

from bb_core.transactions.models import BloodTransaction, TransactionType

logger = logging.getLogger(__name__)

# Party keys stored in dedicated columns; anything else lands in metadata
PARTY_FIELDS = (
    "donor_name",
    "donor_phone",
    "donor_email",
    "donor_address",
    "blood_bag_number",
    "receiver_name",
    "receiver_phone",
    "hospital_name",
    "patient_id",
    "needed_date",
    "notes",
)


def actor_label(actor) -> str:
    """
    Human-readable actor for audit columns: email, then username, else "system".
    """
    if actor is None or not getattr(actor, "is_authenticated", False):
        return "system"
    return getattr(actor, "email", "") or getattr(actor, "username", "") or "system"


class TransactionRecorder:
    """
    Append-only writer for the stock movement trail.

    A record is always built from the StockChange returned by the ledger call
    it documents, so an entry cannot exist for a mutation that did not happen.
    """

    def __init__(self, *, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def record(
        self,
        *,
        tx_type: str,
        change,
        units: int,
        actor=None,
        to_change=None,
        parties: Optional[Dict[str, Any]] = None,
        donation_request_id: UUID | None = None,
        blood_request_id: UUID | None = None,
    ) -> UUID:
        if tx_type not in TransactionType.values:
            raise ValidationError({"type": f"Unknown transaction type: {tx_type}"})
        if change is None:
            raise ValidationError("A transaction must reference the ledger change it records.")

        fields: Dict[str, Any] = {
            "type": tx_type,
            "units": units,
            "previous_stock": change.previous_units,
            "new_stock": change.new_units,
            "performed_by_label": actor_label(actor),
            "donation_request_id": donation_request_id,
            "blood_request_id": blood_request_id,
        }
        if actor is not None and getattr(actor, "is_authenticated", False):
            fields["performed_by_id"] = actor.pk

        if tx_type == TransactionType.EXCHANGE:
            if to_change is None:
                raise ValidationError("An exchange must reference both ledger changes.")
            fields.update(
                from_blood_group=change.blood_group,
                to_blood_group=to_change.blood_group,
                to_previous_stock=to_change.previous_units,
                to_new_stock=to_change.new_units,
            )
        else:
            fields["blood_group"] = change.blood_group

        metadata: Dict[str, Any] = {}
        for key, value in (parties or {}).items():
            if value is None:
                continue
            if key in PARTY_FIELDS:
                fields[key] = value
            else:
                metadata[key] = value.isoformat() if isinstance(value, (date, datetime)) else value
        fields["metadata"] = metadata

        tx = BloodTransaction.objects.using(self.using).create(**fields)

        logger.info(
            "transaction recorded id=%s type=%s units=%s stock %s->%s",
            tx.id,
            tx_type,
            units,
            change.previous_units,
            change.new_units,
        )
        return tx.id
