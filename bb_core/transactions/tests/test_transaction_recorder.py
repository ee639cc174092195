import pytest
from django.core.exceptions import ValidationError

from bb_core.inventory.services import StockChange
from bb_core.transactions.models import BloodTransaction, TransactionType
from bb_core.transactions.services import TransactionRecorder

pytestmark = pytest.mark.django_db


def test_record_copies_balances_from_the_ledger_change(admin_user):
    change = StockChange(blood_group="A+", previous_units=3, new_units=5)

    tx_id = TransactionRecorder().record(
        tx_type=TransactionType.ENTRY,
        change=change,
        units=2,
        actor=admin_user,
        parties={"donor_name": "Rahim", "district": "Dhaka"},
    )

    tx = BloodTransaction.objects.get(id=tx_id)
    assert (tx.blood_group, tx.previous_stock, tx.new_stock) == ("A+", 3, 5)
    assert tx.performed_by_id == admin_user.id
    assert tx.performed_by_label == "admin@bloodbank.test"
    assert tx.donor_name == "Rahim"
    assert tx.metadata == {"district": "Dhaka"}


def test_record_without_ledger_change_is_refused():
    with pytest.raises(ValidationError):
        TransactionRecorder().record(tx_type=TransactionType.DONATE, change=None, units=1)

    assert not BloodTransaction.objects.exists()


def test_exchange_needs_both_changes():
    change = StockChange(blood_group="A+", previous_units=3, new_units=1)

    with pytest.raises(ValidationError):
        TransactionRecorder().record(tx_type=TransactionType.EXCHANGE, change=change, units=2)


def test_anonymous_actor_is_recorded_as_system():
    change = StockChange(blood_group="O+", previous_units=0, new_units=1)

    tx_id = TransactionRecorder().record(tx_type=TransactionType.ENTRY, change=change, units=1)

    assert BloodTransaction.objects.get(id=tx_id).performed_by_label == "system"
