import pytest
from django.core.exceptions import ValidationError

from bb_core.common.api.exceptions import ConflictError, InsufficientStockError
from bb_core.inventory.models import BagStatus, BloodStock, DonationHistory
from bb_core.inventory.services import BagService, StockService
from bb_core.transactions.models import BloodTransaction, TransactionType

pytestmark = pytest.mark.django_db


def test_entry_records_transaction_and_bag(admin_user):
    result = StockService().entry(
        blood_group="A+",
        units=2,
        donor_name="Walk-in donor",
        donor_phone="01900000000",
        blood_bag_number="BAG-001",
        actor=admin_user,
        donor_details={"weight": 62},
    )

    tx = BloodTransaction.objects.get(id=result.transaction_id)
    assert tx.type == TransactionType.ENTRY
    assert (tx.previous_stock, tx.new_stock) == (0, 2)
    assert tx.blood_bag_number == "BAG-001"
    assert tx.metadata == {"weight": 62}

    bag = DonationHistory.objects.get(blood_bag_number="BAG-001")
    assert bag.transaction_id == tx.id
    assert bag.status == BagStatus.AVAILABLE


def test_entry_generates_bag_number_when_missing():
    result = StockService().entry(blood_group="B+", units=1, donor_name="Anon")

    assert result.bag.blood_bag_number.startswith("BAG-")


def test_entry_refuses_duplicate_bag_number():
    StockService().entry(blood_group="B+", units=1, donor_name="One", blood_bag_number="DUP-1")

    with pytest.raises(ConflictError):
        StockService().entry(blood_group="B+", units=1, donor_name="Two", blood_bag_number="DUP-1")

    assert BloodStock.objects.get(blood_group="B+").units == 1


def test_entry_requires_donor_name():
    with pytest.raises(ValidationError):
        StockService().entry(blood_group="A+", units=1, donor_name="  ")


def test_donate_withdraws_and_records(stock):
    stock("O+", 5)

    result = StockService().donate(blood_group="O+", units=2, receiver_name="Patient", hospital_name="Square")

    tx = BloodTransaction.objects.get(id=result.transaction_id)
    assert tx.type == TransactionType.DONATE
    assert (tx.previous_stock, tx.new_stock) == (5, 3)


def test_failed_donate_writes_no_transaction(stock):
    stock("O+", 1)

    with pytest.raises(InsufficientStockError):
        StockService().donate(blood_group="O+", units=2, receiver_name="Patient", hospital_name="Square")

    assert not BloodTransaction.objects.exists()
    assert BloodStock.objects.get(blood_group="O+").units == 1


def test_exchange_moves_units_between_groups(stock):
    stock("A+", 4)
    stock("B+", 1)

    result = StockService().exchange(from_blood_group="A+", to_blood_group="B+", units=3, hospital_name="Popular")

    tx = BloodTransaction.objects.get(id=result.transaction_id)
    assert tx.type == TransactionType.EXCHANGE
    assert (tx.from_blood_group, tx.to_blood_group) == ("A+", "B+")
    assert (tx.previous_stock, tx.new_stock) == (4, 1)
    assert (tx.to_previous_stock, tx.to_new_stock) == (1, 4)


def test_exchange_same_group_is_refused():
    with pytest.raises(ValidationError):
        StockService().exchange(from_blood_group="A+", to_blood_group="A+", units=1, hospital_name="Popular")


def test_exchange_short_withdrawal_leaves_both_groups_untouched(stock):
    stock("A+", 1)
    stock("B+", 2)

    with pytest.raises(InsufficientStockError) as exc:
        StockService().exchange(from_blood_group="A+", to_blood_group="B+", units=2, hospital_name="Popular")

    assert "Insufficient stock of A+. Only 1 unit(s) available" in str(exc.value.detail["detail"])
    assert BloodStock.objects.get(blood_group="A+").units == 1
    assert BloodStock.objects.get(blood_group="B+").units == 2
    assert not BloodTransaction.objects.filter(type=TransactionType.EXCHANGE).exists()


def test_disposal_records_reason(stock):
    stock("AB+", 3)

    result = StockService().dispose(blood_group="AB+", units=1, reason="Expired")

    tx = BloodTransaction.objects.get(id=result.transaction_id)
    assert tx.type == TransactionType.DISPOSAL
    assert tx.metadata["reason"] == "Expired"
    assert tx.new_stock == 2


def test_mark_bag_used(admin_user):
    StockService().entry(blood_group="A+", units=1, donor_name="Donor", blood_bag_number="BAG-USE")

    bag = BagService().mark_used(blood_bag_number="BAG-USE", patient_name="Patient", actor=admin_user)

    assert bag.blood_used is True
    assert bag.status == BagStatus.USED
    assert bag.used_by == "admin@bloodbank.test"


def test_mark_unknown_bag_is_not_found():
    with pytest.raises(DonationHistory.DoesNotExist):
        BagService().mark_used(blood_bag_number="NOPE")
