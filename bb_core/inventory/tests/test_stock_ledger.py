import threading

import pytest
from django.core.exceptions import ValidationError
from django.db import connection, connections

from bb_core.common.api.exceptions import InsufficientStockError
from bb_core.inventory.models import BloodStock
from bb_core.inventory.services import StockLedger

pytestmark = pytest.mark.django_db


def test_first_deposit_creates_the_row():
    change = StockLedger().apply_delta("A+", 4)

    assert (change.previous_units, change.new_units) == (0, 4)
    assert BloodStock.objects.get(blood_group="A+").units == 4


def test_withdrawal_beyond_balance_is_refused_and_units_unchanged(stock):
    stock("B+", 3)
    ledger = StockLedger()

    with pytest.raises(InsufficientStockError) as exc:
        ledger.apply_delta("B+", -4)

    assert exc.value.available_units == 3
    assert BloodStock.objects.get(blood_group="B+").units == 3


def test_withdrawal_from_missing_group_reports_zero_available():
    with pytest.raises(InsufficientStockError) as exc:
        StockLedger().apply_delta("AB-", -1)

    assert exc.value.available_units == 0
    assert not BloodStock.objects.filter(blood_group="AB-").exists()


def test_interleaved_deltas_compose_to_their_sum(stock):
    stock("O+", 10)
    ledger = StockLedger()
    deltas = [3, -2, 5, -7, 1, -4, 2]

    for delta in deltas:
        ledger.apply_delta("O+", delta)

    assert ledger.balance("O+") == 10 + sum(deltas)


def test_withdrawal_to_exactly_zero_is_allowed(stock):
    stock("A-", 2)

    change = StockLedger().apply_delta("A-", -2)

    assert change.new_units == 0


def test_every_call_stamps_updated_by(stock, admin_user):
    stock("B-", 1)

    StockLedger().apply_delta("B-", 1, admin_user)

    row = BloodStock.objects.get(blood_group="B-")
    assert row.updated_by == "admin@bloodbank.test"


@pytest.mark.parametrize("delta", [0, 1.5, True, "2"])
def test_non_integer_or_zero_delta_is_invalid(delta):
    with pytest.raises(ValidationError):
        StockLedger().apply_delta("A+", delta)


def test_unknown_blood_group_is_invalid():
    with pytest.raises(ValidationError):
        StockLedger().apply_delta("C+", 1)


@pytest.mark.django_db(transaction=True)
def test_concurrent_deltas_compose_under_row_locks():
    if connection.vendor != "postgresql":
        pytest.skip("row locks need PostgreSQL (BB_TEST_DB=postgres)")

    StockLedger().apply_delta("AB+", 100)
    deltas = [3, -2, 5, -7, 1, -4, 2, 6, -1, -3] * 4
    errors = []

    def worker(delta):
        try:
            StockLedger().apply_delta("AB+", delta)
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)
        finally:
            connections.close_all()

    threads = [threading.Thread(target=worker, args=(d,)) for d in deltas]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert StockLedger().balance("AB+") == 100 + sum(deltas)
