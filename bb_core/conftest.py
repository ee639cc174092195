# bb_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from bb_core.iam.models import UserProfile
from bb_core.inventory.services import StockLedger


@pytest.fixture
def admin_user(db):
    User = get_user_model()
    return User.objects.create_user(
        username="admin",
        email="admin@bloodbank.test",
        password="testpass",
        is_staff=True,
    )


@pytest.fixture
def donor_user(db):
    """
    Registered donor with a profile (counters start at 0).
    """
    User = get_user_model()
    user = User.objects.create_user(
        username="donor",
        email="donor@bloodbank.test",
        password="testpass",
        first_name="Rahim",
        last_name="Uddin",
    )
    UserProfile.objects.create(user=user, phone="01700000001", blood_group="O+", district="Dhaka")
    return user


@pytest.fixture
def requester_user(db):
    User = get_user_model()
    user = User.objects.create_user(username="requester", email="requester@bloodbank.test", password="testpass")
    UserProfile.objects.create(user=user, phone="01700000002", blood_group="O-", district="Dhaka")
    return user


@pytest.fixture
def anon_client():
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    c = APIClient()
    c.force_authenticate(user=admin_user)
    return c


@pytest.fixture
def donor_client(donor_user):
    c = APIClient()
    c.force_authenticate(user=donor_user)
    return c


@pytest.fixture
def requester_client(requester_user):
    c = APIClient()
    c.force_authenticate(user=requester_user)
    return c


@pytest.fixture
def stock(db):
    """
    Seed the ledger: stock("O-", 2)
    """
    ledger = StockLedger()

    def _seed(blood_group: str, units: int):
        return ledger.apply_delta(blood_group, units)

    return _seed


@pytest.fixture
def blood_request_payload():
    return {
        "blood_group": "O-",
        "units_required": 1,
        "hospital_name": "Dhaka Medical College Hospital",
        "hospital_location": "Bakshibazar",
        "district": "Dhaka",
        "contact_number": "01800000000",
        "reason": "Surgery",
        "urgency": "urgent",
        "requester_name": "Karim",
        "requester_email": "Requester@BloodBank.test",
    }
