from datetime import timedelta

import pytest
from django.utils import timezone

from bb_core.donations.models import DonationRequest

pytestmark = pytest.mark.django_db


def payload(**overrides):
    data = {
        "blood_group": "B+",
        "donor_name": "Karim",
        "donor_phone": "01711111111",
        "date_of_birth": "1990-05-05",
        "weight": "70",
    }
    data.update(overrides)
    return data


def test_anyone_can_submit_a_donation(anon_client):
    res = anon_client.post("/api/v1/donation-requests/", payload(), format="json")

    assert res.status_code == 201
    assert res.json()["data"]["approval_status"] == "pending"


def test_missing_required_fields(anon_client):
    res = anon_client.post("/api/v1/donation-requests/", payload(donor_phone=""), format="json")

    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Blood group, donor name, and phone are required"


def test_ineligible_submission_returns_reasons(anon_client):
    res = anon_client.post("/api/v1/donation-requests/", payload(weight="40"), format="json")

    assert res.status_code == 400
    err = res.json()["error"]
    assert err["code"] == "ineligible_donor"
    assert err["details"]["ineligibility_reasons"] == ["Weight 40kg - Minimum weight required is 50 kg"]
    assert "warning_messages" in err["details"]
    assert DonationRequest.objects.count() == 0


def test_recent_donor_is_refused(anon_client):
    last = (timezone.localdate() - timedelta(days=10)).isoformat()

    res = anon_client.post("/api/v1/donation-requests/", payload(last_donation_date=last), format="json")

    assert res.status_code == 400
    assert "Only 10 days since last donation" in res.json()["error"]["details"]["ineligibility_reasons"][0]


def test_review_queue_is_admin_only(anon_client, donor_client, admin_client):
    anon_client.post("/api/v1/donation-requests/", payload(), format="json")

    assert donor_client.get("/api/v1/donation-requests/pending/").status_code == 403

    res = admin_client.get("/api/v1/donation-requests/pending/")
    assert res.status_code == 200
    assert res.json()["count"] == 1


def test_approve_endpoint_and_double_approval(anon_client, admin_client):
    created = anon_client.post("/api/v1/donation-requests/", payload(units=2), format="json").json()["data"]
    url = f"/api/v1/donation-requests/{created['id']}/approve/"

    res = admin_client.put(url, {}, format="json")
    assert res.status_code == 400

    res = admin_client.put(url, {"blood_bag_number": "BAG-100"}, format="json")
    assert res.status_code == 200
    assert (res.json()["previous_stock"], res.json()["new_stock"]) == (0, 2)

    res = admin_client.put(url, {"blood_bag_number": "BAG-101"}, format="json")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "invalid_state"

    stock = admin_client.get("/api/v1/admin/blood-stock/").json()["stock"]
    assert stock["B+"] == 2


def test_reject_and_delete(anon_client, admin_client):
    created = anon_client.post("/api/v1/donation-requests/", payload(), format="json").json()["data"]

    res = admin_client.put(f"/api/v1/donation-requests/{created['id']}/reject/", {"reason": "Ill"}, format="json")
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "cancelled"

    res = admin_client.delete(f"/api/v1/donation-requests/{created['id']}/")
    assert res.status_code == 200
    assert admin_client.get(f"/api/v1/donation-requests/{created['id']}/").status_code == 404


def test_list_filters(anon_client, admin_client):
    anon_client.post("/api/v1/donation-requests/", payload(district="Dhaka"), format="json")
    anon_client.post("/api/v1/donation-requests/", payload(blood_group="O+", district="Sylhet"), format="json")

    res = admin_client.get("/api/v1/donation-requests/", {"district": "sylhet"})

    assert res.status_code == 200
    assert [d["blood_group"] for d in res.json()["results"]] == ["O+"]


def test_non_finite_weight_is_refused_not_a_server_error(anon_client):
    res = anon_client.post("/api/v1/donation-requests/", payload(weight="inf"), format="json")

    assert res.status_code == 400
    assert res.json()["error"]["details"]["ineligibility_reasons"] == ["Invalid weight provided"]
    assert DonationRequest.objects.count() == 0
