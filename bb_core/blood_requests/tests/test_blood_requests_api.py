import pytest

from bb_core.blood_requests.models import BloodRequest
from bb_core.iam.models import UserProfile
from bb_core.inventory.models import BloodStock
from bb_core.transactions.models import BloodTransaction, TransactionType

pytestmark = pytest.mark.django_db

BASE = "/api/v1/blood-requests/"


def create(client, payload, **overrides):
    res = client.post(BASE, {**payload, **overrides}, format="json")
    assert res.status_code == 201, res.content
    return res.json()["data"]


def test_create_requires_all_fields(anon_client, blood_request_payload):
    res = anon_client.post(BASE, {**blood_request_payload, "hospital_location": "  "}, format="json")

    assert res.status_code == 400
    assert res.json()["error"]["message"] == "All fields are required"


def test_create_normalises_requester_email(anon_client, blood_request_payload):
    data = create(anon_client, blood_request_payload)

    assert data["requester_email"] == "requester@bloodbank.test"
    assert (data["status"], data["approval_status"]) == ("pending", "pending")


def test_bank_fulfilment_short_of_stock_keeps_request_pending(anon_client, admin_client, blood_request_payload, stock):
    stock("O-", 2)
    req = create(anon_client, blood_request_payload, blood_group="O-")

    res = admin_client.put(f"{BASE}{req['id']}/donate-from-bank/", {"units": 3}, format="json")

    assert res.status_code == 400
    err = res.json()["error"]
    assert err["message"] == "Insufficient stock. Only 2 unit(s) available"
    assert err["details"]["available_units"] == 2
    assert BloodRequest.objects.get(id=req["id"]).status == "pending"
    assert BloodStock.objects.get(blood_group="O-").units == 2
    assert not BloodTransaction.objects.exists()


def test_bank_fulfilment(requester_client, admin_client, requester_user, blood_request_payload, stock):
    stock("O-", 5)
    req = create(requester_client, blood_request_payload, blood_group="O-", units_required=2)

    res = admin_client.put(f"{BASE}{req['id']}/donate-from-bank/", {}, format="json")

    assert res.status_code == 200
    body = res.json()
    assert (body["previous_stock"], body["new_stock"]) == (5, 3)
    assert body["data"]["status"] == "fulfilled"
    assert body["data"]["fulfilled_by"] == "Blood Bank"
    assert body["data"]["counters_updated"] is True

    tx = BloodTransaction.objects.get(id=body["transaction_id"])
    assert tx.type == TransactionType.DONATE
    assert str(tx.blood_request_id) == req["id"]
    assert UserProfile.objects.get(user=requester_user).blood_taken == 1


def test_pledge_then_fulfil_counts_requester_once(
    requester_client, donor_client, admin_client, requester_user, donor_user, blood_request_payload
):
    req = create(requester_client, blood_request_payload)

    res = donor_client.put(f"{BASE}{req['id']}/donate/", {"donor_name": "X", "donor_phone": "Y"}, format="json")
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "active"

    res = admin_client.put(f"{BASE}{req['id']}/status/", {"status": "fulfilled"}, format="json")
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "fulfilled"

    assert UserProfile.objects.get(user=requester_user).blood_taken == 1
    donor = UserProfile.objects.get(user=donor_user)
    assert donor.blood_given == 1
    assert donor.available is False


def test_pledge_requires_pending(anon_client, donor_client, admin_client, blood_request_payload):
    req = create(anon_client, blood_request_payload)
    admin_client.put(f"{BASE}{req['id']}/status/", {"status": "cancelled"}, format="json")

    res = donor_client.put(f"{BASE}{req['id']}/donate/", {}, format="json")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "invalid_state"


def test_pledge_unknown_request_is_404(donor_client):
    res = donor_client.put(f"{BASE}00000000-0000-0000-0000-000000000000/donate/", {}, format="json")

    assert res.status_code == 404


def test_admins_and_anonymous_cannot_pledge(anon_client, admin_client, blood_request_payload):
    req = create(anon_client, blood_request_payload)

    assert anon_client.put(f"{BASE}{req['id']}/donate/", {}, format="json").status_code in (401, 403)
    assert admin_client.put(f"{BASE}{req['id']}/donate/", {}, format="json").status_code == 403


def test_invalid_status(anon_client, admin_client, blood_request_payload):
    req = create(anon_client, blood_request_payload)

    res = admin_client.put(f"{BASE}{req['id']}/status/", {"status": "archived"}, format="json")

    assert res.status_code == 400
    assert res.json()["error"]["details"] == {"status": ["Invalid status"]}


def test_public_board_shows_only_approved_open_requests(anon_client, admin_client, blood_request_payload):
    approved = create(anon_client, blood_request_payload, district="Dhaka")
    create(anon_client, blood_request_payload, district="Khulna")
    cancelled = create(anon_client, blood_request_payload, district="Sylhet")

    admin_client.put(f"{BASE}{approved['id']}/approve/", {}, format="json")
    admin_client.put(f"{BASE}{cancelled['id']}/approve/", {}, format="json")
    admin_client.put(f"{BASE}{cancelled['id']}/status/", {"status": "cancelled"}, format="json")

    public = anon_client.get(BASE, {"all": "1"}).json()
    assert [r["id"] for r in public["results"]] == [approved["id"]]

    everything = admin_client.get(BASE, {"all": "1"}).json()
    assert everything["count"] == 3


def test_reject_records_reason(anon_client, admin_client, blood_request_payload):
    req = create(anon_client, blood_request_payload)

    res = admin_client.put(f"{BASE}{req['id']}/reject/", {"reason": "Duplicate"}, format="json")

    assert res.status_code == 200
    data = res.json()["data"]
    assert (data["approval_status"], data["status"], data["rejection_reason"]) == ("rejected", "pending", "Duplicate")

    res = admin_client.put(f"{BASE}{req['id']}/approve/", {}, format="json")
    assert res.status_code == 400


def test_mine_requires_email(requester_client, blood_request_payload):
    create(requester_client, blood_request_payload)

    assert requester_client.get(f"{BASE}mine/").status_code == 400

    res = requester_client.get(f"{BASE}mine/", {"email": "requester@bloodbank.test"})
    assert res.json()["count"] == 1


def test_delete_keeps_applied_counters(
    requester_client, donor_client, admin_client, requester_user, blood_request_payload
):
    req = create(requester_client, blood_request_payload)
    donor_client.put(f"{BASE}{req['id']}/donate/", {"donor_name": "X", "donor_phone": "Y"}, format="json")

    res = admin_client.delete(f"{BASE}{req['id']}/")

    assert res.status_code == 200
    assert not BloodRequest.objects.exists()
    assert UserProfile.objects.get(user=requester_user).blood_taken == 1


def test_delete_requires_admin(anon_client, donor_client, blood_request_payload):
    req = create(anon_client, blood_request_payload)

    assert donor_client.delete(f"{BASE}{req['id']}/").status_code == 403


def test_request_filed_for_someone_else_credits_only_the_filer(
    donor_client, admin_client, donor_user, requester_user, blood_request_payload
):
    req = create(donor_client, blood_request_payload, requester_email=requester_user.email)

    res = admin_client.put(f"{BASE}{req['id']}/status/", {"status": "fulfilled"}, format="json")

    assert res.status_code == 200, res.content
    assert UserProfile.objects.get(user=donor_user).blood_taken == 1
    assert UserProfile.objects.get(user=requester_user).blood_taken == 0


def test_pledge_with_another_members_phone_credits_only_the_pledger(
    anon_client, donor_client, donor_user, requester_user, blood_request_payload
):
    req = create(anon_client, blood_request_payload)

    res = donor_client.put(f"{BASE}{req['id']}/donate/", {"donor_phone": "01700000002"}, format="json")

    assert res.status_code == 200, res.content
    assert UserProfile.objects.get(user=donor_user).blood_given == 1
    assert UserProfile.objects.get(user=requester_user).blood_given == 0
