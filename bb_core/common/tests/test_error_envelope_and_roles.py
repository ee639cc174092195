import pytest
from django.contrib.auth.models import Group
from django.core.management import call_command

from bb_core.common.permissions import ROLE_ADMIN, ROLE_DONOR, user_roles

pytestmark = pytest.mark.django_db


def test_not_found_uses_envelope(anon_client):
    res = anon_client.get("/api/v1/blood-requests/00000000-0000-0000-0000-000000000000/")

    assert res.status_code == 404
    err = res.json()["error"]
    assert err["code"] == "not_found"
    assert err["message"] == "Blood request not found"
    assert err["request_id"]


def test_permission_denied_uses_envelope(donor_client):
    res = donor_client.get("/api/v1/admin/blood-transactions/")

    assert res.status_code == 403
    assert res.json()["error"]["code"] == "permission_denied"


def test_roles_from_flags_and_groups(admin_user, donor_user):
    assert user_roles(admin_user) == {ROLE_ADMIN}
    assert user_roles(donor_user) == {ROLE_DONOR}

    call_command("ensure_roles")
    donor_user.groups.add(Group.objects.get(name=ROLE_ADMIN))
    assert ROLE_ADMIN in user_roles(donor_user)
