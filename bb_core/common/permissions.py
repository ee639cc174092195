# bb_core/common/permissions.py

from __future__ import annotations

from typing import Set

from rest_framework.permissions import SAFE_METHODS, BasePermission

# Group/role names (Django auth Group names)
ROLE_ADMIN = "ADMIN"
ROLE_DONOR = "DONOR"

ROLE_GROUPS = [ROLE_ADMIN, ROLE_DONOR]


def user_roles(user) -> Set[str]:
    """
    Resolve roles from:
    1) superuser / staff flags (treated as ADMIN)
    2) Django groups: user.groups

    Authenticated users without an explicit group are treated as DONOR,
    since every registered account can pledge blood.
    """
    roles: Set[str] = set()

    if not user or not getattr(user, "is_authenticated", False):
        return roles

    if getattr(user, "is_superuser", False) or getattr(user, "is_staff", False):
        roles.add(ROLE_ADMIN)
        return roles

    if hasattr(user, "groups"):
        roles.update(user.groups.values_list("name", flat=True))

    if not roles:
        roles.add(ROLE_DONOR)

    return roles


def is_admin(user) -> bool:
    return ROLE_ADMIN in user_roles(user)


class IsBloodBankAdmin(BasePermission):
    """
    Blood bank staff only (stock ledger, approvals, transaction trail).
    """
    message = "Admin access required."

    def has_permission(self, request, view) -> bool:
        return is_admin(request.user)


class BaseRolePermission(BasePermission):
    """
    Action -> allowed roles map for ViewSets.

    - ADMIN bypass.
    - "*" in a role set means "anyone, including anonymous" (public endpoints).
    - Unknown SAFE actions fall back to list/retrieve; other unknown actions are denied.
    """
    message = "You do not have permission to perform this action."

    PUBLIC = "*"

    allowed_roles_per_action: dict[str, set[str]] = {
        "list": {ROLE_ADMIN},
        "retrieve": {ROLE_ADMIN},
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            read_action = "retrieve" if ("pk" in kwargs or "id" in kwargs) else "list"
            allowed = self.allowed_roles_per_action.get(read_action)

        if allowed is not None and self.PUBLIC in allowed:
            return True

        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        roles = user_roles(user)
        if ROLE_ADMIN in roles:
            return True

        if allowed is not None:
            return bool(roles & allowed)

        # Unknown action => deny by default
        return False

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class BloodRequestPermission(BaseRolePermission):
    """Blood requests: anyone may file/browse, donors pledge, admins run the workflow."""
    allowed_roles_per_action = {
        "list": {BaseRolePermission.PUBLIC},
        "retrieve": {BaseRolePermission.PUBLIC},
        "create": {BaseRolePermission.PUBLIC},
        "mine": {ROLE_ADMIN, ROLE_DONOR},
        "donate": {ROLE_DONOR},
        "approve": {ROLE_ADMIN},
        "reject": {ROLE_ADMIN},
        "donate_from_bank": {ROLE_ADMIN},
        "update_status": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }


class DonationRequestPermission(BaseRolePermission):
    """Donation requests: anyone may submit, admins review."""
    allowed_roles_per_action = {
        "create": {BaseRolePermission.PUBLIC},
        "list": {ROLE_ADMIN},
        "retrieve": {ROLE_ADMIN},
        "pending": {ROLE_ADMIN},
        "approve": {ROLE_ADMIN},
        "reject": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }
