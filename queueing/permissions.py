"""
Role based permission classes.
"""
from rest_framework.permissions import BasePermission

from .models import QueueFamily

ADMIN_ROLES = {"admin"}
FAMILY_ROLES = {
    QueueFamily.PHARMACY.value: {"pharmacist", "admin"},
    QueueFamily.INSPECTION.value: {"inspector", "admin"},
}


class IsAdminRole(BasePermission):
    """Allow access only to users with the administrator role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and (user.is_superuser or getattr(user, "role", None) in ADMIN_ROLES))


def can_operate_family(user, family: str) -> bool:
    """Staff accounts may operate every family; specialists only their own."""
    role = getattr(user, "role", None)
    if user.is_superuser or role == "staff":
        return True
    return role in FAMILY_ROLES.get(family, set())
