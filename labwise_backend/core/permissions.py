"""Core permissions for RBAC (Role-Based Access Control).

This module provides the base permission class with the read_roles/write_roles
pattern that every app derives its endpoint permissions from.

Standard roles: receptionist, technician, manager, physician, patient,
phlebotomist
"""

from rest_framework.permissions import BasePermission, SAFE_METHODS


def role_name_of(user):
    role = getattr(user, "role", None)
    return getattr(role, "name", None)


class RBACPermission(BasePermission):
    """Base class for RBAC permissions with read_roles/write_roles pattern.

    Subclasses should define:
    - read_roles: set of role names that can perform GET/HEAD/OPTIONS
    - write_roles: set of role names that can perform POST/PUT/PATCH/DELETE

    Example:
        class MyPermission(RBACPermission):
            read_roles = {"manager", "technician"}
            write_roles = {"manager"}
    """

    read_roles: set = set()
    write_roles: set = set()

    def _role_name(self, request):
        return role_name_of(getattr(request, "user", None))

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False

        role_name = self._role_name(request)
        if not role_name:
            return False

        if request.method in SAFE_METHODS:
            return role_name in self.read_roles

        return role_name in self.write_roles

    def has_object_permission(self, request, view, obj):
        # Subclasses override for ownership checks (e.g. physician owns order)
        return True


class UserPermission(RBACPermission):
    """Lab managers administer accounts.

    Receptionists may list users filtered to ``role=physician`` so they can
    pick the ordering physician during order entry.
    """

    read_roles = {"manager"}
    write_roles = {"manager"}

    def has_permission(self, request, view):
        if super().has_permission(request, view):
            return True
        if request.method != "GET" or self._role_name(request) != "receptionist":
            return False
        return view.kwargs.get("pk") is None and request.query_params.get("role") == "physician"


class AuditLogPermission(RBACPermission):
    read_roles = {"manager"}
    write_roles = set()
