from rest_framework.permissions import SAFE_METHODS

from labwise_backend.core.permissions import RBACPermission


class OrderAccessMixin:
    """Physicians only see orders they placed, patients only their own."""

    def has_object_permission(self, request, view, obj):
        role_name = self._role_name(request)
        if not role_name:
            return False
        if role_name == "physician":
            return obj.physician_id == request.user.id
        if role_name == "patient":
            return obj.patient.user_id == request.user.id
        return True


class OrderPermission(OrderAccessMixin, RBACPermission):
    read_roles = {"receptionist", "technician", "manager", "physician", "patient"}
    write_roles = {"receptionist", "manager", "physician"}


class OrderDetailPermission(OrderAccessMixin, RBACPermission):
    read_roles = {"receptionist", "technician", "manager", "physician", "patient"}
    write_roles = {"receptionist", "manager"}

    def has_object_permission(self, request, view, obj):
        if request.method not in SAFE_METHODS:
            return True
        return super().has_object_permission(request, view, obj)


class LabBenchPermission(RBACPermission):
    """Accessioning, rejection, result entry and the worklist."""

    read_roles = {"technician", "manager"}
    write_roles = {"technician", "manager"}
