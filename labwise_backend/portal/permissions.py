from labwise_backend.core.permissions import RBACPermission


PORTAL_ROLES = {"physician", "patient"}


class PortalPermission(RBACPermission):
    """External users only: ordering physicians and patients."""

    read_roles = PORTAL_ROLES
    write_roles = set()
