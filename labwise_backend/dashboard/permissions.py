from labwise_backend.core.permissions import RBACPermission


class KPIPermission(RBACPermission):
    read_roles = {"manager"}
    write_roles = set()
