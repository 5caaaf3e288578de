from labwise_backend.core.permissions import RBACPermission


class InventoryPermission(RBACPermission):
    read_roles = {"manager", "technician"}
    write_roles = {"manager"}


class InventoryManagerPermission(RBACPermission):
    read_roles = {"manager"}
    write_roles = {"manager"}
