from labwise_backend.core.permissions import RBACPermission


class InstrumentPermission(RBACPermission):
    read_roles = {"manager", "technician"}
    write_roles = {"manager", "technician"}


class QCLogPermission(RBACPermission):
    read_roles = {"manager", "technician"}
    write_roles = {"manager", "technician"}
