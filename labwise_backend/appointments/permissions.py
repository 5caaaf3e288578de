from labwise_backend.core.permissions import RBACPermission


class AppointmentPermission(RBACPermission):
    """Front desk books; phlebotomists read their collection schedule."""

    read_roles = {"receptionist", "manager", "phlebotomist"}
    write_roles = {"receptionist", "manager"}


class AppointmentDetailPermission(RBACPermission):
    read_roles = {"receptionist", "manager", "phlebotomist", "technician"}
    write_roles = {"receptionist", "manager"}


class SampleCollectionPermission(RBACPermission):
    read_roles = set()
    write_roles = {"phlebotomist", "manager", "technician"}
