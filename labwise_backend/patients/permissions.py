from labwise_backend.core.permissions import RBACPermission


class PatientListPermission(RBACPermission):
    """Registration desk and lab staff search patients; physicians may register."""

    read_roles = {"receptionist", "technician", "manager", "phlebotomist"}
    write_roles = {"receptionist", "manager", "physician"}


class PatientDetailPermission(RBACPermission):
    read_roles = {"receptionist", "technician", "manager", "phlebotomist", "physician"}
    write_roles = {"receptionist", "manager"}


class EligibilityPermission(RBACPermission):
    read_roles = set()
    write_roles = {"receptionist", "manager"}
