from labwise_backend.core.permissions import RBACPermission


class TestCatalogPermission(RBACPermission):
    """Everyone placing or working orders reads the catalog; managers maintain it."""

    read_roles = {"manager", "receptionist", "technician", "physician"}
    write_roles = {"manager"}
