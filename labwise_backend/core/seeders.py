from django.contrib.auth import get_user_model
from django.db import transaction

from .models import AuditLog, Role

User = get_user_model()

SEED_PASSWORD = "password123"

ROLE_DEFINITIONS = [
    (Role.RECEPTIONIST, "Receptionist"),
    (Role.TECHNICIAN, "Lab Technician"),
    (Role.MANAGER, "Lab Manager"),
    (Role.PHYSICIAN, "Physician"),
    (Role.PATIENT, "Patient"),
    (Role.PHLEBOTOMIST, "Phlebotomist"),
]

DEMO_USERS = [
    ("sarah.chen@labwise.com", "Sarah", "Chen", Role.RECEPTIONIST),
    ("david.r@labwise.com", "David", "Rodriguez", Role.TECHNICIAN),
    ("emily.jones@labwise.com", "Emily", "Jones", Role.MANAGER),
    ("msmith@clinic.com", "Michael", "Smith", Role.PHYSICIAN),
    ("johndoe@email.com", "John", "Doe", Role.PATIENT),
    ("charles.b@labwise.com", "Charles", "Brown", Role.PHLEBOTOMIST),
]


def seed_core(flush: bool = False) -> dict:
    """
    Seeds:
    - roles
    - one demo user per role (password ``password123``)

    With flush=True audit logs and the demo users are removed first;
    superusers are never touched.
    """
    stats: dict[str, int] = {}

    with transaction.atomic():
        if flush:
            AuditLog.objects.all().delete()
            User.objects.filter(
                is_superuser=False,
                email__in=[email for email, *_ in DEMO_USERS],
            ).delete()

        roles = _seed_roles()
        stats["core_roles"] = len(roles)

        users = _seed_users(roles)
        stats["core_users"] = len(users)

    return stats


def _seed_roles() -> dict[str, Role]:
    roles: dict[str, Role] = {}
    for name, label in ROLE_DEFINITIONS:
        role, _created = Role.objects.get_or_create(name=name, defaults={"label": label})
        roles[name] = role
    return roles


def _seed_users(roles: dict[str, Role]) -> list[User]:
    users: list[User] = []
    for email, first_name, last_name, role_name in DEMO_USERS:
        user, created = User.objects.get_or_create(
            email=email,
            defaults={
                "username": email,
                "first_name": first_name,
                "last_name": last_name,
                "role": roles[role_name],
            },
        )
        if created:
            user.set_password(SEED_PASSWORD)
            if role_name == Role.PHYSICIAN:
                user.physician_info = {"npi": "1234567890", "clinic_name": "Downtown Clinic"}
            user.save()
        users.append(user)
    return users
