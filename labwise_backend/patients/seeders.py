from datetime import date

from django.contrib.auth import get_user_model
from django.db import transaction

from labwise_backend.core.counters import next_mrn

from .models import Patient

User = get_user_model()

DEMO_PATIENTS = [
    {
        "first_name": "John",
        "last_name": "Doe",
        "date_of_birth": date(1985, 4, 12),
        "gender": Patient.GENDER_MALE,
        "phone": "555-0101",
        "email": "johndoe@email.com",
        "city": "Springfield",
        "insurance_info": [
            {"provider_name": "Acme Health", "policy_number": "AH-100200", "group_number": "G-1", "is_primary": True},
        ],
    },
    {
        "first_name": "Maria",
        "last_name": "Garcia",
        "date_of_birth": date(1992, 9, 3),
        "gender": Patient.GENDER_FEMALE,
        "phone": "555-0102",
        "city": "Springfield",
    },
    {
        "first_name": "Liam",
        "last_name": "Walker",
        "date_of_birth": date(2015, 1, 20),
        "gender": Patient.GENDER_MALE,
        "phone": "555-0103",
        "city": "Shelbyville",
    },
]


def seed_patients() -> dict:
    """Creates the demo patients once; the portal patient is linked to its user."""
    created = 0
    with transaction.atomic():
        for data in DEMO_PATIENTS:
            if Patient.objects.filter(first_name=data["first_name"], last_name=data["last_name"]).exists():
                continue
            user = None
            if data.get("email"):
                user = User.objects.filter(email=data["email"]).first()
            Patient.objects.create(mrn=next_mrn(), user=user, **data)
            created += 1
    return {"patients_created": created}
