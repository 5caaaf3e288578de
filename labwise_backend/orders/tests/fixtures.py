"""Shared setup for order workflow tests."""

from __future__ import annotations

from datetime import date, timedelta

from django.utils import timezone

from labwise_backend.catalog.models import TestCatalogItem
from labwise_backend.core.models import Role, User
from labwise_backend.patients.models import Patient


def make_user(role_name, email, **extra):
    role, _ = Role.objects.get_or_create(name=role_name, defaults={"label": role_name.title()})
    return User.objects.create_user(username=email, email=email, password="DummyPass123!", role=role, **extra)


def make_catalog():
    """K and TSH share a Gold Top, CBC uses Lavender, PT Light Blue. TSH > 4 reflexes FT4."""
    items = [
        TestCatalogItem(
            test_code="K", name="Potassium", tube_type="Gold Top",
            reference_ranges=[{"gender": "Any", "range_low": 3.5, "range_high": 5.1, "units": "mmol/L"}],
        ),
        TestCatalogItem(
            test_code="TSH", name="Thyroid Stimulating Hormone", tube_type="Gold Top",
            reference_ranges=[{"gender": "Any", "range_low": 0.4, "range_high": 4.0, "units": "mIU/L"}],
            reflex_rules=[
                {"condition": {"test_code": "TSH", "operator": "gt", "value": 4.0}, "action": {"add_test_code": "FT4"}},
            ],
        ),
        TestCatalogItem(
            test_code="FT4", name="Free T4", tube_type="Gold Top",
            reference_ranges=[{"gender": "Any", "range_low": 0.8, "range_high": 1.8, "units": "ng/dL"}],
        ),
        TestCatalogItem(
            test_code="CBC", name="Complete Blood Count", tube_type="Lavender Top",
            reference_ranges=[
                {"gender": "Any", "age_min": 18, "range_low": 4.5, "range_high": 11.0, "units": "10^3/uL"},
                {"gender": "Any", "age_max": 17, "range_low": 5.0, "range_high": 14.5, "units": "10^3/uL"},
            ],
        ),
        TestCatalogItem(test_code="PT", name="Prothrombin Time", tube_type="Light Blue Top"),
        TestCatalogItem(test_code="OLD", name="Retired Test", tube_type="Gold Top", is_active=False),
    ]
    TestCatalogItem.objects.bulk_create(items)


def make_patient(mrn="P0000001", user=None, **extra):
    data = {
        "first_name": "John",
        "last_name": "Doe",
        "date_of_birth": date(1980, 1, 1),
        "gender": Patient.GENDER_MALE,
        "phone": "555-0101",
    }
    data.update(extra)
    return Patient.objects.create(mrn=mrn, user=user, **data)


def slot(days=2, hour=9, minute=0):
    """A timezone-aware datetime ``days`` from now at a fixed wall-clock time."""
    base = timezone.localtime(timezone.now() + timedelta(days=days))
    return base.replace(hour=hour, minute=minute, second=0, microsecond=0)
