from decimal import Decimal

from django.db import transaction

from .models import TestCatalogItem

CATALOG = [
    {
        "test_code": "CBC",
        "name": "Complete Blood Count",
        "tube_type": "Lavender Top",
        "min_volume": Decimal("3.0"),
        "turnaround_value": 4,
        "price": Decimal("25.00"),
        "reference_ranges": [
            {"age_min": 18, "age_max": 120, "gender": "Any", "range_low": 4.5, "range_high": 11.0, "units": "10^3/uL"},
        ],
    },
    {
        "test_code": "K",
        "name": "Potassium",
        "tube_type": "Gold Top",
        "min_volume": Decimal("1.0"),
        "turnaround_value": 2,
        "price": Decimal("12.00"),
        "reference_ranges": [
            {"gender": "Any", "range_low": 3.5, "range_high": 5.1, "units": "mmol/L"},
        ],
    },
    {
        "test_code": "TSH",
        "name": "Thyroid Stimulating Hormone",
        "tube_type": "Gold Top",
        "min_volume": Decimal("1.0"),
        "turnaround_value": 24,
        "price": Decimal("40.00"),
        "reference_ranges": [
            {"gender": "Any", "range_low": 0.4, "range_high": 4.0, "units": "mIU/L"},
        ],
        "reflex_rules": [
            {"condition": {"test_code": "TSH", "operator": "gt", "value": 4.0}, "action": {"add_test_code": "FT4"}},
        ],
    },
    {
        "test_code": "FT4",
        "name": "Free T4",
        "tube_type": "Gold Top",
        "min_volume": Decimal("1.0"),
        "turnaround_value": 24,
        "price": Decimal("35.00"),
        "reference_ranges": [
            {"gender": "Any", "range_low": 0.8, "range_high": 1.8, "units": "ng/dL"},
        ],
    },
    {
        "test_code": "PT",
        "name": "Prothrombin Time",
        "tube_type": "Light Blue Top",
        "min_volume": Decimal("2.7"),
        "special_handling": "Fill to line; invert 3-4 times",
        "turnaround_value": 2,
        "price": Decimal("18.00"),
        "reference_ranges": [
            {"gender": "Any", "range_low": 11.0, "range_high": 13.5, "units": "sec"},
        ],
    },
]


def seed_catalog() -> dict:
    created = 0
    with transaction.atomic():
        for data in CATALOG:
            code = data["test_code"]
            defaults = {key: value for key, value in data.items() if key != "test_code"}
            _item, was_created = TestCatalogItem.objects.get_or_create(test_code=code, defaults=defaults)
            created += int(was_created)
    return {"catalog_tests_created": created}
