"""Human-readable identifiers backed by the ``Counter`` table."""

from django.db import transaction
from django.utils import timezone

from .models import Counter


def next_value(name: str) -> int:
    """Atomically increment and return the counter ``name`` (starting at 1)."""
    with transaction.atomic():
        Counter.objects.get_or_create(name=name)
        counter = Counter.objects.select_for_update().get(name=name)
        counter.value += 1
        counter.save(update_fields=['value'])
        return counter.value


def next_mrn() -> str:
    return f"P{next_value('patient_mrn'):07d}"


def next_order_id() -> str:
    year = timezone.now().year
    return f"ORD-{year}-{next_value(f'order_id_{year}'):05d}"


def next_accession_number() -> str:
    year = timezone.now().year
    return f"ACC-{year}-{next_value(f'accession_{year}'):06d}"
