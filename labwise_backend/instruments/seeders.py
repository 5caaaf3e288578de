from django.db import transaction
from django.utils import timezone

from .models import Instrument

INSTRUMENTS = [
    ("HEM-01", "Hematology Analyzer", "Sysmex XN-1000", Instrument.STATUS_ONLINE),
    ("CHEM-01", "Chemistry Analyzer", "Roche cobas c311", Instrument.STATUS_ONLINE),
    ("COAG-01", "Coagulation Analyzer", "Stago STA Compact Max", Instrument.STATUS_MAINTENANCE),
]


def seed_instruments() -> dict:
    created = 0
    today = timezone.localdate()
    with transaction.atomic():
        for instrument_id, name, model, status in INSTRUMENTS:
            _instrument, was_created = Instrument.objects.get_or_create(
                instrument_id=instrument_id,
                defaults={
                    "name": name,
                    "model": model,
                    "status": status,
                    "last_calibration_date": today,
                },
            )
            created += int(was_created)
    return {"instruments_created": created}
