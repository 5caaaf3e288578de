"""
LabWise seed command - reproducible development data.

Usage:
    python manage.py seed           # seed every app
    python manage.py seed --flush   # drop demo users and audit logs first

Demo users share the password ``password123``.
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from labwise_backend.catalog.seeders import seed_catalog
from labwise_backend.core.seeders import seed_core
from labwise_backend.instruments.seeders import seed_instruments
from labwise_backend.inventory.seeders import seed_inventory
from labwise_backend.patients.seeders import seed_patients


class Command(BaseCommand):
    help = "Seed database with demo data for LabWise"

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush",
            action="store_true",
            help="Delete demo users and audit logs before seeding.",
        )

    def handle(self, *args, **options):
        flush = options.get("flush", False)

        self.stdout.write("=" * 80)
        self.stdout.write("  LabWise seed")
        self.stdout.write("=" * 80)

        steps = [
            ("Core (Roles, Users)", lambda: seed_core(flush=flush)),
            ("Patients", seed_patients),
            ("Test catalog", seed_catalog),
            ("Inventory", seed_inventory),
            ("Instruments", seed_instruments),
        ]

        try:
            with transaction.atomic():
                stats = {}
                for index, (label, seeder) in enumerate(steps, start=1):
                    self.stdout.write(f"\n[{index}/{len(steps)}] Seeding {label}...")
                    section_stats = seeder()
                    stats.update(section_stats)
                    self._print_stats(section_stats)
        except Exception as e:
            self.stderr.write(f"\nSeeding failed: {e}")
            raise

        self.stdout.write("\n" + "=" * 80)
        self.stdout.write(self.style.SUCCESS("  Seeding complete."))
        self.stdout.write("=" * 80)

    def _print_stats(self, stats):
        for key, value in stats.items():
            self.stdout.write(f"  - {key}: {value}")
