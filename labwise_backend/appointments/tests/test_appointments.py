"""Tests for appointment booking, the day view and sample collection."""

from __future__ import annotations

from unittest import mock

from django.test import TestCase

from rest_framework import status
from rest_framework.test import APIClient

from labwise_backend.appointments.models import Appointment
from labwise_backend.appointments.scheduling import check_appointment_conflicts
from labwise_backend.core.models import AuditLog
from labwise_backend.orders import services, workflow
from labwise_backend.orders.models import Order, OrderSample
from labwise_backend.orders.tests.fixtures import make_catalog, make_patient, make_user, slot


class AppointmentConflictTest(TestCase):
    databases = {"default"}

    def setUp(self):
        self.patient = make_patient()
        self.existing = Appointment.objects.create(
            patient=self.patient,
            appointment_type=Appointment.TYPE_CONSULTATION,
            scheduled_time=slot(hour=10),
            duration_minutes=30,
        )

    def conflicts(self, hour, minute, duration, exclude=None):
        return check_appointment_conflicts(
            start_time=slot(hour=hour, minute=minute),
            duration_minutes=duration,
            exclude_appointment_id=exclude,
        )

    def test_end_time_is_derived(self):
        self.assertEqual(self.existing.end_time, slot(hour=10, minute=30))

    def test_overlap_detection(self):
        self.assertEqual(len(self.conflicts(10, 15, 30)), 1)
        self.assertEqual(len(self.conflicts(9, 45, 30)), 1)
        self.assertEqual(len(self.conflicts(9, 0, 180)), 1)

    def test_touching_windows_do_not_conflict(self):
        self.assertEqual(self.conflicts(10, 30, 15), [])
        self.assertEqual(self.conflicts(9, 45, 15), [])

    def test_excluded_and_no_show_do_not_block(self):
        self.assertEqual(self.conflicts(10, 0, 30, exclude=self.existing.id), [])

        self.existing.status = Appointment.STATUS_NO_SHOW
        self.existing.save()
        self.assertEqual(self.conflicts(10, 0, 30), [])


class AppointmentApiTest(TestCase):
    databases = {"default"}

    def setUp(self):
        make_catalog()
        self.receptionist = make_user("receptionist", "rec_appt@example.com")
        self.phlebotomist = make_user("phlebotomist", "phleb_appt@example.com")
        self.technician = make_user("technician", "tech_appt@example.com")
        self.physician = make_user("physician", "doc_appt@example.com")
        self.patient = make_patient()

        self.client = APIClient()
        self.client.defaults["HTTP_HOST"] = "localhost"
        self.client.force_authenticate(user=self.receptionist)

    def _book(self, hour, minute=0, duration=15, **extra):
        payload = {
            "patient_id": self.patient.id,
            "appointment_type": Appointment.TYPE_SAMPLE_COLLECTION,
            "scheduled_time": slot(hour=hour, minute=minute).isoformat(),
            "duration_minutes": duration,
        }
        payload.update(extra)
        return self.client.post("/api/v1/appointments/", payload, format="json")

    def test_create_returns_aggregated_entry(self):
        response = self._book(9)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], Appointment.STATUS_SCHEDULED)
        self.assertEqual(response.data["patient_info"]["mrn"], self.patient.mrn)
        self.assertIsNone(response.data["order_info"])
        self.assertTrue(AuditLog.objects.filter(action="APPOINTMENT_CREATE").exists())

    def test_overlapping_create_returns_409(self):
        self._book(9, duration=30)

        response = self._book(9, minute=15)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(len(response.data["conflicts"]), 1)
        self.assertEqual(Appointment.objects.count(), 1)

    def test_update_checks_conflicts_against_others_only(self):
        first = self._book(9, duration=30).data["id"]
        self._book(11, duration=30)

        same_slot = self.client.put(
            f"/api/v1/appointments/{first}/",
            {
                "patient_id": self.patient.id,
                "appointment_type": Appointment.TYPE_SAMPLE_COLLECTION,
                "scheduled_time": slot(hour=9, minute=10).isoformat(),
                "duration_minutes": 30,
            },
            format="json",
        )
        clash = self.client.patch(
            f"/api/v1/appointments/{first}/",
            {"scheduled_time": slot(hour=11, minute=15).isoformat()},
            format="json",
        )

        self.assertEqual(same_slot.status_code, status.HTTP_200_OK, same_slot.data)
        self.assertEqual(clash.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Appointment.objects.get(pk=first).scheduled_time, slot(hour=9, minute=10))

    def test_order_of_other_patient_is_rejected(self):
        other = make_patient(mrn="P0000002")
        order = services.create_order(
            patient_id=other.id, physician_id=self.physician.id,
            icd10_code="Z00.0", priority="Routine", test_codes=["K"],
        )

        response = self._book(9, order_id=order.id)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("order_id", response.data)

    def test_moving_linked_appointment_to_other_patient_is_rejected(self):
        order = services.create_order(
            patient_id=self.patient.id, physician_id=self.physician.id,
            icd10_code="Z00.0", priority="Routine", test_codes=["K"],
        )
        booked = self._book(9, order_id=order.id).data["id"]
        other = make_patient(mrn="P0000002")

        response = self.client.patch(
            f"/api/v1/appointments/{booked}/", {"patient_id": other.id}, format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("order_id", response.data)
        self.assertEqual(Appointment.objects.get(pk=booked).patient_id, self.patient.id)

    def test_day_view_aggregates_orders(self):
        linked = services.create_order(
            patient_id=self.patient.id, physician_id=self.physician.id,
            icd10_code="Z00.0", priority="Routine", test_codes=["K", "CBC"],
        )
        self._book(9, order_id=linked.id)
        other_day = slot(days=5, hour=9)
        Appointment.objects.create(
            patient=self.patient, appointment_type=Appointment.TYPE_CONSULTATION, scheduled_time=other_day,
        )

        self.client.force_authenticate(user=self.phlebotomist)
        response = self.client.get(f"/api/v1/appointments/?date={slot(hour=9).date().isoformat()}")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        entry = response.data[0]
        self.assertEqual(entry["order_info"]["order_id"], linked.order_id)
        self.assertEqual([o["order_id"] for o in entry["pending_orders"]], [linked.order_id])

        gold = next(s for s in entry["order_info"]["samples"] if s["sample_type"] == "Gold Top")
        self.assertEqual(gold["specimen_summary"]["tube_type"], "Gold Top")
        self.assertEqual(gold["tests"][0]["specimen_requirements"]["tube_type"], "Gold Top")

    def test_day_view_filters(self):
        self._book(9, notes="fasting")
        self._book(10, appointment_type=Appointment.TYPE_CONSULTATION)
        day = slot(hour=9).date().isoformat()

        by_type = self.client.get(f"/api/v1/appointments/?date={day}&type=Consultation")
        by_notes = self.client.get(f"/api/v1/appointments/?date={day}&q=fasting")

        self.assertEqual([a["appointment_type"] for a in by_type.data], [Appointment.TYPE_CONSULTATION])
        self.assertEqual(len(by_notes.data), 1)

    def test_delete(self):
        appointment_id = self._book(9).data["id"]

        response = self.client.delete(f"/api/v1/appointments/{appointment_id}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Appointment.objects.filter(pk=appointment_id).exists())

    def test_rbac(self):
        self.client.force_authenticate(user=self.phlebotomist)
        self.assertEqual(self._book(9).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.technician)
        self.assertEqual(self.client.get("/api/v1/appointments/").status_code, status.HTTP_403_FORBIDDEN)


class CollectSamplesTest(TestCase):
    databases = {"default"}

    def setUp(self):
        make_catalog()
        self.phlebotomist = make_user("phlebotomist", "phleb_col@example.com")
        self.receptionist = make_user("receptionist", "rec_col@example.com")
        physician = make_user("physician", "doc_col@example.com")
        self.patient = make_patient()
        self.order = services.create_order(
            patient_id=self.patient.id, physician_id=physician.id,
            icd10_code="Z00.0", priority="Routine", test_codes=["K", "CBC"],
            appointment_details={"scheduled_time": slot(hour=8)},
        )
        self.appointment = self.order.appointments.get()

        self.client = APIClient()
        self.client.defaults["HTTP_HOST"] = "localhost"
        self.client.force_authenticate(user=self.phlebotomist)

    def test_collect_marks_samples_collected(self):
        response = self.client.post(f"/api/v1/appointments/{self.appointment.id}/collect/")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["collected_samples"], 2)
        self.assertEqual(response.data["appointment_status"], Appointment.STATUS_COMPLETED)

        statuses = set(self.order.samples.values_list("status", flat=True))
        self.assertEqual(statuses, {OrderSample.STATUS_COLLECTED})
        self.assertFalse(self.order.samples.filter(collection_timestamp__isnull=True).exists())

        self.order.refresh_from_db()
        self.assertEqual(self.order.order_status, Order.STATUS_IN_PROGRESS)
        self.assertTrue(AuditLog.objects.filter(action="SAMPLE_COLLECTED", entity_id=self.order.order_id).exists())

    def test_collect_without_pending_order(self):
        self.client.post(f"/api/v1/appointments/{self.appointment.id}/collect/")
        walk_in = Appointment.objects.create(
            patient=self.patient, appointment_type=Appointment.TYPE_CONSULTATION, scheduled_time=slot(hour=12),
        )

        response = self.client.post(f"/api/v1/appointments/{walk_in.id}/collect/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Collection confirmed, but no pending orders found.")
        walk_in.refresh_from_db()
        self.assertEqual(walk_in.status, Appointment.STATUS_COMPLETED)

    def test_failed_collection_leaves_appointment_open(self):
        with mock.patch.object(workflow, "collect_pending_samples", side_effect=RuntimeError("db down")):
            with self.assertLogs("labwise_backend.core.exceptions", level="ERROR"):
                response = self.client.post(f"/api/v1/appointments/{self.appointment.id}/collect/")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.status, Appointment.STATUS_SCHEDULED)

    def test_collect_unknown_appointment_returns_404(self):
        response = self.client.post("/api/v1/appointments/999999/collect/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_receptionist_cannot_collect(self):
        self.client.force_authenticate(user=self.receptionist)
        response = self.client.post(f"/api/v1/appointments/{self.appointment.id}/collect/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
