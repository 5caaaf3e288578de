"""Tests for order entry, order edits and the printable report."""

from __future__ import annotations

from datetime import timedelta

from django.test import TestCase

from rest_framework import status
from rest_framework.test import APIClient

from labwise_backend.appointments.models import Appointment
from labwise_backend.core.models import AuditLog
from labwise_backend.orders import services, workflow
from labwise_backend.orders.models import Order, OrderSample, OrderTest

from .fixtures import make_catalog, make_patient, make_user, slot


class OrderCreateTest(TestCase):
    databases = {"default"}

    def setUp(self):
        make_catalog()
        self.receptionist = make_user("receptionist", "rec_ord@example.com")
        self.physician = make_user("physician", "doc_ord@example.com", first_name="Michael", last_name="Smith")
        self.patient = make_patient()

        self.client = APIClient()
        self.client.defaults["HTTP_HOST"] = "localhost"
        self.client.force_authenticate(user=self.receptionist)

    def _payload(self, **overrides):
        payload = {
            "patient_id": self.patient.id,
            "physician_id": self.physician.id,
            "icd10_code": "E11.9",
            "priority": "Routine",
            "test_codes": ["k", "CBC", "TSH"],
        }
        payload.update(overrides)
        return payload

    def test_create_groups_tests_by_tube_type(self):
        response = self.client.post("/api/v1/orders/", self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertRegex(response.data["order_id"], r"^ORD-\d{4}-\d{5}$")
        self.assertEqual(response.data["order_status"], Order.STATUS_PENDING)
        self.assertEqual(response.data["physician_name"], "Michael Smith")

        samples = {s["sample_type"]: s for s in response.data["samples"]}
        self.assertEqual(set(samples), {"Gold Top", "Lavender Top"})
        self.assertEqual(sorted(t["test_code"] for t in samples["Gold Top"]["tests"]), ["K", "TSH"])
        for sample in samples.values():
            self.assertEqual(sample["status"], OrderSample.STATUS_AWAITING_COLLECTION)
            self.assertIsNone(sample["accession_number"])

        self.assertTrue(AuditLog.objects.filter(action="ORDER_CREATE", entity_id=response.data["order_id"]).exists())

    def test_create_snapshots_catalog_fields(self):
        response = self.client.post("/api/v1/orders/", self._payload(test_codes=["K", "CBC"]), format="json")

        tests = {t.test_code: t for t in OrderTest.objects.filter(sample__order_id=response.data["id"])}
        self.assertEqual(tests["K"].name, "Potassium")
        self.assertEqual(tests["K"].reference_range, "3.5 - 5.1")
        self.assertEqual(tests["K"].result_units, "mmol/L")
        # adult range picked by the patient's age
        self.assertEqual(tests["CBC"].reference_range, "4.5 - 11.0")
        self.assertEqual(tests["K"].status, OrderTest.STATUS_PENDING)

    def test_order_ids_are_sequential(self):
        first = self.client.post("/api/v1/orders/", self._payload(), format="json").data["order_id"]
        second = self.client.post("/api/v1/orders/", self._payload(), format="json").data["order_id"]

        self.assertEqual(int(second.rsplit("-", 1)[1]), int(first.rsplit("-", 1)[1]) + 1)

    def test_unknown_test_codes_return_400(self):
        response = self.client.post(
            "/api/v1/orders/",
            self._payload(test_codes=["K", "NOPE", "OLD"]),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["invalid_codes"], ["NOPE", "OLD"])
        self.assertFalse(Order.objects.exists())

    def test_empty_test_list_returns_400(self):
        response = self.client.post("/api/v1/orders/", self._payload(test_codes=[]), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_samples_input_is_accepted(self):
        payload = self._payload(test_codes=None)
        payload.pop("test_codes")
        payload["samples"] = [
            {"sample_type": "Gold Top", "test_codes": ["K"]},
            {"sample_type": "Lavender Top", "test_codes": ["CBC"]},
        ]

        response = self.client.post("/api/v1/orders/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(len(response.data["samples"]), 2)

    def test_samples_follow_catalog_tube_types(self):
        payload = self._payload(test_codes=None)
        payload.pop("test_codes")
        payload["samples"] = [{"sample_type": "Red Top", "test_codes": ["K", "CBC"]}]

        response = self.client.post("/api/v1/orders/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(
            sorted(s["sample_type"] for s in response.data["samples"]),
            ["Gold Top", "Lavender Top"],
        )

    def test_unknown_patient_returns_404(self):
        response = self.client.post("/api/v1/orders/", self._payload(patient_id=999999), format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_non_physician_as_ordering_physician_returns_404(self):
        response = self.client.post("/api/v1/orders/", self._payload(physician_id=self.receptionist.id), format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_create_with_appointment_books_collection(self):
        start = slot(hour=9)
        response = self.client.post(
            "/api/v1/orders/",
            self._payload(appointment_details={"scheduled_time": start.isoformat(), "duration_minutes": 20}),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        appointment = Appointment.objects.get(order_id=response.data["id"])
        self.assertEqual(appointment.appointment_type, Appointment.TYPE_SAMPLE_COLLECTION)
        self.assertEqual(appointment.end_time, start + timedelta(minutes=20))
        self.assertEqual(response.data["appointment"]["id"], appointment.id)

    def test_create_with_conflicting_appointment_returns_409_and_creates_nothing(self):
        Appointment.objects.create(
            patient=make_patient(mrn="P0000009"),
            appointment_type=Appointment.TYPE_CONSULTATION,
            scheduled_time=slot(hour=9),
            duration_minutes=30,
        )

        response = self.client.post(
            "/api/v1/orders/",
            self._payload(appointment_details={"scheduled_time": slot(hour=9, minute=15).isoformat()}),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["conflicts"][0]["type"], "appointment_overlap")
        self.assertFalse(Order.objects.exists())

    def test_list_search(self):
        order_id = self.client.post("/api/v1/orders/", self._payload(), format="json").data["order_id"]
        other = make_patient(mrn="P0000050", first_name="Zed", last_name="Zulu", phone="555-9999")
        self.client.post("/api/v1/orders/", self._payload(patient_id=other.id), format="json")

        by_order = self.client.get(f"/api/v1/orders/?q={order_id}")
        by_name = self.client.get("/api/v1/orders/?q=zulu")

        self.assertEqual([o["order_id"] for o in by_order.data], [order_id])
        self.assertEqual([o["patient_info"]["mrn"] for o in by_name.data], ["P0000050"])


class OrderUpdateTest(TestCase):
    databases = {"default"}

    def setUp(self):
        make_catalog()
        self.receptionist = make_user("receptionist", "rec_upd@example.com")
        self.physician = make_user("physician", "doc_upd@example.com")
        self.patient = make_patient()

        self.order = services.create_order(
            patient_id=self.patient.id,
            physician_id=self.physician.id,
            icd10_code="E11.9",
            priority=Order.PRIORITY_ROUTINE,
            test_codes=["K", "TSH", "CBC"],
            appointment_details={"scheduled_time": slot(hour=8), "duration_minutes": 15},
        )
        self.client = APIClient()
        self.client.defaults["HTTP_HOST"] = "localhost"
        self.client.force_authenticate(user=self.receptionist)

    def _put(self, test_codes, scheduled_time=None, **extra):
        payload = {
            "physician_id": self.physician.id,
            "icd10_code": "E11.65",
            "test_codes": test_codes,
            "appointment_details": {"scheduled_time": (scheduled_time or slot(hour=8)).isoformat()},
        }
        payload.update(extra)
        return self.client.put(f"/api/v1/orders/{self.order.id}/", payload, format="json")

    def test_update_preserves_collected_sample_state(self):
        workflow.collect_pending_samples(self.order)
        gold = self.order.samples.get(sample_type="Gold Top")
        workflow.accession_sample(gold)
        gold.refresh_from_db()
        k_test_id = gold.tests.get(test_code="K").id

        response = self._put(["K", "PT"])

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        kept = OrderSample.objects.get(pk=gold.pk)
        self.assertEqual(kept.accession_number, gold.accession_number)
        self.assertEqual(kept.collection_timestamp, gold.collection_timestamp)
        self.assertEqual(kept.received_timestamp, gold.received_timestamp)
        self.assertEqual(kept.status, OrderSample.STATUS_IN_LAB)
        self.assertEqual(list(kept.tests.values_list("id", flat=True)), [k_test_id])

        types = set(self.order.samples.values_list("sample_type", flat=True))
        self.assertEqual(types, {"Gold Top", "Light Blue Top"})
        new_sample = self.order.samples.get(sample_type="Light Blue Top")
        self.assertEqual(new_sample.status, OrderSample.STATUS_AWAITING_COLLECTION)

        self.order.refresh_from_db()
        self.assertEqual(self.order.icd10_code, "E11.65")
        self.assertEqual(self.order.order_status, Order.STATUS_PARTIALLY_COLLECTED)
        self.assertTrue(AuditLog.objects.filter(action="ORDER_UPDATE").exists())

    def test_update_moves_appointment(self):
        response = self._put(["K"], scheduled_time=slot(hour=11))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        appointment = self.order.appointments.get()
        self.assertEqual(appointment.scheduled_time, slot(hour=11))
        self.assertEqual(appointment.duration_minutes, 15)

    def test_update_reports_the_moved_appointment(self):
        booked = self.order.appointments.get()
        Appointment.objects.create(
            patient=self.patient,
            order=self.order,
            appointment_type=Appointment.TYPE_CONSULTATION,
            scheduled_time=slot(hour=7),
        )

        response = self._put(["K"], scheduled_time=slot(hour=11))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["appointment"]["id"], booked.id)
        booked.refresh_from_db()
        self.assertEqual(booked.scheduled_time, slot(hour=11))

    def test_conflicting_update_returns_409_and_changes_nothing(self):
        Appointment.objects.create(
            patient=make_patient(mrn="P0000002"),
            appointment_type=Appointment.TYPE_CONSULTATION,
            scheduled_time=slot(hour=10),
            duration_minutes=30,
        )
        before_tests = sorted(OrderTest.objects.filter(sample__order=self.order).values_list("test_code", flat=True))

        response = self._put(["PT"], scheduled_time=slot(hour=10, minute=10))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        after_tests = sorted(OrderTest.objects.filter(sample__order=self.order).values_list("test_code", flat=True))
        self.assertEqual(before_tests, after_tests)
        self.assertEqual(self.order.appointments.get().scheduled_time, slot(hour=8))
        self.order.refresh_from_db()
        self.assertEqual(self.order.icd10_code, "E11.9")

    def test_invalid_codes_on_update_return_400(self):
        response = self._put(["K", "BOGUS"])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["invalid_codes"], ["BOGUS"])

    def test_patient_cannot_be_changed(self):
        other = make_patient(mrn="P0000003")

        response = self._put(["K"], patient_id=other.id)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "patient_id")

    def test_appointment_details_are_required(self):
        response = self.client.put(
            f"/api/v1/orders/{self.order.id}/",
            {"physician_id": self.physician.id, "icd10_code": "E11.9", "test_codes": ["K"]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_physician_cannot_edit(self):
        self.client.force_authenticate(user=self.physician)
        self.assertEqual(self._put(["K"]).status_code, status.HTTP_403_FORBIDDEN)


class OrderAccessTest(TestCase):
    databases = {"default"}

    def setUp(self):
        make_catalog()
        self.physician = make_user("physician", "doc_a@example.com")
        self.other_physician = make_user("physician", "doc_b@example.com")
        self.patient_user = make_user("patient", "pat_a@example.com")
        self.technician = make_user("technician", "tech_a@example.com")

        patient = make_patient(user=self.patient_user)
        other_patient = make_patient(mrn="P0000002")
        self.own = services.create_order(
            patient_id=patient.id, physician_id=self.physician.id,
            icd10_code="Z00.0", priority="Routine", test_codes=["K"],
        )
        self.foreign = services.create_order(
            patient_id=other_patient.id, physician_id=self.other_physician.id,
            icd10_code="Z00.0", priority="Routine", test_codes=["K"],
        )
        self.client = APIClient()
        self.client.defaults["HTTP_HOST"] = "localhost"

    def test_physician_sees_only_own_orders(self):
        self.client.force_authenticate(user=self.physician)

        response = self.client.get("/api/v1/orders/")

        self.assertEqual([o["order_id"] for o in response.data], [self.own.order_id])
        self.assertEqual(self.client.get(f"/api/v1/orders/{self.foreign.id}/").status_code, status.HTTP_403_FORBIDDEN)

    def test_patient_sees_only_own_orders(self):
        self.client.force_authenticate(user=self.patient_user)

        response = self.client.get("/api/v1/orders/")

        self.assertEqual([o["order_id"] for o in response.data], [self.own.order_id])

    def test_lab_staff_see_everything(self):
        self.client.force_authenticate(user=self.technician)
        self.assertEqual(len(self.client.get("/api/v1/orders/").data), 2)

    def test_pdf_report(self):
        self.client.force_authenticate(user=self.technician)

        response = self.client.get(f"/api/v1/orders/{self.own.id}/pdf/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertTrue(response.content.startswith(b"%PDF"))
        self.assertTrue(AuditLog.objects.filter(action="ORDER_REPORT_VIEW", entity_id=self.own.order_id).exists())

    def test_pdf_report_with_markup_characters(self):
        patient = self.own.patient
        patient.last_name = "<Doe & Sons"
        patient.save()
        self.own.icd10_code = "Z00.0<b>"
        self.own.save()
        self.client.force_authenticate(user=self.technician)

        response = self.client.get(f"/api/v1/orders/{self.own.id}/pdf/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_anonymous_gets_401(self):
        self.assertEqual(self.client.get("/api/v1/orders/").status_code, status.HTTP_401_UNAUTHORIZED)
