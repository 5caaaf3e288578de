"""Tests for patient registration, search and eligibility checks."""

from __future__ import annotations

from datetime import date
from unittest import mock

from django.test import SimpleTestCase, TestCase

from rest_framework import status
from rest_framework.test import APIClient

from labwise_backend.core.models import AuditLog, Role, User
from labwise_backend.patients.models import Patient
from labwise_backend.patients.tasks import verify_insurance_eligibility


def make_user(role_name, email):
    role, _ = Role.objects.get_or_create(name=role_name, defaults={"label": role_name.title()})
    return User.objects.create_user(username=email, email=email, password="DummyPass123!", role=role)


PATIENT_PAYLOAD = {
    "first_name": "Jane",
    "last_name": "Roe",
    "date_of_birth": "1990-05-17",
    "gender": "Female",
    "phone": "555-0199",
    "email": "jane.roe@example.com",
    "street": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
    "insurance_info": [
        {"provider_name": "Acme Health", "policy_number": "AH-1", "is_primary": True},
    ],
}


class PatientApiTest(TestCase):
    databases = {"default"}

    def setUp(self):
        self.receptionist = make_user("receptionist", "rec_pat@example.com")
        self.technician = make_user("technician", "tech_pat@example.com")
        self.physician = make_user("physician", "doc_pat@example.com")
        self.patient_user = make_user("patient", "portal_pat@example.com")

        self.client = APIClient()
        self.client.defaults["HTTP_HOST"] = "localhost"

    def test_create_then_fetch_returns_same_fields(self):
        self.client.force_authenticate(user=self.receptionist)

        created = self.client.post("/api/v1/patients/", PATIENT_PAYLOAD, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)

        fetched = self.client.get(f"/api/v1/patients/{created.data['id']}/")
        self.assertEqual(fetched.status_code, status.HTTP_200_OK)
        for key in ("first_name", "last_name", "date_of_birth", "gender", "phone", "city", "zip_code"):
            self.assertEqual(fetched.data[key], PATIENT_PAYLOAD[key])
        self.assertEqual(fetched.data["insurance_info"][0]["policy_number"], "AH-1")
        self.assertEqual(fetched.data["mrn"], created.data["mrn"])

        self.assertTrue(AuditLog.objects.filter(action="PATIENT_CREATE", patient_id=created.data["id"]).exists())

    def test_mrns_are_sequential_and_unique(self):
        self.client.force_authenticate(user=self.receptionist)

        first = self.client.post("/api/v1/patients/", PATIENT_PAYLOAD, format="json").data["mrn"]
        second = self.client.post("/api/v1/patients/", {**PATIENT_PAYLOAD, "first_name": "Jim"}, format="json").data["mrn"]

        self.assertRegex(first, r"^P\d{7}$")
        self.assertEqual(int(second[1:]), int(first[1:]) + 1)

    def test_mrn_in_payload_is_ignored(self):
        self.client.force_authenticate(user=self.receptionist)

        response = self.client.post("/api/v1/patients/", {**PATIENT_PAYLOAD, "mrn": "HACKED"}, format="json")

        self.assertNotEqual(response.data["mrn"], "HACKED")

    def test_search_matches_name_mrn_and_phone(self):
        Patient.objects.create(mrn="P0000100", first_name="Alice", last_name="Walker", phone="555-1111")
        Patient.objects.create(mrn="P0000101", first_name="Bob", last_name="Stone", phone="555-2222")
        self.client.force_authenticate(user=self.technician)

        by_name = self.client.get("/api/v1/patients/?q=walk")
        by_mrn = self.client.get("/api/v1/patients/?q=P0000101")
        by_phone = self.client.get("/api/v1/patients/?q=2222")

        self.assertEqual([p["first_name"] for p in by_name.data], ["Alice"])
        self.assertEqual([p["first_name"] for p in by_mrn.data], ["Bob"])
        self.assertEqual([p["first_name"] for p in by_phone.data], ["Bob"])

    def test_update_patient(self):
        patient = Patient.objects.create(mrn="P0000200", first_name="Old", last_name="Name")
        self.client.force_authenticate(user=self.receptionist)

        response = self.client.put(
            f"/api/v1/patients/{patient.id}/",
            {**PATIENT_PAYLOAD, "first_name": "New"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        patient.refresh_from_db()
        self.assertEqual(patient.first_name, "New")
        self.assertEqual(patient.mrn, "P0000200")

    def test_link_portal_user_requires_patient_role(self):
        self.client.force_authenticate(user=self.receptionist)

        bad = self.client.post("/api/v1/patients/", {**PATIENT_PAYLOAD, "user": self.physician.id}, format="json")
        good = self.client.post("/api/v1/patients/", {**PATIENT_PAYLOAD, "user": self.patient_user.id}, format="json")

        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(good.status_code, status.HTTP_201_CREATED)

    def test_rbac(self):
        patient = Patient.objects.create(mrn="P0000300", first_name="A", last_name="B")

        self.client.force_authenticate(user=self.technician)
        self.assertEqual(
            self.client.post("/api/v1/patients/", PATIENT_PAYLOAD, format="json").status_code,
            status.HTTP_403_FORBIDDEN,
        )

        self.client.force_authenticate(user=self.physician)
        self.assertEqual(self.client.get("/api/v1/patients/").status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get(f"/api/v1/patients/{patient.id}/").status_code, status.HTTP_200_OK)

        self.client.force_authenticate(user=self.patient_user)
        self.assertEqual(self.client.get(f"/api/v1/patients/{patient.id}/").status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_gets_401(self):
        self.assertEqual(self.client.get("/api/v1/patients/").status_code, status.HTTP_401_UNAUTHORIZED)


class EligibilityTest(TestCase):
    databases = {"default"}

    def setUp(self):
        self.receptionist = make_user("receptionist", "rec_elig@example.com")
        self.patient = Patient.objects.create(
            mrn="P0000400",
            first_name="Ellie",
            last_name="Gible",
            insurance_info=[{"provider_name": "Acme", "policy_number": "POL-9"}],
        )
        self.client = APIClient()
        self.client.defaults["HTTP_HOST"] = "localhost"
        self.client.force_authenticate(user=self.receptionist)

    def test_request_is_queued(self):
        fake_job = mock.Mock(id="job-123")
        with mock.patch(
            "labwise_backend.patients.views.verify_insurance_eligibility.delay",
            return_value=fake_job,
        ) as delay:
            response = self.client.post(
                "/api/v1/verify-eligibility/",
                {"patient_id": self.patient.id, "policy_number": "POL-9"},
                format="json",
            )

        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(response.data, {
            "message": "Eligibility verification has been queued.",
            "job_id": "job-123",
            "status": "Queued",
        })
        delay.assert_called_once_with(self.patient.id, "POL-9")

    def test_unknown_patient_returns_404(self):
        response = self.client.post(
            "/api/v1/verify-eligibility/",
            {"patient_id": 999999, "policy_number": "POL-9"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_task_result(self):
        self.assertEqual(verify_insurance_eligibility(self.patient.id, "POL-9")["status"], "Eligible")
        self.assertEqual(verify_insurance_eligibility(self.patient.id, "OTHER")["status"], "PolicyNotFound")
        self.assertEqual(verify_insurance_eligibility(999999, "POL-9")["status"], "PatientNotFound")


class PatientAgeTest(SimpleTestCase):
    def test_age_counts_completed_years(self):
        patient = Patient(date_of_birth=date(1990, 5, 17))

        self.assertEqual(patient.age_on(date(2020, 5, 16)), 29)
        self.assertEqual(patient.age_on(date(2020, 5, 17)), 30)
        self.assertIsNone(Patient().age_on(date(2020, 1, 1)))

    def test_age_defaults_to_local_date(self):
        patient = Patient(date_of_birth=date(1990, 5, 17))

        with mock.patch("labwise_backend.patients.models.timezone.localdate", return_value=date(2020, 5, 17)):
            self.assertEqual(patient.age_on(), 30)
