"""Tests for user administration and the audit trail."""

from __future__ import annotations

from unittest import mock

from django.test import TestCase

from rest_framework import status
from rest_framework.test import APIClient

from labwise_backend.core.models import AuditLog, Role, User
from labwise_backend.core.utils import log_action


class UserManagementTest(TestCase):
    databases = {"default"}

    def setUp(self):
        self.role_manager, _ = Role.objects.get_or_create(name="manager", defaults={"label": "Lab Manager"})
        self.role_receptionist, _ = Role.objects.get_or_create(name="receptionist", defaults={"label": "Receptionist"})
        self.role_physician, _ = Role.objects.get_or_create(name="physician", defaults={"label": "Physician"})
        self.role_technician, _ = Role.objects.get_or_create(name="technician", defaults={"label": "Lab Technician"})

        self.manager = User.objects.create_user(
            username="mgr@example.com", email="mgr@example.com", password="DummyPass123!", role=self.role_manager,
        )
        self.receptionist = User.objects.create_user(
            username="rec@example.com", email="rec@example.com", password="DummyPass123!", role=self.role_receptionist,
        )
        self.physician = User.objects.create_user(
            username="doc@example.com", email="doc@example.com", password="DummyPass123!",
            role=self.role_physician, first_name="Michael", last_name="Smith",
        )

        self.client = APIClient()
        self.client.defaults["HTTP_HOST"] = "localhost"

    def test_manager_lists_users(self):
        self.client.force_authenticate(user=self.manager)

        response = self.client.get("/api/v1/users/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 3)

    def test_receptionist_may_only_list_physicians(self):
        self.client.force_authenticate(user=self.receptionist)

        self.assertEqual(self.client.get("/api/v1/users/").status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.get("/api/v1/users/?role=physician")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u["id"] for u in response.data], [self.physician.id])
        self.assertEqual(response.data[0]["name"], "Michael Smith")

    def test_create_user(self):
        self.client.force_authenticate(user=self.manager)

        response = self.client.post(
            "/api/v1/users/",
            {
                "email": "New.Tech@Example.com",
                "first_name": "New",
                "last_name": "Tech",
                "password": "LongEnough1!",
                "role": "technician",
                "training_records": [
                    {"document_name": "Phlebotomy basics", "completion_date": "2026-01-15"},
                ],
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["email"], "new.tech@example.com")
        self.assertEqual(response.data["role"]["name"], "technician")

        user = User.objects.get(email="new.tech@example.com")
        self.assertTrue(user.check_password("LongEnough1!"))
        self.assertEqual(user.training_records[0]["completion_date"], "2026-01-15")
        self.assertTrue(AuditLog.objects.filter(action="USER_CREATE", entity_id=str(user.pk)).exists())

    def test_create_duplicate_email_returns_409(self):
        self.client.force_authenticate(user=self.manager)

        response = self.client.post(
            "/api/v1/users/",
            {"email": "DOC@example.com", "first_name": "X", "last_name": "Y", "password": "LongEnough1!", "role": "physician"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_create_without_password_returns_400(self):
        self.client.force_authenticate(user=self.manager)

        response = self.client.post(
            "/api/v1/users/",
            {"email": "nopass@example.com", "first_name": "X", "last_name": "Y", "role": "physician"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", response.data)

    def test_update_to_taken_email_returns_409(self):
        self.client.force_authenticate(user=self.manager)

        response = self.client.put(
            f"/api/v1/users/{self.receptionist.id}/",
            {"email": "doc@example.com", "first_name": "R", "last_name": "R", "role": "receptionist"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_delete_deactivates(self):
        self.client.force_authenticate(user=self.manager)

        response = self.client.delete(f"/api/v1/users/{self.physician.id}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.physician.refresh_from_db()
        self.assertFalse(self.physician.is_active)

    def test_non_manager_cannot_create(self):
        self.client.force_authenticate(user=self.receptionist)

        response = self.client.post(
            "/api/v1/users/",
            {"email": "x@example.com", "first_name": "X", "last_name": "Y", "password": "LongEnough1!", "role": "manager"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AuditLogTest(TestCase):
    databases = {"default"}

    def setUp(self):
        role_manager, _ = Role.objects.get_or_create(name="manager", defaults={"label": "Lab Manager"})
        role_technician, _ = Role.objects.get_or_create(name="technician", defaults={"label": "Lab Technician"})
        self.manager = User.objects.create_user(
            username="mgr_audit@example.com", email="mgr_audit@example.com", password="DummyPass123!", role=role_manager,
        )
        self.technician = User.objects.create_user(
            username="tech_audit@example.com", email="tech_audit@example.com", password="DummyPass123!", role=role_technician,
        )
        self.client = APIClient()
        self.client.defaults["HTTP_HOST"] = "localhost"

        log_action(self.manager, "ORDER_CREATE", "Order", "ORD-2026-00001")
        log_action(self.technician, "SAMPLE_ACCESSIONED", "Order", "ORD-2026-00001")
        log_action(None, "SYSTEM_TASK", "InventoryItem", 7)

    def test_log_action_records_role(self):
        entry = AuditLog.objects.get(action="SAMPLE_ACCESSIONED")
        self.assertEqual(entry.role_name, "technician")
        self.assertEqual(entry.user, self.technician)

    def test_manager_reads_filtered_audit_logs(self):
        self.client.force_authenticate(user=self.manager)

        response = self.client.get("/api/v1/audit-logs/?action=ORDER_CREATE")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([e["action"] for e in response.data], ["ORDER_CREATE"])

        response = self.client.get("/api/v1/audit-logs/?action=All&entity_id=ORD-2026-00001")
        self.assertEqual(len(response.data), 2)

    def test_entry_without_user_is_attributed_to_system(self):
        self.client.force_authenticate(user=self.manager)

        response = self.client.get("/api/v1/audit-logs/?action=SYSTEM_TASK")

        self.assertEqual(response.data[0]["user_name"], "System")

    def test_technician_cannot_read_audit_logs(self):
        self.client.force_authenticate(user=self.technician)
        self.assertEqual(self.client.get("/api/v1/audit-logs/").status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_gets_401(self):
        self.assertEqual(self.client.get("/api/v1/audit-logs/").status_code, status.HTTP_401_UNAUTHORIZED)

    def test_audit_write_failure_is_swallowed(self):
        with mock.patch.object(AuditLog.objects, "create", side_effect=RuntimeError("db down")):
            with self.assertLogs("labwise_backend.core.utils", level="ERROR"):
                log_action(self.manager, "ORDER_UPDATE", "Order", "ORD-2026-00001")
        self.assertFalse(AuditLog.objects.filter(action="ORDER_UPDATE").exists())
