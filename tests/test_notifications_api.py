"""Tests for the notification and cron endpoints."""

import hmac
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from src.config import Settings, get_settings
from src.main import app
from src.models import DeviceToken, ScheduledNotification
from src.models.enums import NotificationCategory, ScheduledNotificationStatus
from src.services.notification_scheduler import NotificationScheduler

DEVICES_URL = "/api/v1/notifications/devices"
SETTINGS_URL = "/api/v1/notifications/settings"
SCHEDULED_URL = "/api/v1/notifications/scheduled"
CRON_URL = "/api/v1/cron/notifications"


def register_device(client, headers, token="ExponentPushToken[a]", **extra):
    return client.post(
        DEVICES_URL,
        headers=headers,
        json={"push_token": token, "platform": "ios", **extra},
    )


class TestDeviceEndpoints:
    """Tests for /notifications/devices."""

    def test_register_device(self, client, auth_headers):
        response = register_device(client, auth_headers, device_name="iPhone")

        assert response.status_code == 201
        data = response.json()
        assert data["push_token"] == "ExponentPushToken[a]"
        assert data["platform"] == "ios"
        assert data["device_name"] == "iPhone"
        assert data["is_active"] is True
        assert data["user_id"] == auth_headers.user_id

    def test_register_twice_keeps_one_row(self, client, auth_headers, db):
        register_device(client, auth_headers, device_name="Old")
        response = register_device(client, auth_headers, device_name="New")

        assert response.status_code == 201
        assert db.query(DeviceToken).count() == 1

        devices = client.get(DEVICES_URL, headers=auth_headers).json()["devices"]
        assert [device["device_name"] for device in devices] == ["New"]

    def test_invalid_platform(self, client, auth_headers):
        response = client.post(
            DEVICES_URL,
            headers=auth_headers,
            json={"push_token": "ExponentPushToken[a]", "platform": "blackberry"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"
        assert response.json()["details"][0]["field"] == "platform"

    def test_list_devices_empty(self, client, auth_headers):
        response = client.get(DEVICES_URL, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"devices": []}

    def test_unregister_device(self, client, auth_headers):
        register_device(client, auth_headers)

        response = client.request(
            "DELETE",
            DEVICES_URL,
            headers=auth_headers,
            json={"push_token": "ExponentPushToken[a]"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Device unregistered"
        assert client.get(DEVICES_URL, headers=auth_headers).json()["devices"] == []

    def test_unregister_unknown_device(self, client, auth_headers):
        response = client.request(
            "DELETE",
            DEVICES_URL,
            headers=auth_headers,
            json={"push_token": "ExponentPushToken[nope]"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Device not found"

    def test_requires_auth(self, client):
        assert client.get(DEVICES_URL).status_code == 401


class TestSettingsEndpoints:
    """Tests for /notifications/settings."""

    def test_get_defaults(self, client, auth_headers):
        response = client.get(SETTINGS_URL, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["notifications_enabled"] is True
        reminders = data["notification_categories"]["reminders"]
        assert reminders["enabled"] is True
        assert reminders["realTime"] is True
        assert reminders["scheduledTime"] == "09:00"
        assert data["notification_categories"]["expenses"]["enabled"] is False

    def test_update_single_category(self, client, auth_headers):
        before = client.get(SETTINGS_URL, headers=auth_headers).json()

        response = client.put(
            SETTINGS_URL,
            headers=auth_headers,
            json={"notification_categories": {"habits": {"enabled": False}}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["notification_categories"]["habits"]["enabled"] is False
        assert (
            data["notification_categories"]["reminders"]
            == before["notification_categories"]["reminders"]
        )

    def test_update_quiet_hours(self, client, auth_headers):
        response = client.put(
            SETTINGS_URL,
            headers=auth_headers,
            json={"quiet_hours_start": "22:00", "quiet_hours_end": "07:00"},
        )

        assert response.status_code == 200
        assert response.json()["quiet_hours_start"] == "22:00"
        assert response.json()["quiet_hours_end"] == "07:00"

        cleared = client.put(SETTINGS_URL, headers=auth_headers, json={"quiet_hours_start": None})
        assert cleared.json()["quiet_hours_start"] is None
        assert cleared.json()["quiet_hours_end"] == "07:00"

    @pytest.mark.parametrize("value", ["25:00", "7:00", "12:60", "noon"])
    def test_rejects_malformed_time(self, client, auth_headers, value):
        response = client.put(SETTINGS_URL, headers=auth_headers, json={"quiet_hours_start": value})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "quiet_hours_start"

    def test_rejects_malformed_scheduled_time(self, client, auth_headers):
        response = client.put(
            SETTINGS_URL,
            headers=auth_headers,
            json={
                "notification_categories": {
                    "habits": {"enabled": True, "scheduled": True, "scheduledTime": "7am"}
                }
            },
        )

        assert response.status_code == 400


class TestScheduledEndpoints:
    """Tests for /notifications/scheduled."""

    def schedule(self, client, headers, minutes=60, title="Call mom"):
        scheduled_for = datetime.now(UTC) + timedelta(minutes=minutes)
        return client.post(
            SCHEDULED_URL,
            headers=headers,
            json={
                "category": "reminders",
                "title": title,
                "body": "It's Sunday",
                "reference_id": "42",
                "scheduled_for": scheduled_for.isoformat(),
            },
        )

    def test_create(self, client, auth_headers):
        response = self.schedule(client, auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["category"] == "reminders"
        assert data["reference_id"] == "42"
        assert data["sent_at"] is None

    def test_create_requires_title(self, client, auth_headers):
        response = client.post(
            SCHEDULED_URL,
            headers=auth_headers,
            json={"category": "reminders", "scheduled_for": "2026-03-10T12:00:00Z"},
        )

        assert response.status_code == 400

    def test_list_soonest_first(self, client, auth_headers):
        self.schedule(client, auth_headers, minutes=120, title="Later")
        self.schedule(client, auth_headers, minutes=30, title="Sooner")

        response = client.get(SCHEDULED_URL, headers=auth_headers)

        assert response.status_code == 200
        assert [item["title"] for item in response.json()] == ["Sooner", "Later"]

    def test_list_filters_by_status(self, client, auth_headers):
        first = self.schedule(client, auth_headers).json()
        self.schedule(client, auth_headers, title="Keep")
        client.post(f"{SCHEDULED_URL}/{first['id']}/cancel", headers=auth_headers)

        pending = client.get(SCHEDULED_URL, headers=auth_headers, params={"status": "pending"})
        cancelled = client.get(
            SCHEDULED_URL, headers=auth_headers, params={"status": "cancelled"}
        )

        assert [item["title"] for item in pending.json()] == ["Keep"]
        assert [item["id"] for item in cancelled.json()] == [first["id"]]

    def test_list_pagination(self, client, auth_headers):
        for minutes in (10, 20, 30):
            self.schedule(client, auth_headers, minutes=minutes)

        response = client.get(
            SCHEDULED_URL, headers=auth_headers, params={"limit": 2, "offset": 2}
        )

        assert len(response.json()) == 1

    def test_cancel(self, client, auth_headers):
        created = self.schedule(client, auth_headers).json()

        response = client.post(f"{SCHEDULED_URL}/{created['id']}/cancel", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_cancel_twice_conflicts(self, client, auth_headers):
        created = self.schedule(client, auth_headers).json()
        client.post(f"{SCHEDULED_URL}/{created['id']}/cancel", headers=auth_headers)

        response = client.post(f"{SCHEDULED_URL}/{created['id']}/cancel", headers=auth_headers)

        assert response.status_code == 409

    def test_cancel_sent_conflicts(self, client, auth_headers, db):
        created = self.schedule(client, auth_headers).json()
        row = db.get(ScheduledNotification, created["id"])
        row.status = ScheduledNotificationStatus.SENT
        db.commit()

        response = client.post(f"{SCHEDULED_URL}/{created['id']}/cancel", headers=auth_headers)

        assert response.status_code == 409
        db.refresh(row)
        assert row.status == ScheduledNotificationStatus.SENT

    def test_cancel_unknown(self, client, auth_headers):
        response = client.post(f"{SCHEDULED_URL}/99999/cancel", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "Scheduled notification not found"

    def test_cancel_other_users_notification(self, client, auth_headers, make_user, db):
        other = make_user()
        row = ScheduledNotification(
            user_id=other.id,
            category=NotificationCategory.REMINDERS,
            title="Not yours",
            scheduled_for=datetime.now(UTC) + timedelta(hours=1),
            status=ScheduledNotificationStatus.PENDING,
        )
        db.add(row)
        db.commit()

        response = client.post(f"{SCHEDULED_URL}/{row.id}/cancel", headers=auth_headers)

        assert response.status_code == 404
        db.refresh(row)
        assert row.status == ScheduledNotificationStatus.PENDING


class TestCronEndpoint:
    """Tests for the cron trigger."""

    def test_runs_sweep(self, client, auth_headers, push_client):
        register_device(client, auth_headers)
        client.post(
            SCHEDULED_URL,
            headers=auth_headers,
            json={
                "category": "reminders",
                "title": "Due now",
                "scheduled_for": (datetime.now(UTC) - timedelta(minutes=1)).isoformat(),
            },
        )

        response = client.get(CRON_URL)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["results"]["scheduled_notifications"]["sent"] == 1
        assert set(data["results"]) == {
            "scheduled_notifications",
            "reminder_notifications",
            "habit_notifications",
        }
        assert "timestamp" in data
        assert len(push_client.calls) == 1

    def test_secret_required_when_configured(self, client):
        app.dependency_overrides[get_settings] = lambda: Settings(cron_secret="s3cret")

        missing = client.get(CRON_URL)
        wrong = client.get(CRON_URL, headers={"Authorization": "Bearer nope"})
        right = client.get(CRON_URL, headers={"Authorization": "Bearer s3cret"})

        assert missing.status_code == 401
        assert missing.json() == {"error": "Unauthorized"}
        assert wrong.status_code == 401
        assert right.status_code == 200

    def test_secret_is_compared_in_constant_time(self, client):
        app.dependency_overrides[get_settings] = lambda: Settings(cron_secret="s3cret")

        with patch(
            "src.api.dependencies.hmac.compare_digest", wraps=hmac.compare_digest
        ) as compare:
            response = client.get(CRON_URL, headers={"Authorization": "Bearer s3cres"})

        assert response.status_code == 401
        compare.assert_called_once_with(b"s3cres", b"s3cret")

    def test_unexpected_failure(self, client):
        with patch.object(NotificationScheduler, "run", side_effect=RuntimeError("boom")):
            response = client.get(CRON_URL)

        assert response.status_code == 500
        assert response.json() == {"error": "Cron job failed"}
