"""Client for the Expo push notification service."""

import logging
from typing import Any

import httpx

from src.config import Settings, get_settings
from src.services.exceptions import PushDeliveryError

logger = logging.getLogger(__name__)

# Ticket error meaning the token is no longer valid for this app
DEVICE_NOT_REGISTERED = "DeviceNotRegistered"


class ExpoPushClient:
    """Submits batches of push messages to Expo in a single request."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.url = self.settings.expo_push_url
        self.timeout = self.settings.push_timeout_seconds

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self.settings.expo_access_token:
            headers["Authorization"] = f"Bearer {self.settings.expo_access_token}"
        return headers

    def send(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Send a batch of push messages.

        Args:
            messages: One payload per device ({to, title, body, data, sound, categoryId})

        Returns:
            One ticket per message, e.g. {"status": "ok", "id": "..."} or
            {"status": "error", "message": "...", "details": {"error": "DeviceNotRegistered"}}

        Raises:
            PushDeliveryError: on transport errors, non-2xx responses or an unreadable body
        """
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.url, json=messages, headers=self._headers())
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise PushDeliveryError(
                f"Expo push API error: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise PushDeliveryError(f"Expo push request failed: {e}") from e
        except ValueError as e:
            raise PushDeliveryError("Expo push API returned invalid JSON") from e

        tickets = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(tickets, list):
            raise PushDeliveryError("Expo push API response has no ticket list")
        if not all(isinstance(ticket, dict) for ticket in tickets):
            raise PushDeliveryError("Expo push API response has malformed tickets")

        # Ticket messages echo the push token, so only error codes are logged
        errors = [
            (ticket.get("details") or {}).get("error", "unknown")
            for ticket in tickets
            if ticket.get("status") == "error"
        ]
        if errors:
            logger.warning(f"{len(errors)}/{len(tickets)} push tickets failed: {errors}")

        return tickets


def get_push_client() -> ExpoPushClient:
    """Get a push client instance."""
    return ExpoPushClient()
