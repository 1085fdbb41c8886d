"""Best-effort donor alerts for matched and confirmed requests."""

from __future__ import annotations

from typing import Any, Optional

import requests

from bloodlink.domain.models import BloodRequest, Donor
from bloodlink.utils.config import Settings, get_settings
from bloodlink.utils.logger import get_logger


logger = get_logger(__name__)


MATCH_ALERT = "donor_matched"
CONFIRMATION_NOTICE = "match_confirmed"


def build_payload(kind: str, request: BloodRequest, donor: Donor, sender: str) -> dict[str, Any]:
    return {
        "kind": kind,
        "sender": sender,
        "donor_id": donor.donor_id,
        "donor_name": donor.name,
        "donor_email": donor.email,
        "donor_phone": donor.phone,
        "request_id": request.request_id,
        "patient_name": request.patient_name,
        "hospital": request.hospital,
        "blood_type": request.blood_type.value,
        "units": request.units,
        "urgency": request.priority.value,
        "contact_number": request.requester_phone,
        "distance_km": request.distance,
        "route": list(request.route or ()),
    }


class NotificationDispatcher:
    """Delivers donor alerts to an HTTP webhook, or logs them when none is set.

    Delivery never raises: transport and HTTP errors are logged and reported
    through the boolean return value only.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._session = session

    @property
    def webhook_enabled(self) -> bool:
        return bool(self._settings.notification_webhook_url)

    def send_match_alert(self, request: BloodRequest, donor: Donor) -> bool:
        return self._deliver(build_payload(MATCH_ALERT, request, donor, self._settings.notification_sender))

    def send_confirmation(self, request: BloodRequest, donor: Donor) -> bool:
        return self._deliver(
            build_payload(CONFIRMATION_NOTICE, request, donor, self._settings.notification_sender)
        )

    def _deliver(self, payload: dict[str, Any]) -> bool:
        if not self.webhook_enabled:
            logger.info(
                "Notification logged (no webhook configured) | kind=%s | request_id=%s | donor_id=%s",
                payload["kind"],
                payload["request_id"],
                payload["donor_id"],
            )
            return True

        url = self._settings.notification_webhook_url
        poster = self._session.post if self._session is not None else requests.post
        try:
            response = poster(
                url,
                json=payload,
                timeout=self._settings.notification_timeout_seconds,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as exc:
            logger.warning(
                "Notification delivery failed | kind=%s | request_id=%s | error=%s",
                payload["kind"],
                payload["request_id"],
                exc,
            )
            return False

        logger.info(
            "Notification delivered | kind=%s | request_id=%s | status_code=%s",
            payload["kind"],
            payload["request_id"],
            response.status_code,
        )
        return True
