"""Fan-out of committed engine events to persistence and notifications."""

from __future__ import annotations

from typing import Iterable, Optional

from bloodlink.domain.models import (
    DonorMatched,
    EngineEvent,
    MatchConfirmed,
    RequestStatusChanged,
)
from bloodlink.repository.data_repository import DataRepository
from bloodlink.services.notification_service import NotificationDispatcher
from bloodlink.utils.logger import get_logger


logger = get_logger(__name__)


class EngineEventRelay:
    """Consumes events drained from the engine after a call has returned.

    Collaborators report their own failures; nothing here can undo a
    transition the engine already committed.
    """

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ) -> None:
        self._repository = repository
        self._dispatcher = dispatcher

    def relay(self, events: Iterable[EngineEvent]) -> int:
        handled = 0
        for event in events:
            if isinstance(event, RequestStatusChanged):
                if self._repository is not None:
                    self._repository.record_status_transition(event)
            elif isinstance(event, DonorMatched):
                if self._dispatcher is not None:
                    self._dispatcher.send_match_alert(event.request, event.donor)
            elif isinstance(event, MatchConfirmed):
                if self._repository is not None:
                    self._repository.record_donation(event.request, event.donor)
                if self._dispatcher is not None:
                    self._dispatcher.send_confirmation(event.request, event.donor)
            else:
                logger.warning("Unhandled engine event | type=%s", type(event).__name__)
                continue
            handled += 1
        if handled:
            logger.debug("Engine events relayed | count=%s", handled)
        return handled
