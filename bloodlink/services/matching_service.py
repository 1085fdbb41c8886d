"""Request fulfillment: donor matching first, bank inventory as fallback."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import RLock
from typing import Callable, Optional

from bloodlink.domain.constraints import validate_requested_units
from bloodlink.domain.errors import InvalidRequestStateError, LocationNotFoundError
from bloodlink.domain.models import (
    BloodRequest,
    BloodType,
    DonorMatched,
    EngineEvent,
    FulfillmentSource,
    InventoryEntry,
    MatchConfirmed,
    RankedDonor,
    RequestPriority,
    RequestStatus,
    RequestStatusChanged,
)
from bloodlink.repository.memory_store import BloodStore, new_identifier
from bloodlink.services.ranking_service import DonorRanker
from bloodlink.services.routing_service import LocationGraph, ShortestPathRouter
from bloodlink.utils.logger import get_logger


logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AllocationEngine:
    """Owns every request status transition and the state it mutates.

    All mutating calls run under a single re-entrant lock, so the
    "donor available -> flip" and "stock available -> decrement" sequences
    cannot interleave. Side effects for collaborators (persistence, donor
    alerts) are queued as events and drained by the caller once the call has
    returned.
    """

    def __init__(
        self,
        store: BloodStore,
        graph: LocationGraph,
        ranker: Optional[DonorRanker] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._graph = graph
        self._ranker = ranker or DonorRanker(ShortestPathRouter(graph))
        self._clock = clock or _utcnow
        self._lock = RLock()
        self._events: list[EngineEvent] = []

    @property
    def lock(self) -> RLock:
        return self._lock

    @property
    def store(self) -> BloodStore:
        return self._store

    @property
    def graph(self) -> LocationGraph:
        return self._graph

    def require_location(self, location_id: str) -> None:
        if not self._graph.has_location(location_id):
            raise LocationNotFoundError(f"Unknown location '{location_id}'")

    # --- events ---

    def drain_events(self) -> list[EngineEvent]:
        """Hand over and clear queued events.

        The outbox keeps growing until drained; every embedding (HTTP layer,
        scripts) must call this after its engine calls.
        """
        with self._lock:
            events, self._events = self._events, []
        return events

    def _transition(self, request: BloodRequest, **changes) -> BloodRequest:
        updated = replace(request, **changes)
        self._store.put_request(updated)
        self._events.append(
            RequestStatusChanged(
                request_id=updated.request_id,
                previous_status=request.status,
                status=updated.status,
                source=updated.source,
                occurred_at=self._clock(),
            )
        )
        return updated

    # --- intake ---

    def create_request(
        self,
        *,
        blood_type: BloodType,
        units: int,
        location_id: str,
        priority: RequestPriority = RequestPriority.URGENT,
        patient_name: str = "",
        hospital: str = "",
        requester_name: str = "",
        requester_phone: str = "",
        relation_with_patient: str = "",
        request_id: Optional[str] = None,
    ) -> BloodRequest:
        blood_type = BloodType.parse(blood_type)
        validate_requested_units(units)
        self.require_location(location_id)
        request = BloodRequest(
            request_id=request_id or new_identifier(),
            blood_type=blood_type,
            units=units,
            location_id=location_id,
            priority=RequestPriority(priority),
            created_at=self._clock(),
            patient_name=patient_name,
            hospital=hospital,
            requester_name=requester_name,
            requester_phone=requester_phone,
            relation_with_patient=relation_with_patient,
        )
        with self._lock:
            self._store.put_request(request)
        logger.info(
            "Blood request created | request_id=%s | blood_type=%s | units=%s | location=%s | priority=%s",
            request.request_id,
            blood_type.value,
            units,
            location_id,
            request.priority.value,
        )
        return request

    # --- matching ---

    def rank_donors(self, blood_type: BloodType, location_id: str) -> list[RankedDonor]:
        """Preview the ranked candidates without mutating anything."""
        blood_type = BloodType.parse(blood_type)
        self.require_location(location_id)
        with self._lock:
            donors = self._store.list_donors()
        return self._ranker.rank_donors(blood_type, location_id, donors)

    def process_request(self, request_id: str) -> BloodRequest:
        with self._lock:
            request = self._store.get_request(request_id)
            if request.status != RequestStatus.PENDING:
                logger.debug(
                    "Process skipped for non-pending request | request_id=%s | status=%s",
                    request_id,
                    request.status.value,
                )
                return request

            ranked = self._ranker.rank_donors(
                request.blood_type,
                request.location_id,
                self._store.list_donors(),
            )
            if ranked:
                return self._match_donor(request, ranked[0])

            if self._store.inventory.try_draw(request.blood_type, request.units):
                fulfilled = self._transition(
                    request,
                    status=RequestStatus.FULFILLED,
                    source=FulfillmentSource.BANK_INVENTORY,
                )
                logger.info(
                    "Request fulfilled from bank | request_id=%s | blood_type=%s | units=%s | remaining=%s",
                    request_id,
                    request.blood_type.value,
                    request.units,
                    self._store.inventory.entry(request.blood_type).total_units,
                )
                return fulfilled

            entry = self._store.inventory.entry(request.blood_type)
            logger.info(
                "Request left pending | request_id=%s | blood_type=%s | units=%s | available=%s | reserved=%s",
                request_id,
                request.blood_type.value,
                request.units,
                entry.available_units,
                entry.reserved_units,
            )
            return request

    def _match_donor(self, request: BloodRequest, candidate: RankedDonor) -> BloodRequest:
        donor = self._store.set_donor_availability(candidate.donor.donor_id, False)
        matched = self._transition(
            request,
            status=RequestStatus.MATCHED,
            source=FulfillmentSource.DONOR_MATCH,
            matched_donor=donor,
            route=candidate.route,
            distance=candidate.distance,
        )
        self._events.append(DonorMatched(request=matched, donor=donor))
        logger.info(
            "Request matched to donor | request_id=%s | donor_id=%s | distance_km=%s | stops=%s",
            request.request_id,
            donor.donor_id,
            candidate.distance,
            len(candidate.path),
        )
        return matched

    def process_pending_requests(self) -> list[BloodRequest]:
        """Process every pending request, most urgent and oldest first."""
        with self._lock:
            pending = sorted(
                self._store.list_requests(RequestStatus.PENDING),
                key=lambda item: (item.priority.rank, item.created_at),
            )
            results = [self.process_request(request.request_id) for request in pending]
        logger.info(
            "Pending batch processed | total=%s | matched=%s | fulfilled=%s | still_pending=%s",
            len(results),
            sum(1 for item in results if item.status == RequestStatus.MATCHED),
            sum(1 for item in results if item.status == RequestStatus.FULFILLED),
            sum(1 for item in results if item.status == RequestStatus.PENDING),
        )
        return results

    # --- lifecycle ---

    def confirm_match(self, request_id: str) -> BloodRequest:
        """Record that the matched donor actually donated."""
        with self._lock:
            request = self._store.get_request(request_id)
            if request.status != RequestStatus.MATCHED or request.matched_donor is None:
                raise InvalidRequestStateError(
                    f"Request '{request_id}' is {request.status.value}; only Matched requests can be confirmed"
                )
            confirmed = self._transition(request, status=RequestStatus.FULFILLED)
            self._events.append(MatchConfirmed(request=confirmed, donor=request.matched_donor))
        logger.info(
            "Donor match confirmed | request_id=%s | donor_id=%s",
            request_id,
            request.matched_donor.donor_id,
        )
        return confirmed

    def mark_complete(self, request_id: str) -> BloodRequest:
        """Administrative completion; does not touch inventory or donors."""
        with self._lock:
            request = self._store.get_request(request_id)
            if request.status == RequestStatus.FULFILLED:
                return request
            if request.status == RequestStatus.CANCELLED:
                raise InvalidRequestStateError(
                    f"Request '{request_id}' is Cancelled and cannot be completed"
                )
            completed = self._transition(request, status=RequestStatus.FULFILLED)
        logger.info("Request marked complete | request_id=%s", request_id)
        return completed

    def cancel_request(self, request_id: str) -> BloodRequest:
        """Cancel a request; a matched donor is released back to the pool."""
        with self._lock:
            request = self._store.get_request(request_id)
            if request.status == RequestStatus.CANCELLED:
                return request
            if request.status == RequestStatus.FULFILLED:
                raise InvalidRequestStateError(
                    f"Request '{request_id}' is Fulfilled and cannot be cancelled"
                )
            released_donor_id = None
            if request.status == RequestStatus.MATCHED and request.matched_donor is not None:
                donor_id = request.matched_donor.donor_id
                if self._donor_releasable(donor_id, request_id):
                    self._store.set_donor_availability(donor_id, True)
                    released_donor_id = donor_id
            cancelled = self._transition(request, status=RequestStatus.CANCELLED)
        logger.info(
            "Request cancelled | request_id=%s | released_donor_id=%s",
            request_id,
            released_donor_id,
        )
        return cancelled

    def _donor_releasable(self, donor_id: str, cancelled_request_id: str) -> bool:
        """Registered and not held by another live Matched request."""
        if not any(donor.donor_id == donor_id for donor in self._store.list_donors()):
            return False
        return not any(
            other.request_id != cancelled_request_id
            and other.matched_donor is not None
            and other.matched_donor.donor_id == donor_id
            for other in self._store.list_requests(RequestStatus.MATCHED)
        )

    # --- inventory ---

    def adjust_inventory(
        self,
        blood_type: BloodType,
        *,
        delta: Optional[int] = None,
        reserved: Optional[int] = None,
    ) -> InventoryEntry:
        """Apply a stock delta and/or a new reserve level for one blood type."""
        blood_type = BloodType.parse(blood_type)
        with self._lock:
            entry = self._store.inventory.entry(blood_type)
            if delta is not None and delta >= 0:
                entry = self.add_units(blood_type, delta)
            elif delta is not None:
                entry = self.remove_units(blood_type, -delta)
            if reserved is not None:
                entry = self.set_reserved(blood_type, reserved)
        return entry

    def add_units(self, blood_type: BloodType, units: int) -> InventoryEntry:
        with self._lock:
            return self._store.inventory.add_units(blood_type, units)

    def remove_units(self, blood_type: BloodType, units: int) -> InventoryEntry:
        with self._lock:
            return self._store.inventory.remove_units(blood_type, units)

    def set_reserved(self, blood_type: BloodType, reserved_units: int) -> InventoryEntry:
        with self._lock:
            return self._store.inventory.set_reserved(blood_type, reserved_units)

    def inventory_snapshot(self) -> list[InventoryEntry]:
        with self._lock:
            return self._store.inventory.snapshot()
