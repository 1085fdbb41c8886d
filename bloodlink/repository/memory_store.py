"""In-memory snapshot of donors, requests and bank inventory."""

from __future__ import annotations

from dataclasses import replace
from threading import RLock
from typing import Iterable, Optional
from uuid import uuid4

from bloodlink.domain.errors import DonorNotFoundError, RequestNotFoundError
from bloodlink.domain.models import BloodRequest, Donor, InventoryEntry, RequestStatus
from bloodlink.services.inventory_service import Inventory


def new_identifier() -> str:
    return uuid4().hex[:12]


class BloodStore:
    """Owns the mutable records the allocation engine works against.

    Records are frozen dataclasses; updates swap in a new instance so callers
    holding an earlier copy never observe a half-applied change.
    """

    def __init__(
        self,
        donors: Iterable[Donor] = (),
        inventory: Optional[Iterable[InventoryEntry]] = None,
    ) -> None:
        self._lock = RLock()
        self._donors: dict[str, Donor] = {}
        self._requests: dict[str, BloodRequest] = {}
        self._inventory = Inventory(inventory)
        for donor in donors:
            self.put_donor(donor)

    @property
    def inventory(self) -> Inventory:
        return self._inventory

    # --- donors ---

    def put_donor(self, donor: Donor) -> Donor:
        with self._lock:
            self._donors[donor.donor_id] = donor
        return donor

    def get_donor(self, donor_id: str) -> Donor:
        with self._lock:
            donor = self._donors.get(donor_id)
        if donor is None:
            raise DonorNotFoundError(f"Unknown donor '{donor_id}'")
        return donor

    def list_donors(self) -> list[Donor]:
        with self._lock:
            return list(self._donors.values())

    def set_donor_availability(self, donor_id: str, is_available: bool) -> Donor:
        with self._lock:
            updated = replace(self.get_donor(donor_id), is_available=is_available)
            self._donors[donor_id] = updated
        return updated

    def remove_donor(self, donor_id: str) -> Donor:
        with self._lock:
            donor = self.get_donor(donor_id)
            del self._donors[donor_id]
        return donor

    # --- requests ---

    def put_request(self, request: BloodRequest) -> BloodRequest:
        with self._lock:
            self._requests[request.request_id] = request
        return request

    def get_request(self, request_id: str) -> BloodRequest:
        with self._lock:
            request = self._requests.get(request_id)
        if request is None:
            raise RequestNotFoundError(f"Unknown blood request '{request_id}'")
        return request

    def list_requests(self, status: Optional[RequestStatus] = None) -> list[BloodRequest]:
        with self._lock:
            requests = list(self._requests.values())
        if status is None:
            return requests
        return [request for request in requests if request.status == status]
