"""Domain models for donor routing, matching and inventory allocation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from bloodlink.domain.errors import UnknownBloodTypeError


class BloodType(str, Enum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"

    @classmethod
    def parse(cls, value: Union[str, "BloodType"]) -> "BloodType":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        raise UnknownBloodTypeError(f"Unknown blood type '{value}'")


class RequestPriority(str, Enum):
    EMERGENCY = "Emergency"
    URGENT = "Urgent"
    SCHEDULED = "Scheduled"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    RequestPriority.EMERGENCY: 0,
    RequestPriority.URGENT: 1,
    RequestPriority.SCHEDULED: 2,
}


class RequestStatus(str, Enum):
    PENDING = "Pending"
    MATCHED = "Matched"
    FULFILLED = "Fulfilled"
    CANCELLED = "Cancelled"


class FulfillmentSource(str, Enum):
    DONOR_MATCH = "DonorMatch"
    BANK_INVENTORY = "BankInventory"


@dataclass(frozen=True)
class Location:
    location_id: str
    name: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class RoadEdge:
    first: str
    second: str
    distance_km: int


@dataclass(frozen=True)
class Route:
    """Ordered location ids from source to destination."""

    path: tuple[str, ...]
    distance: int


@dataclass(frozen=True)
class NoRoute:
    """Result value for unreachable or trivial (same-node) routes."""


NO_ROUTE = NoRoute()

RouteResult = Union[Route, NoRoute]


@dataclass(frozen=True)
class Donor:
    donor_id: str
    name: str
    blood_type: BloodType
    location_id: str
    phone: str
    is_available: bool = True
    email: Optional[str] = None


@dataclass(frozen=True)
class InventoryEntry:
    blood_type: BloodType
    total_units: int
    reserved_units: int = 0

    @property
    def available_units(self) -> int:
        return self.total_units - self.reserved_units


@dataclass(frozen=True)
class BloodRequest:
    request_id: str
    blood_type: BloodType
    units: int
    location_id: str
    priority: RequestPriority
    created_at: datetime
    status: RequestStatus = RequestStatus.PENDING
    patient_name: str = ""
    hospital: str = ""
    requester_name: str = ""
    requester_phone: str = ""
    relation_with_patient: str = ""
    matched_donor: Optional[Donor] = None
    route: Optional[tuple[str, ...]] = None
    distance: Optional[int] = None
    source: Optional[FulfillmentSource] = None


@dataclass(frozen=True)
class RankedDonor:
    donor: Donor
    path: tuple[str, ...]
    route: tuple[str, ...]
    distance: int


@dataclass(frozen=True)
class RequestStatusChanged:
    request_id: str
    previous_status: RequestStatus
    status: RequestStatus
    source: Optional[FulfillmentSource]
    occurred_at: datetime


@dataclass(frozen=True)
class DonorMatched:
    request: BloodRequest
    donor: Donor


@dataclass(frozen=True)
class MatchConfirmed:
    request: BloodRequest
    donor: Donor


EngineEvent = Union[RequestStatusChanged, DonorMatched, MatchConfirmed]
