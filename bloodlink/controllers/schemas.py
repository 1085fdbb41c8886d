"""Request/response DTOs shared by the HTTP controllers."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from bloodlink.domain.models import (
    BloodRequest,
    BloodType,
    Donor,
    FulfillmentSource,
    InventoryEntry,
    Location,
    RankedDonor,
    RequestPriority,
    RequestStatus,
)


class LocationResponse(BaseModel):
    location_id: str
    name: str
    latitude: float
    longitude: float

    @classmethod
    def from_domain(cls, location: Location) -> "LocationResponse":
        return cls(
            location_id=location.location_id,
            name=location.name,
            latitude=location.latitude,
            longitude=location.longitude,
        )


class RouteResponse(BaseModel):
    from_id: str
    to_id: str
    reachable: bool
    path: list[str] = Field(default_factory=list)
    route: list[str] = Field(default_factory=list)
    distance: Optional[int] = Field(default=None, ge=0)


class CompatibilityResponse(BaseModel):
    recipient: BloodType
    acceptable_donor_types: list[BloodType]


class DonorResponse(BaseModel):
    donor_id: str
    name: str
    blood_type: BloodType
    location_id: str
    phone: str
    email: Optional[str] = None
    is_available: bool

    @classmethod
    def from_domain(cls, donor: Donor) -> "DonorResponse":
        return cls(
            donor_id=donor.donor_id,
            name=donor.name,
            blood_type=donor.blood_type,
            location_id=donor.location_id,
            phone=donor.phone,
            email=donor.email,
            is_available=donor.is_available,
        )


class RegisterDonorRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    blood_type: BloodType
    location_id: str = Field(min_length=1)
    phone: str = Field(min_length=5, max_length=32)
    email: Optional[str] = Field(default=None, max_length=254)
    is_available: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must be non-empty")
        return value


class DonorAvailabilityRequest(BaseModel):
    is_available: bool


class RankedDonorResponse(BaseModel):
    donor: DonorResponse
    path: list[str]
    route: list[str]
    distance: int = Field(ge=0)

    @classmethod
    def from_domain(cls, ranked: RankedDonor) -> "RankedDonorResponse":
        return cls(
            donor=DonorResponse.from_domain(ranked.donor),
            path=list(ranked.path),
            route=list(ranked.route),
            distance=ranked.distance,
        )


class CreateBloodRequest(BaseModel):
    blood_type: BloodType
    units: int = Field(gt=0, le=50)
    location_id: str = Field(min_length=1)
    priority: RequestPriority = RequestPriority.URGENT
    patient_name: str = ""
    hospital: str = ""
    requester_name: str = ""
    requester_phone: str = ""
    relation_with_patient: str = ""
    auto_process: bool = False


class BloodRequestResponse(BaseModel):
    request_id: str
    blood_type: BloodType
    units: int
    location_id: str
    priority: RequestPriority
    status: RequestStatus
    created_at: datetime
    patient_name: str
    hospital: str
    matched_donor: Optional[DonorResponse] = None
    route: Optional[list[str]] = None
    distance: Optional[int] = None
    source: Optional[FulfillmentSource] = None

    @classmethod
    def from_domain(cls, request: BloodRequest) -> "BloodRequestResponse":
        return cls(
            request_id=request.request_id,
            blood_type=request.blood_type,
            units=request.units,
            location_id=request.location_id,
            priority=request.priority,
            status=request.status,
            created_at=request.created_at,
            patient_name=request.patient_name,
            hospital=request.hospital,
            matched_donor=(
                DonorResponse.from_domain(request.matched_donor)
                if request.matched_donor is not None
                else None
            ),
            route=list(request.route) if request.route is not None else None,
            distance=request.distance,
            source=request.source,
        )


class InventoryEntryResponse(BaseModel):
    blood_type: BloodType
    total_units: int = Field(ge=0)
    reserved_units: int = Field(ge=0)
    available_units: int = Field(ge=0)

    @classmethod
    def from_domain(cls, entry: InventoryEntry) -> "InventoryEntryResponse":
        return cls(
            blood_type=entry.blood_type,
            total_units=entry.total_units,
            reserved_units=entry.reserved_units,
            available_units=entry.available_units,
        )


class InventoryAdjustmentRequest(BaseModel):
    delta: Optional[int] = None
    reserved: Optional[int] = None

    @model_validator(mode="after")
    def validate_has_change(self) -> "InventoryAdjustmentRequest":
        if self.delta is None and self.reserved is None:
            raise ValueError("either delta or reserved must be provided")
        return self


class DonationResponse(BaseModel):
    donation_id: int
    donor_id: str
    request_id: str
    donor_name: str
    blood_type: str
    units: int
    hospital: str
    recipient_name: str
    donated_at: str


class LeaderboardEntryResponse(BaseModel):
    donor_id: str
    donor_name: str
    blood_type: str
    donation_count: int = Field(ge=0)
    total_units: int = Field(ge=0)
