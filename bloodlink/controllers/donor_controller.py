"""HTTP controller layer for the donor registry, ranking preview and history."""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from bloodlink.controllers.dependencies import (
    get_engine,
    get_registry,
    get_repository,
    to_http_exception,
)
from bloodlink.controllers.schemas import (
    DonationResponse,
    DonorAvailabilityRequest,
    DonorResponse,
    LeaderboardEntryResponse,
    RankedDonorResponse,
    RegisterDonorRequest,
)
from bloodlink.domain.errors import BloodLinkError
from bloodlink.repository.data_repository import DataRepository
from bloodlink.services.matching_service import AllocationEngine
from bloodlink.services.registry_service import DonorRegistryService
from bloodlink.utils.config import get_settings
from bloodlink.utils.logger import get_logger


logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(tags=["donors"])


@router.get(
    "/donors",
    response_model=list[DonorResponse],
    status_code=status.HTTP_200_OK,
)
async def list_donors(
    blood_type: Optional[str] = None,
    registry: DonorRegistryService = Depends(get_registry),
) -> list[DonorResponse]:
    try:
        donors = registry.list_donors(blood_type)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    return [DonorResponse.from_domain(donor) for donor in donors]


@router.post(
    "/donors",
    response_model=DonorResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_donor(
    payload: RegisterDonorRequest,
    registry: DonorRegistryService = Depends(get_registry),
) -> DonorResponse:
    try:
        donor = registry.register_donor(
            name=payload.name,
            blood_type=payload.blood_type,
            location_id=payload.location_id,
            phone=payload.phone,
            email=payload.email,
            is_available=payload.is_available,
        )
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    return DonorResponse.from_domain(donor)


@router.get(
    "/donors/ranked",
    response_model=list[RankedDonorResponse],
    status_code=status.HTTP_200_OK,
)
async def ranked_donors(
    blood_type: str = Query(min_length=1),
    location_id: str = Query(min_length=1),
    limit: int = Query(default=settings.ranking_preview_limit, gt=0, le=500),
    engine: AllocationEngine = Depends(get_engine),
) -> list[RankedDonorResponse]:
    """Preview nearest exact-type donors before a request is processed."""
    try:
        ranked = engine.rank_donors(blood_type, location_id)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    return [RankedDonorResponse.from_domain(item) for item in ranked[:limit]]


@router.get(
    "/donors/compatible",
    response_model=list[DonorResponse],
    status_code=status.HTTP_200_OK,
)
async def compatible_donors(
    recipient: str = Query(min_length=1),
    registry: DonorRegistryService = Depends(get_registry),
) -> list[DonorResponse]:
    try:
        donors = registry.compatible_donors(recipient)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    return [DonorResponse.from_domain(donor) for donor in donors]


@router.get(
    "/donors/{donor_id}",
    response_model=DonorResponse,
    status_code=status.HTTP_200_OK,
)
async def get_donor(
    donor_id: str,
    registry: DonorRegistryService = Depends(get_registry),
) -> DonorResponse:
    try:
        return DonorResponse.from_domain(registry.get_donor(donor_id))
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc


@router.patch(
    "/donors/{donor_id}/availability",
    response_model=DonorResponse,
    status_code=status.HTTP_200_OK,
)
async def set_donor_availability(
    donor_id: str,
    payload: DonorAvailabilityRequest,
    registry: DonorRegistryService = Depends(get_registry),
) -> DonorResponse:
    try:
        donor = registry.set_availability(donor_id, payload.is_available)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    return DonorResponse.from_domain(donor)


@router.delete(
    "/donors/{donor_id}",
    response_model=DonorResponse,
    status_code=status.HTTP_200_OK,
)
async def remove_donor(
    donor_id: str,
    registry: DonorRegistryService = Depends(get_registry),
) -> DonorResponse:
    try:
        donor = registry.remove_donor(donor_id)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    return DonorResponse.from_domain(donor)


@router.get(
    "/donations",
    response_model=list[DonationResponse],
    status_code=status.HTTP_200_OK,
)
async def list_donations(
    donor_id: Optional[str] = None,
    repository: DataRepository = Depends(get_repository),
) -> list[DonationResponse]:
    records = repository.list_donations(donor_id=donor_id)
    return [DonationResponse(**asdict(record)) for record in records]


@router.get(
    "/donations/leaderboard",
    response_model=list[LeaderboardEntryResponse],
    status_code=status.HTTP_200_OK,
)
async def donation_leaderboard(
    limit: int = Query(default=10, gt=0, le=100),
    repository: DataRepository = Depends(get_repository),
) -> list[LeaderboardEntryResponse]:
    entries = repository.donor_leaderboard(limit=limit)
    logger.debug("Leaderboard served | entries=%s", len(entries))
    return [LeaderboardEntryResponse(**asdict(entry)) for entry in entries]
