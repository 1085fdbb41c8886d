"""HTTP controller layer for blood bank stock."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from bloodlink.controllers.dependencies import get_engine, to_http_exception
from bloodlink.controllers.schemas import InventoryAdjustmentRequest, InventoryEntryResponse
from bloodlink.domain.errors import BloodLinkError
from bloodlink.services.matching_service import AllocationEngine


router = APIRouter(tags=["inventory"])


@router.get(
    "/inventory",
    response_model=list[InventoryEntryResponse],
    status_code=status.HTTP_200_OK,
)
async def inventory_snapshot(
    engine: AllocationEngine = Depends(get_engine),
) -> list[InventoryEntryResponse]:
    return [InventoryEntryResponse.from_domain(entry) for entry in engine.inventory_snapshot()]


@router.get(
    "/inventory/{blood_type}",
    response_model=InventoryEntryResponse,
    status_code=status.HTTP_200_OK,
)
async def inventory_entry(
    blood_type: str,
    engine: AllocationEngine = Depends(get_engine),
) -> InventoryEntryResponse:
    try:
        return InventoryEntryResponse.from_domain(engine.store.inventory.entry(blood_type))
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc


@router.post(
    "/inventory/{blood_type}/adjust",
    response_model=InventoryEntryResponse,
    status_code=status.HTTP_200_OK,
)
async def adjust_inventory(
    blood_type: str,
    payload: InventoryAdjustmentRequest,
    engine: AllocationEngine = Depends(get_engine),
) -> InventoryEntryResponse:
    """Positive delta adds stock, negative removes (clamped at zero)."""
    try:
        entry = engine.adjust_inventory(
            blood_type,
            delta=payload.delta,
            reserved=payload.reserved,
        )
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    return InventoryEntryResponse.from_domain(entry)
