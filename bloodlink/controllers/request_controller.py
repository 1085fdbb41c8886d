"""HTTP controller layer for blood request intake and fulfillment."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status

from bloodlink.controllers.dependencies import (
    get_engine,
    get_event_relay,
    schedule_event_relay,
    to_http_exception,
)
from bloodlink.controllers.schemas import BloodRequestResponse, CreateBloodRequest
from bloodlink.domain.errors import BloodLinkError
from bloodlink.domain.models import RequestStatus
from bloodlink.services.event_service import EngineEventRelay
from bloodlink.services.matching_service import AllocationEngine
from bloodlink.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["requests"])


@router.post(
    "/requests",
    response_model=BloodRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_request(
    payload: CreateBloodRequest,
    background_tasks: BackgroundTasks,
    engine: AllocationEngine = Depends(get_engine),
    relay: EngineEventRelay = Depends(get_event_relay),
) -> BloodRequestResponse:
    """Register a pending request and optionally run matching right away."""
    try:
        request = engine.create_request(
            blood_type=payload.blood_type,
            units=payload.units,
            location_id=payload.location_id,
            priority=payload.priority,
            patient_name=payload.patient_name,
            hospital=payload.hospital,
            requester_name=payload.requester_name,
            requester_phone=payload.requester_phone,
            relation_with_patient=payload.relation_with_patient,
        )
        if payload.auto_process:
            request = engine.process_request(request.request_id)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    schedule_event_relay(background_tasks, engine, relay)
    return BloodRequestResponse.from_domain(request)


@router.get(
    "/requests",
    response_model=list[BloodRequestResponse],
    status_code=status.HTTP_200_OK,
)
async def list_requests(
    status_filter: Optional[RequestStatus] = Query(default=None, alias="status"),
    engine: AllocationEngine = Depends(get_engine),
) -> list[BloodRequestResponse]:
    requests = engine.store.list_requests(status_filter)
    return [BloodRequestResponse.from_domain(request) for request in requests]


@router.post(
    "/requests/process_pending",
    response_model=list[BloodRequestResponse],
    status_code=status.HTTP_200_OK,
)
async def process_pending_requests(
    background_tasks: BackgroundTasks,
    engine: AllocationEngine = Depends(get_engine),
    relay: EngineEventRelay = Depends(get_event_relay),
) -> list[BloodRequestResponse]:
    results = engine.process_pending_requests()
    schedule_event_relay(background_tasks, engine, relay)
    return [BloodRequestResponse.from_domain(request) for request in results]


@router.get(
    "/requests/{request_id}",
    response_model=BloodRequestResponse,
    status_code=status.HTTP_200_OK,
)
async def get_request(
    request_id: str,
    engine: AllocationEngine = Depends(get_engine),
) -> BloodRequestResponse:
    try:
        return BloodRequestResponse.from_domain(engine.store.get_request(request_id))
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc


@router.post(
    "/requests/{request_id}/process",
    response_model=BloodRequestResponse,
    status_code=status.HTTP_200_OK,
)
async def process_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    engine: AllocationEngine = Depends(get_engine),
    relay: EngineEventRelay = Depends(get_event_relay),
) -> BloodRequestResponse:
    """Run one fulfillment attempt: nearest donor, else bank stock."""
    try:
        request = engine.process_request(request_id)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected processing failure | request_id=%s", request_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process blood request",
        ) from exc
    schedule_event_relay(background_tasks, engine, relay)
    return BloodRequestResponse.from_domain(request)


@router.post(
    "/requests/{request_id}/confirm",
    response_model=BloodRequestResponse,
    status_code=status.HTTP_200_OK,
)
async def confirm_match(
    request_id: str,
    background_tasks: BackgroundTasks,
    engine: AllocationEngine = Depends(get_engine),
    relay: EngineEventRelay = Depends(get_event_relay),
) -> BloodRequestResponse:
    try:
        request = engine.confirm_match(request_id)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    schedule_event_relay(background_tasks, engine, relay)
    return BloodRequestResponse.from_domain(request)


@router.post(
    "/requests/{request_id}/complete",
    response_model=BloodRequestResponse,
    status_code=status.HTTP_200_OK,
)
async def mark_complete(
    request_id: str,
    background_tasks: BackgroundTasks,
    engine: AllocationEngine = Depends(get_engine),
    relay: EngineEventRelay = Depends(get_event_relay),
) -> BloodRequestResponse:
    try:
        request = engine.mark_complete(request_id)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    schedule_event_relay(background_tasks, engine, relay)
    return BloodRequestResponse.from_domain(request)


@router.post(
    "/requests/{request_id}/cancel",
    response_model=BloodRequestResponse,
    status_code=status.HTTP_200_OK,
)
async def cancel_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    engine: AllocationEngine = Depends(get_engine),
    relay: EngineEventRelay = Depends(get_event_relay),
) -> BloodRequestResponse:
    try:
        request = engine.cancel_request(request_id)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    schedule_event_relay(background_tasks, engine, relay)
    return BloodRequestResponse.from_domain(request)
