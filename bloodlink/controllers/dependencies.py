"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import BackgroundTasks, HTTPException, Request, status

from bloodlink.domain.errors import (
    BloodLinkError,
    GraphConfigurationError,
    InvalidQuantityError,
    InvalidRequestStateError,
    UnknownBloodTypeError,
    UnknownIdentifierError,
)
from bloodlink.repository.data_repository import DataRepository
from bloodlink.services.event_service import EngineEventRelay
from bloodlink.services.matching_service import AllocationEngine
from bloodlink.services.registry_service import DonorRegistryService


def _require_state(request: Request, attribute: str, label: str):
    service = getattr(request.app.state, attribute, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not initialized",
        )
    return service


def get_engine(request: Request) -> AllocationEngine:
    return _require_state(request, "engine", "Allocation engine")


def get_registry(request: Request) -> DonorRegistryService:
    service = getattr(request.app.state, "registry", None)
    if service is None:
        service = DonorRegistryService(get_engine(request))
        request.app.state.registry = service
    return service


def get_repository(request: Request) -> DataRepository:
    return _require_state(request, "repository", "Donation history store")


def get_event_relay(request: Request) -> EngineEventRelay:
    relay = getattr(request.app.state, "event_relay", None)
    if relay is None:
        relay = EngineEventRelay()
        request.app.state.event_relay = relay
    return relay


def schedule_event_relay(
    background_tasks: BackgroundTasks,
    engine: AllocationEngine,
    relay: EngineEventRelay,
) -> None:
    """Hand committed events to collaborators after the response is sent."""
    events = engine.drain_events()
    if events:
        background_tasks.add_task(relay.relay, events)


def to_http_exception(exc: BloodLinkError) -> HTTPException:
    if isinstance(exc, UnknownBloodTypeError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, UnknownIdentifierError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, InvalidRequestStateError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, (InvalidQuantityError, GraphConfigurationError)):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))
