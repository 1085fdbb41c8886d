"""HTTP controller layer for road network and compatibility lookups."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from bloodlink.controllers.dependencies import get_engine, to_http_exception
from bloodlink.controllers.schemas import CompatibilityResponse, LocationResponse, RouteResponse
from bloodlink.domain.compatibility import sorted_donor_types
from bloodlink.domain.errors import BloodLinkError
from bloodlink.domain.models import BloodType, Route
from bloodlink.services.matching_service import AllocationEngine
from bloodlink.services.routing_service import ShortestPathRouter


router = APIRouter(tags=["network"])


@router.get(
    "/locations",
    response_model=list[LocationResponse],
    status_code=status.HTTP_200_OK,
)
async def list_locations(
    engine: AllocationEngine = Depends(get_engine),
) -> list[LocationResponse]:
    return [LocationResponse.from_domain(location) for location in engine.graph.locations()]


@router.get(
    "/route",
    response_model=RouteResponse,
    status_code=status.HTTP_200_OK,
)
async def shortest_route(
    from_id: str = Query(min_length=1),
    to_id: str = Query(min_length=1),
    engine: AllocationEngine = Depends(get_engine),
) -> RouteResponse:
    """Shortest road route; unreachable pairs are a normal response."""
    try:
        engine.require_location(from_id)
        engine.require_location(to_id)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc

    router_service = ShortestPathRouter(engine.graph)
    result = router_service.route(from_id, to_id)
    if not isinstance(result, Route):
        return RouteResponse(from_id=from_id, to_id=to_id, reachable=False)
    return RouteResponse(
        from_id=from_id,
        to_id=to_id,
        reachable=True,
        path=list(result.path),
        route=list(router_service.route_names(result)),
        distance=result.distance,
    )


@router.get(
    "/compatibility/{blood_type}",
    response_model=CompatibilityResponse,
    status_code=status.HTTP_200_OK,
)
async def compatibility(blood_type: str) -> CompatibilityResponse:
    try:
        recipient = BloodType.parse(blood_type)
    except BloodLinkError as exc:
        raise to_http_exception(exc) from exc
    return CompatibilityResponse(
        recipient=recipient,
        acceptable_donor_types=sorted_donor_types(recipient),
    )
