"""Domain-level validation rules for graph configuration and quantities."""

from __future__ import annotations

from typing import Iterable, Sequence

from bloodlink.domain.errors import GraphConfigurationError, InvalidQuantityError
from bloodlink.domain.models import Location, RoadEdge


def validate_road_network(
    locations: Sequence[Location],
    edges: Iterable[RoadEdge],
) -> None:
    location_ids = [location.location_id for location in locations]
    if len(set(location_ids)) != len(location_ids):
        raise GraphConfigurationError("location ids must be unique")

    known_ids = set(location_ids)
    for edge in edges:
        if edge.first not in known_ids:
            raise GraphConfigurationError(
                f"edge endpoint '{edge.first}' is not a known location"
            )
        if edge.second not in known_ids:
            raise GraphConfigurationError(
                f"edge endpoint '{edge.second}' is not a known location"
            )
        if edge.first == edge.second:
            raise GraphConfigurationError(
                f"self-loop edge on '{edge.first}' is not allowed"
            )
        if isinstance(edge.distance_km, bool) or not isinstance(edge.distance_km, int):
            raise GraphConfigurationError(
                f"edge {edge.first}-{edge.second} distance must be an integer"
            )
        if edge.distance_km <= 0:
            raise GraphConfigurationError(
                f"edge {edge.first}-{edge.second} distance must be > 0"
            )


def validate_unit_delta(units: int, *, field_name: str = "units") -> None:
    """Administrative adjustments accept zero but never negative counts."""
    if isinstance(units, bool) or not isinstance(units, int):
        raise InvalidQuantityError(f"{field_name} must be an integer")
    if units < 0:
        raise InvalidQuantityError(f"{field_name} must be >= 0")


def validate_requested_units(units: int) -> None:
    if isinstance(units, bool) or not isinstance(units, int):
        raise InvalidQuantityError("requested units must be an integer")
    if units <= 0:
        raise InvalidQuantityError("requested units must be > 0")
