"""Road graph and shortest-path routing between city locations."""

from __future__ import annotations

import heapq
import itertools
import math
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from bloodlink.domain.constraints import validate_road_network
from bloodlink.domain.errors import LocationNotFoundError
from bloodlink.domain.models import NO_ROUTE, Location, RoadEdge, Route, RouteResult
from bloodlink.domain.seed_data import LAHORE_LOCATIONS, LAHORE_ROAD_EDGES
from bloodlink.utils.logger import get_logger


logger = get_logger(__name__)

_EMPTY_NEIGHBORS: Mapping[str, int] = MappingProxyType({})


class LocationGraph:
    """Static weighted undirected graph of named areas.

    Adjacency is built once from validated edges; duplicate edges between the
    same pair keep the shorter distance.
    """

    def __init__(self, locations: Sequence[Location], edges: Iterable[RoadEdge]) -> None:
        edge_list = list(edges)
        validate_road_network(locations, edge_list)

        self._locations: dict[str, Location] = {
            location.location_id: location for location in locations
        }
        adjacency: dict[str, dict[str, int]] = {
            location_id: {} for location_id in self._locations
        }
        for edge in edge_list:
            current = adjacency[edge.first].get(edge.second)
            if current is not None and current <= edge.distance_km:
                continue
            adjacency[edge.first][edge.second] = edge.distance_km
            adjacency[edge.second][edge.first] = edge.distance_km

        self._adjacency: dict[str, Mapping[str, int]] = {
            location_id: MappingProxyType(neighbors)
            for location_id, neighbors in adjacency.items()
        }
        self._edge_count = sum(len(neighbors) for neighbors in adjacency.values()) // 2
        logger.debug(
            "Location graph built | locations=%s | edges=%s",
            len(self._locations),
            self._edge_count,
        )

    @classmethod
    def lahore(cls) -> "LocationGraph":
        return cls(LAHORE_LOCATIONS, LAHORE_ROAD_EDGES)

    @property
    def edge_count(self) -> int:
        return self._edge_count

    def neighbors(self, location_id: str) -> Mapping[str, int]:
        """Neighbor id -> distance; empty for unknown or isolated ids."""
        return self._adjacency.get(location_id, _EMPTY_NEIGHBORS)

    def has_location(self, location_id: str) -> bool:
        return location_id in self._locations

    def location(self, location_id: str) -> Location:
        location = self._locations.get(location_id)
        if location is None:
            raise LocationNotFoundError(f"Unknown location '{location_id}'")
        return location

    def location_name(self, location_id: str) -> str:
        location = self._locations.get(location_id)
        return location.name if location is not None else location_id

    def locations(self) -> list[Location]:
        return list(self._locations.values())


class ShortestPathRouter:
    """Dijkstra over a :class:`LocationGraph` using a binary heap."""

    def __init__(self, graph: LocationGraph) -> None:
        self._graph = graph

    @property
    def graph(self) -> LocationGraph:
        return self._graph

    def route(self, from_id: str, to_id: str) -> RouteResult:
        if from_id == to_id:
            return NO_ROUTE
        if not self._graph.has_location(from_id) or not self._graph.has_location(to_id):
            return NO_ROUTE

        tentative: dict[str, float] = {from_id: 0}
        predecessor: dict[str, str] = {}
        visited: set[str] = set()
        # heap entries carry a push sequence so equal distances pop in
        # insertion order
        sequence = itertools.count()
        frontier: list[tuple[float, int, str]] = [(0, next(sequence), from_id)]

        while frontier:
            distance, _, current = heapq.heappop(frontier)
            if current in visited:
                continue
            visited.add(current)
            if current == to_id:
                break

            for neighbor, weight in self._graph.neighbors(current).items():
                if neighbor in visited:
                    continue
                candidate = distance + weight
                if candidate < tentative.get(neighbor, math.inf):
                    tentative[neighbor] = candidate
                    predecessor[neighbor] = current
                    heapq.heappush(frontier, (candidate, next(sequence), neighbor))

        if to_id not in visited:
            return NO_ROUTE

        path = [to_id]
        while path[-1] != from_id:
            path.append(predecessor[path[-1]])
        path.reverse()
        return Route(path=tuple(path), distance=int(tentative[to_id]))

    def route_names(self, route: Route) -> tuple[str, ...]:
        return tuple(self._graph.location_name(location_id) for location_id in route.path)

    def distance(self, from_id: str, to_id: str) -> Optional[int]:
        result = self.route(from_id, to_id)
        if isinstance(result, Route):
            return result.distance
        return None
