from __future__ import annotations

import itertools

import pytest

from bloodlink.domain.errors import GraphConfigurationError, LocationNotFoundError
from bloodlink.domain.models import NO_ROUTE, Location, NoRoute, RoadEdge, Route
from bloodlink.services.routing_service import LocationGraph, ShortestPathRouter


def _location(location_id: str) -> Location:
    return Location(location_id, location_id.upper(), 0.0, 0.0)


def _build_graph(location_ids: list[str], edges: list[tuple[str, str, int]]) -> LocationGraph:
    return LocationGraph(
        [_location(location_id) for location_id in location_ids],
        [RoadEdge(first, second, distance) for first, second, distance in edges],
    )


# --- LocationGraph ---

def test_neighbors_are_symmetric() -> None:
    graph = _build_graph(["a", "b"], [("a", "b", 3)])
    assert dict(graph.neighbors("a")) == {"b": 3}
    assert dict(graph.neighbors("b")) == {"a": 3}


def test_neighbors_of_unknown_or_isolated_location_is_empty() -> None:
    graph = _build_graph(["a", "b", "lonely"], [("a", "b", 3)])
    assert dict(graph.neighbors("missing")) == {}
    assert dict(graph.neighbors("lonely")) == {}


def test_duplicate_edges_keep_shorter_distance() -> None:
    graph = _build_graph(["a", "b"], [("a", "b", 9), ("b", "a", 4), ("a", "b", 6)])
    assert graph.neighbors("a")["b"] == 4
    assert graph.edge_count == 1


@pytest.mark.parametrize(
    "edges",
    [
        [("a", "ghost", 3)],
        [("a", "a", 3)],
        [("a", "b", 0)],
        [("a", "b", -2)],
    ],
)
def test_invalid_edges_rejected_at_construction(edges) -> None:
    with pytest.raises(GraphConfigurationError):
        _build_graph(["a", "b"], edges)


def test_location_lookup_fails_fast_for_unknown_id() -> None:
    graph = _build_graph(["a"], [])
    with pytest.raises(LocationNotFoundError):
        graph.location("nowhere")
    assert graph.location_name("nowhere") == "nowhere"


# --- ShortestPathRouter ---

def test_two_hop_path_distance_and_order() -> None:
    router = ShortestPathRouter(_build_graph(["A", "B", "C"], [("A", "B", 3), ("B", "C", 4)]))
    result = router.route("A", "C")
    assert result == Route(path=("A", "B", "C"), distance=7)


def test_indirect_path_beats_longer_direct_edge() -> None:
    router = ShortestPathRouter(
        _build_graph(["A", "B", "C"], [("A", "C", 10), ("A", "B", 3), ("B", "C", 4)])
    )
    result = router.route("A", "C")
    assert isinstance(result, Route)
    assert result.distance == 7
    assert result.path == ("A", "B", "C")


def test_same_source_and_destination_is_no_route() -> None:
    router = ShortestPathRouter(_build_graph(["A", "B"], [("A", "B", 1)]))
    assert router.route("A", "A") is NO_ROUTE


def test_disconnected_and_unknown_nodes_are_no_route() -> None:
    router = ShortestPathRouter(_build_graph(["A", "B", "C", "D"], [("A", "B", 1), ("C", "D", 1)]))
    assert isinstance(router.route("A", "D"), NoRoute)
    assert isinstance(router.route("A", "nowhere"), NoRoute)
    assert router.distance("A", "D") is None


def test_equal_cost_paths_resolve_deterministically() -> None:
    graph = _build_graph(
        ["s", "x", "y", "t"],
        [("s", "x", 2), ("s", "y", 2), ("x", "t", 2), ("y", "t", 2)],
    )
    router = ShortestPathRouter(graph)
    first = router.route("s", "t")
    assert isinstance(first, Route)
    assert first.distance == 4
    for _ in range(5):
        assert router.route("s", "t") == first


def test_lahore_routes_are_symmetric_in_distance() -> None:
    graph = LocationGraph.lahore()
    router = ShortestPathRouter(graph)
    location_ids = [location.location_id for location in graph.locations()]
    for source, target in itertools.combinations(location_ids, 2):
        forward = router.route(source, target)
        backward = router.route(target, source)
        assert isinstance(forward, Route)
        assert isinstance(backward, Route)
        assert forward.distance == backward.distance
        assert forward.path[0] == source and forward.path[-1] == target
        assert backward.path[0] == target and backward.path[-1] == source


def test_lahore_route_distance_matches_edge_weights() -> None:
    graph = LocationGraph.lahore()
    router = ShortestPathRouter(graph)
    result = router.route("old_lahore", "raiwind")
    assert isinstance(result, Route)
    walked = sum(
        graph.neighbors(first)[second]
        for first, second in zip(result.path, result.path[1:])
    )
    assert walked == result.distance


def test_lahore_known_short_hops() -> None:
    router = ShortestPathRouter(LocationGraph.lahore())
    assert router.route("liberty", "gulberg") == Route(path=("liberty", "gulberg"), distance=2)
    assert router.distance("gulberg", "model_town") == 4
    assert router.route_names(Route(path=("liberty", "gulberg"), distance=2)) == (
        "Liberty Market Area",
        "Gulberg",
    )
