from __future__ import annotations

import itertools
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest

from bloodlink.domain.errors import (
    DonorNotFoundError,
    InvalidQuantityError,
    InvalidRequestStateError,
    LocationNotFoundError,
    RequestNotFoundError,
    UnknownBloodTypeError,
)
from bloodlink.domain.models import (
    BloodType,
    Donor,
    DonorMatched,
    FulfillmentSource,
    InventoryEntry,
    Location,
    MatchConfirmed,
    RequestPriority,
    RequestStatus,
    RequestStatusChanged,
    RoadEdge,
)
from bloodlink.domain.seed_data import DEMO_DONORS, opening_inventory
from bloodlink.repository.memory_store import BloodStore
from bloodlink.services.matching_service import AllocationEngine
from bloodlink.services.registry_service import DonorRegistryService
from bloodlink.services.routing_service import LocationGraph


def _build_graph() -> LocationGraph:
    locations = [
        Location("hospital", "City Hospital", 0.0, 0.0),
        Location("near", "Near Town", 0.0, 0.0),
        Location("far", "Far Town", 0.0, 0.0),
        Location("island", "Island", 0.0, 0.0),
    ]
    edges = [RoadEdge("hospital", "near", 4), RoadEdge("hospital", "far", 7)]
    return LocationGraph(locations, edges)


def _ticking_clock():
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    counter = itertools.count()
    return lambda: base + timedelta(minutes=next(counter))


def _build_engine(donors=(), inventory=None) -> AllocationEngine:
    store = BloodStore(donors=donors, inventory=inventory)
    return AllocationEngine(store=store, graph=_build_graph(), clock=_ticking_clock())


def _donor(donor_id: str, blood_type: BloodType, location_id: str, available: bool = True) -> Donor:
    return Donor(donor_id, f"Donor {donor_id}", blood_type, location_id, "0300-0000000", is_available=available)


# --- scenarios ---

def test_nearest_exact_type_donor_is_matched() -> None:
    engine = _build_engine(
        donors=[
            _donor("d7", BloodType.A_POS, "far"),
            _donor("d4", BloodType.A_POS, "near"),
        ]
    )
    request = engine.create_request(blood_type=BloodType.A_POS, units=1, location_id="hospital")

    result = engine.process_request(request.request_id)

    assert result.status == RequestStatus.MATCHED
    assert result.source == FulfillmentSource.DONOR_MATCH
    assert result.matched_donor is not None and result.matched_donor.donor_id == "d4"
    assert result.distance == 4
    assert result.route == ("City Hospital", "Near Town")
    assert engine.store.get_donor("d4").is_available is False
    assert engine.store.get_donor("d7").is_available is True


def test_bank_fulfills_when_no_donor_available() -> None:
    engine = _build_engine(
        donors=[_donor("away", BloodType.B_POS, "near", available=False)],
        inventory=[InventoryEntry(BloodType.B_POS, 10, 0)],
    )
    request = engine.create_request(blood_type=BloodType.B_POS, units=2, location_id="hospital")

    result = engine.process_request(request.request_id)

    assert result.status == RequestStatus.FULFILLED
    assert result.source == FulfillmentSource.BANK_INVENTORY
    assert result.matched_donor is None
    assert engine.store.inventory.entry(BloodType.B_POS).total_units == 8


def test_reserved_stock_is_not_drawn_and_request_stays_pending() -> None:
    engine = _build_engine(inventory=[InventoryEntry(BloodType.O_NEG, 5, 3)])
    request = engine.create_request(
        blood_type=BloodType.O_NEG,
        units=3,
        location_id="hospital",
        priority=RequestPriority.EMERGENCY,
    )

    result = engine.process_request(request.request_id)

    assert result.status == RequestStatus.PENDING
    assert result.source is None
    assert engine.store.inventory.entry(BloodType.O_NEG) == InventoryEntry(BloodType.O_NEG, 5, 3)


def test_compatible_but_not_exact_donor_is_not_matched() -> None:
    engine = _build_engine(
        donors=[_donor("universal", BloodType.O_NEG, "near")],
        inventory=[InventoryEntry(BloodType.A_POS, 1, 0)],
    )
    request = engine.create_request(blood_type=BloodType.A_POS, units=1, location_id="hospital")

    result = engine.process_request(request.request_id)

    assert result.source == FulfillmentSource.BANK_INVENTORY
    assert engine.store.get_donor("universal").is_available is True


def test_unreachable_donor_falls_back_to_bank() -> None:
    engine = _build_engine(
        donors=[_donor("stranded", BloodType.AB_NEG, "island")],
        inventory=[InventoryEntry(BloodType.AB_NEG, 1, 0)],
    )
    request = engine.create_request(blood_type=BloodType.AB_NEG, units=1, location_id="hospital")

    result = engine.process_request(request.request_id)

    assert result.status == RequestStatus.FULFILLED
    assert engine.store.get_donor("stranded").is_available is True


# --- idempotence ---

def test_reprocessing_matched_request_is_a_noop() -> None:
    engine = _build_engine(
        donors=[_donor("d1", BloodType.A_POS, "near"), _donor("d2", BloodType.A_POS, "far")],
    )
    request = engine.create_request(blood_type=BloodType.A_POS, units=1, location_id="hospital")
    first = engine.process_request(request.request_id)
    engine.drain_events()

    second = engine.process_request(request.request_id)

    assert second == first
    assert engine.store.get_donor("d2").is_available is True
    assert engine.drain_events() == []


def test_reprocessing_fulfilled_request_leaves_inventory_untouched() -> None:
    engine = _build_engine(inventory=[InventoryEntry(BloodType.B_NEG, 6, 0)])
    request = engine.create_request(blood_type=BloodType.B_NEG, units=2, location_id="hospital")
    engine.process_request(request.request_id)

    engine.process_request(request.request_id)

    assert engine.store.inventory.entry(BloodType.B_NEG).total_units == 4


# --- confirmation and lifecycle ---

def test_confirm_match_fulfills_without_reranking_or_inventory() -> None:
    engine = _build_engine(
        donors=[_donor("d1", BloodType.A_POS, "near")],
        inventory=[InventoryEntry(BloodType.A_POS, 5, 0)],
    )
    request = engine.create_request(blood_type=BloodType.A_POS, units=1, location_id="hospital")
    matched = engine.process_request(request.request_id)

    with mock.patch.object(engine._ranker, "rank_donors") as rank_spy:
        confirmed = engine.confirm_match(request.request_id)

    rank_spy.assert_not_called()
    assert confirmed.status == RequestStatus.FULFILLED
    assert confirmed.source == FulfillmentSource.DONOR_MATCH
    assert confirmed.matched_donor == matched.matched_donor
    assert engine.store.inventory.entry(BloodType.A_POS).total_units == 5


def test_confirm_requires_matched_request() -> None:
    engine = _build_engine()
    request = engine.create_request(blood_type=BloodType.A_POS, units=1, location_id="hospital")
    with pytest.raises(InvalidRequestStateError):
        engine.confirm_match(request.request_id)


def test_cancel_matched_request_releases_donor() -> None:
    engine = _build_engine(donors=[_donor("d1", BloodType.O_POS, "near")])
    request = engine.create_request(blood_type=BloodType.O_POS, units=1, location_id="hospital")
    engine.process_request(request.request_id)
    assert engine.store.get_donor("d1").is_available is False

    cancelled = engine.cancel_request(request.request_id)

    assert cancelled.status == RequestStatus.CANCELLED
    assert engine.store.get_donor("d1").is_available is True
    assert engine.process_request(request.request_id).status == RequestStatus.CANCELLED


def test_fulfilled_request_cannot_be_cancelled() -> None:
    engine = _build_engine(inventory=[InventoryEntry(BloodType.A_NEG, 3, 0)])
    request = engine.create_request(blood_type=BloodType.A_NEG, units=1, location_id="hospital")
    engine.process_request(request.request_id)
    with pytest.raises(InvalidRequestStateError):
        engine.cancel_request(request.request_id)


def test_mark_complete_pending_request() -> None:
    engine = _build_engine()
    request = engine.create_request(blood_type=BloodType.B_POS, units=1, location_id="hospital")
    completed = engine.mark_complete(request.request_id)
    assert completed.status == RequestStatus.FULFILLED
    assert engine.mark_complete(request.request_id) == completed


def test_cancel_keeps_donor_held_by_another_live_match() -> None:
    engine = _build_engine(donors=[_donor("d1", BloodType.A_POS, "near")])
    registry = DonorRegistryService(engine)
    first = engine.create_request(blood_type=BloodType.A_POS, units=1, location_id="hospital")
    engine.process_request(first.request_id)
    registry.set_availability("d1", True)
    second = engine.create_request(blood_type=BloodType.A_POS, units=1, location_id="hospital")
    assert engine.process_request(second.request_id).matched_donor.donor_id == "d1"

    engine.cancel_request(first.request_id)

    assert engine.store.get_donor("d1").is_available is False
    third = engine.create_request(blood_type=BloodType.A_POS, units=1, location_id="hospital")
    assert engine.process_request(third.request_id).status == RequestStatus.PENDING
    holders = [
        item
        for item in engine.store.list_requests(RequestStatus.MATCHED)
        if item.matched_donor.donor_id == "d1"
    ]
    assert [item.request_id for item in holders] == [second.request_id]

    engine.cancel_request(second.request_id)
    assert engine.store.get_donor("d1").is_available is True


# --- batch processing ---

def test_pending_batch_serves_emergencies_first() -> None:
    engine = _build_engine(inventory=[InventoryEntry(BloodType.A_POS, 2, 0)])
    scheduled = engine.create_request(
        blood_type=BloodType.A_POS,
        units=2,
        location_id="hospital",
        priority=RequestPriority.SCHEDULED,
    )
    emergency = engine.create_request(
        blood_type=BloodType.A_POS,
        units=2,
        location_id="hospital",
        priority=RequestPriority.EMERGENCY,
    )

    results = engine.process_pending_requests()

    assert [item.request_id for item in results] == [emergency.request_id, scheduled.request_id]
    assert engine.store.get_request(emergency.request_id).status == RequestStatus.FULFILLED
    assert engine.store.get_request(scheduled.request_id).status == RequestStatus.PENDING


# --- events ---

def test_events_emitted_after_commit_and_drained_once() -> None:
    engine = _build_engine(donors=[_donor("d1", BloodType.A_POS, "near")])
    request = engine.create_request(blood_type=BloodType.A_POS, units=1, location_id="hospital")
    engine.process_request(request.request_id)
    engine.confirm_match(request.request_id)

    events = engine.drain_events()

    kinds = [type(event) for event in events]
    assert kinds == [RequestStatusChanged, DonorMatched, RequestStatusChanged, MatchConfirmed]
    assert events[0].status == RequestStatus.MATCHED
    assert events[2].previous_status == RequestStatus.MATCHED
    assert events[2].status == RequestStatus.FULFILLED
    assert engine.drain_events() == []


# --- inventory adjustments ---

def test_adjust_inventory_dispatches_delta_and_reserve() -> None:
    engine = _build_engine(inventory=[InventoryEntry(BloodType.O_NEG, 5, 3)])
    assert engine.adjust_inventory(BloodType.O_NEG, delta=4).total_units == 9
    assert engine.adjust_inventory(BloodType.O_NEG, delta=-20).total_units == 0
    entry = engine.adjust_inventory(BloodType.O_NEG, delta=6, reserved=10)
    assert entry == InventoryEntry(BloodType.O_NEG, 6, 6)


def test_engine_unit_operations_apply_under_lock() -> None:
    engine = _build_engine(inventory=[InventoryEntry(BloodType.A_NEG, 4, 1)])

    with mock.patch.object(engine, "_lock", wraps=engine.lock) as lock_spy:
        assert engine.add_units(BloodType.A_NEG, 3).total_units == 7
        assert engine.set_reserved("A-", 5) == InventoryEntry(BloodType.A_NEG, 7, 5)
        clamped = engine.remove_units(BloodType.A_NEG, 50)

    assert clamped == InventoryEntry(BloodType.A_NEG, 0, 0)
    assert lock_spy.__enter__.call_count == 3
    assert engine.set_reserved(BloodType.A_NEG, 2).reserved_units == 0
    with pytest.raises(InvalidQuantityError):
        engine.add_units(BloodType.A_NEG, -1)
    with pytest.raises(InvalidQuantityError):
        engine.remove_units(BloodType.A_NEG, -1)


def test_adjust_inventory_goes_through_unit_operations() -> None:
    engine = _build_engine(inventory=[InventoryEntry(BloodType.B_POS, 2, 0)])
    with mock.patch.object(engine, "remove_units", wraps=engine.remove_units) as remove_spy, \
            mock.patch.object(engine, "set_reserved", wraps=engine.set_reserved) as reserve_spy:
        entry = engine.adjust_inventory(BloodType.B_POS, delta=-5, reserved=1)
    remove_spy.assert_called_once_with(BloodType.B_POS, 5)
    reserve_spy.assert_called_once_with(BloodType.B_POS, 1)
    assert entry == InventoryEntry(BloodType.B_POS, 0, 0)


# --- caller errors ---

def test_unknown_identifiers_fail_fast() -> None:
    engine = _build_engine()
    with pytest.raises(RequestNotFoundError):
        engine.process_request("missing")
    with pytest.raises(LocationNotFoundError):
        engine.create_request(blood_type=BloodType.A_POS, units=1, location_id="atlantis")
    with pytest.raises(LocationNotFoundError):
        engine.rank_donors(BloodType.A_POS, "atlantis")
    with pytest.raises(UnknownBloodTypeError):
        engine.rank_donors("Q+", "hospital")


@pytest.mark.parametrize("units", [0, -2])
def test_non_positive_request_units_rejected(units: int) -> None:
    engine = _build_engine()
    with pytest.raises(InvalidQuantityError):
        engine.create_request(blood_type=BloodType.A_POS, units=units, location_id="hospital")


# --- registry ---

def test_registry_round_trip_on_demo_snapshot() -> None:
    engine = AllocationEngine(
        store=BloodStore(donors=DEMO_DONORS, inventory=opening_inventory()),
        graph=LocationGraph.lahore(),
    )
    registry = DonorRegistryService(engine)
    donor = registry.register_donor(
        name="  Nadia Iqbal ",
        blood_type="B-",
        location_id="shadman",
        phone="0311-1112223",
    )
    assert donor.name == "Nadia Iqbal"
    assert registry.get_donor(donor.donor_id).blood_type == BloodType.B_NEG
    assert [item.donor_id for item in registry.list_donors(BloodType.B_NEG)] == ["7", donor.donor_id]

    ranked = engine.rank_donors(BloodType.B_NEG, "liberty")
    assert ranked[0].donor.donor_id == donor.donor_id
    assert ranked[0].distance == 2

    registry.set_availability(donor.donor_id, False)
    assert engine.rank_donors(BloodType.B_NEG, "liberty")[0].donor.donor_id == "7"

    registry.remove_donor(donor.donor_id)
    with pytest.raises(DonorNotFoundError):
        registry.get_donor(donor.donor_id)
    with pytest.raises(LocationNotFoundError):
        registry.register_donor(name="x", blood_type="A+", location_id="atlantis", phone="12345")


# --- concurrency ---

def test_concurrent_processing_never_double_allocates() -> None:
    engine = _build_engine(
        donors=[_donor("solo", BloodType.O_POS, "near")],
        inventory=[InventoryEntry(BloodType.O_POS, 3, 0)],
    )
    requests = [
        engine.create_request(blood_type=BloodType.O_POS, units=1, location_id="hospital")
        for _ in range(8)
    ]

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda item: engine.process_request(item.request_id), requests))

    matched = [item for item in results if item.status == RequestStatus.MATCHED]
    from_bank = [item for item in results if item.source == FulfillmentSource.BANK_INVENTORY]
    assert len(matched) == 1
    assert len(from_bank) == 3
    assert engine.store.inventory.entry(BloodType.O_POS).total_units == 0
    assert sum(1 for item in results if item.status == RequestStatus.PENDING) == 4
