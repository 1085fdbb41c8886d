#!/usr/bin/env python3
"""Validate local BloodLink environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bloodlink.domain.models import BloodType, RequestStatus, Route
from bloodlink.domain.seed_data import DEMO_DONORS, opening_inventory
from bloodlink.repository.data_repository import DataRepository
from bloodlink.repository.memory_store import BloodStore
from bloodlink.services.matching_service import AllocationEngine
from bloodlink.services.routing_service import LocationGraph, ShortestPathRouter
from bloodlink.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="bloodlink-env-")

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = ["fastapi", "uvicorn", "pydantic", "requests", "pytest"]
    import_errors: list[str] = []
    for module_name in package_specs:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "bloodlink_validation.db",
        )

        # CHECK 3: Database initialization
        try:
            DataRepository(validation_settings).initialize_database()
            ok, line = _print_result("Database initialization", True)
        except RuntimeError as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Road graph loads and routes
        try:
            graph = LocationGraph.lahore()
            result = ShortestPathRouter(graph).route("gulberg", "raiwind")
            if not isinstance(result, Route):
                raise RuntimeError("gulberg -> raiwind is unreachable")
            ok, line = _print_result(
                "Road graph routing",
                True,
                f": gulberg -> raiwind {result.distance} km over {len(result.path)} stops",
            )
        except Exception as exc:
            ok, line = _print_result("Road graph routing", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Allocation smoke test on the demo snapshot
        try:
            engine = AllocationEngine(
                store=BloodStore(donors=DEMO_DONORS, inventory=opening_inventory()),
                graph=LocationGraph.lahore(),
            )
            request = engine.create_request(
                blood_type=BloodType.A_POS,
                units=1,
                location_id="liberty",
            )
            processed = engine.process_request(request.request_id)
            if processed.status != RequestStatus.MATCHED:
                raise RuntimeError(f"expected Matched, got {processed.status.value}")
            events = engine.drain_events()
            ok, line = _print_result(
                "Allocation smoke test",
                True,
                f": matched donor {processed.matched_donor.name} at {processed.distance} km"
                f" ({len(events)} events)",
            )
        except Exception as exc:
            ok, line = _print_result("Allocation smoke test", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" BloodLink Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
