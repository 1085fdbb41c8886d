"""Per-blood-type stock ledger with clamping adjustments."""

from __future__ import annotations

from dataclasses import replace
from threading import RLock
from typing import Iterable, Optional

from bloodlink.domain.constraints import validate_unit_delta
from bloodlink.domain.models import BloodType, InventoryEntry
from bloodlink.utils.logger import get_logger


logger = get_logger(__name__)


def _clamped(entry: InventoryEntry) -> InventoryEntry:
    total = max(0, entry.total_units)
    reserved = min(max(0, entry.reserved_units), total)
    if total == entry.total_units and reserved == entry.reserved_units:
        return entry
    return replace(entry, total_units=total, reserved_units=reserved)


class Inventory:
    """Blood bank stock keyed by blood type.

    ``reserved_units <= total_units`` holds after every call. Removing more
    than is in stock clamps to zero instead of raising.
    """

    def __init__(self, entries: Optional[Iterable[InventoryEntry]] = None) -> None:
        self._lock = RLock()
        self._entries: dict[BloodType, InventoryEntry] = {
            blood_type: InventoryEntry(blood_type, 0, 0) for blood_type in BloodType
        }
        for entry in entries or ():
            blood_type = BloodType.parse(entry.blood_type)
            self._entries[blood_type] = _clamped(replace(entry, blood_type=blood_type))

    def entry(self, blood_type: BloodType) -> InventoryEntry:
        with self._lock:
            return self._entries[BloodType.parse(blood_type)]

    def available(self, blood_type: BloodType) -> int:
        return self.entry(blood_type).available_units

    def snapshot(self) -> list[InventoryEntry]:
        with self._lock:
            return [self._entries[blood_type] for blood_type in BloodType]

    def add_units(self, blood_type: BloodType, units: int) -> InventoryEntry:
        validate_unit_delta(units)
        blood_type = BloodType.parse(blood_type)
        with self._lock:
            current = self._entries[blood_type]
            updated = replace(current, total_units=current.total_units + units)
            self._entries[blood_type] = updated
        logger.info(
            "Inventory units added | blood_type=%s | units=%s | total=%s",
            blood_type.value,
            units,
            updated.total_units,
        )
        return updated

    def remove_units(self, blood_type: BloodType, units: int) -> InventoryEntry:
        validate_unit_delta(units)
        blood_type = BloodType.parse(blood_type)
        with self._lock:
            current = self._entries[blood_type]
            updated = _clamped(replace(current, total_units=current.total_units - units))
            self._entries[blood_type] = updated
        if units > current.total_units:
            logger.warning(
                "Inventory removal clamped | blood_type=%s | requested=%s | removed=%s",
                blood_type.value,
                units,
                current.total_units,
            )
        else:
            logger.info(
                "Inventory units removed | blood_type=%s | units=%s | total=%s",
                blood_type.value,
                units,
                updated.total_units,
            )
        return updated

    def set_reserved(self, blood_type: BloodType, reserved_units: int) -> InventoryEntry:
        if isinstance(reserved_units, bool) or not isinstance(reserved_units, int):
            validate_unit_delta(reserved_units, field_name="reserved_units")
        blood_type = BloodType.parse(blood_type)
        with self._lock:
            current = self._entries[blood_type]
            updated = _clamped(replace(current, reserved_units=reserved_units))
            self._entries[blood_type] = updated
        logger.info(
            "Inventory reserve set | blood_type=%s | requested=%s | reserved=%s",
            blood_type.value,
            reserved_units,
            updated.reserved_units,
        )
        return updated

    def try_draw(self, blood_type: BloodType, units: int) -> bool:
        """Decrement total by ``units`` only when unreserved stock covers it."""
        blood_type = BloodType.parse(blood_type)
        with self._lock:
            current = self._entries[blood_type]
            if current.available_units < units:
                return False
            self._entries[blood_type] = replace(
                current, total_units=current.total_units - units
            )
            return True
