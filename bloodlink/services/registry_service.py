"""Donor registry operations layered over the shared engine lock."""

from __future__ import annotations

from typing import Optional

from bloodlink.domain.compatibility import compatible_donors
from bloodlink.domain.models import BloodType, Donor
from bloodlink.repository.memory_store import new_identifier
from bloodlink.services.matching_service import AllocationEngine
from bloodlink.utils.logger import get_logger


logger = get_logger(__name__)


class DonorRegistryService:
    """Register, update and remove donors without racing the engine."""

    def __init__(self, engine: AllocationEngine) -> None:
        self._engine = engine
        self._store = engine.store

    def register_donor(
        self,
        *,
        name: str,
        blood_type: BloodType,
        location_id: str,
        phone: str,
        email: Optional[str] = None,
        is_available: bool = True,
    ) -> Donor:
        blood_type = BloodType.parse(blood_type)
        self._engine.require_location(location_id)
        donor = Donor(
            donor_id=new_identifier(),
            name=name.strip(),
            blood_type=blood_type,
            location_id=location_id,
            phone=phone.strip(),
            is_available=is_available,
            email=email,
        )
        with self._engine.lock:
            self._store.put_donor(donor)
        logger.info(
            "Donor registered | donor_id=%s | blood_type=%s | location=%s",
            donor.donor_id,
            blood_type.value,
            location_id,
        )
        return donor

    def list_donors(self, blood_type: Optional[BloodType] = None) -> list[Donor]:
        donors = self._store.list_donors()
        if blood_type is None:
            return donors
        blood_type = BloodType.parse(blood_type)
        return [donor for donor in donors if donor.blood_type == blood_type]

    def get_donor(self, donor_id: str) -> Donor:
        return self._store.get_donor(donor_id)

    def set_availability(self, donor_id: str, is_available: bool) -> Donor:
        with self._engine.lock:
            donor = self._store.set_donor_availability(donor_id, is_available)
        logger.info(
            "Donor availability updated | donor_id=%s | is_available=%s",
            donor_id,
            is_available,
        )
        return donor

    def remove_donor(self, donor_id: str) -> Donor:
        with self._engine.lock:
            donor = self._store.remove_donor(donor_id)
        logger.info("Donor removed | donor_id=%s", donor_id)
        return donor

    def compatible_donors(self, recipient: BloodType) -> list[Donor]:
        return compatible_donors(BloodType.parse(recipient), self._store.list_donors())
