"""Distance-based ranking of exact-type donors."""

from __future__ import annotations

from typing import Iterable, Optional

from bloodlink.domain.models import BloodType, Donor, RankedDonor, Route
from bloodlink.services.routing_service import ShortestPathRouter
from bloodlink.utils.logger import get_logger


logger = get_logger(__name__)


def is_candidate(donor: Donor, blood_type: BloodType) -> bool:
    """Exact-type, currently available donors are the only candidates."""
    return donor.is_available and donor.blood_type == blood_type


class DonorRanker:
    """Orders candidate donors by road distance from a target location.

    Each call recomputes the ranking from the donors passed in; nothing is
    cached between calls.
    """

    def __init__(self, router: ShortestPathRouter) -> None:
        self._router = router

    def rank_donors(
        self,
        blood_type: BloodType,
        target_location: str,
        donors: Iterable[Donor],
    ) -> list[RankedDonor]:
        blood_type = BloodType.parse(blood_type)
        ranked: list[RankedDonor] = []
        skipped_unreachable = 0
        for donor in donors:
            if not is_candidate(donor, blood_type):
                continue
            result = self._router.route(target_location, donor.location_id)
            if not isinstance(result, Route):
                skipped_unreachable += 1
                continue
            ranked.append(
                RankedDonor(
                    donor=donor,
                    path=result.path,
                    route=self._router.route_names(result),
                    distance=result.distance,
                )
            )

        # list.sort is stable, so equal distances keep input order
        ranked.sort(key=lambda item: item.distance)
        logger.debug(
            "Donors ranked | blood_type=%s | target=%s | candidates=%s | unreachable=%s",
            blood_type.value,
            target_location,
            len(ranked),
            skipped_unreachable,
        )
        return ranked

    def nearest_donor(
        self,
        blood_type: BloodType,
        target_location: str,
        donors: Iterable[Donor],
    ) -> Optional[RankedDonor]:
        ranked = self.rank_donors(blood_type, target_location, donors)
        return ranked[0] if ranked else None
