"""Red cell compatibility table.

Compatibility is informational only: donor selection uses exact-type
matching, see ``bloodlink.services.ranking_service``.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from bloodlink.domain.models import BloodType, Donor


_A_POS = BloodType.A_POS
_A_NEG = BloodType.A_NEG
_B_POS = BloodType.B_POS
_B_NEG = BloodType.B_NEG
_AB_POS = BloodType.AB_POS
_AB_NEG = BloodType.AB_NEG
_O_POS = BloodType.O_POS
_O_NEG = BloodType.O_NEG


# recipient -> donor types it may receive
COMPATIBILITY_TABLE: Mapping[BloodType, frozenset[BloodType]] = {
    _A_POS: frozenset({_A_POS, _A_NEG, _O_POS, _O_NEG}),
    _A_NEG: frozenset({_A_NEG, _O_NEG}),
    _B_POS: frozenset({_B_POS, _B_NEG, _O_POS, _O_NEG}),
    _B_NEG: frozenset({_B_NEG, _O_NEG}),
    _AB_POS: frozenset(BloodType),
    _AB_NEG: frozenset({_A_NEG, _B_NEG, _AB_NEG, _O_NEG}),
    _O_POS: frozenset({_O_POS, _O_NEG}),
    _O_NEG: frozenset({_O_NEG}),
}


def acceptable_donor_types(recipient: BloodType) -> frozenset[BloodType]:
    return COMPATIBILITY_TABLE[BloodType.parse(recipient)]


def can_receive(recipient: BloodType, donor_type: BloodType) -> bool:
    return BloodType.parse(donor_type) in acceptable_donor_types(recipient)


def sorted_donor_types(recipient: BloodType) -> list[BloodType]:
    """Acceptable donor types in enum declaration order, for display."""
    accepted = acceptable_donor_types(recipient)
    return [blood_type for blood_type in BloodType if blood_type in accepted]


def compatible_donors(recipient: BloodType, donors: Iterable[Donor]) -> list[Donor]:
    """Available donors of any type the recipient may safely receive."""
    accepted = acceptable_donor_types(recipient)
    return [
        donor
        for donor in donors
        if donor.is_available and donor.blood_type in accepted
    ]
