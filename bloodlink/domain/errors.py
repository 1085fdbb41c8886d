"""Exception hierarchy shared by the engine, registry and HTTP layers."""

from __future__ import annotations


class BloodLinkError(Exception):
    """Base failure raised by the matching engine."""


class UnknownIdentifierError(BloodLinkError):
    """Raised when a caller references an id the snapshot does not hold."""


class LocationNotFoundError(UnknownIdentifierError):
    """Raised when a location id is not part of the road graph."""


class DonorNotFoundError(UnknownIdentifierError):
    """Raised when a donor id is not registered."""


class RequestNotFoundError(UnknownIdentifierError):
    """Raised when a blood request id is not known."""


class UnknownBloodTypeError(UnknownIdentifierError):
    """Raised when a blood type label is outside the eight ABO/Rh groups."""


class InvalidQuantityError(BloodLinkError):
    """Raised for negative unit counts or non-positive requested units."""


class GraphConfigurationError(BloodLinkError):
    """Raised when locations or road edges are inconsistent at build time."""


class InvalidRequestStateError(BloodLinkError):
    """Raised when a lifecycle step is applied to a request in the wrong state."""
