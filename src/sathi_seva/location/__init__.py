"""Geocoding and locality helpers."""

from .service import (
    FixedLocationProvider,
    LocationProvider,
    LocationService,
    are_in_same_locality,
    calculate_distance,
)

__all__ = [
    "FixedLocationProvider",
    "LocationProvider",
    "LocationService",
    "are_in_same_locality",
    "calculate_distance",
]
