"""Geocoding through OpenStreetMap Nominatim and distance helpers."""

import math
from typing import Optional

import httpx

from sathi_seva.config import settings
from sathi_seva.core.errors import DependencyFailure, NotFoundError
from sathi_seva.core.models import AddressDetails, Coordinates
from sathi_seva.utils.logging import get_logger, log_error_context

logger = get_logger(__name__)

EARTH_RADIUS_KM = 6371.0


class LocationProvider:
    """Source of the caller's current position (browser, device, fixture)."""

    async def current(self) -> Coordinates:
        raise NotImplementedError


class FixedLocationProvider(LocationProvider):
    """Always reports the same coordinates."""

    def __init__(self, latitude: float, longitude: float):
        self.coordinates = Coordinates(latitude=latitude, longitude=longitude)

    async def current(self) -> Coordinates:
        return self.coordinates


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres, rounded to two decimals."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_KM * c, 2)


def are_in_same_locality(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    max_distance: float = 5.0
) -> bool:
    return calculate_distance(lat1, lon1, lat2, lon2) <= max_distance


class LocationService:
    """Client for forward and reverse geocoding."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or httpx.AsyncClient(
            base_url=settings.nominatim_url,
            headers={"User-Agent": settings.nominatim_user_agent},
            timeout=settings.geocoding_timeout
        )
        self.logger = logger.bind(component="location_service")

    async def reverse_geocode(self, latitude: float, longitude: float) -> AddressDetails:
        """
        Resolve coordinates to address details.

        Raises:
            DependencyFailure: the geocoding request failed
        """
        try:
            response = await self.client.get(
                "/reverse",
                params={
                    "format": "json",
                    "lat": latitude,
                    "lon": longitude,
                    "addressdetails": 1,
                }
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error("Reverse geocoding failed", **log_error_context(e))
            raise DependencyFailure("Failed to get address details") from e

        address = data.get("address") or {}
        return AddressDetails(
            formatted_address=data.get("display_name") or "",
            city=address.get("city") or address.get("town") or address.get("village") or "",
            state=address.get("state") or "",
            pincode=address.get("postcode") or "",
            locality=address.get("neighbourhood") or address.get("suburb") or address.get("hamlet") or "",
            country=address.get("country") or ""
        )

    async def geocode(self, address: str) -> Coordinates:
        """
        Resolve a free-text address to coordinates.

        Raises:
            NotFoundError: no match for the address
            DependencyFailure: the geocoding request failed
        """
        try:
            response = await self.client.get(
                "/search",
                params={"format": "json", "q": address, "limit": 1}
            )
            response.raise_for_status()
            results = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error("Geocoding failed", address=address, **log_error_context(e))
            raise DependencyFailure("Failed to get coordinates from address") from e

        if not results:
            raise NotFoundError(f"Address not found: {address}")

        return Coordinates(
            latitude=float(results[0]["lat"]),
            longitude=float(results[0]["lon"])
        )

    async def close(self) -> None:
        await self.client.aclose()
