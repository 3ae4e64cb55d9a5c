"""User profile access with upsert-on-read and location enrichment."""

from typing import Any, Optional

from sathi_seva.core.errors import SathiSevaError
from sathi_seva.core.models import Coordinates, UserProfile
from sathi_seva.location.service import LocationProvider, LocationService
from sathi_seva.storage.base import ProfileRepository
from sathi_seva.utils.logging import get_logger, log_error_context

logger = get_logger(__name__)

EDITABLE_FIELDS = frozenset({
    "full_name",
    "phone",
    "address",
    "skills",
    "verification_status",
    "city",
    "state",
    "pincode",
    "locality",
    "latitude",
    "longitude",
})


class ProfileService:
    """Reads and edits profiles; creates an empty one on first visit."""

    def __init__(
        self,
        profile_repository: ProfileRepository,
        location_service: Optional[LocationService] = None
    ):
        self.logger = logger.bind(component="profile_service")
        self.profiles = profile_repository
        self.location = location_service

    async def get_or_create(self, user_id: str) -> Optional[UserProfile]:
        """
        Fetch a profile, creating an empty one if none exists.

        Two steps: look the profile up, and on a miss or a lookup failure
        upsert a fresh profile. Returns None only if both steps fail.
        """
        try:
            profile = await self.profiles.find_by_user_id(user_id)
            if profile is not None:
                return profile
            self.logger.info("No profile found, creating one", user_id=user_id)
        except Exception as e:
            self.logger.warning("Profile lookup failed, attempting upsert", **log_error_context(e, user_id=user_id))

        try:
            return await self.profiles.upsert(UserProfile(user_id=user_id))
        except Exception as e:
            self.logger.error("Profile upsert failed", **log_error_context(e, user_id=user_id))
            return None

    async def update_profile(self, user_id: str, **changes: Any) -> Optional[UserProfile]:
        """Apply edits to the editable profile fields; unknown fields are ignored."""
        ignored = set(changes) - EDITABLE_FIELDS
        if ignored:
            self.logger.warning("Ignoring non-editable profile fields", user_id=user_id, fields=sorted(ignored))

        profile = await self.get_or_create(user_id)
        if profile is None:
            return None

        edits = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
        try:
            updated = UserProfile.model_validate({**profile.model_dump(), **edits})
            return await self.profiles.upsert(updated)
        except Exception as e:
            self.logger.error("Profile update failed", **log_error_context(e, user_id=user_id))
            return None

    async def update_location(self, user_id: str, coordinates: Coordinates) -> Optional[UserProfile]:
        """
        Store coordinates plus reverse-geocoded address fields.

        If geocoding is unavailable only the coordinates are stored.
        """
        changes = {"latitude": coordinates.latitude, "longitude": coordinates.longitude}

        if self.location is not None:
            try:
                address = await self.location.reverse_geocode(coordinates.latitude, coordinates.longitude)
                changes.update(
                    city=address.city or None,
                    state=address.state or None,
                    pincode=address.pincode or None,
                    locality=address.locality or None,
                    address=address.formatted_address or None
                )
            except SathiSevaError as e:
                self.logger.warning("Reverse geocoding unavailable", **log_error_context(e, user_id=user_id))

        return await self.update_profile(user_id, **changes)

    async def locate_and_update(self, user_id: str, provider: LocationProvider) -> Optional[UserProfile]:
        """Ask the provider where the user is, then store it."""
        try:
            coordinates = await provider.current()
        except Exception as e:
            self.logger.error("Current location unavailable", **log_error_context(e, user_id=user_id))
            return None
        return await self.update_location(user_id, coordinates)
