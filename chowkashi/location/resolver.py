from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..geo.models import Coordinates
from ..search.models import DeviceReading, GeolocationErrorCode
from .geocoder import geocode_address

logger = logging.getLogger(__name__)

NEAR_ME_LABEL = "Near me"
_DEVICE_SENTINELS = {"near me", "current location"}

_ERROR_MESSAGES: dict[GeolocationErrorCode, str] = {
    GeolocationErrorCode.permission_denied: "Location access denied by user",
    GeolocationErrorCode.position_unavailable: "Location information unavailable",
    GeolocationErrorCode.timeout: "Location request timed out",
    GeolocationErrorCode.unsupported: "Geolocation is not supported by this browser",
}


class GeolocationError(RuntimeError):
    """Raised by a geolocation provider that could not produce a position."""

    def __init__(self, code: GeolocationErrorCode) -> None:
        super().__init__(_ERROR_MESSAGES[code])
        self.code = code


GeolocationProvider = Callable[[], Awaitable[Coordinates]]
Geocoder = Callable[[str], Awaitable[Coordinates | None]]


def reported_position(reading: DeviceReading | None) -> GeolocationProvider:
    """Provider that replays what the client's geolocation API reported."""

    async def provide() -> Coordinates:
        if reading is None:
            raise GeolocationError(GeolocationErrorCode.unsupported)
        if reading.coordinates is not None:
            return reading.coordinates
        raise GeolocationError(reading.error or GeolocationErrorCode.position_unavailable)

    return provide


def is_device_sentinel(text: str | None) -> bool:
    return bool(text) and text.strip().lower() in _DEVICE_SENTINELS


@dataclass(frozen=True)
class ResolvedLocation:
    coordinates: Coordinates | None
    label: str | None = None
    notice: str | None = None


class LocationResolver:
    def __init__(
        self,
        geocode: Geocoder = geocode_address,
        on_resolved: Callable[[str], None] | None = None,
    ) -> None:
        self._geocode = geocode
        self._on_resolved = on_resolved

    def _resolved(self, coordinates: Coordinates, label: str) -> ResolvedLocation:
        if self._on_resolved is not None:
            self._on_resolved(label)
        return ResolvedLocation(coordinates=coordinates, label=label)

    async def from_device(self, provider: GeolocationProvider) -> ResolvedLocation:
        try:
            coordinates = await provider()
        except GeolocationError as exc:
            logger.info("Device location unavailable: %s", exc)
            return ResolvedLocation(coordinates=None, notice=str(exc))
        return self._resolved(coordinates, NEAR_ME_LABEL)

    async def from_text(self, text: str, provider: GeolocationProvider) -> ResolvedLocation:
        if is_device_sentinel(text):
            return await self.from_device(provider)

        coordinates = await self._geocode(text)
        if coordinates is None:
            return ResolvedLocation(
                coordinates=None, notice=f"Could not find a location for '{text.strip()}'"
            )
        return self._resolved(coordinates, text)

    async def resolve(self, text: str | None, device: DeviceReading | None) -> ResolvedLocation:
        """Typed text wins when present; otherwise fall back to the device reading."""
        provider = reported_position(device)
        if text and text.strip():
            return await self.from_text(text, provider)
        return await self.from_device(provider)
