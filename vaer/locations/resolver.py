"""
Decide which location the widget should show.

The order of preference is the persisted location, then the current
position and finally the default location. Whatever is decided is written
back to the store, so once resolve() returns the store always holds a
complete location. A cycle that has been superseded leaves the store to the
newer one.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import httpx
import structlog

from ..exceptions import GeolocationError
from ..integrations.accuweather.types import Location
from ..integrations.common import IntegrationAPIError
from ..ui import Notifier
from .geolocation import Geolocator
from .store import LocationStore, get_persisted_location, set_persisted_location
from .types import DEFAULT_LOCATION, PersistedLocation

logger = structlog.get_logger()


class ReverseGeocoder(Protocol):
    async def geolocate(self, *, latitude: float, longitude: float) -> Location: ...


@dataclass(frozen=True)
class UsePersisted:
    location: PersistedLocation


@dataclass(frozen=True)
class UseGeolocated:
    key: str
    label: str


@dataclass(frozen=True)
class UseDefault:
    pass


type LocationDecision = UsePersisted | UseGeolocated | UseDefault


class LocationResolver:
    def __init__(
        self,
        *,
        store: LocationStore,
        service: ReverseGeocoder,
        notifier: Notifier,
        geolocator: Geolocator | None = None,
    ) -> None:
        self.store = store
        self.service = service
        self.notifier = notifier
        self.geolocator = geolocator

    async def resolve(
        self, *, is_current: Callable[[], bool] = lambda: True
    ) -> LocationDecision:
        """
        Decide on a location and write it back to the store.

        is_current is checked before every write and notification. Once it
        returns False the decision is still returned, but the store and the
        notifier are left alone so a newer cycle's choice is never
        overwritten.
        """

        if location := await get_persisted_location(self.store):
            logger.debug("Using persisted location", key=location.key)
            return UsePersisted(location=location)

        if self.geolocator is None:
            logger.info("No geolocation available, using default location")
            await self._write_back(DEFAULT_LOCATION, is_current=is_current)
            return UseDefault()

        try:
            location = await self._geolocate(self.geolocator)
        except (GeolocationError, IntegrationAPIError, httpx.HTTPError) as exc:
            logger.warning("Geolocation failed, using default location", error=str(exc))
            if is_current():
                self.notifier.show_error("Fetch geolocation data error", str(exc))
            await self._write_back(DEFAULT_LOCATION, is_current=is_current)
            return UseDefault()

        await self._write_back(location, is_current=is_current)
        return UseGeolocated(key=location.key, label=location.label)

    async def _write_back(
        self, location: PersistedLocation, *, is_current: Callable[[], bool]
    ) -> None:
        if not is_current():
            logger.info("Not persisting location of superseded cycle", key=location.key)
            return
        await set_persisted_location(self.store, location)

    async def _geolocate(self, geolocator: Geolocator) -> PersistedLocation:
        coordinates = await geolocator.locate()
        result = await self.service.geolocate(
            latitude=coordinates.latitude, longitude=coordinates.longitude
        )
        return PersistedLocation(key=result.key, label=result.label)


def decision_location(decision: LocationDecision) -> PersistedLocation:
    """The location a decision points at."""
    if isinstance(decision, UsePersisted):
        return decision.location
    if isinstance(decision, UseGeolocated):
        return PersistedLocation(key=decision.key, label=decision.label)
    return DEFAULT_LOCATION
