"""
Persistent key/value storage for the widget's location preference.

The location is stored as two values, the location key and its display
label. They are always written together so a reader sees either both or
neither.
"""

from collections.abc import Mapping
from typing import Protocol

import structlog

from .queries import get_setting, save_settings
from .types import PersistedLocation

logger = structlog.get_logger()

LOCATION_KEY = "weather_location_key"
LOCATION_LABEL = "weather_location_label"


class LocationStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def set_many(self, values: Mapping[str, str]) -> None:
        """Write all values, or none of them."""
        ...


class MemoryStore:
    """
    A store that only lives as long as the process.
    """

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(values or {})

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        self.values[key] = value

    async def set_many(self, values: Mapping[str, str]) -> None:
        self.values.update(values)


class DatabaseStore:
    """
    A store backed by the widget_setting table.
    """

    async def get(self, key: str) -> str | None:
        return await get_setting(name=key)

    async def set(self, key: str, value: str) -> None:
        await save_settings(values={key: value})

    async def set_many(self, values: Mapping[str, str]) -> None:
        await save_settings(values=values)


async def get_persisted_location(store: LocationStore) -> PersistedLocation | None:
    """
    Read the saved location. A half written location is treated as missing.
    """

    key = await store.get(LOCATION_KEY)
    label = await store.get(LOCATION_LABEL)
    if key and label:
        return PersistedLocation(key=key, label=label)

    if key or label:
        logger.warning("Ignoring incomplete persisted location", key=key, label=label)

    return None


async def set_persisted_location(
    store: LocationStore, location: PersistedLocation
) -> None:
    await store.set_many({LOCATION_KEY: location.key, LOCATION_LABEL: location.label})
    logger.info("Persisted location", key=location.key, label=location.label)
