from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

import structlog

from .. import db
from ..integrations.accuweather.client import AccuWeatherClient
from ..locations.geolocation import get_geolocator
from ..locations.store import DatabaseStore, LocationStore, MemoryStore
from ..ui import ModalRegistry, Notifier, Spinner
from .widget import WeatherService, WeatherWidget

logger = structlog.get_logger()


def get_store() -> LocationStore:
    """
    The database store when DATABASE_URL is set, otherwise an in-memory one.
    """

    if db.is_configured():
        return DatabaseStore()

    logger.warning("DATABASE_URL is not set, the location will not be persisted")
    return MemoryStore()


def create_widget(
    *, store: LocationStore, service: WeatherService, notifier: Notifier
) -> WeatherWidget:
    return WeatherWidget(
        store=store,
        service=service,
        notifier=notifier,
        busy_indicator=Spinner(),
        modal_host=ModalRegistry(),
        geolocator=get_geolocator(),
    )


@asynccontextmanager
async def widget_context(*, notifier: Notifier) -> AsyncIterator[WeatherWidget]:
    """
    Set up a widget with a database connection (if configured) and an
    AccuWeather client, both released when the block exits.
    """

    async with AsyncExitStack() as stack:
        store = get_store()
        if isinstance(store, DatabaseStore):
            await stack.enter_async_context(db.setup())

        client = await stack.enter_async_context(AccuWeatherClient())
        yield create_widget(store=store, service=client, notifier=notifier)
