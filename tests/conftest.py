from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator, Callable, Iterator

import asyncpg
import pytest

from vaer import db
from vaer.db.migrations import migrate_db
from vaer.integrations.accuweather.types import (
    CurrentConditions,
    FiveDayForecast,
    HourlyForecast,
    Location,
    LocationInfo,
)
from vaer.locations.store import MemoryStore
from vaer.ui import ModalRegistry, Notifications, Spinner
from vaer.weather.types import WeatherSnapshot
from vaer.weather.widget import WeatherWidget

from payloads import (
    current_day_payload,
    five_day_payload,
    hourly_payload,
    location_payload,
)


def pytest_configure(config: pytest.Config) -> None:
    os.environ.setdefault("ACCUWEATHER_API_KEY", "test-key")
    os.environ["VAER_GEOLOCATION"] = "off"


def pytest_sessionfinish() -> None:
    """
    Silence exceptions raised when logging during atexit callbacks
    """

    logging.raiseExceptions = False


@pytest.fixture
def make_snapshot() -> Callable[..., WeatherSnapshot]:
    def make(
        *, days: int = 5, hours: int = 8, city: str = "Warsaw"
    ) -> WeatherSnapshot:
        return WeatherSnapshot.model_validate(
            {
                "five_day": five_day_payload(days),
                "current_day": current_day_payload(),
                "location_info": {"Key": "274663", "LocalizedName": city},
                "hourly": hourly_payload(hours),
            }
        )

    return make


@pytest.fixture
def snapshot(make_snapshot: Callable[..., WeatherSnapshot]) -> WeatherSnapshot:
    return make_snapshot()


################
# Fake service #
################


class FakeWeatherService:
    """
    Serves the same forecast for every location key and records the calls.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.blocked: asyncio.Event | None = None
        self.cities = [
            Location.model_validate(payload)
            for payload in (
                location_payload("178087", "Berlin", "Berlin", "Germany"),
                location_payload("312122", "Bern", "Bern", "Switzerland"),
                location_payload("274455", "Krakow", "Lesser Poland", "Poland"),
            )
        ]
        self.hourly_hours = 8

    async def _call(self, operation: str, argument: str) -> None:
        self.calls.append((operation, argument))
        if gate := self.gates.get(argument):
            if self.blocked:
                self.blocked.set()
            await gate.wait()
        if error := self.failures.get(operation):
            raise error

    def operations(self, name: str) -> list[str]:
        return [argument for operation, argument in self.calls if operation == name]

    async def geolocate(self, *, latitude: float, longitude: float) -> Location:
        await self._call("geolocate", f"{latitude},{longitude}")
        return self.cities[2]

    async def city_search(self, query: str) -> list[Location]:
        await self._call("city_search", query)
        return [
            city for city in self.cities if city.label.lower().startswith(query.lower())
        ]

    async def five_day_forecast(self, key: str) -> FiveDayForecast:
        await self._call("five_day_forecast", key)
        return FiveDayForecast.model_validate(five_day_payload())

    async def current_day_forecast(self, key: str) -> list[CurrentConditions]:
        await self._call("current_day_forecast", key)
        return [CurrentConditions.model_validate(c) for c in current_day_payload()]

    async def location_info(self, key: str) -> LocationInfo:
        await self._call("location_info", key)
        return LocationInfo.model_validate({"Key": key, "LocalizedName": "Warsaw"})

    async def hourly_forecast(self, key: str) -> list[HourlyForecast]:
        await self._call("hourly_forecast", key)
        return [
            HourlyForecast.model_validate(h) for h in hourly_payload(self.hourly_hours)
        ]


@pytest.fixture
def service() -> FakeWeatherService:
    return FakeWeatherService()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def notifications() -> Notifications:
    return Notifications()


@pytest.fixture
def spinner() -> Spinner:
    return Spinner()


@pytest.fixture
def modal_host() -> ModalRegistry:
    return ModalRegistry()


@pytest.fixture
def widget(
    store: MemoryStore,
    service: FakeWeatherService,
    notifications: Notifications,
    spinner: Spinner,
    modal_host: ModalRegistry,
) -> WeatherWidget:
    return WeatherWidget(
        store=store,
        service=service,
        notifier=notifications,
        busy_indicator=spinner,
        modal_host=modal_host,
    )


############
# Database #
############


async def _setup_db() -> None:
    con = await asyncpg.connect(database="postgres")
    try:
        try:
            await con.execute("CREATE DATABASE vaer_test")
        except asyncpg.exceptions.DuplicateDatabaseError:
            pass
    finally:
        await con.close()

    await migrate_db()


async def _drop_db() -> None:
    con = await asyncpg.connect(database="postgres")
    try:
        await con.execute("DROP DATABASE vaer_test")
    finally:
        await con.close()


@pytest.fixture(scope="session")
def setup_db() -> Iterator[None]:
    os.environ["PGDATABASE"] = "vaer_test"

    try:
        asyncio.run(_setup_db())
    except (OSError, asyncpg.PostgresError) as exc:
        pytest.skip(f"PostgreSQL is not available: {exc}")

    try:
        yield
    finally:
        asyncio.run(_drop_db())


@pytest.fixture
async def _connection(
    setup_db: None,
) -> AsyncIterator[asyncpg.Connection[asyncpg.Record]]:
    connection = await asyncpg.connect()
    try:
        transaction = connection.transaction()
        await transaction.start()
        try:
            yield connection
        finally:
            await transaction.rollback()
    finally:
        await connection.close()


@pytest.fixture
def connection(
    _connection: asyncpg.Connection[asyncpg.Record],
) -> Iterator[asyncpg.Connection[asyncpg.Record]]:
    # The contextvar has to be set in a sync fixture, async fixtures run in a
    # separate task and don't share context with the test function.
    with db.set_connection(_connection):
        yield _connection
