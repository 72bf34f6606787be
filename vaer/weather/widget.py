"""
The weather widget: resolve the location, fetch the snapshot and render it.

Every refresh is one cycle of resolve -> fetch -> render. Cycles can overlap,
e.g. when the user saves a new location while the previous cycle is still
waiting on the network. Each cycle takes a generation number when it starts
and only the cycle holding the latest number may replace the view.
"""

from typing import Protocol

import structlog

from ..exceptions import FetchFailure
from ..locations.geolocation import Geolocator
from ..locations.resolver import LocationResolver, ReverseGeocoder, decision_location
from ..locations.store import LocationStore
from ..settings.controller import CitySearch, SettingsController
from ..ui import BusyIndicator, ModalHost, Notifier, busy
from .fetcher import ForecastService, WeatherDataFetcher
from .render import ViewNode, render

logger = structlog.get_logger()


class WeatherService(ReverseGeocoder, CitySearch, ForecastService, Protocol):
    """Everything the widget needs from the remote weather service."""

    pass


class WeatherWidget:
    def __init__(
        self,
        *,
        store: LocationStore,
        service: WeatherService,
        notifier: Notifier,
        busy_indicator: BusyIndicator,
        modal_host: ModalHost,
        geolocator: Geolocator | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.busy_indicator = busy_indicator
        self.resolver = LocationResolver(
            store=store, service=service, notifier=notifier, geolocator=geolocator
        )
        self.fetcher = WeatherDataFetcher(service)
        self.settings = SettingsController(
            store=store,
            service=service,
            notifier=notifier,
            modal_host=modal_host,
            refresh=self.refresh,
            supersede=self.supersede,
        )

        # The currently displayed view, None until the first successful render
        self.view: ViewNode | None = None
        self.generation = 0

    async def start(self) -> ViewNode | None:
        view = await self.refresh()
        await self.settings.build_modal()
        return view

    def supersede(self) -> None:
        """Invalidate every cycle that is currently in flight."""
        self.generation += 1

    async def refresh(self) -> ViewNode | None:
        """
        Run one resolve -> fetch -> render cycle and return the view that is
        displayed afterwards.

        On FetchFailure the previous view stays in place and an error is
        shown. A cycle that has been overtaken by a newer one is discarded
        and does not write to the store.
        """

        self.supersede()
        generation = self.generation

        def is_current() -> bool:
            return generation == self.generation

        with busy(self.busy_indicator):
            decision = await self.resolver.resolve(is_current=is_current)
            location = decision_location(decision)

            log = logger.bind(
                generation=generation,
                key=location.key,
                decision=type(decision).__name__,
            )

            if not is_current():
                log.info("Discarding superseded cycle before fetch")
                return self.view

            try:
                snapshot = await self.fetcher.fetch(location.key)
            except FetchFailure as exc:
                if not is_current():
                    log.info("Ignoring failure of superseded cycle", error=exc.reason)
                    return self.view
                self.notifier.show_error("Fetch weather data error", str(exc))
                return self.view

            if not is_current():
                log.info("Discarding render of superseded cycle")
                return self.view

            self.view = render(location.label, snapshot)
            log.info("Rendered weather", label=location.label)
            return self.view
