"""
The location picker in the settings dialog.

Typing in the search input runs a city search and replaces the candidate
list. Saving looks the typed label up among the candidates, persists it and
refreshes the widget.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import httpx
import structlog

from ..exceptions import InvalidLocationSelection, SearchFailure
from ..integrations.accuweather.types import Location
from ..integrations.common import IntegrationAPIError
from ..locations.store import (
    LocationStore,
    get_persisted_location,
    set_persisted_location,
)
from ..locations.types import LocationCandidate, PersistedLocation
from ..ui import Modal, ModalHost, Notifier
from ..weather.render import SETTINGS_MODAL_ID, ViewNode, create_element

logger = structlog.get_logger()

SEARCH_INPUT_ID = "countrySearch"
DATALIST_ID = "datalistOptions"


class CitySearch(Protocol):
    async def city_search(self, query: str) -> list[Location]: ...


class SettingsController:
    def __init__(
        self,
        *,
        store: LocationStore,
        service: CitySearch,
        notifier: Notifier,
        modal_host: ModalHost,
        refresh: Callable[[], Awaitable[Any]],
        supersede: Callable[[], None] | None = None,
    ) -> None:
        self.store = store
        self.service = service
        self.notifier = notifier
        self.modal_host = modal_host
        self.refresh = refresh
        self.supersede = supersede
        self.modal: Modal | None = None

        # Label -> location key, from the most recent search
        self.candidates: dict[str, str] = {}
        # What is currently typed in the search input
        self.search_value = ""
        # Bumped for every lookup, only the latest one may set the candidates
        self.search_sequence = 0

    async def on_search_input(self, query: str) -> None:
        self.search_value = query
        if not query:
            return

        self.search_sequence += 1
        sequence = self.search_sequence
        self.candidates = {}
        try:
            results = await self.service.city_search(query)
        except (IntegrationAPIError, httpx.HTTPError) as exc:
            if sequence != self.search_sequence:
                logger.debug("Ignoring failure of superseded search", query=query)
                return
            error = SearchFailure(query, str(exc) or type(exc).__name__)
            logger.warning("City search failed", query=query, error=error.reason)
            self.notifier.show_error("Search location error", str(error))
            self.update_modal()
            return

        if sequence != self.search_sequence:
            logger.debug("Ignoring result of superseded search", query=query)
            return

        self.candidates = {result.label: result.key for result in results}
        logger.debug("City search done", query=query, count=len(self.candidates))
        self.update_modal()

    async def on_save(self, selected_label: str) -> Any:
        """
        Persist the candidate matching the label and run a new refresh cycle.

        Raises InvalidLocationSelection, without touching the store, if the
        label is not one of the current candidates.
        """

        key = self.candidates.get(selected_label)
        if key is None:
            error = InvalidLocationSelection(selected_label)
            self.notifier.show_error("Invalid location", str(error))
            raise error

        # In flight cycles must not overwrite the choice with their own location
        if self.supersede is not None:
            self.supersede()
        await set_persisted_location(
            self.store, PersistedLocation(key=key, label=selected_label)
        )
        return await self.refresh()

    async def save_current_input(self) -> Any:
        """
        The save button handler. Reads the search input when clicked.
        """
        return await self.on_save(self.search_value)

    @property
    def candidate_list(self) -> list[LocationCandidate]:
        return [
            LocationCandidate(key=key, label=label)
            for label, key in self.candidates.items()
        ]

    #########
    # Modal #
    #########

    async def build_modal(self) -> None:
        """
        Register the settings dialog with the modal host, once.
        """

        if self.modal_host.exists(SETTINGS_MODAL_ID):
            return

        location = await get_persisted_location(self.store)
        self.search_value = location.label if location else ""

        self.modal = Modal(
            id=SETTINGS_MODAL_ID,
            title="Weather settings",
            body=self.render_body(),
            footer=render_save_button(),
            actions={"save": self.save_current_input},
        )
        self.modal_host.create(self.modal)

    def update_modal(self) -> None:
        """
        Re-render the dialog body so it shows the latest candidates.
        """
        if self.modal is not None:
            self.modal.body = self.render_body()

    def render_body(self) -> ViewNode:
        search_input = create_element(
            "input",
            {
                "class": "form-control",
                "list": DATALIST_ID,
                "id": SEARCH_INPUT_ID,
                "placeholder": "Type to search...",
                "autocomplete": "off",
                "value": self.search_value,
            },
            events={"keyup": "settings:search"},
        )
        label = create_element("label", {"for": SEARCH_INPUT_ID}, text="Location")
        field = create_element(
            "div",
            {"class": "form-floating col px-0"},
            children=(search_input, label, self.render_datalist()),
        )
        form = create_element("form", {"class": "row"}, children=(field,))
        return create_element("div", {"class": "container"}, children=(form,))

    def render_datalist(self) -> ViewNode:
        options = tuple(
            create_element("option", {"data-value": key, "value": label})
            for label, key in self.candidates.items()
        )
        return create_element("datalist", {"id": DATALIST_ID}, children=options)


def render_save_button() -> ViewNode:
    return create_element(
        "button",
        {
            "type": "button",
            "class": "btn btn-primary col-3",
            "data-bs-dismiss": "modal",
        },
        events={"click": f"modal:{SETTINGS_MODAL_ID}:save"},
        text="Save & Close",
    )
