"""
Turn a weather snapshot into a view tree.

render() is a pure function: the same label and snapshot always give the
same tree. The tree is plain data (tag, attributes, text, children and named
event bindings) and can be serialised to a dict or to HTML.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .types import HOURLY_INDICES, WeatherSnapshot

CONTAINER_ID = "weatherContainer"
SETTINGS_MODAL_ID = "weatherModal"
ICON_URL = "https://developer.accuweather.com/sites/default/files/{icon:02d}-s.png"

# Indexed by day of week, with Sunday as 0
WEEKDAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

VOID_TAGS = frozenset({"img", "input"})

TEMPLATES_DIR = Path(__file__).parent / "templates"
environment = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(default=True),
)
environment.globals["void_tags"] = VOID_TAGS


@dataclass(frozen=True)
class ViewNode:
    tag: str
    attributes: Mapping[str, str] = field(default_factory=dict)
    children: tuple[ViewNode, ...] = ()
    text: str | None = None
    events: Mapping[str, str] = field(default_factory=dict)

    def walk(self) -> Iterator[ViewNode]:
        """Depth first iteration over this node and all its descendants."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, element_id: str) -> ViewNode | None:
        return next(
            (node for node in self.walk() if node.attributes.get("id") == element_id),
            None,
        )

    def find_all(self, css_class: str) -> list[ViewNode]:
        return [
            node
            for node in self.walk()
            if css_class in node.attributes.get("class", "").split()
        ]

    def text_content(self) -> str:
        return "".join(node.text for node in self.walk() if node.text)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag": self.tag,
            "attributes": dict(self.attributes),
            "text": self.text,
            "events": dict(self.events),
            "children": [child.to_dict() for child in self.children],
        }

    @property
    def html_attributes(self) -> dict[str, str]:
        attributes = {**self.attributes}
        attributes.update(
            {f"data-on-{event}": handler for event, handler in self.events.items()}
        )
        return attributes

    def to_html(self) -> str:
        return environment.get_template("view.html").render(node=self)

    def to_text(self) -> str:
        """A plain text outline, one line per node with text."""
        return "\n".join(self._text_lines(depth=0))

    def _text_lines(self, *, depth: int) -> Iterator[str]:
        if self.text:
            yield "  " * depth + self.text
            depth += 1
        for child in self.children:
            yield from child._text_lines(depth=depth)


###################
# Element helpers #
###################


def create_element(
    tag: str,
    attributes: Mapping[str, str] | None = None,
    events: Mapping[str, str] | None = None,
    text: str | None = None,
    children: tuple[ViewNode, ...] = (),
) -> ViewNode:
    return ViewNode(
        tag=tag,
        attributes=dict(attributes or {}),
        children=children,
        text=text,
        events=dict(events or {}),
    )


def create_column(*children: ViewNode, text: str | None = None) -> ViewNode:
    return create_element("div", {"class": "col"}, text=text, children=children)


##############
# Formatting #
##############


def format_temperature(value: float) -> str:
    return f"{value:g}°C"


def format_hour(value: datetime) -> str:
    """The hour of day in the timestamp's own (location local) time."""
    return f"{value.hour:02d}:00"


def weekday_label(value: datetime) -> str:
    return WEEKDAYS[value.isoweekday() % 7]


def icon_url(icon: int) -> str:
    return ICON_URL.format(icon=icon)


##########
# Render #
##########


def render(label: str, snapshot: WeatherSnapshot) -> ViewNode:
    return create_element(
        "div",
        {"id": CONTAINER_ID, "class": "row mt-5", "data-location": label},
        children=(render_today(snapshot), render_next_days(snapshot)),
    )


def render_today(snapshot: WeatherSnapshot) -> ViewNode:
    info = create_element(
        "div",
        {"class": "d-flex flex-row"},
        children=(render_today_info(snapshot), render_settings_trigger()),
    )
    return create_element(
        "div",
        {"class": "weather__today"},
        children=(info, render_current_day(snapshot), render_hourly(snapshot)),
    )


def render_today_info(snapshot: WeatherSnapshot) -> ViewNode:
    title = create_element(
        "h1", text=f"Weather in {snapshot.location_info.localized_name}"
    )
    headline = create_element(
        "div", {"class": "weather__headline"}, text=snapshot.headline
    )
    return create_element(
        "div",
        {"class": "weather__element flex-grow-1 p-3"},
        children=(title, headline),
    )


def render_settings_trigger() -> ViewNode:
    button = create_element(
        "button",
        {
            "class": "btn weather__settings__button",
            "data-bs-toggle": "modal",
            "data-bs-target": f"#{SETTINGS_MODAL_ID}",
            "aria-label": "Weather settings",
        },
        events={"click": f"modal:{SETTINGS_MODAL_ID}"},
        text="⚙",
    )
    return create_element(
        "div", {"class": "d-flex weather__element"}, children=(button,)
    )


def render_current_day(snapshot: WeatherSnapshot) -> ViewNode:
    today = snapshot.days[0]
    tile = render_tile(
        format_temperature(snapshot.current_temperature),
        today.icon,
        f"↑ {format_temperature(today.max_temp)}",
        f"↓ {format_temperature(today.min_temp)}",
        hero=True,
    )
    return create_element(
        "div",
        {"class": "d-flex align-items-center weather__element weather__current"},
        children=(tile,),
    )


def render_hourly(snapshot: WeatherSnapshot) -> ViewNode:
    samples = snapshot.hourly_samples
    entries = tuple(
        create_element(
            "div",
            {"class": "d-flex flex-column weather__hour", "data-index": str(index)},
            children=(
                create_element(
                    "div",
                    {"class": "fs-5 fw-bold text-center weather__hour-temperature"},
                    text=format_temperature(samples[index].temperature),
                ),
                create_element(
                    "div",
                    {"class": "text-center weather__hour-time"},
                    text=format_hour(samples[index].date_time),
                ),
            ),
        )
        for index in HOURLY_INDICES
    )
    return create_element(
        "div",
        {"class": "d-flex flex-column weather__element weather__hourly py-4"},
        children=(
            create_element("h2", {"class": "ps-3"}, text="Hourly Weather"),
            create_element(
                "div", {"class": "d-flex justify-content-between"}, children=entries
            ),
        ),
    )


def render_next_days(snapshot: WeatherSnapshot) -> ViewNode:
    columns = tuple(
        create_column(
            render_tile(
                weekday_label(day.date),
                day.icon,
                format_temperature(day.max_temp),
                format_temperature(day.min_temp),
            )
        )
        for day in snapshot.days
    )
    return create_element(
        "div",
        {"class": "d-flex justify-content-center flex-wrap weather__next-days"},
        children=columns,
    )


def render_tile(
    label: str, icon: int, maximum: str, minimum: str, *, hero: bool = False
) -> ViewNode:
    """
    A (label, icon, max, min) tile. The hero variant lays the parts out
    horizontally and is used for today, the compact one for the next days.
    """

    if hero:
        container = {"class": "row d-flex align-items-center weather__tile--hero m-5"}
        label_node = create_element(
            "div", {"class": "fs-1 fw-bold col-12 col-sm-4 weather__label"}, text=label
        )
        icon_wrapper = {"class": "col-12 col-sm-4"}
        temperature_range = create_element(
            "div",
            {"class": "col-12 col-sm-4 weather__range"},
            children=(
                create_element("div", {"class": "fw-bold weather__max"}, text=maximum),
                create_element("div", {"class": "weather__min"}, text=minimum),
            ),
        )
    else:
        container = {
            "class": "d-flex flex-column align-items-center weather__element "
            "weather__tile p-3"
        }
        label_node = create_element("div", {"class": "weather__label"}, text=label)
        icon_wrapper = {}
        temperature_range = create_element(
            "div",
            {"class": "row weather__range"},
            children=(
                create_element(
                    "div", {"class": "col fw-bold weather__max"}, text=maximum
                ),
                create_element("div", {"class": "col weather__min"}, text=minimum),
            ),
        )

    icon_node = create_element(
        "div",
        icon_wrapper,
        children=(create_element("img", {"src": icon_url(icon), "alt": ""}),),
    )
    return create_element(
        "div", container, children=(label_node, icon_node, temperature_range)
    )
