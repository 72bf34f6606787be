from collections.abc import Callable
from datetime import datetime

import pytest

from vaer.weather.render import (
    CONTAINER_ID,
    SETTINGS_MODAL_ID,
    ViewNode,
    create_element,
    format_temperature,
    icon_url,
    render,
    weekday_label,
)
from vaer.weather.types import WeatherSnapshot

LABEL = "Warsaw, Masovia, Poland"


def texts(node: ViewNode, css_class: str) -> list[str]:
    return [n.text_content() for n in node.find_all(css_class)]


def test_render_is_pure(snapshot: WeatherSnapshot) -> None:
    assert render(LABEL, snapshot) == render(LABEL, snapshot)
    assert render(LABEL, snapshot).to_html() == render(LABEL, snapshot).to_html()


def test_container(snapshot: WeatherSnapshot) -> None:
    view = render(LABEL, snapshot)

    assert view.attributes["id"] == CONTAINER_ID
    assert view.attributes["data-location"] == LABEL
    assert view.find(CONTAINER_ID) is view


def test_today(snapshot: WeatherSnapshot) -> None:
    view = render(LABEL, snapshot)

    titles = [node.text for node in view.walk() if node.tag == "h1"]
    assert titles == ["Weather in Warsaw"]
    assert texts(view, "weather__headline") == ["Rain on Tuesday"]

    (current,) = view.find_all("weather__current")
    (hero,) = current.find_all("weather__tile--hero")
    assert texts(hero, "weather__label") == ["5.5°C"]
    assert texts(hero, "weather__max") == ["↑ 8°C"]
    assert texts(hero, "weather__min") == ["↓ 0°C"]
    (image,) = [node for node in hero.walk() if node.tag == "img"]
    assert image.attributes["src"] == icon_url(1)


def test_settings_trigger(snapshot: WeatherSnapshot) -> None:
    view = render(LABEL, snapshot)

    buttons = [node for node in view.walk() if node.events]
    assert len(buttons) == 1
    assert buttons[0].events == {"click": f"modal:{SETTINGS_MODAL_ID}"}


def test_hourly_entries(snapshot: WeatherSnapshot) -> None:
    view = render(LABEL, snapshot)

    entries = view.find_all("weather__hour")
    assert [
        (
            entry.find_all("weather__hour-temperature")[0].text,
            entry.find_all("weather__hour-time")[0].text,
        )
        for entry in entries
    ] == [("2°C", "03:00"), ("4°C", "09:00"), ("6°C", "15:00"), ("8°C", "21:00")]
    assert [entry.attributes["data-index"] for entry in entries] == [
        "1",
        "3",
        "5",
        "7",
    ]


@pytest.mark.parametrize("days", [1, 3, 5])
def test_next_days(
    make_snapshot: Callable[..., WeatherSnapshot], days: int
) -> None:
    view = render(LABEL, make_snapshot(days=days))

    tiles = view.find_all("weather__tile")
    assert len(tiles) == days
    assert [texts(tile, "weather__label")[0] for tile in tiles] == [
        "Sun",
        "Mon",
        "Tue",
        "Wed",
        "Thu",
    ][:days]
    assert [texts(tile, "weather__max")[0] for tile in tiles] == [
        f"{8 + day}°C" for day in range(days)
    ]
    assert [texts(tile, "weather__min")[0] for tile in tiles] == [
        f"{day}°C" for day in range(days)
    ]


@pytest.mark.parametrize(
    "date,label",
    [
        ("2024-03-10T07:00:00+01:00", "Sun"),
        ("2024-03-11T07:00:00+01:00", "Mon"),
        ("2024-03-12T07:00:00+01:00", "Tue"),
        ("2024-03-13T07:00:00+01:00", "Wed"),
        ("2024-03-14T07:00:00+01:00", "Thu"),
        ("2024-03-15T07:00:00+01:00", "Fri"),
        ("2024-03-16T07:00:00+01:00", "Sat"),
        # Late evening in the location, already the next day in UTC
        ("2024-03-16T23:30:00-05:00", "Sat"),
    ],
)
def test_weekday_label(date: str, label: str) -> None:
    assert weekday_label(datetime.fromisoformat(date)) == label


@pytest.mark.parametrize(
    "icon,url",
    [
        (1, "https://developer.accuweather.com/sites/default/files/01-s.png"),
        (7, "https://developer.accuweather.com/sites/default/files/07-s.png"),
        (33, "https://developer.accuweather.com/sites/default/files/33-s.png"),
    ],
)
def test_icon_url(icon: int, url: str) -> None:
    assert icon_url(icon) == url


@pytest.mark.parametrize(
    "value,expected", [(5.5, "5.5°C"), (8.0, "8°C"), (-3.0, "-3°C"), (0.0, "0°C")]
)
def test_format_temperature(value: float, expected: str) -> None:
    assert format_temperature(value) == expected


def test_to_html_escapes() -> None:
    node = create_element(
        "div",
        {"data-location": 'Rock "n" Roll'},
        events={"click": "open"},
        text="<b>& more</b>",
        children=(create_element("img", {"src": "x.png"}),),
    )

    assert node.to_html() == (
        '<div data-location="Rock &#34;n&#34; Roll" data-on-click="open">'
        '&lt;b&gt;&amp; more&lt;/b&gt;<img src="x.png"></div>'
    )


def test_rendered_html(snapshot: WeatherSnapshot) -> None:
    html = render("<script>alert(1)</script>", snapshot).to_html()

    assert html.startswith('<div id="weatherContainer" class="row mt-5"')
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "<h1>Weather in Warsaw</h1>" in html
    assert 'data-on-click="modal:weatherModal"' in html
    assert "</img>" not in html


def test_to_dict_and_text(snapshot: WeatherSnapshot) -> None:
    view = render(LABEL, snapshot)

    data = view.to_dict()
    assert data["tag"] == "div"
    assert data["attributes"]["data-location"] == LABEL
    assert len(data["children"]) == 2

    outline = view.to_text()
    assert outline.splitlines()[0] == "Weather in Warsaw"
    assert "Hourly Weather" in outline
