"""
HTTP views for the weather widget.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from ..exceptions import InvalidLocationSelection
from ..ui import Notifications
from .render import environment
from .widget import WeatherWidget

router = APIRouter(prefix="/weather")
templates = Jinja2Templates(env=environment)


def get_widget(request: Request) -> WeatherWidget:
    return request.app.state.widget


def get_notifications(request: Request) -> Notifications:
    return request.app.state.notifications


Widget = Annotated[WeatherWidget, Depends(get_widget)]
Messages = Annotated[Notifications, Depends(get_notifications)]


@router.get("/", response_class=HTMLResponse)
async def weather_page(
    request: Request, widget: Widget, messages: Messages
) -> HTMLResponse:
    """
    The rendered widget, started on first access.
    """
    view = widget.view or await widget.start()
    context = {"view": view, "messages": messages.consume()}
    return templates.TemplateResponse(request, "weather.html", context)


@router.get("/view")
async def weather_view(widget: Widget, messages: Messages) -> dict[str, Any]:
    view = widget.view or await widget.start()
    if view is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=[message.model_dump() for message in messages.consume()],
        )

    return {
        "view": view.to_dict(),
        "messages": [message.model_dump() for message in messages.consume()],
    }


@router.get("/search")
async def search_locations(
    widget: Widget, messages: Messages, q: Annotated[str, Query()] = ""
) -> dict[str, Any]:
    await widget.settings.on_search_input(q)
    return {
        "candidates": [c.model_dump() for c in widget.settings.candidate_list],
        "messages": [message.model_dump() for message in messages.consume()],
    }


@router.post("/settings", response_class=RedirectResponse)
async def save_location(
    widget: Widget, location: Annotated[str, Form()]
) -> RedirectResponse:
    """
    Save one of the locations from the latest search and refresh the widget.
    """
    try:
        await widget.settings.on_save(location)
    except InvalidLocationSelection as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return RedirectResponse(url="/weather/", status_code=status.HTTP_303_SEE_OTHER)
