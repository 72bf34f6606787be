from importlib import import_module
from pathlib import Path

from fastapi import FastAPI

from . import db
from .integrations.accuweather.client import AccuWeatherClient
from .ui import Notifications
from .weather.services import create_widget, get_store

app = FastAPI()


def load_apps(path: Path) -> None:
    for api_module in path.glob("*/api.py"):
        # Construct the name of the module
        relative_path = api_module.relative_to(Path(__file__).parent)
        module_path = ".".join(p.name for p in reversed(relative_path.parents))
        module_name = f"{module_path}.{api_module.stem}"

        # Register the module
        module = import_module(module_name, package="vaer")
        if router := getattr(module, "router", None):
            app.include_router(router)


load_apps(Path(__file__).parent)


@app.on_event("startup")
async def startup():
    if db.is_configured():
        await db.connect()

    app.state.client = AccuWeatherClient()
    app.state.notifications = Notifications()
    app.state.widget = create_widget(
        store=get_store(),
        service=app.state.client,
        notifier=app.state.notifications,
    )


@app.on_event("shutdown")
async def shutdown():
    await app.state.client.close()
    if db.is_configured():
        await db.disconnect()


@app.get("/health")
async def get_health() -> dict:
    if db.is_configured():
        await db.fetchval("SELECT 1")
    return {"status": "pass"}
