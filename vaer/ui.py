"""
The UI collaborators the widget talks to: a busy indicator, an error
notifier and a host for modal dialogs.

The implementations here keep their state in memory and log through
structlog, which is all the CLI and the HTTP views need.
"""

from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

import structlog
from pydantic import BaseModel

from .weather.render import ViewNode

logger = structlog.get_logger()

type Level = Literal["success", "info", "warning", "error"]
CSS_CLASS_MAPPING = {
    "success": "alert alert-success",
    "info": "alert alert-info",
    "warning": "alert alert-warning",
    "error": "alert alert-danger",
}


################
# Notification #
################


class Message(BaseModel):
    level: Level
    title: str
    detail: str = ""

    @property
    def css_class(self) -> str:
        return CSS_CLASS_MAPPING[self.level]


class Notifier(Protocol):
    def show_error(self, title: str, detail: str) -> None: ...


class Notifications:
    """
    Collects messages until they are consumed by whatever displays them.
    """

    def __init__(self) -> None:
        self.messages: list[Message] = []

    def message(self, level: Level, title: str, detail: str = "") -> None:
        log = logger.error if level == "error" else logger.info
        log(title, detail=detail)
        self.messages.append(Message(level=level, title=title, detail=detail))

    def show_error(self, title: str, detail: str) -> None:
        self.message("error", title, detail)

    def consume(self) -> list[Message]:
        messages, self.messages = self.messages, []
        return messages


##################
# Busy indicator #
##################


class BusyIndicator(Protocol):
    def show(self) -> None: ...

    def hide(self) -> None: ...


class Spinner:
    """
    Counts how many operations are in progress.
    """

    def __init__(self) -> None:
        self.active = 0

    @property
    def visible(self) -> bool:
        return self.active > 0

    def show(self) -> None:
        self.active += 1
        logger.debug("Show spinner", active=self.active)

    def hide(self) -> None:
        self.active -= 1
        logger.debug("Hide spinner", active=self.active)


@contextmanager
def busy(indicator: BusyIndicator) -> Iterator[None]:
    """
    Show the indicator for the duration of the block, on every exit path.
    """

    indicator.show()
    try:
        yield
    finally:
        indicator.hide()


##########
# Modals #
##########

type ModalAction = Callable[[], Awaitable[Any]]


@dataclass
class Modal:
    id: str
    title: str
    body: ViewNode
    footer: ViewNode
    actions: dict[str, ModalAction] = field(default_factory=dict)


class ModalHost(Protocol):
    def exists(self, modal_id: str) -> bool: ...

    def create(self, modal: Modal) -> None: ...


class ModalRegistry:
    def __init__(self) -> None:
        self.modals: dict[str, Modal] = {}

    def exists(self, modal_id: str) -> bool:
        return modal_id in self.modals

    def create(self, modal: Modal) -> None:
        if modal.id in self.modals:
            raise ValueError(f"Modal {modal.id} already exists")
        self.modals[modal.id] = modal

    async def trigger(self, modal_id: str, action: str) -> Any:
        """
        Run an action bound to a modal, e.g. a button click.
        """
        return await self.modals[modal_id].actions[action]()
