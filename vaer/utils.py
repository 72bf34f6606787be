import time
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

logger = structlog.get_logger()


@contextmanager
def timed(event: str, **kwargs: Any) -> Iterator[None]:
    """
    Log how long the wrapped block took, also when it raises.
    """

    started = time.monotonic()
    try:
        yield
    finally:
        elapsed_ms = round((time.monotonic() - started) * 1000, 2)
        logger.debug(event, elapsed_ms=elapsed_ms, **kwargs)
