"""Common utilities for integrations."""

from .exceptions import IntegrationAPIError
from .retry import with_retry
from .utils import getenv

__all__ = [
    "IntegrationAPIError",
    "getenv",
    "with_retry",
]
