"""Common exception classes for integrations."""


class IntegrationAPIError(Exception):
    """Base exception for all integration API errors."""

    pass
