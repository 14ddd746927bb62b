"""Provider error taxonomy.

Adapters translate transport and vendor failures into these classes so the
workflows can decide what to retry without knowing which backend is wired in.

Retryable: TransientError, RateLimitError.
Not retryable: everything else.
"""


__all__ = [
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "TransientError",
    "ProvisionError",
    "DeliveryError",
    "ExtractionError",
]


class ProviderError(Exception):
    """Base class for all provider errors.

    Callers can catch every collaborator failure with a single handler.
    """

    pass


class RateLimitError(ProviderError):
    """Rate limit exceeded.

    May carry a retry_after_seconds hint taken from the Retry-After header.
    """

    def __init__(self, message: str, retry_after_seconds: float | None = None):
        """Initialize RateLimitError.

        Args:
            message: Error description from the provider.
            retry_after_seconds: Optional hint from provider on when to retry.
        """
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class AuthenticationError(ProviderError):
    """Invalid or expired API key. Needs operator intervention."""

    pass


class TransientError(ProviderError):
    """Temporary failure (network, timeout, 5xx). Safe to retry."""

    pass


class ProvisionError(ProviderError):
    """Identity service rejected the account request (e.g. duplicate login)."""

    pass


class DeliveryError(ProviderError):
    """Notification service refused the message."""

    pass


class ExtractionError(ProviderError):
    """Extraction oracle could not process the source document."""

    pass
