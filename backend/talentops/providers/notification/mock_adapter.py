"""Mock notification provider for testing."""

from typing import Any

from talentops.providers.errors import ProviderError
from talentops.providers.notification.base import NotificationProvider, WelcomePayload


class MockNotificationProvider(NotificationProvider):
    """Records messages instead of sending them.

    Attributes:
        calls: Record of all method invocations for test assertions.
        failures: Errors raised, in order, by the next send calls.
    """

    def __init__(self, failures: list[ProviderError] | None = None) -> None:
        """Initialize mock notification provider.

        Note: Does not call super().__init__() - we don't need a config for mock.
        """
        self.calls: list[dict[str, Any]] = []
        self.failures = list(failures or [])

    async def send_welcome(self, recipient_email: str, payload: WelcomePayload) -> None:
        self.calls.append(
            {
                "method": "send_welcome",
                "recipient_email": recipient_email,
                "payload": payload,
            }
        )
        if self.failures:
            raise self.failures.pop(0)

    def assert_sent_to(self, recipient_email: str) -> None:
        """Test helper to verify a welcome message was attempted.

        Raises:
            AssertionError: If nothing was sent to the address.
        """
        recipients = [call["recipient_email"] for call in self.calls]
        assert recipient_email in recipients, (
            f"Expected a message to '{recipient_email}', got {recipients}"
        )
