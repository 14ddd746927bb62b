"""Abstract base class and types for notification providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from talentops.providers.config import ProviderConfig


@dataclass(frozen=True)
class WelcomePayload:
    """Content of the welcome message sent after activation.

    Attributes:
        candidate_name: Recipient display name.
        login_id: Provisioned login identifier.
        temporary_secret: Initial password (must be changed at first login).
        role: Granted role.
        department: Department, if any.
    """

    candidate_name: str
    login_id: str
    temporary_secret: str
    role: str
    department: str | None = None

    def render_text(self, login_url: str) -> str:
        """Plain-text email body."""
        lines = [
            f"Hello {self.candidate_name},",
            "",
            "Welcome aboard! Your employee account has been created.",
            "",
            f"Username: {self.login_id}",
            f"Temporary password: {self.temporary_secret}",
            f"Role: {self.role}",
        ]
        if self.department:
            lines.append(f"Department: {self.department}")
        lines.extend(
            [
                "",
                f"Sign in at {login_url} and change your password right away.",
            ]
        )
        return "\n".join(lines)


class NotificationProvider(ABC):
    """Delivers onboarding messages to new employees."""

    def __init__(self, config: "ProviderConfig") -> None:
        """Initialize with provider configuration.

        Args:
            config: Provider configuration including sender and API key.
        """
        self.config = config

    @abstractmethod
    async def send_welcome(self, recipient_email: str, payload: WelcomePayload) -> None:
        """Send the welcome message.

        Args:
            recipient_email: Destination address.
            payload: Message content.

        Raises:
            ProviderError: On delivery failure.
        """
        ...
